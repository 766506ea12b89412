"""
transport_billing/schemas/transport.py

Purpose: Transport bill schemas and (de)serialization

- BillStatus enum and the TransportBill record with its two sub-records
- parse_transport_bill: the single place API payloads become typed bills
  (every ISO date string becomes a calendar date)
- Form conversions: bill -> input strings -> backend payload
"""

import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, validator

from utils.time_utils import parse_iso_date, parse_iso_datetime, to_api_date, to_form_date


class BillStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TransportBillData(BaseModel):
    bill: float = 0
    ms: str = ""
    gstno: str = ""
    other_detail: str = Field("", alias="otherDetail")
    srno: float = 0
    lrno: float = 0
    lr_date: Optional[dt.date] = Field(None, alias="lrDate")
    invoice_no: str = Field("", alias="invoiceNo")
    consignor_consignee: str = Field("", alias="consignorConsignee")
    handle_charges: float = Field(0, alias="handleCharges")
    detention: float = 0
    freight: float = 0
    total: float = 0
    status: BillStatus = BillStatus.PENDING

    class Config:
        populate_by_name = True

    @validator("lr_date", pre=True)
    def parse_dates(cls, v):
        return parse_iso_date(v)


class OwnerData(BaseModel):
    contact_no: Optional[float] = Field(None, alias="contactNo")
    owner_name_and_address: str = Field("", alias="ownerNameAndAddress")
    pan_no: str = Field("", alias="panNo")
    driver_name_and_mob: str = Field("", alias="driverNameAndMob")
    licence_no: str = Field("", alias="licenceNo")
    chasis_no: str = Field("", alias="chasisNo")
    engine_no: str = Field("", alias="engineNo")
    insurance_co: str = Field("", alias="insuranceCo")
    policy_no: str = Field("", alias="policyNo")
    policy_date: Optional[dt.date] = Field(None, alias="policyDate")
    srno: float = 0
    lrno: float = 0
    packages: float = 0
    description: str = ""
    wt_kgs: float = Field(0, alias="wtKgs")
    remarks: str = ""
    broker_name: str = Field("", alias="brokerName")
    broker_pan_no: str = Field("", alias="brokerPanNo")
    lorry_hire_amount: float = Field(0, alias="lorryHireAmount")
    acc_no: Optional[float] = Field(None, alias="accNo")
    other_charges_hamli_detention_height: float = Field(0, alias="otherChargesHamliDetentionHeight")
    total_lorry_hire_rs: float = Field(0, alias="totalLorryHireRs")
    adv_amt1: float = Field(0, alias="advAmt1")
    adv_date1: Optional[dt.date] = Field(None, alias="advDate1")
    neft_imps_idno1: str = Field("", alias="neftImpsIdno1")
    adv_amt2: float = Field(0, alias="advAmt2")
    adv_date2: Optional[dt.date] = Field(None, alias="advDate2")
    neft_imps_idno2: str = Field("", alias="neftImpsIdno2")
    adv_amt3: float = Field(0, alias="advAmt3")
    adv_date3: Optional[dt.date] = Field(None, alias="advDate3")
    neft_imps_idno3: str = Field("", alias="neftImpsIdno3")
    balance_amt: float = Field(0, alias="balanceAmt")
    other_charges_hamali_detention_height: str = Field("", alias="otherChargesHamaliDetentionHeight")
    deduction_in_claim_penalty: str = Field("", alias="deductionInClaimPenalty")
    final_neft_imps_idno: str = Field("", alias="finalNeftImpsIdno")
    final_date: Optional[dt.date] = Field(None, alias="finalDate")
    delivery_date: Optional[dt.date] = Field(None, alias="deliveryDate")

    class Config:
        populate_by_name = True

    @validator(
        "policy_date", "adv_date1", "adv_date2", "adv_date3", "final_date", "delivery_date",
        pre=True
    )
    def parse_dates(cls, v):
        return parse_iso_date(v)


class TransportBill(BaseModel):
    """
    One transport bill entry.

    ``id`` is the human-readable sequence id (TE-20250730-0001),
    ``storage_id`` the backend's own id (``_id`` on the wire).
    """
    id: Optional[str] = None
    storage_id: Optional[str] = Field(None, alias="_id")
    date: Optional[dt.date] = None
    vehicle_no: str = Field("", alias="vehicleNo")
    from_location: str = Field("", alias="from")
    to_location: str = Field("", alias="to")
    transport_bill_data: TransportBillData = Field(default_factory=TransportBillData, alias="transportBillData")
    owner_data: OwnerData = Field(default_factory=OwnerData, alias="ownerData")
    created_at: Optional[dt.datetime] = Field(None, alias="createdAt")
    updated_at: Optional[dt.datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True

    @validator("date", pre=True)
    def parse_date(cls, v):
        return parse_iso_date(v)

    @validator("created_at", "updated_at", pre=True)
    def parse_timestamps(cls, v):
        return parse_iso_datetime(v)

    @property
    def total(self) -> float:
        return self.transport_bill_data.total

    @property
    def status(self) -> BillStatus:
        return self.transport_bill_data.status


class EntryPage(BaseModel):
    """
    One page of entries from GET /api/transport-entries.
    """
    entries: List[TransportBill] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    pages: int = 1


# Wire names of every date-bearing field, per sub-record
BILL_DATE_FIELDS = ("lrDate",)
OWNER_DATE_FIELDS = ("policyDate", "advDate1", "advDate2", "advDate3", "finalDate", "deliveryDate")

# Fields that are never part of a create/update payload
_READ_ONLY_FIELDS = {"id", "storage_id", "created_at", "updated_at"}


def parse_transport_bill(payload: Dict[str, Any]) -> TransportBill:
    """
    Converts a raw API entry into a TransportBill.

    Every date-bearing field is normalized to a calendar date here, so
    nothing downstream sees ISO strings.
    """
    return TransportBill.model_validate(payload)


def parse_entry_page(payload: Any) -> EntryPage:
    """
    Builds an EntryPage from GET /api/transport-entries data.
    """
    if not isinstance(payload, dict):
        return EntryPage()
    entries = [parse_transport_bill(item) for item in payload.get("entries") or []]
    return EntryPage(
        entries=entries,
        total=payload.get("total", len(entries)),
        page=payload.get("page", 1),
        pages=payload.get("pages", 1),
    )


def entry_key(bill: TransportBill) -> Optional[str]:
    """
    Identifier used for list operations: the readable id, else the storage id.
    """
    return bill.id or bill.storage_id


def to_form_data(bill: TransportBill) -> Dict[str, Any]:
    """
    Converts a bill into editable form values. Dates become YYYY-MM-DD
    strings (empty when missing).
    """
    form = bill.model_dump(by_alias=True, mode="json", exclude=_READ_ONLY_FIELDS)

    form["date"] = to_form_date(bill.date)
    for field in BILL_DATE_FIELDS:
        form["transportBillData"][field] = to_form_date(
            getattr(bill.transport_bill_data, _field_name(TransportBillData, field))
        )
    for field in OWNER_DATE_FIELDS:
        form["ownerData"][field] = to_form_date(
            getattr(bill.owner_data, _field_name(OwnerData, field))
        )

    return form


def from_form_data(form: Dict[str, Any]) -> Dict[str, Any]:
    """
    Converts submitted form values back into a backend payload with ISO
    date strings. Reverses to_form_data.
    """
    bill = TransportBill.model_validate(form)
    return to_payload(bill)


def to_payload(bill: TransportBill) -> Dict[str, Any]:
    """
    Serializes a bill for POST/PUT /api/transport-entries.
    """
    payload = bill.model_dump(by_alias=True, mode="json", exclude=_READ_ONLY_FIELDS)

    payload["date"] = to_api_date(bill.date)
    for field in BILL_DATE_FIELDS:
        payload["transportBillData"][field] = to_api_date(
            getattr(bill.transport_bill_data, _field_name(TransportBillData, field))
        )
    for field in OWNER_DATE_FIELDS:
        payload["ownerData"][field] = to_api_date(
            getattr(bill.owner_data, _field_name(OwnerData, field))
        )

    return payload


def empty_form(today: dt.date) -> Dict[str, Any]:
    """
    A blank entry form with every date defaulting to ``today``.
    """
    bill = TransportBill(date=today)
    form = to_form_data(bill)
    today_text = to_form_date(today)
    for field in BILL_DATE_FIELDS:
        form["transportBillData"][field] = today_text
    for field in OWNER_DATE_FIELDS:
        form["ownerData"][field] = today_text
    return form


def _field_name(model, alias: str) -> str:
    for name, field in model.model_fields.items():
        if field.alias == alias:
            return name
    raise KeyError(alias)
