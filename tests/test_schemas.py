from datetime import date

import pytest
from pydantic import ValidationError

from conftest import bill_payload, user_payload
from transport_billing.schemas.transport import (
    BillStatus,
    empty_form,
    entry_key,
    from_form_data,
    parse_entry_page,
    parse_transport_bill,
    to_form_data,
)
from transport_billing.schemas.user import AuthResponse, RegisterRequest, User


def test_parse_transport_bill_normalizes_every_date():
    bill = parse_transport_bill(bill_payload(date="2024-03-01T00:00:00.000Z"))

    assert bill.date == date(2024, 3, 1)
    assert bill.transport_bill_data.lr_date == date(2024, 3, 1)
    assert bill.owner_data.policy_date == date(2024, 3, 1)
    assert bill.owner_data.adv_date1 == date(2024, 3, 1)
    assert bill.owner_data.adv_date2 is None
    assert bill.owner_data.final_date == date(2024, 3, 1)
    assert bill.owner_data.delivery_date == date(2024, 3, 1)
    assert bill.from_location == "Pune"
    assert bill.to_location == "Mumbai"
    assert bill.status == BillStatus.PENDING
    assert bill.total == 100
    assert bill.created_at.year == 2024


def test_entry_key_prefers_readable_id():
    bill = parse_transport_bill(bill_payload(entry_id="TE-1", storage_id="abc"))
    assert entry_key(bill) == "TE-1"

    payload = bill_payload(storage_id="abc")
    payload.pop("id")
    assert entry_key(parse_transport_bill(payload)) == "abc"


@pytest.mark.parametrize("day", [
    "2024-01-01", "2024-01-31", "2024-02-29", "2024-03-01", "2024-03-31",
    "2024-04-01", "2024-04-30", "2024-12-31",
])
def test_form_round_trip_keeps_calendar_date(day):
    bill = parse_transport_bill(bill_payload(date=f"{day}T00:00:00.000Z"))

    form = to_form_data(bill)
    assert form["date"] == day
    assert form["transportBillData"]["lrDate"] == day
    assert form["ownerData"]["deliveryDate"] == day
    assert form["ownerData"]["advDate2"] == ""

    payload = from_form_data(form)
    assert payload["date"] == f"{day}T00:00:00.000Z"
    assert payload["transportBillData"]["lrDate"] == f"{day}T00:00:00.000Z"
    assert payload["ownerData"]["advDate2"] is None

    assert parse_transport_bill(payload).date == date.fromisoformat(day)


def test_payload_excludes_read_only_fields():
    payload = from_form_data(to_form_data(parse_transport_bill(bill_payload())))
    for field in ("id", "_id", "createdAt", "updatedAt"):
        assert field not in payload
    assert payload["from"] == "Pune"
    assert payload["vehicleNo"] == "MH12AB1234"


def test_empty_form_defaults_dates_to_today():
    form = empty_form(date(2024, 6, 15))
    assert form["date"] == "2024-06-15"
    assert form["transportBillData"]["lrDate"] == "2024-06-15"
    assert form["ownerData"]["advDate3"] == "2024-06-15"
    assert form["transportBillData"]["status"] == "PENDING"
    assert form["vehicleNo"] == ""


def test_parse_entry_page():
    page = parse_entry_page({"entries": [bill_payload(), bill_payload(entry_id="TE-2")], "total": 7, "pages": 2})
    assert [b.id for b in page.entries] == ["TE-20240601-0001", "TE-2"]
    assert page.total == 7
    assert page.pages == 2
    assert parse_entry_page(None).entries == []


def test_auth_response_splits_token():
    auth = AuthResponse.model_validate({**user_payload(), "token": "abc"})
    user = auth.to_user()
    assert isinstance(user, User)
    assert user.profile.company_name == "Kumar Roadways"
    assert "token" not in user.to_storage()
    assert user.to_storage()["profile"]["ownerName"] == "Ravi Kumar"


def _register(**overrides):
    data = {
        "email": "New@Example.com",
        "password": "secret1",
        "profile": {
            "ownerName": "Asha",
            "companyName": "Asha Carriers",
            "mobileNumber": "9876543210",
            "address": "Nashik",
        },
    }
    data.update(overrides)
    return RegisterRequest.model_validate(data)


def test_register_request_normalizes_email():
    request = _register()
    assert request.email == "new@example.com"
    assert request.to_payload()["profile"]["companyName"] == "Asha Carriers"


@pytest.mark.parametrize("overrides", [
    {"email": "not-an-email"},
    {"password": "123"},
    {"profile": {"ownerName": "", "companyName": "X", "mobileNumber": "9876543210", "address": "Y"}},
    {"profile": {"ownerName": "A", "companyName": "X", "mobileNumber": "12345", "address": "Y"}},
    {"profile": {"ownerName": "A", "companyName": "X", "mobileNumber": "9876543210", "address": "Y",
                 "gstNumber": "BAD"}},
    {"bank": {"ifscCode": "BAD"}},
])
def test_register_request_rejects_bad_input(overrides):
    with pytest.raises(ValidationError):
        _register(**overrides)
