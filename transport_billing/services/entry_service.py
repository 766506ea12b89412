"""
transport_billing/services/entry_service.py

Purpose: Entry list / form controller

- Loads entries through the gateway and keeps the current list
- Client-side financial year, search, status and date-range filtering
- Sorting for the reports table
- Create / update (full re-fetch) and delete (optimistic local removal)
- Converts a selected entry to form values for editing
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from transport_billing.core.config import settings
from transport_billing.core.logging import get_logger, LogContext
from transport_billing.schemas.response import FieldError
from transport_billing.schemas.transport import TransportBill, entry_key, from_form_data, to_form_data
from transport_billing.services.analytics_service import filter_by_financial_year
from transport_billing.services.api_client import ApiClient
from utils import constants as c

logger = get_logger(__name__)


@dataclass
class EntryListResult:
    entries: List[TransportBill] = field(default_factory=list)
    total: int = 0
    error: Optional[str] = None
    errors: List[FieldError] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


def _matches(bill: TransportBill, query: str) -> bool:
    haystack = (
        entry_key(bill) or "",
        bill.vehicle_no,
        bill.from_location,
        bill.to_location,
        bill.transport_bill_data.invoice_no,
        bill.owner_data.owner_name_and_address,
    )
    return any(query in value.lower() for value in haystack if value)


def search_entries(bills: List[TransportBill], search: Optional[str]) -> List[TransportBill]:
    """
    Case-insensitive substring match over id, vehicle, route ends,
    invoice number and owner.
    """
    query = (search or "").strip().lower()
    if not query:
        return list(bills)
    return [bill for bill in bills if _matches(bill, query)]


def filter_entries(
    bills: List[TransportBill],
    status: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> List[TransportBill]:
    """
    Status filter ("all" or None keeps everything) and an inclusive date
    range where either bound may be omitted.
    """
    result = list(bills)
    if status and status != c.ALL_FILTER:
        result = [bill for bill in result if bill.status.value == status]
    if from_date is not None:
        result = [bill for bill in result if bill.date is not None and bill.date >= from_date]
    if to_date is not None:
        result = [bill for bill in result if bill.date is not None and bill.date <= to_date]
    return result


_SORT_KEYS = {
    "date-desc": (lambda bill: bill.date or date.min, True),
    "date-asc": (lambda bill: bill.date or date.min, False),
    "amount-desc": (lambda bill: bill.total, True),
    "amount-asc": (lambda bill: bill.total, False),
    "vehicle": (lambda bill: bill.vehicle_no.lower(), False),
    "status": (lambda bill: bill.status.value, False),
}


def sort_entries(bills: List[TransportBill], sort: Optional[str] = c.DEFAULT_SORT) -> List[TransportBill]:
    """
    Stable sort; an unknown key leaves the order unchanged.
    """
    sort_key = _SORT_KEYS.get(sort or "")
    if sort_key is None:
        return list(bills)
    key, reverse = sort_key
    return sorted(bills, key=key, reverse=reverse)


def _form_errors(error: PydanticValidationError) -> List[FieldError]:
    return [
        FieldError(msg=item["msg"], param=".".join(str(part) for part in item["loc"]))
        for item in error.errors()
    ]


class EntryListController:
    """
    Holds the fetched entries for one financial year selection.
    """

    def __init__(
        self,
        api_client: ApiClient,
        financial_year: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        self.api = api_client
        self.financial_year = financial_year
        self.limit = limit or settings.ENTRY_FETCH_LIMIT
        self.entries: List[TransportBill] = []
        self.error: Optional[str] = None

    def _result(self, entries: List[TransportBill], message: Optional[str] = None, errors=None) -> EntryListResult:
        return EntryListResult(
            entries=entries,
            total=len(self.entries),
            error=self.error,
            errors=list(errors or []),
            message=message,
        )

    async def load(self, search: Optional[str] = None) -> bool:
        """
        Re-fetches entries. On failure the current list is kept and
        ``error`` is set.
        """
        response = await self.api.get_transport_entries(
            search=search,
            limit=self.limit,
            financial_year=None if self.financial_year == c.ALL_FILTER else self.financial_year,
        )
        if not response.success or response.data is None:
            self.error = response.error or c.FETCH_ENTRIES_FAILED_MESSAGE
            logger.warning(f"Entry fetch failed: {self.error}")
            return False

        self.entries = filter_by_financial_year(response.data.entries, self.financial_year)
        self.error = None
        logger.debug(f"Loaded {len(self.entries)} entries")
        return True

    def view(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        sort: Optional[str] = c.DEFAULT_SORT,
    ) -> List[TransportBill]:
        """
        The current list filtered and sorted for display.
        """
        visible = search_entries(self.entries, search)
        visible = filter_entries(visible, status, from_date, to_date)
        return sort_entries(visible, sort)

    async def fetch(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        sort: Optional[str] = c.DEFAULT_SORT,
    ) -> EntryListResult:
        await self.load()
        return self._result(self.view(search, status, from_date, to_date, sort))

    def find(self, entry_id: str) -> Optional[TransportBill]:
        for bill in self.entries:
            if entry_key(bill) == entry_id or bill.storage_id == entry_id:
                return bill
        return None

    def form_for(self, entry_id: str) -> Optional[Dict[str, Any]]:
        """
        Form values for editing ``entry_id``, or None when it is not in
        the current list.
        """
        bill = self.find(entry_id)
        if bill is None:
            return None
        return to_form_data(bill)

    async def delete(self, entry_id: str) -> EntryListResult:
        """
        Deletes an entry and drops it from the local list without a
        re-fetch.
        """
        with LogContext(entry_id=entry_id):
            response = await self.api.delete_transport_entry(entry_id)
            if not response.success:
                self.error = response.error or c.DELETE_ENTRY_FAILED_MESSAGE
                logger.warning(f"Delete failed: {self.error}")
                return self._result(self.entries)

            self.entries = [
                bill for bill in self.entries
                if entry_key(bill) != entry_id and bill.storage_id != entry_id
            ]
            self.error = None
            logger.info("Entry deleted")
            return self._result(self.entries, message=c.ENTRY_DELETED_MESSAGE)

    async def _save(self, form: Dict[str, Any], storage_id: Optional[str]) -> EntryListResult:
        try:
            payload = from_form_data(form)
        except PydanticValidationError as e:
            self.error = "Invalid entry data"
            return self._result(self.entries, errors=_form_errors(e))

        if storage_id:
            response = await self.api.update_transport_entry(storage_id, payload)
            failed_message, success_message = c.UPDATE_ENTRY_FAILED_MESSAGE, c.ENTRY_UPDATED_MESSAGE
        else:
            response = await self.api.create_transport_entry(payload)
            failed_message, success_message = c.CREATE_ENTRY_FAILED_MESSAGE, c.ENTRY_CREATED_MESSAGE

        if not response.success:
            self.error = response.error or failed_message
            logger.warning(f"Save failed: {self.error}")
            return self._result(self.entries, errors=response.errors)

        await self.load()
        if self.error:
            return self._result(self.entries)
        saved_id = storage_id or (entry_key(response.data) if response.data else None)
        logger.info("Entry saved", extra={"entry_id": saved_id})
        return self._result(self.entries, message=success_message)

    async def create(self, form: Dict[str, Any]) -> EntryListResult:
        return await self._save(form, None)

    async def update(self, storage_id: str, form: Dict[str, Any]) -> EntryListResult:
        return await self._save(form, storage_id)
