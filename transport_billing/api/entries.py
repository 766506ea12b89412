"""
transport_billing/api/entries.py

Purpose: Transport entry form and list endpoints

- Latest entries for the entry page, filtered by financial year
- Blank and pre-filled forms (YYYY-MM-DD date strings)
- Create / update from submitted form values
- Delete
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from transport_billing.api.deps import ensure_result, ensure_success, get_services, require_user
from transport_billing.core.config import settings
from transport_billing.core.exceptions import ResourceNotFoundError
from transport_billing.core.logging import LogContext
from transport_billing.schemas.transport import empty_form
from transport_billing.services.entry_service import EntryListController, EntryListResult
from utils import constants as c

router = APIRouter(prefix="/entry", dependencies=[Depends(require_user)])


def _controller(request: Request, financial_year: Optional[str], limit: Optional[int] = None) -> EntryListController:
    return EntryListController(get_services(request).api, financial_year=financial_year, limit=limit)


def _payload(result: EntryListResult) -> Dict[str, Any]:
    return {
        "success": True,
        "message": result.message,
        "entries": result.entries,
        "total": result.total,
    }


@router.get("")
async def list_entries(
    request: Request,
    search: Optional[str] = None,
    financial_year: Optional[str] = Query(None, alias="financialYear"),
):
    """The most recent entries, page-size limited."""
    controller = _controller(request, financial_year, limit=settings.ENTRY_PAGE_SIZE)
    if not await controller.load(search=search):
        ensure_result(EntryListResult(error=controller.error), c.FETCH_ENTRIES_FAILED_MESSAGE)
    return _payload(EntryListResult(entries=controller.view(search=search), total=len(controller.entries)))


@router.get("/new")
async def new_entry_form(request: Request):
    return {"form": empty_form(get_services(request).today())}


@router.post("", status_code=201)
async def create_entry(
    request: Request,
    form: Dict[str, Any] = Body(...),
    financial_year: Optional[str] = Query(None, alias="financialYear"),
):
    controller = _controller(request, financial_year, limit=settings.ENTRY_PAGE_SIZE)
    result = await controller.create(form)
    ensure_result(result, c.CREATE_ENTRY_FAILED_MESSAGE)
    return _payload(result)


@router.get("/{entry_id}")
async def get_entry(request: Request, entry_id: str):
    with LogContext(entry_id=entry_id):
        response = await get_services(request).api.get_transport_entry(entry_id)
        ensure_success(response, c.ENTRY_NOT_FOUND_MESSAGE, not_found=c.ENTRY_NOT_FOUND_MESSAGE, require_data=True)
        return {"entry": response.data}


@router.get("/{entry_id}/form")
async def edit_entry_form(
    request: Request,
    entry_id: str,
    financial_year: Optional[str] = Query(None, alias="financialYear"),
):
    """
    Form values for editing an entry from the current list.
    """
    controller = _controller(request, financial_year)
    if not await controller.load():
        ensure_result(EntryListResult(error=controller.error), c.FETCH_ENTRIES_FAILED_MESSAGE)

    form = controller.form_for(entry_id)
    if form is None:
        raise ResourceNotFoundError(c.ENTRY_NOT_FOUND_MESSAGE, details={"entry_id": entry_id})

    bill = controller.find(entry_id)
    return {"storage_id": bill.storage_id, "form": form}


@router.put("/{storage_id}")
async def update_entry(
    request: Request,
    storage_id: str,
    form: Dict[str, Any] = Body(...),
    financial_year: Optional[str] = Query(None, alias="financialYear"),
):
    controller = _controller(request, financial_year, limit=settings.ENTRY_PAGE_SIZE)
    with LogContext(entry_id=storage_id):
        result = await controller.update(storage_id, form)
    ensure_result(result, c.UPDATE_ENTRY_FAILED_MESSAGE)
    return _payload(result)


@router.delete("/{entry_id}")
async def delete_entry(
    request: Request,
    entry_id: str,
    financial_year: Optional[str] = Query(None, alias="financialYear"),
):
    """
    Deletes an entry and returns the current list without it.
    """
    controller = _controller(request, financial_year, limit=settings.ENTRY_PAGE_SIZE)
    if not await controller.load():
        ensure_result(EntryListResult(error=controller.error), c.FETCH_ENTRIES_FAILED_MESSAGE)

    result = await controller.delete(entry_id)
    ensure_result(result, c.DELETE_ENTRY_FAILED_MESSAGE)
    return _payload(result)
