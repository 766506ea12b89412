"""
transport_billing/api/views.py

Purpose: Dashboard, analysis and reports views

- Protected by require_user
- Fetch entries through the gateway, aggregate with analytics_service
- CSV export of the analysis summary
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from transport_billing.api.deps import ensure_result, ensure_success, get_services, require_user
from transport_billing.core.config import settings
from transport_billing.schemas.transport import TransportBill
from transport_billing.schemas.user import User
from transport_billing.services import analytics_service as analytics
from transport_billing.services.entry_service import EntryListController
from utils import constants as c
from utils.time_utils import current_financial_year, financial_year_options

router = APIRouter()


async def _load_entries(request: Request, fy: Optional[str] = None) -> List[TransportBill]:
    services = get_services(request)
    response = await services.api.get_transport_entries(
        limit=settings.ENTRY_FETCH_LIMIT,
        financial_year=None if fy in (None, c.ALL_FILTER) else fy,
    )
    ensure_success(response, c.FETCH_ENTRIES_FAILED_MESSAGE)
    return response.data.entries if response.data else []


def _selected_year(request: Request, financial_year: Optional[str]) -> str:
    return financial_year or current_financial_year(get_services(request).today())


@router.get("/dashboard")
async def dashboard(request: Request, user: User = Depends(require_user)):
    bills = await _load_entries(request)
    summary = analytics.build_dashboard(bills, get_services(request).today())
    return {"user": user.to_storage(), "summary": summary}


@router.get("/analysis")
async def analysis(
    request: Request,
    financial_year: Optional[str] = Query(None, alias="financialYear"),
    user: User = Depends(require_user),
):
    today = get_services(request).today()
    selected = _selected_year(request, financial_year)
    bills = await _load_entries(request, selected)
    return {
        "financial_year": selected,
        "financial_year_options": financial_year_options(today),
        "summary": analytics.build_analysis(bills, None if selected == c.ALL_FILTER else selected, today),
    }


@router.get("/analysis/export")
async def export_analysis(
    request: Request,
    financial_year: Optional[str] = Query(None, alias="financialYear"),
    user: User = Depends(require_user),
):
    today = get_services(request).today()
    selected = _selected_year(request, financial_year)
    fy = None if selected == c.ALL_FILTER else selected
    bills = await _load_entries(request, selected)
    summary = analytics.build_analysis(bills, fy, today)

    return Response(
        content=analytics.export_analysis_csv(summary, today),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{analytics.export_filename(fy, today)}"'},
    )


@router.get("/reports")
async def reports(
    request: Request,
    search: Optional[str] = None,
    status: Optional[str] = c.ALL_FILTER,
    financial_year: Optional[str] = Query(None, alias="financialYear"),
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    sort: str = c.DEFAULT_SORT,
    user: User = Depends(require_user),
):
    services = get_services(request)
    selected = _selected_year(request, financial_year)
    controller = EntryListController(services.api, financial_year=selected)

    result = await controller.fetch(search=search, status=status, from_date=from_date, to_date=to_date, sort=sort)
    ensure_result(result, c.FETCH_ENTRIES_FAILED_MESSAGE)

    return {
        "financial_year": selected,
        "financial_year_options": financial_year_options(services.today()),
        "sort_options": c.SORT_OPTIONS,
        "entries": result.entries,
        "shown": len(result.entries),
        "total": result.total,
        "stats": analytics.report_stats(result.entries),
    }
