"""
transport_billing/services/analytics_service.py

Purpose: Aggregations over transport bills

- Financial year filtering
- Status distribution and completion/pending rates
- Route, vehicle and owner rankings
- Monthly trends (analysis: observed months; dashboard: last six months)
- Half-year growth metrics
- Analysis / dashboard / report summaries and CSV export

All functions are pure: ``today`` is passed in, nothing is fetched.
"""

import csv
import io
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from transport_billing.core.logging import get_logger
from transport_billing.schemas.analytics import (
    AnalysisSummary,
    DashboardStats,
    DashboardSummary,
    GrowthMetrics,
    MonthlyPoint,
    OwnerStat,
    RecentEntry,
    ReportStats,
    RouteStat,
    StatusBreakdown,
    VehicleStat,
)
from transport_billing.schemas.transport import BillStatus, TransportBill, entry_key
from utils.constants import (
    ALL_FILTER,
    ANALYSIS_TOP_N,
    ANALYSIS_TREND_MONTHS,
    DASHBOARD_TOP_N,
    DASHBOARD_TREND_MONTHS,
    RECENT_ENTRIES_COUNT,
)
from utils.format_utils import driver_label, format_route, owner_label
from utils.time_utils import add_months, financial_year, format_display_date, month_name, months_ago

logger = get_logger(__name__)


def _revenue(bills: Iterable[TransportBill]) -> float:
    return sum(bill.total for bill in bills)


def _percent(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return part / whole * 100


def _count_status(bills: List[TransportBill], status: BillStatus) -> int:
    return sum(1 for bill in bills if bill.status == status)


def filter_by_financial_year(bills: List[TransportBill], fy: Optional[str]) -> List[TransportBill]:
    """
    Keeps bills dated inside financial year ``fy`` ("2024-25").
    ``None`` or "all" keeps everything.
    """
    if not fy or fy == ALL_FILTER:
        return list(bills)
    return [bill for bill in bills if bill.date is not None and financial_year(bill.date) == fy]


def status_distribution(bills: List[TransportBill]) -> Dict[str, int]:
    """
    Count per status, only for statuses that occur.
    """
    distribution: Dict[str, int] = {}
    for bill in bills:
        key = bill.status.value
        distribution[key] = distribution.get(key, 0) + 1
    return distribution


def _group(bills: Iterable[TransportBill], key_fn) -> Dict[str, Tuple[int, float]]:
    groups: Dict[str, Tuple[int, float]] = {}
    for bill in bills:
        key = key_fn(bill)
        count, revenue = groups.get(key, (0, 0.0))
        groups[key] = (count + 1, revenue + bill.total)
    return groups


def route_ranking(bills: List[TransportBill], top_n: int = ANALYSIS_TOP_N) -> List[RouteStat]:
    """
    Routes ("from → to") ranked by revenue, highest first.
    """
    groups = _group(bills, lambda bill: format_route(bill.from_location, bill.to_location))
    stats = [RouteStat(route=route, count=count, revenue=revenue) for route, (count, revenue) in groups.items()]
    return sorted(stats, key=lambda stat: stat.revenue, reverse=True)[:top_n]


def vehicle_ranking(bills: List[TransportBill], top_n: int = ANALYSIS_TOP_N) -> List[VehicleStat]:
    """
    Vehicles ranked by trip count, highest first.
    """
    groups = _group(bills, lambda bill: bill.vehicle_no)
    stats = [
        VehicleStat(vehicle=vehicle, count=count, revenue=revenue)
        for vehicle, (count, revenue) in groups.items()
    ]
    return sorted(stats, key=lambda stat: stat.count, reverse=True)[:top_n]


def owner_ranking(bills: List[TransportBill], top_n: int = ANALYSIS_TOP_N) -> List[OwnerStat]:
    """
    Owners (first line of the owner field) ranked by trip count.
    """
    groups = _group(bills, lambda bill: owner_label(bill.owner_data.owner_name_and_address))
    stats = [OwnerStat(owner=owner, count=count, revenue=revenue) for owner, (count, revenue) in groups.items()]
    return sorted(stats, key=lambda stat: stat.count, reverse=True)[:top_n]


def vehicle_efficiency(trips: int) -> int:
    """
    Display score for the dashboard, bounded to 75..95.
    """
    return min(95, max(75, 80 + trips * 2))


def monthly_trend(bills: List[TransportBill], keep: int = ANALYSIS_TREND_MONTHS) -> List[MonthlyPoint]:
    """
    Per-month counts and revenue in chronological order, last ``keep``
    months that have entries. Months without entries are not emitted.
    """
    buckets: Dict[Tuple[int, int], Tuple[int, float]] = {}
    for bill in bills:
        if bill.date is None:
            continue
        key = (bill.date.year, bill.date.month)
        count, revenue = buckets.get(key, (0, 0.0))
        buckets[key] = (count + 1, revenue + bill.total)

    points = [
        MonthlyPoint(month=month_name(month), year=year, count=count, revenue=revenue)
        for (year, month), (count, revenue) in sorted(buckets.items())
    ]
    return points[-keep:] if keep > 0 else []


def dashboard_monthly_trend(
    bills: List[TransportBill],
    today: date,
    months: int = DASHBOARD_TREND_MONTHS,
) -> List[MonthlyPoint]:
    """
    The last ``months`` calendar months ending with the current one,
    zero-filled, with entries outside the window ignored.
    """
    window: Dict[Tuple[int, int], List] = {}
    for offset in range(months - 1, -1, -1):
        window[add_months(today.year, today.month, -offset)] = [0, 0.0]

    for bill in bills:
        if bill.date is None:
            continue
        bucket = window.get((bill.date.year, bill.date.month))
        if bucket is not None:
            bucket[0] += 1
            bucket[1] += bill.total

    return [
        MonthlyPoint(month=month_name(month), year=year, count=count, revenue=revenue)
        for (year, month), (count, revenue) in window.items()
    ]


def growth_metrics(bills: List[TransportBill], today: date) -> GrowthMetrics:
    """
    Last six months against the six before them.

    Growth against an empty previous period is 0, never infinite.
    """
    six_months_ago = months_ago(today, 6)
    twelve_months_ago = months_ago(today, 12)

    current = [bill for bill in bills if bill.date is not None and bill.date >= six_months_ago]
    previous = [
        bill for bill in bills
        if bill.date is not None and twelve_months_ago <= bill.date < six_months_ago
    ]

    current_revenue = _revenue(current)
    previous_revenue = _revenue(previous)

    revenue_growth = (current_revenue - previous_revenue) / previous_revenue * 100 if previous_revenue > 0 else 0.0
    volume_growth = (len(current) - len(previous)) / len(previous) * 100 if previous else 0.0

    return GrowthMetrics(revenue_growth=revenue_growth, volume_growth=volume_growth)


def rate(bills: List[TransportBill], status: BillStatus) -> float:
    """
    Percentage of bills with ``status``; 0 for no bills.
    """
    return _percent(_count_status(bills, status), len(bills))


def completion_rate(bills: List[TransportBill]) -> float:
    return rate(bills, BillStatus.COMPLETED)


def pending_rate(bills: List[TransportBill]) -> float:
    return rate(bills, BillStatus.PENDING)


def build_analysis(
    bills: List[TransportBill],
    financial_year: Optional[str],
    today: date,
) -> AnalysisSummary:
    """
    Everything the analysis page shows, for one financial year (or all).
    """
    filtered = filter_by_financial_year(bills, financial_year)
    total_revenue = _revenue(filtered)

    logger.debug(f"Analysis over {len(filtered)} of {len(bills)} entries (FY {financial_year or ALL_FILTER})")

    return AnalysisSummary(
        financial_year=financial_year,
        total_entries=len(filtered),
        total_revenue=total_revenue,
        average_revenue=total_revenue / len(filtered) if filtered else 0.0,
        status_distribution=status_distribution(filtered),
        route_analysis=route_ranking(filtered, ANALYSIS_TOP_N),
        vehicle_analysis=vehicle_ranking(filtered, ANALYSIS_TOP_N),
        owner_analysis=owner_ranking(filtered, ANALYSIS_TOP_N),
        monthly_trend=monthly_trend(filtered, ANALYSIS_TREND_MONTHS),
        completion_rate=completion_rate(filtered),
        pending_rate=pending_rate(filtered),
        growth=growth_metrics(filtered, today),
    )


def _in_month(bill: TransportBill, year: int, month: int) -> bool:
    return bill.date is not None and bill.date.year == year and bill.date.month == month


def _recent_entries(bills: List[TransportBill], count: int) -> List[RecentEntry]:
    dated = sorted(bills, key=lambda bill: bill.date or date.min, reverse=True)[:count]
    return [
        RecentEntry(
            id=entry_key(bill) or "N/A",
            vehicle=bill.vehicle_no,
            route=format_route(bill.from_location, bill.to_location),
            status=bill.status.value.lower(),
            amount=bill.total,
            date=format_display_date(bill.date),
            driver=driver_label(bill.owner_data.driver_name_and_mob),
        )
        for bill in dated
    ]


def build_dashboard(bills: List[TransportBill], today: date) -> DashboardSummary:
    """
    Dashboard statistics over every entry (no financial year filter).
    """
    total_entries = len(bills)
    total_revenue = _revenue(bills)
    last_year, last_month = add_months(today.year, today.month, -1)

    this_month = [bill for bill in bills if _in_month(bill, today.year, today.month)]
    last_month_count = sum(1 for bill in bills if _in_month(bill, last_year, last_month))

    stats = DashboardStats(
        total_entries=total_entries,
        completed_entries=_count_status(bills, BillStatus.COMPLETED),
        pending_entries=_count_status(bills, BillStatus.PENDING),
        total_revenue=total_revenue,
        monthly_revenue=_revenue(this_month),
        active_vehicles=len({bill.vehicle_no for bill in bills}),
        avg_revenue_per_trip=total_revenue / total_entries if total_entries else 0.0,
        this_month_entries=len(this_month),
        last_month_entries=last_month_count,
    )

    vehicles = vehicle_ranking(bills, DASHBOARD_TOP_N)
    for vehicle in vehicles:
        vehicle.efficiency = vehicle_efficiency(vehicle.count)

    return DashboardSummary(
        stats=stats,
        recent_entries=_recent_entries(bills, RECENT_ENTRIES_COUNT),
        top_routes=route_ranking(bills, DASHBOARD_TOP_N),
        vehicle_performance=vehicles,
        monthly_trend=dashboard_monthly_trend(bills, today, DASHBOARD_TREND_MONTHS),
        status_breakdown=StatusBreakdown(
            completed=stats.completed_entries,
            pending=stats.pending_entries,
            in_transit=_count_status(bills, BillStatus.IN_PROGRESS),
        ),
    )


def report_stats(bills: List[TransportBill]) -> ReportStats:
    """
    Summary line over the currently filtered report rows.
    """
    total = len(bills)
    total_revenue = _revenue(bills)
    return ReportStats(
        total=total,
        completed=_count_status(bills, BillStatus.COMPLETED),
        pending=_count_status(bills, BillStatus.PENDING),
        in_progress=_count_status(bills, BillStatus.IN_PROGRESS),
        total_revenue=total_revenue,
        average_revenue=total_revenue / total if total else 0.0,
        completion_rate=completion_rate(bills),
    )


def export_filename(fy: Optional[str], today: date) -> str:
    return f"transport-analysis-{fy or ALL_FILTER}-{today.isoformat()}.csv"


def export_analysis_csv(summary: AnalysisSummary, today: date) -> str:
    """
    Renders an analysis summary as a CSV report, every cell quoted.
    """
    rows: List[list] = [
        ["Analysis Report", f"FY {summary.financial_year or 'All Years'}"],
        ["Generated on", format_display_date(today)],
        [""],
        ["Key Metrics"],
        ["Total Entries", summary.total_entries],
        ["Total Revenue", summary.total_revenue],
        ["Average Revenue", f"{summary.average_revenue:.2f}"],
        ["Completion Rate", f"{summary.completion_rate:.1f}%"],
        [""],
        ["Status Distribution"],
    ]
    for status, count in summary.status_distribution.items():
        share = _percent(count, summary.total_entries)
        rows.append([status.replace("_", " ", 1), count, f"{share:.1f}%"])

    rows += [[""], ["Top Routes by Revenue"], ["Route", "Trips", "Revenue"]]
    rows += [[route.route, route.count, route.revenue] for route in summary.route_analysis]

    rows += [[""], ["Top Vehicles by Trips"], ["Vehicle", "Trips", "Revenue"]]
    rows += [[vehicle.vehicle, vehicle.count, vehicle.revenue] for vehicle in summary.vehicle_analysis]

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()
