import csv
import io
import math
from datetime import date

from conftest import bill_payload
from transport_billing.schemas.transport import parse_transport_bill
from transport_billing.services import analytics_service as analytics

TODAY = date(2024, 6, 15)


def bill(day, total=100, status="PENDING", **kwargs):
    return parse_transport_bill(bill_payload(date=f"{day}T00:00:00.000Z", total=total, status=status, **kwargs))


def test_two_entry_scenario():
    bills = [
        bill("2024-04-10", 100, "COMPLETED", entry_id="A"),
        bill("2024-05-10", 200, "PENDING", entry_id="B"),
    ]

    summary = analytics.build_analysis(bills, "2024-25", TODAY)

    assert summary.total_entries == 2
    assert summary.total_revenue == 300
    assert summary.average_revenue == 150
    assert summary.completion_rate == 50
    assert summary.pending_rate == 50
    assert summary.status_distribution == {"COMPLETED": 1, "PENDING": 1}


def test_empty_input_is_all_zeros():
    summary = analytics.build_analysis([], None, TODAY)

    assert summary.total_entries == 0
    assert summary.average_revenue == 0
    assert summary.completion_rate == 0
    assert summary.pending_rate == 0
    assert summary.growth.revenue_growth == 0
    assert summary.growth.volume_growth == 0
    assert summary.route_analysis == []
    assert summary.monthly_trend == []
    for value in (summary.average_revenue, summary.completion_rate, summary.growth.revenue_growth):
        assert math.isfinite(value)

    dashboard = analytics.build_dashboard([], TODAY)
    assert dashboard.stats.avg_revenue_per_trip == 0
    assert [p.count for p in dashboard.monthly_trend] == [0] * 6


def test_filter_by_financial_year():
    bills = [bill("2024-03-31", entry_id="old"), bill("2024-04-01", entry_id="new")]

    assert [b.id for b in analytics.filter_by_financial_year(bills, "2024-25")] == ["new"]
    assert [b.id for b in analytics.filter_by_financial_year(bills, "2023-24")] == ["old"]
    assert len(analytics.filter_by_financial_year(bills, "all")) == 2
    assert len(analytics.filter_by_financial_year(bills, None)) == 2


def test_route_ranking_sorts_by_revenue():
    bills = [
        bill("2024-05-01", 100, origin="A", destination="B"),
        bill("2024-05-02", 100, origin="A", destination="B"),
        bill("2024-05-03", 100, origin="A", destination="B"),
        bill("2024-05-04", 500, origin="C", destination="D"),
    ]

    ranking = analytics.route_ranking(bills)

    assert [r.route for r in ranking] == ["C → D", "A → B"]
    assert ranking[1].count == 3
    assert ranking[1].revenue == 300


def test_vehicle_ranking_sorts_by_count():
    bills = [
        bill("2024-05-01", 1000, vehicle="BIG"),
        bill("2024-05-02", 10, vehicle="BUSY"),
        bill("2024-05-03", 10, vehicle="BUSY"),
    ]

    assert [v.vehicle for v in analytics.vehicle_ranking(bills)] == ["BUSY", "BIG"]


def test_rankings_are_stable_and_truncated():
    bills = [bill("2024-05-01", 100, vehicle=f"V{i}") for i in range(7)]

    ranking = analytics.vehicle_ranking(bills, top_n=5)

    assert [v.vehicle for v in ranking] == ["V0", "V1", "V2", "V3", "V4"]


def test_owner_ranking_uses_first_line():
    bills = [
        bill("2024-05-01", owner="Shree Logistics\nPlot 4"),
        bill("2024-05-02", owner="Shree Logistics\nPlot 9"),
        bill("2024-05-03", owner=""),
    ]

    ranking = analytics.owner_ranking(bills)

    assert ranking[0].owner == "Shree Logistics"
    assert ranking[0].count == 2
    assert ranking[1].owner == "Unknown"


def test_analysis_trend_is_chronological_without_gaps_filled():
    bills = [
        bill("2024-05-10", 200),
        bill("2023-12-01", 50),
        bill("2024-02-20", 70),
        bill("2024-05-11", 100),
    ]

    trend = analytics.monthly_trend(bills)

    assert [(p.year, p.month) for p in trend] == [(2023, "Dec"), (2024, "Feb"), (2024, "May")]
    assert trend[-1].count == 2
    assert trend[-1].revenue == 300


def test_analysis_trend_keeps_last_twelve():
    bills = [bill(f"{2023 + (m // 12)}-{m % 12 + 1:02d}-01") for m in range(14)]
    trend = analytics.monthly_trend(bills, keep=12)
    assert len(trend) == 12
    assert (trend[0].year, trend[0].month) == (2023, "Mar")


def test_dashboard_trend_is_six_preseeded_months():
    bills = [bill("2024-06-01", 100), bill("2024-03-05", 40), bill("2023-11-30", 999)]

    trend = analytics.dashboard_monthly_trend(bills, TODAY)

    assert [(p.year, p.month) for p in trend] == [
        (2024, "Jan"), (2024, "Feb"), (2024, "Mar"), (2024, "Apr"), (2024, "May"), (2024, "Jun"),
    ]
    assert [p.count for p in trend] == [0, 0, 1, 0, 0, 1]
    assert sum(p.revenue for p in trend) == 140


def test_growth_against_empty_previous_period_is_zero():
    growth = analytics.growth_metrics([bill("2024-06-01", 100)], TODAY)
    assert growth.revenue_growth == 0
    assert growth.volume_growth == 0


def test_growth_compares_half_years():
    # current window starts 2023-12-15, previous one 2023-06-15
    bills = [
        bill("2024-06-01", 300),
        bill("2023-12-20", 150),
        bill("2023-12-10", 100),
        bill("2023-09-01", 100),
        bill("2023-07-01", 50),
        bill("2023-06-20", 50),
        bill("2023-06-14", 999),
    ]

    growth = analytics.growth_metrics(bills, TODAY)

    assert growth.revenue_growth == 50
    assert growth.volume_growth == -50


def test_rates():
    bills = [bill("2024-05-01", status="COMPLETED"), bill("2024-05-02", status="IN_PROGRESS")]
    assert analytics.rate(bills, analytics.BillStatus.IN_PROGRESS) == 50
    assert analytics.completion_rate(bills) == 50
    assert analytics.pending_rate(bills) == 0
    assert analytics.rate([], analytics.BillStatus.COMPLETED) == 0


def test_dashboard_summary():
    bills = [
        bill("2024-06-10", 100, "COMPLETED", entry_id="A", vehicle="V1", driver="Suresh - 98220"),
        bill("2024-06-12", 200, "PENDING", entry_id="B", vehicle="V1", driver=""),
        bill("2024-05-20", 300, "IN_PROGRESS", entry_id="C", vehicle="V2"),
    ]

    summary = analytics.build_dashboard(bills, TODAY)

    stats = summary.stats
    assert stats.total_entries == 3
    assert stats.completed_entries == 1
    assert stats.pending_entries == 1
    assert stats.total_revenue == 600
    assert stats.monthly_revenue == 300
    assert stats.active_vehicles == 2
    assert stats.avg_revenue_per_trip == 200
    assert stats.this_month_entries == 2
    assert stats.last_month_entries == 1

    assert [e.id for e in summary.recent_entries] == ["B", "A", "C"]
    assert summary.recent_entries[0].driver == "N/A"
    assert summary.recent_entries[1].driver == "Suresh"
    assert summary.recent_entries[1].status == "completed"
    assert summary.recent_entries[1].date == "10/06/2024"

    assert summary.vehicle_performance[0].vehicle == "V1"
    assert summary.vehicle_performance[0].efficiency == 84
    assert summary.status_breakdown.in_transit == 1


def test_vehicle_efficiency_bounds():
    assert analytics.vehicle_efficiency(0) == 80
    assert analytics.vehicle_efficiency(1) == 82
    assert analytics.vehicle_efficiency(100) == 95


def test_dashboard_limits():
    bills = [bill(f"2024-05-{d:02d}", d, vehicle=f"V{d}", origin=f"O{d}") for d in range(1, 11)]
    summary = analytics.build_dashboard(bills, TODAY)
    assert len(summary.recent_entries) == 5
    assert len(summary.top_routes) == 4
    assert len(summary.vehicle_performance) == 4
    assert summary.top_routes[0].revenue == 10


def test_report_stats():
    bills = [bill("2024-05-01", 100, "COMPLETED"), bill("2024-05-02", 300, "IN_PROGRESS")]
    stats = analytics.report_stats(bills)
    assert stats.total == 2
    assert stats.in_progress == 1
    assert stats.average_revenue == 200
    assert stats.completion_rate == 50


def test_export_csv():
    bills = [bill("2024-05-01", 100, "IN_PROGRESS")]
    summary = analytics.build_analysis(bills, "2024-25", TODAY)

    text = analytics.export_analysis_csv(summary, TODAY)
    rows = list(csv.reader(io.StringIO(text)))

    assert rows[0] == ["Analysis Report", "FY 2024-25"]
    assert rows[1] == ["Generated on", "15/06/2024"]
    assert ["IN PROGRESS", "1", "100.0%"] in rows
    assert ["Pune → Mumbai", "1", "100.0"] in rows
    assert text.startswith('"Analysis Report"')
    assert analytics.export_filename(None, TODAY) == "transport-analysis-all-2024-06-15.csv"
