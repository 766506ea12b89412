"""
transport_billing/schemas/analytics.py

Purpose: Analytics summary schemas

- Ranking rows (routes, vehicles, owners) and monthly trend points
- AnalysisSummary for the analysis page
- DashboardSummary for the dashboard
- ReportStats for the reports table header
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RouteStat(BaseModel):
    route: str
    count: int = 0
    revenue: float = 0


class VehicleStat(BaseModel):
    vehicle: str
    count: int = 0
    revenue: float = 0
    efficiency: Optional[int] = None


class OwnerStat(BaseModel):
    owner: str
    count: int = 0
    revenue: float = 0


class MonthlyPoint(BaseModel):
    month: str
    year: int
    count: int = 0
    revenue: float = 0


class GrowthMetrics(BaseModel):
    revenue_growth: float = 0
    volume_growth: float = 0


class AnalysisSummary(BaseModel):
    financial_year: Optional[str] = None
    total_entries: int = 0
    total_revenue: float = 0
    average_revenue: float = 0
    status_distribution: Dict[str, int] = Field(default_factory=dict)
    route_analysis: List[RouteStat] = Field(default_factory=list)
    vehicle_analysis: List[VehicleStat] = Field(default_factory=list)
    owner_analysis: List[OwnerStat] = Field(default_factory=list)
    monthly_trend: List[MonthlyPoint] = Field(default_factory=list)
    completion_rate: float = 0
    pending_rate: float = 0
    growth: GrowthMetrics = Field(default_factory=GrowthMetrics)


class DashboardStats(BaseModel):
    total_entries: int = 0
    completed_entries: int = 0
    pending_entries: int = 0
    total_revenue: float = 0
    monthly_revenue: float = 0
    active_vehicles: int = 0
    avg_revenue_per_trip: float = 0
    this_month_entries: int = 0
    last_month_entries: int = 0


class RecentEntry(BaseModel):
    id: str
    vehicle: str
    route: str
    status: str
    amount: float
    date: str
    driver: str


class StatusBreakdown(BaseModel):
    completed: int = 0
    pending: int = 0
    in_transit: int = 0


class DashboardSummary(BaseModel):
    stats: DashboardStats = Field(default_factory=DashboardStats)
    recent_entries: List[RecentEntry] = Field(default_factory=list)
    top_routes: List[RouteStat] = Field(default_factory=list)
    vehicle_performance: List[VehicleStat] = Field(default_factory=list)
    monthly_trend: List[MonthlyPoint] = Field(default_factory=list)
    status_breakdown: StatusBreakdown = Field(default_factory=StatusBreakdown)


class ReportStats(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    total_revenue: float = 0
    average_revenue: float = 0
    completion_rate: float = 0
