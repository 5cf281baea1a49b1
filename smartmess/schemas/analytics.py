from datetime import date, datetime

from .common import CamelModel
from .leave import LeaveRead


class MonthlyBreakdown(CamelModel):
    month: str
    leave_days: int = 0
    serving_days: int = 0
    revenue: float = 0
    savings: float = 0


class LeavePattern(CamelModel):
    pattern: str
    count: int
    last_occurrence: date


class LeaveAnalytics(CamelModel):
    total_leave_days: int
    total_serving_days: int
    leaves_by_type: dict[str, int]
    monthly_breakdown: list[MonthlyBreakdown]
    upcoming_leaves: list[LeaveRead]
    frequent_leave_patterns: list[LeavePattern]


class LeaveRiskProfile(CamelModel):
    user_id: int
    user_name: str
    email: str | None = None
    leave_count: int
    total_leave_days: int
    last_leave_date: datetime | None = None
    average_days_between_leaves: float
    risk_level: str


class MonitoringAlert(CamelModel):
    id: str
    type: str = "frequent_leave"
    message: str
    user_id: int
    severity: str = "high"
    created_at: datetime


class MonitoringReport(CamelModel):
    frequent_leave_users: list[LeaveRiskProfile]
    total_users: int
    average_leave_frequency: float
    risk_thresholds: dict[str, int]
    alerts: list[MonitoringAlert]
