"""Read-only leave reports, recomputed on every request."""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..constants import BLOCKING_LEAVE_STATUSES, LEAVE_TYPES
from ..models import MessLeave, User
from ..schemas.analytics import (
    LeaveAnalytics,
    LeavePattern,
    LeaveRiskProfile,
    MonitoringAlert,
    MonitoringReport,
    MonthlyBreakdown,
)
from ..schemas.leave import LeaveRead
from .dates import days_in_month, days_in_year, days_inclusive, months_ago
from .leaves import resolve_owner_mess

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 5
MONITORING_WINDOW_MONTHS = 3
MIN_LEAVES_FOR_MONITORING = 3
HIGH_RISK_LEAVE_COUNT = 8
MEDIUM_RISK_LEAVE_COUNT = 5
HIGH_RISK_GAP_DAYS = 7
MEDIUM_RISK_GAP_DAYS = 14


def _leave_days(leave: MessLeave) -> int:
    """Inclusive day span, or 0 for a record whose dates cannot be used."""
    try:
        days = days_inclusive(leave.start_date, leave.end_date)
    except (TypeError, AttributeError) as exc:
        logger.warning("Invalid dates for leave %s: %s", getattr(leave, "id", None), exc)
        return 0
    return days if days > 0 else 0


def _leave_savings(leave: MessLeave) -> float:
    try:
        return float(leave.estimated_savings or 0)
    except (TypeError, ValueError):
        logger.warning("Invalid estimated savings for leave %s", leave.id)
        return 0.0


def _monthly_breakdown(leaves: list[MessLeave], year: int) -> list[MonthlyBreakdown]:
    rows = []
    for month in range(1, 13):
        month_days = days_in_month(year, month)
        month_leaves = [
            leave
            for leave in leaves
            if leave.start_date is not None
            and leave.start_date.year == year
            and leave.start_date.month == month
        ]
        leave_days = sum(_leave_days(leave) for leave in month_leaves)
        rows.append(
            MonthlyBreakdown(
                month=calendar.month_name[month],
                leave_days=leave_days,
                serving_days=max(0, month_days - leave_days),
                revenue=0,
                savings=sum(_leave_savings(leave) for leave in month_leaves),
            )
        )
    return rows


def _frequent_patterns(leaves: list[MessLeave]) -> list[LeavePattern]:
    grouped: dict[str, list[MessLeave]] = defaultdict(list)
    for leave in leaves:
        if not leave.is_recurring or not leave.recurring_pattern:
            continue
        frequency = str(leave.recurring_pattern.get("frequency") or "custom")
        grouped[f"{frequency.title()} {leave.leave_type}"].append(leave)
    patterns = [
        LeavePattern(
            pattern=label,
            count=len(items),
            last_occurrence=max(item.start_date for item in items),
        )
        for label, items in grouped.items()
    ]
    patterns.sort(key=lambda item: (-item.count, item.pattern))
    return patterns


def build_owner_analytics(db: Session, owner_id: int, today: date | None = None) -> LeaveAnalytics:
    today = today or date.today()
    mess = resolve_owner_mess(db, owner_id)
    year = today.year

    leaves = (
        db.query(MessLeave)
        .filter(
            MessLeave.mess_id == mess.id,
            MessLeave.start_date >= date(year, 1, 1),
            MessLeave.start_date <= date(year, 12, 31),
            MessLeave.status.in_(BLOCKING_LEAVE_STATUSES),
        )
        .all()
    )

    total_leave_days = sum(_leave_days(leave) for leave in leaves)
    leaves_by_type = {leave_type: 0 for leave_type in LEAVE_TYPES}
    for leave in leaves:
        bucket = leave.leave_type if leave.leave_type in leaves_by_type else "other"
        leaves_by_type[bucket] += 1

    upcoming = (
        db.query(MessLeave)
        .options(joinedload(MessLeave.mess))
        .filter(
            MessLeave.mess_id == mess.id,
            MessLeave.start_date >= today,
            MessLeave.status.in_(BLOCKING_LEAVE_STATUSES),
        )
        .order_by(MessLeave.start_date.asc(), MessLeave.id.asc())
        .limit(UPCOMING_LIMIT)
        .all()
    )

    return LeaveAnalytics(
        total_leave_days=total_leave_days,
        total_serving_days=max(0, days_in_year(year) - total_leave_days),
        leaves_by_type=leaves_by_type,
        monthly_breakdown=_monthly_breakdown(leaves, year),
        upcoming_leaves=[LeaveRead.from_leave(leave, today) for leave in upcoming],
        frequent_leave_patterns=_frequent_patterns(leaves),
    )


def classify_risk(leave_count: int, average_gap_days: float) -> str:
    if leave_count >= HIGH_RISK_LEAVE_COUNT or average_gap_days < HIGH_RISK_GAP_DAYS:
        return "high"
    if leave_count >= MEDIUM_RISK_LEAVE_COUNT or average_gap_days < MEDIUM_RISK_GAP_DAYS:
        return "medium"
    return "low"


def average_gap_days(timestamps: list[datetime]) -> float:
    ordered = sorted(timestamps)
    if len(ordered) < 2:
        return 0.0
    total = sum(
        (later - earlier).total_seconds() / 86400 for earlier, later in zip(ordered, ordered[1:])
    )
    return total / (len(ordered) - 1)


def build_monitoring_report(db: Session, mess_id: int, now: datetime | None = None) -> MonitoringReport:
    now = now or datetime.utcnow()
    window_start = months_ago(now, MONITORING_WINDOW_MONTHS)
    leaves = (
        db.query(MessLeave)
        .filter(MessLeave.mess_id == mess_id, MessLeave.created_at >= window_start)
        .all()
    )

    grouped: dict[int, list[MessLeave]] = defaultdict(list)
    for leave in leaves:
        grouped[leave.created_by].append(leave)

    candidates = {
        creator_id: items
        for creator_id, items in grouped.items()
        if len(items) >= MIN_LEAVES_FOR_MONITORING
    }
    users = {}
    if candidates:
        users = {user.id: user for user in db.query(User).filter(User.id.in_(list(candidates))).all()}

    profiles: list[LeaveRiskProfile] = []
    for creator_id, items in sorted(candidates.items()):
        created = [item.created_at for item in items if item.created_at is not None]
        gap = average_gap_days(created)
        user = users.get(creator_id)
        profiles.append(
            LeaveRiskProfile(
                user_id=creator_id,
                user_name=user.full_name if user else f"User {creator_id}",
                email=user.email if user else None,
                leave_count=len(items),
                total_leave_days=sum(_leave_days(item) for item in items),
                last_leave_date=max(created) if created else None,
                average_days_between_leaves=round(gap, 2),
                risk_level=classify_risk(len(items), gap),
            )
        )

    alerts = [
        MonitoringAlert(
            id=f"alert_{profile.user_id}_{int(now.timestamp())}",
            message=(
                f"{profile.user_name} has taken {profile.leave_count} leaves in the last "
                f"{MONITORING_WINDOW_MONTHS} months ({profile.total_leave_days} days total)"
            ),
            user_id=profile.user_id,
            created_at=now,
        )
        for profile in profiles
        if profile.risk_level == "high"
    ]

    total_users = (
        db.query(func.count(func.distinct(MessLeave.created_by)))
        .filter(MessLeave.mess_id == mess_id)
        .scalar()
        or 0
    )
    average_frequency = (
        sum(profile.leave_count for profile in profiles) / len(profiles) if profiles else 0.0
    )

    return MonitoringReport(
        frequent_leave_users=profiles,
        total_users=total_users,
        average_leave_frequency=average_frequency,
        risk_thresholds={"high": HIGH_RISK_LEAVE_COUNT, "medium": MEDIUM_RISK_LEAVE_COUNT},
        alerts=alerts,
    )
