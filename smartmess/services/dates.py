"""Date arithmetic shared by the leave workflow, billing and analytics."""

from __future__ import annotations

import calendar
from datetime import date, datetime

from ..constants import BLOCKING_LEAVE_STATUSES


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days covered by ``start..end`` with both ends counted."""
    return (end - start).days + 1


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def months_ago(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, days_in_month(year, month))
    return moment.replace(year=year, month=month, day=day)


def derive_status(status: str, start: date, end: date, today: date) -> str:
    """Effective status of a leave on ``today``.

    Only ``scheduled`` and ``cancelled`` are ever persisted; ``active`` and
    ``completed`` follow from where ``today`` falls relative to the range.
    """
    if status not in BLOCKING_LEAVE_STATUSES:
        return status
    if today > end:
        return "completed"
    if start <= today:
        return "active"
    return "scheduled"


def format_date_range(start: date, end: date) -> str:
    if start == end:
        return _format_day(start)
    return f"{_format_day(start)} - {_format_day(end)}"


def _format_day(value: date) -> str:
    return value.strftime("%d %b %Y")
