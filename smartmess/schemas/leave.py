from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import Field, field_validator, model_validator

from ..constants import LeaveType, MealType
from ..services.dates import derive_status
from .common import CamelModel


class RecurringPattern(CamelModel):
    frequency: Literal["daily", "weekly", "monthly", "yearly"]
    interval: int = Field(default=1, ge=1)
    days_of_week: list[int] | None = None
    end_date: date | None = None
    occurrences: int | None = Field(default=None, ge=1)

    @field_validator("days_of_week")
    def days_in_week(cls, value: list[int] | None) -> list[int] | None:
        if value is None:
            return value
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("daysOfWeek entries must be between 0 and 6")
        return sorted(set(value))


class LeaveCreate(CamelModel):
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str | None = Field(default=None, max_length=500)
    meal_types: list[MealType] = Field(..., min_length=1)
    is_recurring: bool = False
    recurring_pattern: RecurringPattern | None = None
    notify_users: bool = False
    send_reminder: bool = False

    @field_validator("meal_types")
    def unique_meals(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("reason")
    def strip_reason(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return value.strip() or None

    @model_validator(mode="after")
    def check_range(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        if self.is_recurring and self.recurring_pattern is None:
            raise ValueError("Recurring leaves need a recurringPattern")
        return self


class LeaveRead(CamelModel):
    id: int
    mess_id: int
    mess_name: str | None = None
    start_date: date
    end_date: date
    leave_type: str
    reason: str | None = None
    meal_types: list[str]
    is_recurring: bool
    recurring_pattern: dict | None = None
    status: str
    effective_status: str
    notifications_sent: bool
    reminder_requested: bool
    created_by: int
    affected_users: int
    estimated_savings: float
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_leave(cls, leave, today: date | None = None) -> "LeaveRead":
        today = today or date.today()
        return cls(
            id=leave.id,
            mess_id=leave.mess_id,
            mess_name=leave.mess.name if leave.mess else None,
            start_date=leave.start_date,
            end_date=leave.end_date,
            leave_type=leave.leave_type,
            reason=leave.reason,
            meal_types=list(leave.meal_types or []),
            is_recurring=bool(leave.is_recurring),
            recurring_pattern=leave.recurring_pattern,
            status=leave.status,
            effective_status=derive_status(leave.status, leave.start_date, leave.end_date, today),
            notifications_sent=bool(leave.notifications_sent),
            reminder_requested=bool(leave.reminder_requested),
            created_by=leave.created_by,
            affected_users=leave.affected_users or 0,
            estimated_savings=leave.estimated_savings or 0,
            created_at=leave.created_at,
            updated_at=leave.updated_at,
        )
