"""Mess leave scheduling, cancellation and the notifications around them."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Sequence

from sqlalchemy.orm import Session, joinedload

from ..constants import BLOCKING_LEAVE_STATUSES
from ..exceptions import LeaveNotFound, NotAssociated, OverlappingLeave
from ..models import Mess, MessLeave, User
from ..schemas.leave import LeaveCreate
from . import billing
from .dates import days_inclusive, format_date_range
from .members import active_members
from .notifications import DispatchResult, NotificationDispatcher

logger = logging.getLogger(__name__)

LEAVE_NOTIFICATION_TITLE = "Mess Leave Notification"
LEAVE_NOTIFICATION_CHANNELS = ("push", "email")


def resolve_owner_mess(db: Session, owner_id: int, *, lock: bool = False) -> Mess:
    owner = db.query(User).filter(User.id == owner_id).one_or_none()
    if not owner:
        raise NotAssociated("Mess owner account not found")
    query = db.query(Mess)
    if owner.mess_id:
        query = query.filter(Mess.id == owner.mess_id)
    else:
        query = query.filter(Mess.owner_user_id == owner.id)
    if lock:
        query = query.with_for_update()
    mess = query.first()
    if not mess:
        raise NotAssociated()
    return mess


def find_overlapping_leaves(db: Session, mess_id: int, start: date, end: date) -> list[MessLeave]:
    return (
        db.query(MessLeave)
        .filter(
            MessLeave.mess_id == mess_id,
            MessLeave.status.in_(BLOCKING_LEAVE_STATUSES),
            MessLeave.start_date <= end,
            MessLeave.end_date >= start,
        )
        .all()
    )


def list_leaves(
    db: Session,
    owner_id: int,
    *,
    statuses: Sequence[str] | None = None,
    leave_types: Sequence[str] | None = None,
    start_from: date | None = None,
    start_to: date | None = None,
) -> list[MessLeave]:
    query = (
        db.query(MessLeave)
        .options(joinedload(MessLeave.mess))
        .filter(MessLeave.created_by == owner_id)
    )
    if statuses:
        query = query.filter(MessLeave.status.in_(statuses))
    if leave_types:
        query = query.filter(MessLeave.leave_type.in_(leave_types))
    if start_from:
        query = query.filter(MessLeave.start_date >= start_from)
    if start_to:
        query = query.filter(MessLeave.start_date <= start_to)
    return query.order_by(MessLeave.start_date.desc(), MessLeave.id.desc()).all()


def estimate_savings(start: date, end: date, meal_count: int, meal_cost: float, affected_users: int) -> float:
    return days_inclusive(start, end) * meal_count * meal_cost * affected_users


def leave_notification_message(leave: MessLeave, kind: str) -> str:
    date_range = format_date_range(leave.start_date, leave.end_date)
    meals = ", ".join(leave.meal_types or [])
    if kind in {"immediate", "manual"}:
        return (
            f"Mess will be closed on {date_range} for {leave.leave_type}. "
            f"Affected meals: {meals}. {leave.reason or ''}"
        ).strip()
    if kind == "cancellation":
        return f"Mess leave scheduled for {date_range} has been cancelled. Normal service will resume."
    if kind == "reminder":
        return f"Reminder: Mess will be closed tomorrow for {leave.leave_type}. Affected meals: {meals}."
    return f"Mess leave notification for {date_range}"


class LeaveOrchestrator:
    def __init__(self, dispatcher: NotificationDispatcher, *, meal_cost: float = 50):
        self.dispatcher = dispatcher
        self.meal_cost = meal_cost

    def create_leave(self, db: Session, owner_id: int, payload: LeaveCreate) -> MessLeave:
        """Schedule a closure and credit every affected member.

        The mess row is locked for the overlap check so two requests for the
        same mess cannot both pass it. The leave and its billing adjustments
        are committed together; notifications and the reminder flag follow
        the commit and never undo it.
        """
        mess = resolve_owner_mess(db, owner_id, lock=True)
        if find_overlapping_leaves(db, mess.id, payload.start_date, payload.end_date):
            db.rollback()
            raise OverlappingLeave()

        members = active_members(db, mess.id)
        leave = MessLeave(
            mess_id=mess.id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            leave_type=payload.leave_type,
            reason=payload.reason,
            meal_types=list(payload.meal_types),
            is_recurring=payload.is_recurring,
            recurring_pattern=(
                payload.recurring_pattern.model_dump(by_alias=True, mode="json", exclude_none=True)
                if payload.recurring_pattern
                else None
            ),
            status="scheduled",
            notifications_sent=False,
            created_by=owner_id,
            affected_users=len(members),
            estimated_savings=estimate_savings(
                payload.start_date,
                payload.end_date,
                len(payload.meal_types),
                self.meal_cost,
                len(members),
            ),
        )
        db.add(leave)
        db.flush()
        billing.create_billing_adjustments(db, leave, members, meal_cost=self.meal_cost)
        db.commit()
        logger.info(
            "Scheduled leave %s for mess %s (%s to %s, %s member(s))",
            leave.id,
            mess.id,
            leave.start_date,
            leave.end_date,
            leave.affected_users,
        )

        if payload.notify_users:
            self._dispatch(db, leave, "immediate")
            leave.notifications_sent = True
            db.commit()

        if payload.send_reminder:
            self._schedule_reminder(db, leave)

        return leave

    def cancel_leave(self, db: Session, leave_id: int, owner_id: int) -> MessLeave:
        leave = (
            db.query(MessLeave)
            .filter(
                MessLeave.id == leave_id,
                MessLeave.created_by == owner_id,
                MessLeave.status == "scheduled",
            )
            .one_or_none()
        )
        if not leave:
            raise LeaveNotFound("Leave not found or cannot be cancelled")

        leave.status = "cancelled"
        leave.updated_at = datetime.utcnow()
        billing.reverse_billing_adjustments(db, leave.id)
        db.commit()
        logger.info("Cancelled leave %s", leave.id)

        self._dispatch(db, leave, "cancellation")
        return leave

    def notify_leave(self, db: Session, leave_id: int, owner_id: int) -> DispatchResult:
        leave = (
            db.query(MessLeave)
            .filter(MessLeave.id == leave_id, MessLeave.created_by == owner_id)
            .one_or_none()
        )
        if not leave:
            raise LeaveNotFound()

        result = self._dispatch(db, leave, "manual")
        leave.notifications_sent = True
        leave.updated_at = datetime.utcnow()
        db.commit()
        return result

    def send_due_reminders(self, db: Session, today: date | None = None) -> int:
        """Send the day-before reminder for every leave starting tomorrow."""
        today = today or date.today()
        due = (
            db.query(MessLeave)
            .filter(
                MessLeave.status == "scheduled",
                MessLeave.reminder_requested.is_(True),
                MessLeave.reminder_sent_at.is_(None),
                MessLeave.start_date == today + timedelta(days=1),
            )
            .order_by(MessLeave.id.asc())
            .all()
        )
        for leave in due:
            self._dispatch(db, leave, "reminder")
            leave.reminder_sent_at = datetime.utcnow()
            db.commit()
        return len(due)

    def _schedule_reminder(self, db: Session, leave: MessLeave) -> None:
        leave.reminder_requested = True
        db.commit()
        logger.info("Reminder scheduled for leave %s", leave.id)

    def _dispatch(self, db: Session, leave: MessLeave, kind: str) -> DispatchResult:
        try:
            return self.dispatcher.send_to_mess(
                db,
                leave.mess_id,
                title=LEAVE_NOTIFICATION_TITLE,
                message=leave_notification_message(leave, kind),
                type="leave_notification",
                channels=LEAVE_NOTIFICATION_CHANNELS,
                data={"leaveId": leave.id, "kind": kind},
            )
        except Exception:
            logger.exception("Error sending %s notifications for leave %s", kind, leave.id)
            return DispatchResult()
