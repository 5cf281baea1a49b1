"""Per-user credit records for mess leaves.

Every affected member is credited the full flat price of the meals the
leave removes; nothing stays owed for those days.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from ..models import BillingAdjustment, MessLeave, User
from .dates import days_inclusive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustmentQuote:
    original_amount: float
    adjusted_amount: float
    credit_amount: float


def quote_adjustment(leave: MessLeave, meal_cost: float) -> AdjustmentQuote:
    days = days_inclusive(leave.start_date, leave.end_date)
    original = days * len(leave.meal_types or []) * meal_cost
    adjusted = 0
    return AdjustmentQuote(
        original_amount=original,
        adjusted_amount=adjusted,
        credit_amount=original - adjusted,
    )


def create_billing_adjustments(
    db: Session,
    leave: MessLeave,
    members: Iterable[User],
    *,
    meal_cost: float,
    now: datetime | None = None,
) -> list[BillingAdjustment]:
    """Stage one adjustment per member. The caller owns the commit."""
    now = now or datetime.utcnow()
    quote = quote_adjustment(leave, meal_cost)
    created: list[BillingAdjustment] = []
    if quote.credit_amount <= 0:
        return created
    for member in members:
        adjustment = BillingAdjustment(
            user_id=member.id,
            leave_id=leave.id,
            original_amount=quote.original_amount,
            adjusted_amount=quote.adjusted_amount,
            credit_amount=quote.credit_amount,
            adjustment_date=now,
            adjustment_reason=f"Mess leave: {leave.leave_type}",
            status="pending",
        )
        db.add(adjustment)
        created.append(adjustment)
    db.flush()
    logger.info("Staged %s billing adjustment(s) for leave %s", len(created), leave.id)
    return created


def reverse_billing_adjustments(db: Session, leave_id: int) -> int:
    """Remove every adjustment of a leave regardless of its status."""
    removed = (
        db.query(BillingAdjustment)
        .filter(BillingAdjustment.leave_id == leave_id)
        .delete(synchronize_session=False)
    )
    logger.info("Removed %s billing adjustment(s) for leave %s", removed, leave_id)
    return removed

