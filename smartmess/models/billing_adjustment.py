from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from ..constants import ADJUSTMENT_STATUSES
from . import Base

adjustment_status_enum = Enum(*ADJUSTMENT_STATUSES, name="billing_adjustment_status")


class BillingAdjustment(Base):
    __tablename__ = "billing_adjustments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    leave_id = Column(Integer, ForeignKey("mess_leaves.id", ondelete="CASCADE"), nullable=False, index=True)
    original_amount = Column(Float, nullable=False)
    adjusted_amount = Column(Float, nullable=False, default=0)
    credit_amount = Column(Float, nullable=False)
    adjustment_date = Column(DateTime, nullable=False)
    adjustment_reason = Column(String(255), nullable=True)
    status = Column(adjustment_status_enum, nullable=False, default="pending")
    applied_at = Column(DateTime, nullable=True)
    reversed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    leave = relationship("MessLeave", back_populates="adjustments")
