from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    func,
)
from sqlalchemy.orm import relationship

from ..constants import LEAVE_STATUSES, LEAVE_TYPES
from . import Base

leave_type_enum = Enum(*LEAVE_TYPES, name="mess_leave_type")
leave_status_enum = Enum(*LEAVE_STATUSES, name="mess_leave_status")


class MessLeave(Base):
    __tablename__ = "mess_leaves"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_mess_leave_date_order"),
        Index("ix_mess_leaves_mess_start", "mess_id", "start_date"),
        Index("ix_mess_leaves_mess_status", "mess_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    mess_id = Column(Integer, ForeignKey("messes.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    leave_type = Column(leave_type_enum, nullable=False)
    reason = Column(String(500), nullable=True)
    meal_types = Column(JSON, nullable=False, default=list)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_pattern = Column(JSON, nullable=True)
    status = Column(leave_status_enum, nullable=False, default="scheduled")
    notifications_sent = Column(Boolean, nullable=False, default=False)
    reminder_requested = Column(Boolean, nullable=False, default=False)
    reminder_sent_at = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    affected_users = Column(Integer, nullable=False, default=0)
    estimated_savings = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    mess = relationship("Mess")
    adjustments = relationship("BillingAdjustment", back_populates="leave", passive_deletes=True)
