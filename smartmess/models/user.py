from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, func

from ..constants import USER_ROLES
from . import Base

user_role_enum = Enum(*USER_ROLES, name="user_role")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    mess_id = Column(Integer, ForeignKey("messes.id"), nullable=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    phone = Column(String(32), nullable=True)
    role = Column(user_role_enum, nullable=False, default="USER")
    is_active = Column(Boolean, nullable=False, default=True)
    notify_email = Column(Boolean, nullable=False, default=True)
    notify_push = Column(Boolean, nullable=False, default=True)
    notify_sms = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
