from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, func

from . import Base

admin_action_enum = Enum("notify", "investigate", "restrict", name="admin_action_type")


class AdminAction(Base):
    __tablename__ = "admin_actions"

    id = Column(Integer, primary_key=True)
    mess_id = Column(Integer, ForeignKey("messes.id"), nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    target_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(admin_action_enum, nullable=False)
    note = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
