from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from . import Base


class Mess(Base):
    __tablename__ = "messes"

    id = Column(Integer, primary_key=True)
    name = Column(String(160), nullable=False)
    owner_user_id = Column(
        Integer,
        ForeignKey("users.id", use_alter=True, name="messes_owner_user_id_fkey"),
        nullable=True,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
