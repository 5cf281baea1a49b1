from __future__ import annotations

from sqlalchemy.orm import Session

from ..constants import ROLE_USER
from ..models import User


def active_members_query(db: Session, mess_id: int):
    return db.query(User).filter(
        User.mess_id == mess_id,
        User.role == ROLE_USER,
        User.is_active.is_(True),
    )


def active_members(db: Session, mess_id: int) -> list[User]:
    return active_members_query(db, mess_id).order_by(User.id.asc()).all()
