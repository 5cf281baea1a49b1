"""Seed a demo mess with an owner and a few members into the configured database."""

from smartmess.db import SessionLocal
from smartmess.models import Mess, User
from smartmess.routers.auth import get_password_hash

OWNER_EMAIL = "owner@smartmess.in"
MEMBER_EMAILS = (
    ("asha@smartmess.in", "Asha Rao"),
    ("vikram@smartmess.in", "Vikram Singh"),
    ("meera@smartmess.in", "Meera Iyer"),
)
DEFAULT_PASSWORD = "demo1234"


def ensure_mess(session) -> Mess:
    mess = session.query(Mess).filter(Mess.name == "Demo Mess").one_or_none()
    if mess is None:
        mess = Mess(name="Demo Mess")
        session.add(mess)
        session.flush()
    return mess


def ensure_user(session, mess: Mess, email: str, full_name: str, role: str) -> User:
    user = session.query(User).filter(User.email == email).one_or_none()
    if user:
        return user

    user = User(
        mess_id=mess.id,
        email=email,
        full_name=full_name,
        password_hash=get_password_hash(DEFAULT_PASSWORD),
        role=role,
        is_active=True,
    )
    session.add(user)
    session.flush()
    if role == "MESS_OWNER" and not mess.owner_user_id:
        mess.owner_user_id = user.id
    return user


def main() -> None:
    session = SessionLocal()
    try:
        mess = ensure_mess(session)
        ensure_user(session, mess, OWNER_EMAIL, "Demo Owner", "MESS_OWNER")
        for email, full_name in MEMBER_EMAILS:
            ensure_user(session, mess, email, full_name, "USER")
        session.commit()
        print("Demo data ready:")
        print(f"  Owner login: {OWNER_EMAIL} / {DEFAULT_PASSWORD}")
        for email, _ in MEMBER_EMAILS:
            print(f"  Member login: {email} / {DEFAULT_PASSWORD}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
