from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import bcrypt

from ..constants import ROLE_ADMIN, ROLE_MESS_OWNER, normalize_role
from ..db import get_db
from ..exceptions import InvalidRequest, Unauthorized
from ..models import Mess, User
from ..schemas.auth import LoginRequest, SignupRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _session_payload(user: User) -> dict:
    return {
        "id": user.id,
        "mess_id": user.mess_id,
        "role": normalize_role(user.role),
        "full_name": user.full_name,
    }


def _serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "fullName": user.full_name,
        "role": user.role,
        "messId": user.mess_id,
        "isActive": user.is_active,
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(request: Request, payload: SignupRequest, db: Session = Depends(get_db)):
    role = normalize_role(payload.role)
    if role is None:
        raise InvalidRequest("Unknown role")
    if role == ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin accounts cannot be self-registered")

    email = payload.email.lower()
    existing = db.query(User).filter(User.email == email).one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    mess_id = None
    if role == ROLE_MESS_OWNER:
        if not payload.mess_name:
            raise InvalidRequest("Mess name is required")
    elif payload.mess_id is not None:
        mess = db.query(Mess).filter(Mess.id == payload.mess_id).one_or_none()
        if not mess:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mess not found")
        mess_id = mess.id

    user = User(
        mess_id=mess_id,
        email=email,
        full_name=payload.full_name,
        phone=payload.phone,
        password_hash=get_password_hash(payload.password),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    if role == ROLE_MESS_OWNER:
        mess = Mess(name=payload.mess_name.strip(), owner_user_id=user.id)
        db.add(mess)
        db.flush()
        user.mess_id = mess.id
    db.commit()

    request.session["user"] = _session_payload(user)
    return JSONResponse(
        {"success": True, "data": _serialize_user(user)},
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login")
async def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is restricted. Contact an administrator.",
        )

    user.updated_at = datetime.utcnow()
    db.commit()
    request.session["user"] = _session_payload(user)
    return JSONResponse({"success": True, "data": _serialize_user(user)})


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return JSONResponse({"success": True})


@router.get("/me")
async def me(request: Request, db: Session = Depends(get_db)):
    session_user = request.session.get("user")
    if not session_user:
        raise Unauthorized()
    user = db.query(User).filter(User.id == session_user["id"]).one_or_none()
    if not user:
        request.session.clear()
        raise Unauthorized()
    return JSONResponse({"success": True, "data": _serialize_user(user)})
