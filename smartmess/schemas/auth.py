from pydantic import EmailStr, Field, constr

from .common import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: constr(min_length=1)


class SignupRequest(CamelModel):
    email: EmailStr
    full_name: constr(min_length=1, max_length=120)
    password: constr(min_length=8)
    role: str = "user"
    phone: str | None = Field(default=None, max_length=32)
    mess_id: int | None = None
    mess_name: str | None = Field(default=None, max_length=160)
