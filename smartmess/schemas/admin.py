from typing import Literal

from pydantic import Field

from .common import CamelModel


class UserActionRequest(CamelModel):
    user_id: int
    action: Literal["notify", "investigate", "restrict"]
    note: str | None = Field(default=None, max_length=255)
