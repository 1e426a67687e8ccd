import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

_ROOM_NAME_RE = re.compile(r"^[A-Za-z0-9 ]{1,64}$")


class RoomName(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)

    @field_validator("name")
    @classmethod
    def v_name(cls, v):
        if not _ROOM_NAME_RE.match(v) or not v.strip():
            raise ValueError("Room name must be 1-64 letters, digits or spaces")
        return v


class RoomResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class MemberAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class ManageMemberRequest(BaseModel):
    user_id: Optional[int] = None
    username: Optional[str] = Field(None, min_length=1, max_length=64)
    action: MemberAction

    @model_validator(mode="after")
    def v_target(self):
        if self.user_id is None and self.username is None:
            raise ValueError("Either user_id or username is required")
        return self
