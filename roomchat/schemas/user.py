import re
import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

_USERNAME_RE = re.compile(r"^[A-Za-z0-9]{4,64}$")
_PASSWORD_RE = re.compile(r"^[A-Za-z0-9]{8,64}$")


def check_password(value: str) -> str:
    if not _PASSWORD_RE.match(value):
        raise ValueError("Password must be 8-64 letters or digits")
    return value


class AccountRequest(BaseModel):
    username: str = Field(..., min_length=4, max_length=64)
    password: str = Field(..., min_length=8, max_length=64)

    @field_validator("username")
    @classmethod
    def v_username(cls, v):
        if not _USERNAME_RE.match(v):
            raise ValueError("Username must be 4-64 letters or digits")
        return v

    @field_validator("password")
    @classmethod
    def v_password(cls, v):
        return check_password(v)


class PasswordChangeRequest(BaseModel):
    old_password: str = Field(..., min_length=1, max_length=64)
    new_password: str = Field(..., min_length=8, max_length=64)

    @field_validator("new_password")
    @classmethod
    def v_new_password(cls, v):
        return check_password(v)


class LoginResponse(BaseModel):
    user_id: int
    username: str
    token: uuid.UUID


class TokenInfo(BaseModel):
    client_label: str
    issued_at: datetime
    is_requester: bool


class UserInfo(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True


class StatusResponse(BaseModel):
    status: str = "ok"
