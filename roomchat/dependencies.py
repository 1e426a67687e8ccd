"""FastAPI dependencies."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.auth import CurrentSession, resolve_bearer
from roomchat.config import Settings
from roomchat.database import get_db
from roomchat.errors import RoomAccessDeniedError
from roomchat.repositories.room_repository import RoomRepository

security_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CurrentSession:
    raw = credentials.credentials if credentials else None
    return await resolve_bearer(raw, db, ttl_hours=settings.SESSION_TOKEN_TTL_HOURS)


async def get_current_user_id(session: CurrentSession = Depends(get_current_session)) -> int:
    return session.user_id


async def require_room_member(
    room_id: int,
    session: CurrentSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
) -> CurrentSession:
    # Evaluated on every request; membership may change between calls
    if not await RoomRepository(db).is_member(room_id, session.user_id):
        raise RoomAccessDeniedError()
    return session
