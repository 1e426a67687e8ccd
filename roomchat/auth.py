"""Password hashing and bearer token resolution."""
import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.errors import MalformedTokenError, UnauthorizedError
from roomchat.repositories.token_repository import TokenRepository

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# Argon2 is deliberately slow, keep it off the event loop
async def hash_password_async(password: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, get_password_hash, password)


async def verify_password_async(plain_password: str, hashed_password: Optional[str]) -> bool:
    loop = asyncio.get_running_loop()
    if hashed_password is None:
        # Spend the same time as a real verify so unknown usernames are not observable
        await loop.run_in_executor(None, pwd_context.dummy_verify)
        return False
    return await loop.run_in_executor(None, verify_password, plain_password, hashed_password)


@dataclass(frozen=True)
class CurrentSession:
    user_id: int
    token: uuid.UUID


def parse_token(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except (ValueError, AttributeError, TypeError):
        raise MalformedTokenError()


async def resolve_bearer(raw: Optional[str], db: AsyncSession, ttl_hours: int = 0) -> CurrentSession:
    """Resolve a bearer value to the session it identifies.

    A value that is not a UUID fails with ``MalformedTokenError``; a well
    formed value with no live row fails with ``UnauthorizedError``.
    """
    if not raw:
        raise UnauthorizedError("Missing bearer token")
    token = parse_token(raw)
    user_id = await TokenRepository(db, ttl_hours=ttl_hours).resolve(token)
    if user_id is None:
        raise UnauthorizedError()
    return CurrentSession(user_id=user_id, token=token)
