import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.auth import hash_password_async, verify_password_async
from roomchat.errors import SamePasswordError, UserNotFoundError, UsernameTakenError, WrongPasswordError
from roomchat.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, username: str, raw_password: str) -> User:
        """Create an account; usernames are unique regardless of case."""
        if await self.get_by_username(username):
            raise UsernameTakenError()

        password_hash = await hash_password_async(raw_password)
        db_user = User(username=username, password_hash=password_hash)
        self.db.add(db_user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same name
            await self.db.rollback()
            raise UsernameTakenError()
        await self.db.refresh(db_user)
        logger.info("Registered user %s (id=%s)", db_user.username, db_user.id)
        return db_user

    async def verify(self, username: str, raw_password: str) -> int:
        """Check credentials and return the user ID"""
        user = await self.get_by_username(username)
        if not user:
            await verify_password_async(raw_password, None)
            raise UserNotFoundError()
        if not await verify_password_async(raw_password, user.password_hash):
            raise WrongPasswordError()
        return user.id

    async def change_password(self, user_id: int, old_raw: str, new_raw: str) -> None:
        """Replace the password after checking the old one"""
        user = await self.get_by_id(user_id)
        if not user:
            raise UserNotFoundError()
        if not await verify_password_async(old_raw, user.password_hash):
            raise WrongPasswordError("Old password does not match")
        if old_raw == new_raw:
            raise SamePasswordError()

        user.password_hash = await hash_password_async(new_raw)
        await self.db.commit()
        logger.info("Password changed for user id=%s", user_id)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get a user by ID"""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get a user by username, ignoring case"""
        result = await self.db.execute(
            select(User).where(func.lower(User.username) == username.lower())
        )
        return result.scalar_one_or_none()
