import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy import select, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.errors import TokenIssueError, TokenNotFoundError
from roomchat.models.session_token import SessionToken

logger = logging.getLogger(__name__)

CLIENT_LABEL_MAX_LENGTH = 255


class TokenRepository:
    def __init__(
        self,
        db: AsyncSession,
        max_retries: int = 5,
        ttl_hours: int = 0,
        token_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ):
        self.db = db
        self.max_retries = max_retries
        self.ttl_hours = ttl_hours
        self.token_factory = token_factory

    async def issue(self, user_id: int, client_label: str) -> uuid.UUID:
        """Mint a session token for ``user_id``.

        Each attempt inserts a fresh random value and lets the unique index
        arbitrate. A collision with another user's token regenerates; if the
        value is already held by this user its client label is refreshed.
        """
        client_label = (client_label or "unknown")[:CLIENT_LABEL_MAX_LENGTH]

        for attempt in range(1, self.max_retries + 1):
            token = self.token_factory()
            self.db.add(SessionToken(token=token, user_id=user_id, client_label=client_label))
            try:
                await self.db.commit()
                return token
            except IntegrityError:
                await self.db.rollback()

            existing = await self.get(token)
            if existing is not None and existing.user_id == user_id:
                existing.client_label = client_label
                await self.db.commit()
                return token
            logger.warning("Session token collision for user id=%s (attempt %d)", user_id, attempt)

        logger.error("Gave up issuing a session token for user id=%s after %d attempts", user_id, self.max_retries)
        raise TokenIssueError("Could not issue a session token")

    async def get(self, token: uuid.UUID) -> Optional[SessionToken]:
        """Get the stored row for a token value"""
        result = await self.db.execute(select(SessionToken).where(SessionToken.token == token))
        return result.scalar_one_or_none()

    async def resolve(self, token: uuid.UUID) -> Optional[int]:
        """Return the owner of a live token, or None"""
        conditions = [SessionToken.token == token]
        if self.ttl_hours > 0:
            conditions.append(SessionToken.issued_at > datetime.utcnow() - timedelta(hours=self.ttl_hours))
        result = await self.db.execute(select(SessionToken.user_id).where(and_(*conditions)))
        return result.scalar_one_or_none()

    async def revoke(self, user_id: int, token: uuid.UUID) -> None:
        """Delete one of the user's tokens"""
        result = await self.db.execute(
            delete(SessionToken).where(
                and_(SessionToken.user_id == user_id, SessionToken.token == token)
            )
        )
        await self.db.commit()
        if result.rowcount != 1:
            raise TokenNotFoundError()
        logger.info("Revoked a session token for user id=%s", user_id)

    async def revoke_all(self, user_id: int) -> int:
        """Delete every token the user holds; returns the count"""
        result = await self.db.execute(delete(SessionToken).where(SessionToken.user_id == user_id))
        await self.db.commit()
        logger.info("Revoked %d session token(s) for user id=%s", result.rowcount, user_id)
        return result.rowcount

    async def list(self, user_id: int, requesting_token: uuid.UUID) -> List[dict]:
        """The user's tokens in issue order, flagging the one making the request"""
        result = await self.db.execute(
            select(SessionToken)
            .where(SessionToken.user_id == user_id)
            .order_by(SessionToken.issued_at.asc(), SessionToken.id.asc())
        )
        return [
            {
                "client_label": row.client_label,
                "issued_at": row.issued_at,
                "is_requester": row.token == requesting_token,
            }
            for row in result.scalars().all()
        ]
