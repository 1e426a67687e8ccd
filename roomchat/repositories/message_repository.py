from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from roomchat.errors import ValidationError
from roomchat.models.message import Message


class MessageRepository:
    """Append-only message log. Membership is checked by the caller."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, room_id: int, sender_id: int, body: str) -> Message:
        """Store a message and return it with its sender loaded"""
        message = Message(room_id=room_id, sender_id=sender_id, body=body)
        self.db.add(message)
        await self.db.commit()
        result = await self.db.execute(
            select(Message).options(joinedload(Message.sender)).where(Message.id == message.id)
        )
        return result.scalar_one()

    async def read_window(self, room_id: int, offset: int = 0, limit: int = 50) -> List[Message]:
        """Return ``limit`` messages starting ``offset`` back from the newest.

        The slice is selected newest-first and returned oldest-first.
        """
        if limit <= 0:
            raise ValidationError("limit must be positive")
        result = await self.db.execute(
            select(Message).options(
                joinedload(Message.sender)
            ).where(Message.room_id == room_id)
            .order_by(Message.sent_at.desc(), Message.id.desc())
            .offset(offset)
            .limit(limit)
        )
        messages = list(result.scalars().all())
        messages.reverse()
        return messages

