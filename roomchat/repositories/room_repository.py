import logging
from typing import Optional, List

from sqlalchemy import select, and_, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.errors import NotMemberError
from roomchat.models.room import Room
from roomchat.models.room_member import RoomMember
from roomchat.models.user import User

logger = logging.getLogger(__name__)


class RoomRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_room(self, name: str, creator_id: int) -> Room:
        """Create a room with its creator as the first member, in one commit."""
        room = Room(name=name)
        try:
            self.db.add(room)
            await self.db.flush()

            self.db.add(RoomMember(room_id=room.id, user_id=creator_id))
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(room)
        logger.info("User id=%s created room id=%s", creator_id, room.id)
        return room

    async def get_by_id(self, room_id: int) -> Optional[Room]:
        """Get a room by ID"""
        result = await self.db.execute(select(Room).where(Room.id == room_id))
        return result.scalar_one_or_none()

    async def list_rooms_for_user(self, user_id: int) -> List[Room]:
        """Rooms the user belongs to, oldest first"""
        result = await self.db.execute(
            select(Room).join(RoomMember).where(RoomMember.user_id == user_id).order_by(Room.id)
        )
        return list(result.scalars().all())

    async def is_member(self, room_id: int, user_id: int) -> bool:
        """Check whether the user belongs to the room"""
        result = await self.db.execute(
            select(RoomMember.id).where(
                and_(RoomMember.room_id == room_id, RoomMember.user_id == user_id)
            )
        )
        return result.scalar_one_or_none() is not None

    async def add_member(self, room_id: int, user_id: int) -> bool:
        """Add ``user_id`` to the room. Returns False if already a member."""
        if await self.is_member(room_id, user_id):
            return False

        self.db.add(RoomMember(room_id=room_id, user_id=user_id))
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent request added the same member first
            await self.db.rollback()
            return False
        logger.info("Added user id=%s to room id=%s", user_id, room_id)
        return True

    async def remove_member(self, room_id: int, user_id: int) -> None:
        """Remove a member; raises NotMemberError if they were not in the room"""
        result = await self.db.execute(
            delete(RoomMember).where(
                and_(RoomMember.room_id == room_id, RoomMember.user_id == user_id)
            )
        )
        await self.db.commit()
        if result.rowcount == 0:
            raise NotMemberError()
        logger.info("Removed user id=%s from room id=%s", user_id, room_id)

    async def list_members(self, room_id: int) -> List[User]:
        """Members of the room ordered by user ID"""
        result = await self.db.execute(
            select(User).join(RoomMember).where(RoomMember.room_id == room_id).order_by(User.id)
        )
        return list(result.scalars().all())

    async def rename(self, room_id: int, new_name: str) -> Optional[Room]:
        """Rename a room; None if it does not exist"""
        room = await self.get_by_id(room_id)
        if not room:
            return None

        room.name = new_name
        await self.db.commit()
        await self.db.refresh(room)
        return room
