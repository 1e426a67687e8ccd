import logging
from typing import Dict, List, Optional

from sqlalchemy import select, and_, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from roomchat.models.association import Association, AssociationKind
from roomchat.models.user import User

logger = logging.getLogger(__name__)


class AssociationRepository:
    """Directed friend/block edges and the views derived from them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int, other_id: int) -> Optional[Association]:
        """Get the edge user_id -> other_id"""
        result = await self.db.execute(
            select(Association).where(
                and_(Association.user_id == user_id, Association.other_user_id == other_id)
            )
        )
        return result.scalar_one_or_none()

    async def set(self, user_id: int, other_id: int, kind: AssociationKind) -> None:
        """Upsert the edge user_id -> other_id; the last kind written wins."""
        existing = await self.get(user_id, other_id)
        if existing:
            existing.kind = kind
            await self.db.commit()
        else:
            self.db.add(Association(user_id=user_id, other_user_id=other_id, kind=kind))
            try:
                await self.db.commit()
            except IntegrityError:
                # Row inserted concurrently; overwrite it instead
                await self.db.rollback()
                existing = await self.get(user_id, other_id)
                existing.kind = kind
                await self.db.commit()
        logger.info("User id=%s set %s toward user id=%s", user_id, kind.value, other_id)

    async def remove(self, user_id: int, other_id: int) -> None:
        """Delete the edge user_id -> other_id if present"""
        await self.db.execute(
            delete(Association).where(
                and_(Association.user_id == user_id, Association.other_user_id == other_id)
            )
        )
        await self.db.commit()

    async def friends(self, user_id: int) -> List[User]:
        """Users with a FRIEND edge in both directions"""
        outgoing = aliased(Association)
        incoming = aliased(Association)
        result = await self.db.execute(
            select(User)
            .join(outgoing, outgoing.other_user_id == User.id)
            .join(
                incoming,
                and_(incoming.user_id == outgoing.other_user_id, incoming.other_user_id == outgoing.user_id),
            )
            .where(
                and_(
                    outgoing.user_id == user_id,
                    outgoing.kind == AssociationKind.FRIEND,
                    incoming.kind == AssociationKind.FRIEND,
                )
            )
            .order_by(User.username)
        )
        return list(result.scalars().all())

    async def incoming_requests(self, user_id: int) -> List[User]:
        """Users who sent a FRIEND edge that was not returned"""
        inbound = aliased(Association)
        reply = aliased(Association)
        result = await self.db.execute(
            select(User)
            .join(inbound, inbound.user_id == User.id)
            .outerjoin(
                reply,
                and_(
                    reply.user_id == inbound.other_user_id,
                    reply.other_user_id == inbound.user_id,
                    reply.kind == AssociationKind.FRIEND,
                ),
            )
            .where(
                and_(
                    inbound.other_user_id == user_id,
                    inbound.kind == AssociationKind.FRIEND,
                    reply.id.is_(None),
                )
            )
            .order_by(User.username)
        )
        return list(result.scalars().all())

    async def unaccepted_outgoing(self, user_id: int) -> List[User]:
        """Users this user sent a FRIEND edge that was not returned"""
        outbound = aliased(Association)
        reply = aliased(Association)
        result = await self.db.execute(
            select(User)
            .join(outbound, outbound.other_user_id == User.id)
            .outerjoin(
                reply,
                and_(
                    reply.user_id == outbound.other_user_id,
                    reply.other_user_id == outbound.user_id,
                    reply.kind == AssociationKind.FRIEND,
                ),
            )
            .where(
                and_(
                    outbound.user_id == user_id,
                    outbound.kind == AssociationKind.FRIEND,
                    reply.id.is_(None),
                )
            )
            .order_by(User.username)
        )
        return list(result.scalars().all())

    async def blocked(self, user_id: int) -> List[User]:
        """Users the given user has blocked"""
        result = await self.db.execute(
            select(User)
            .join(Association, Association.other_user_id == User.id)
            .where(and_(Association.user_id == user_id, Association.kind == AssociationKind.BLOCK))
            .order_by(User.username)
        )
        return list(result.scalars().all())

    async def summary(self, user_id: int) -> Dict[str, List[User]]:
        """All association views keyed by name"""
        return {
            "friends": await self.friends(user_id),
            "incoming_requests": await self.incoming_requests(user_id),
            "unaccepted_requests": await self.unaccepted_outgoing(user_id),
            "blocked": await self.blocked(user_id),
        }

    async def search(self, user_id: int, term: str, limit: int = 50) -> List[User]:
        """Case-insensitive username search hiding users who blocked the searcher."""
        blockers = select(Association.user_id).where(
            and_(Association.other_user_id == user_id, Association.kind == AssociationKind.BLOCK)
        )
        result = await self.db.execute(
            select(User)
            .where(
                and_(
                    func.lower(User.username).contains(term.lower(), autoescape=True),
                    User.id != user_id,
                    User.id.not_in(blockers),
                )
            )
            .order_by(User.username)
            .limit(limit)
        )
        return list(result.scalars().all())
