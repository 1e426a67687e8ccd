from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.config import Settings
from roomchat.database import get_db
from roomchat.dependencies import get_current_user_id, get_settings
from roomchat.errors import UserNotFoundError, ValidationError
from roomchat.models.association import AssociationKind
from roomchat.repositories.association_repository import AssociationRepository
from roomchat.repositories.user_repository import UserRepository
from roomchat.schemas.association import AssociationAction, AssociationsResponse, AssociationUpdate
from roomchat.schemas.user import StatusResponse, UserInfo

router = APIRouter()

_KINDS = {
    AssociationAction.FRIEND: AssociationKind.FRIEND,
    AssociationAction.BLOCK: AssociationKind.BLOCK,
}


@router.get("/search", response_model=List[UserInfo])
async def search_users(
    term: str = Query(..., min_length=1, max_length=64),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Search users by username, hiding anyone who blocked the caller"""
    return await AssociationRepository(db).search(user_id, term, limit=settings.USER_SEARCH_LIMIT)


@router.put("/associate", response_model=StatusResponse)
async def associate(
    update: AssociationUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Set or remove a friend/block association"""
    if update.other_user_id == user_id:
        raise ValidationError("Cannot associate with yourself")

    association_repo = AssociationRepository(db)
    if update.kind == AssociationAction.REMOVE:
        await association_repo.remove(user_id, update.other_user_id)
        return StatusResponse()

    if not await UserRepository(db).get_by_id(update.other_user_id):
        raise UserNotFoundError()
    await association_repo.set(user_id, update.other_user_id, _KINDS[update.kind])
    return StatusResponse()


@router.get("/associations", response_model=AssociationsResponse)
async def list_associations(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Friends, pending requests and blocked users"""
    summary = await AssociationRepository(db).summary(user_id)
    return {
        view: [UserInfo.model_validate(user) for user in users]
        for view, users in summary.items()
    }
