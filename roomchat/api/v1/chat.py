import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.auth import CurrentSession
from roomchat.config import Settings
from roomchat.database import get_db
from roomchat.dependencies import get_current_user_id, get_settings, require_room_member
from roomchat.errors import UserNotFoundError, ValidationError
from roomchat.repositories.message_repository import MessageRepository
from roomchat.repositories.room_repository import RoomRepository
from roomchat.repositories.user_repository import UserRepository
from roomchat.schemas.message import MessageCreate, MessageResponse
from roomchat.schemas.room import ManageMemberRequest, MemberAction, RoomName, RoomResponse
from roomchat.schemas.user import StatusResponse, UserInfo

logger = logging.getLogger(__name__)
router = APIRouter()


def _message_dict(msg) -> dict:
    return {
        "id": msg.id,
        "room_id": msg.room_id,
        "sender_id": msg.sender_id,
        "sender_username": msg.sender.username,
        "body": msg.body,
        "sent_at": msg.sent_at,
    }


@router.get("/rooms", response_model=List[RoomResponse])
async def list_rooms(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List rooms of the current user"""
    return await RoomRepository(db).list_rooms_for_user(user_id)


@router.post("/create-room", response_model=RoomResponse)
async def create_room(
    body: RoomName,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a room with the caller as its first member"""
    return await RoomRepository(db).create_room(body.name, user_id)


@router.put("/{room_id}/change-name", response_model=RoomResponse)
async def change_name(
    room_id: int,
    body: RoomName,
    session: CurrentSession = Depends(require_room_member),
    db: AsyncSession = Depends(get_db),
):
    """Rename a room"""
    room = await RoomRepository(db).rename(room_id, body.name)
    logger.info("User id=%s renamed room id=%s", session.user_id, room_id)
    return room


@router.get("/{room_id}/members", response_model=List[UserInfo])
async def list_members(
    room_id: int,
    session: CurrentSession = Depends(require_room_member),
    db: AsyncSession = Depends(get_db),
):
    """List room members"""
    return await RoomRepository(db).list_members(room_id)


@router.put("/{room_id}/manage-user", response_model=StatusResponse)
async def manage_user(
    room_id: int,
    body: ManageMemberRequest,
    session: CurrentSession = Depends(require_room_member),
    db: AsyncSession = Depends(get_db),
):
    """Add or remove a room member.

    Adding someone who is already present succeeds without change; removing
    someone who is not present is an error.
    """
    user_repo = UserRepository(db)
    if body.user_id is not None:
        target = await user_repo.get_by_id(body.user_id)
    else:
        target = await user_repo.get_by_username(body.username)
    if not target:
        raise UserNotFoundError()

    room_repo = RoomRepository(db)
    if body.action == MemberAction.ADD:
        await room_repo.add_member(room_id, target.id)
    else:
        await room_repo.remove_member(room_id, target.id)
    return StatusResponse()


@router.get("/{room_id}/messages", response_model=List[MessageResponse])
async def get_messages(
    room_id: int,
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1),
    session: CurrentSession = Depends(require_room_member),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Get a window of room messages counted back from the newest"""
    if limit > settings.MESSAGE_WINDOW_MAX:
        raise ValidationError(f"limit must not exceed {settings.MESSAGE_WINDOW_MAX}")
    messages = await MessageRepository(db).read_window(room_id, offset, limit)
    return [_message_dict(msg) for msg in messages]


@router.post("/{room_id}/messages", response_model=MessageResponse)
async def send_message(
    room_id: int,
    body: MessageCreate,
    session: CurrentSession = Depends(require_room_member),
    db: AsyncSession = Depends(get_db),
):
    """Send a message to a room"""
    message = await MessageRepository(db).append(room_id, session.user_id, body.body)
    return _message_dict(message)
