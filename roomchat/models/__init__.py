from .base import Base
from .user import User
from .session_token import SessionToken
from .room import Room
from .room_member import RoomMember
from .message import Message
from .association import Association, AssociationKind

__all__ = [
    "Base",
    "User",
    "SessionToken",
    "Room",
    "RoomMember",
    "Message",
    "Association",
    "AssociationKind",
]
