from enum import Enum
from typing import List

from pydantic import BaseModel

from roomchat.schemas.user import UserInfo


class AssociationAction(str, Enum):
    FRIEND = "friend"
    BLOCK = "block"
    REMOVE = "remove"


class AssociationUpdate(BaseModel):
    other_user_id: int
    kind: AssociationAction


class AssociationsResponse(BaseModel):
    friends: List[UserInfo]
    incoming_requests: List[UserInfo]
    unaccepted_requests: List[UserInfo]
    blocked: List[UserInfo]
