from datetime import datetime

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=2048)


class MessageResponse(BaseModel):
    id: int
    room_id: int
    sender_id: int
    sender_username: str
    body: str
    sent_at: datetime
