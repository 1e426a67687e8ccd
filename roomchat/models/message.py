from datetime import datetime

from sqlalchemy import Column, Integer, ForeignKey, Text, DateTime, Index
from sqlalchemy.orm import relationship

from .base import BaseModel


class Message(BaseModel):
    __tablename__ = "messages"

    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    room = relationship("Room", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id], back_populates="sent_messages")

    __table_args__ = (Index("ix_messages_room_sent", "room_id", "sent_at"),)
