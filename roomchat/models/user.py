from sqlalchemy import Column, String, Index, func
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    # Stored with the casing chosen at registration; uniqueness is on lower(username)
    username = Column(String(64), nullable=False)
    password_hash = Column(String(255), nullable=False)

    session_tokens = relationship("SessionToken", back_populates="user", cascade="all, delete-orphan")
    room_memberships = relationship("RoomMember", back_populates="user", cascade="all, delete-orphan")
    sent_messages = relationship("Message", foreign_keys="Message.sender_id", back_populates="sender")

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username}>"


Index("uq_users_username_lower", func.lower(User.username), unique=True)
