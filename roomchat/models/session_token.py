from datetime import datetime

from sqlalchemy import Column, Integer, ForeignKey, DateTime, String, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class SessionToken(BaseModel):
    __tablename__ = "session_tokens"

    token = Column(Uuid, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_label = Column(String(255), nullable=False, default="unknown")
    issued_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="session_tokens")

    __table_args__ = (
        UniqueConstraint("user_id", "token", name="uq_session_tokens_user_token"),
    )
