from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class AssociationKind(PyEnum):
    FRIEND = "friend"
    BLOCK = "block"


class Association(BaseModel):
    """Directed edge from ``user_id`` to ``other_user_id``."""

    __tablename__ = "associations"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    other_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(Enum(AssociationKind), nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    other_user = relationship("User", foreign_keys=[other_user_id])

    __table_args__ = (
        UniqueConstraint("user_id", "other_user_id", name="uq_associations_pair"),
    )
