"""Relationship ORM model (directed follow edge between users)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from microblog.database import Base

if TYPE_CHECKING:
    from microblog.models.user import User


class Relationship(Base):
    """Edge from a follower to the user they follow."""

    __tablename__ = "relationships"
    __table_args__ = (
        UniqueConstraint("follower_id", "followed_id", name="uq_follower_followed"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    follower_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    followed_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    follower: Mapped[User] = relationship(
        foreign_keys=[follower_id], back_populates="relationships"
    )
    followed: Mapped[User] = relationship(
        foreign_keys=[followed_id], back_populates="reverse_relationships"
    )
