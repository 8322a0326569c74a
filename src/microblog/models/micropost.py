"""Micropost ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from microblog.database import Base

if TYPE_CHECKING:
    from microblog.models.user import User

MAX_CONTENT_LENGTH = 140


class Micropost(Base):
    """Short text post authored by a user."""

    __tablename__ = "microposts"
    __table_args__ = (Index("ix_microposts_user_id_created_at", "user_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    content: Mapped[str] = mapped_column(String(MAX_CONTENT_LENGTH))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user: Mapped[User] = relationship(back_populates="microposts")

    def __repr__(self) -> str:
        return f"<Micropost(id={self.id}, user_id={self.user_id})>"
