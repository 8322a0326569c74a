"""User ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from microblog.database import Base

if TYPE_CHECKING:
    from microblog.models.micropost import Micropost
    from microblog.models.relationship import Relationship


class User(Base):
    """Account that authors microposts and follows other users."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)  # Always lowercase
    password_digest: Mapped[str] = mapped_column(String(255))
    remember_token: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    admin: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    microposts: Mapped[list[Micropost]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    relationships: Mapped[list[Relationship]] = relationship(
        foreign_keys="Relationship.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reverse_relationships: Mapped[list[Relationship]] = relationship(
        foreign_keys="Relationship.followed_id",
        back_populates="followed",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
