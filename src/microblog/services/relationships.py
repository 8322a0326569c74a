"""Follow-edge persistence."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from microblog.models.relationship import Relationship
from microblog.schemas.relationship import RelationshipCreate
from microblog.services.base import ValidationError, collect_errors, savepoint

logger = logging.getLogger(__name__)


async def get_relationship(
    db: AsyncSession, follower_id: int, followed_id: int
) -> Relationship | None:
    result = await db.execute(
        select(Relationship).where(
            Relationship.follower_id == follower_id,
            Relationship.followed_id == followed_id,
        )
    )
    return result.scalar_one_or_none()


async def create_relationship(
    db: AsyncSession, follower_id: int | None, followed_id: int | None
) -> Relationship:
    """Create a follow edge from ``follower_id`` to ``followed_id``.

    Neither user is looked up first; a dangling ID is left to the foreign key
    and surfaces as ConstraintError. ``users.follow`` checks existence.

    Raises:
        ValidationError: If either ID is missing, both are equal, or the
            edge already exists
        ConstraintError: If the database rejects the edge (missing user,
            or a concurrent duplicate)
    """
    data, errors = collect_errors(
        RelationshipCreate, {"follower_id": follower_id, "followed_id": followed_id}
    )
    if data is not None and await get_relationship(db, data.follower_id, data.followed_id):
        errors.setdefault("followed_id", []).append("has already been taken")
    if errors:
        raise ValidationError(errors)

    relationship = Relationship(follower_id=data.follower_id, followed_id=data.followed_id)
    async with savepoint(db):
        db.add(relationship)

    logger.info("User %s followed user %s", data.follower_id, data.followed_id)
    return relationship
