"""Micropost persistence and the feed query."""

import logging

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from microblog.models.micropost import Micropost
from microblog.models.relationship import Relationship
from microblog.models.user import User
from microblog.schemas.micropost import MicropostCreate
from microblog.services.base import NotFoundError, paginate, savepoint, validate

logger = logging.getLogger(__name__)


def newest_first(query: Select) -> Select:
    """Order a micropost query by creation time, newest first."""
    return query.order_by(Micropost.created_at.desc(), Micropost.id.desc())


async def create_micropost(
    db: AsyncSession, user_id: int | None, content: str | None
) -> Micropost:
    """Post a micropost on behalf of a user.

    Raises:
        ValidationError: If content is blank or too long, or user_id is missing
        NotFoundError: If no user has the given ID
    """
    data = validate(MicropostCreate, {"content": content, "user_id": user_id})

    if await db.get(User, data.user_id) is None:
        raise NotFoundError(f"User {data.user_id} not found")

    micropost = Micropost(content=data.content, user_id=data.user_id)
    async with savepoint(db):
        db.add(micropost)

    logger.info("User %s posted micropost %s", micropost.user_id, micropost.id)
    return micropost


async def get_micropost(db: AsyncSession, micropost_id: int) -> Micropost:
    """Fetch a micropost by ID, raising NotFoundError when absent."""
    micropost = await db.get(Micropost, micropost_id)
    if micropost is None:
        raise NotFoundError(f"Micropost {micropost_id} not found")
    return micropost


async def delete_micropost(db: AsyncSession, micropost: Micropost) -> None:
    async with savepoint(db):
        await db.delete(micropost)
    logger.info("Deleted micropost %s", micropost.id)


async def list_microposts(
    db: AsyncSession, user_id: int, limit: int | None = None, offset: int = 0
) -> list[Micropost]:
    """Return a user's own microposts, newest first."""
    query = newest_first(select(Micropost).where(Micropost.user_id == user_id))
    result = await db.execute(paginate(query, limit, offset))
    return list(result.scalars().all())


async def count_microposts(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(Micropost).where(Micropost.user_id == user_id)
    )
    return result.scalar_one()


async def from_users_followed_by(
    db: AsyncSession, user: User, limit: int | None = None, offset: int = 0
) -> list[Micropost]:
    """Return microposts by ``user`` and by everyone ``user`` follows.

    Runs as a single query with the followed IDs as a subquery:

        user_id IN (SELECT followed_id FROM relationships WHERE follower_id = :id)
        OR user_id = :id
    """
    followed_ids = select(Relationship.followed_id).where(Relationship.follower_id == user.id)
    query = newest_first(
        select(Micropost).where(
            or_(Micropost.user_id.in_(followed_ids), Micropost.user_id == user.id)
        )
    )
    result = await db.execute(paginate(query, limit, offset))
    return list(result.scalars().all())
