"""User accounts, the follow graph and the feed."""

import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from microblog.models.micropost import Micropost
from microblog.models.relationship import Relationship
from microblog.models.user import User
from microblog.schemas.user import UserCreate, UserUpdate, confirmation_errors
from microblog.services.base import (
    NotFoundError,
    ValidationError,
    collect_errors,
    paginate,
    savepoint,
)
from microblog.services.microposts import from_users_followed_by
from microblog.services.relationships import create_relationship, get_relationship
from microblog.utils.security import encrypt, hash_password, new_remember_token, verify_password

logger = logging.getLogger(__name__)


async def _email_taken(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    """Check case-insensitively whether another user already has ``email``."""
    query = select(User.id).where(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def create_user(
    db: AsyncSession,
    name: str | None,
    email: str | None,
    password: str | None,
    password_confirmation: str | None = None,
    admin: bool = False,
) -> User:
    """Sign up a new user.

    The email is stored lowercase, the password only as a bcrypt digest, and
    a fresh remember token only as its digest.

    Raises:
        ValidationError: With every violated constraint, before anything is written
        ConstraintError: If the database rejects the row (e.g. a concurrent signup)
    """
    data, errors = collect_errors(
        UserCreate,
        {
            "name": name,
            "email": email,
            "password": password,
            "password_confirmation": password_confirmation,
            "admin": admin,
        },
    )
    mismatch = confirmation_errors(password, password_confirmation)
    if mismatch:
        errors["password_confirmation"] = mismatch
    if "email" not in errors and await _email_taken(db, email):
        errors["email"] = ["has already been taken"]
    if errors:
        raise ValidationError(errors)

    user = User(
        name=data.name,
        email=data.email,
        password_digest=hash_password(data.password),
        remember_token=encrypt(new_remember_token()),
        admin=data.admin,
    )
    async with savepoint(db):
        db.add(user)

    logger.info("Created user %s <%s>", user.id, user.email)
    return user


async def update_user(
    db: AsyncSession,
    user: User,
    *,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    password_confirmation: str | None = None,
) -> User:
    """Change the given fields of ``user``; omitted fields are left alone.

    Raises:
        ValidationError: If any supplied field is invalid or the email is taken
    """
    changes = {
        key: value
        for key, value in {
            "name": name,
            "email": email,
            "password": password,
            "password_confirmation": password_confirmation,
        }.items()
        if value is not None
    }
    data, errors = collect_errors(UserUpdate, changes)
    mismatch = confirmation_errors(password, password_confirmation)
    if mismatch:
        errors["password_confirmation"] = mismatch
    if "email" in changes and "email" not in errors and await _email_taken(db, email, user.id):
        errors["email"] = ["has already been taken"]
    if errors:
        raise ValidationError(errors)

    async with savepoint(db):
        if data.name is not None:
            user.name = data.name
        if data.email is not None:
            user.email = data.email
        if data.password is not None:
            user.password_digest = hash_password(data.password)

    logger.info("Updated user %s (%s)", user.id, ", ".join(sorted(changes)))
    return user


async def delete_user(db: AsyncSession, user: User) -> None:
    """Delete a user together with their microposts and follow edges."""
    user_id = user.id
    async with savepoint(db):
        await db.execute(delete(Micropost).where(Micropost.user_id == user_id))
        await db.execute(
            delete(Relationship).where(
                or_(Relationship.follower_id == user_id, Relationship.followed_id == user_id)
            )
        )
        await db.delete(user)

    logger.info("Deleted user %s", user_id)


async def get_user(db: AsyncSession, user_id: int) -> User:
    """Fetch a user by ID, raising NotFoundError when absent."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession, limit: int | None = None, offset: int = 0) -> list[User]:
    result = await db.execute(paginate(select(User).order_by(User.id), limit, offset))
    return list(result.scalars().all())


async def set_admin(db: AsyncSession, user: User, admin: bool) -> User:
    async with savepoint(db):
        user.admin = admin
    logger.info("Set admin=%s for user %s", admin, user.id)
    return user


async def feed(
    db: AsyncSession, user: User, limit: int | None = None, offset: int = 0
) -> list[Micropost]:
    """Return the user's feed: their own and followed users' posts, newest first."""
    return await from_users_followed_by(db, user, limit=limit, offset=offset)


async def is_following(db: AsyncSession, user: User, other_user: User) -> bool:
    return await get_relationship(db, user.id, other_user.id) is not None


async def follow(db: AsyncSession, user: User, other_user: User) -> Relationship:
    """Make ``user`` follow ``other_user``.

    Unlike ``create_relationship``, the target is looked up first so a
    missing user is reported as NotFoundError rather than ConstraintError.

    Raises:
        ValidationError: If other_user has no ID, is ``user`` itself, or is
            already followed
        NotFoundError: If no user with other_user's ID exists
    """
    if other_user.id is not None and await db.get(User, other_user.id) is None:
        raise NotFoundError(f"User {other_user.id} not found")
    return await create_relationship(db, user.id, other_user.id)


async def unfollow(db: AsyncSession, user: User, other_user: User) -> None:
    """Remove the edge from ``user`` to ``other_user``.

    Raises:
        NotFoundError: If ``user`` does not follow ``other_user``
    """
    relationship = await get_relationship(db, user.id, other_user.id)
    if relationship is None:
        raise NotFoundError(f"User {user.id} is not following user {other_user.id}")

    async with savepoint(db):
        await db.delete(relationship)

    logger.info("User %s unfollowed user %s", user.id, other_user.id)


async def followed_users(db: AsyncSession, user: User) -> list[User]:
    """Return the users that ``user`` follows."""
    result = await db.execute(
        select(User)
        .join(Relationship, Relationship.followed_id == User.id)
        .where(Relationship.follower_id == user.id)
        .order_by(User.id)
    )
    return list(result.scalars().all())


async def followers(db: AsyncSession, user: User) -> list[User]:
    """Return the users that follow ``user``."""
    result = await db.execute(
        select(User)
        .join(Relationship, Relationship.follower_id == User.id)
        .where(Relationship.followed_id == user.id)
        .order_by(User.id)
    )
    return list(result.scalars().all())


async def authenticate(db: AsyncSession, email: str, password: str) -> User | None:
    """Return the user with this email if the password matches, else None."""
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_digest):
        return None
    return user


async def remember(db: AsyncSession, user: User) -> str:
    """Issue a new remember token for ``user``.

    Only the digest is stored; the raw token is returned for the caller to
    hand to the client.
    """
    token = new_remember_token()
    async with savepoint(db):
        user.remember_token = encrypt(token)
    return token


async def find_by_remember_token(db: AsyncSession, token: str) -> User | None:
    result = await db.execute(select(User).where(User.remember_token == encrypt(token)))
    return result.scalar_one_or_none()
