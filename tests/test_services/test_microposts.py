"""Tests for the micropost service and the feed."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from microblog.models.user import User
from microblog.schemas.micropost import MicropostResponse
from microblog.services.base import NotFoundError, ValidationError
from microblog.services.microposts import (
    count_microposts,
    create_micropost,
    delete_micropost,
    from_users_followed_by,
    get_micropost,
    list_microposts,
)
from microblog.services.users import create_user, feed, follow, unfollow


class TestCreateMicropost:
    """Tests for posting microposts."""

    async def test_create_success(self, db: AsyncSession, user: User) -> None:
        """Test that a valid micropost is persisted."""
        micropost = await create_micropost(db, user.id, "Lorem ipsum")

        assert micropost.id is not None
        assert micropost.content == "Lorem ipsum"
        assert micropost.user_id == user.id
        assert micropost.created_at is not None

    @pytest.mark.parametrize("length", [1, 140])
    async def test_content_length_accepted(self, db: AsyncSession, user: User, length: int) -> None:
        """Test the accepted content length range."""
        micropost = await create_micropost(db, user.id, "a" * length)

        assert len(micropost.content) == length

    async def test_content_too_long(self, db: AsyncSession, user: User) -> None:
        """Test that 141 characters are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await create_micropost(db, user.id, "a" * 141)

        assert exc_info.value.errors == {"content": ["is too long (maximum is 140 characters)"]}
        assert await count_microposts(db, user.id) == 0

    @pytest.mark.parametrize("content", [None, "", "   "])
    async def test_content_blank(
        self, db: AsyncSession, user: User, content: str | None
    ) -> None:
        """Test that empty or absent content is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await create_micropost(db, user.id, content)

        assert exc_info.value.errors == {"content": ["can't be blank"]}

    async def test_user_id_required(self, db: AsyncSession) -> None:
        """Test that a missing author is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await create_micropost(db, None, "Lorem ipsum")

        assert exc_info.value.errors == {"user_id": ["can't be blank"]}

    async def test_unknown_user(self, db: AsyncSession) -> None:
        """Test that a nonexistent author raises NotFoundError."""
        with pytest.raises(NotFoundError, match="User 42 not found"):
            await create_micropost(db, 42, "Lorem ipsum")


class TestMicropostQueries:
    """Tests for reading and deleting microposts."""

    async def test_newest_first(self, db: AsyncSession, user: User) -> None:
        """Test that ordering follows created_at rather than insertion order."""
        older = await create_micropost(db, user.id, "Written first, dated later")
        newer = await create_micropost(db, user.id, "Written second, dated earlier")
        older.created_at = newer.created_at + timedelta(hours=1)
        newer.created_at = newer.created_at - timedelta(days=1)
        await db.flush()

        assert await list_microposts(db, user.id) == [older, newer]

    async def test_insertion_order_breaks_ties(self, db: AsyncSession, user: User) -> None:
        """Test that P2 precedes P1 when created after it."""
        p1 = await create_micropost(db, user.id, "P1")
        p2 = await create_micropost(db, user.id, "P2")
        p2.created_at = p1.created_at
        await db.flush()

        assert await list_microposts(db, user.id) == [p2, p1]

    async def test_pagination(self, db: AsyncSession, user: User) -> None:
        """Test limit/offset over a user's posts."""
        posts = [await create_micropost(db, user.id, f"Post {i}") for i in range(5)]

        page = await list_microposts(db, user.id, limit=2, offset=1)

        assert page == [posts[3], posts[2]]
        assert await count_microposts(db, user.id) == 5

    async def test_get_and_delete(self, db: AsyncSession, user: User) -> None:
        """Test fetching and deleting a micropost."""
        micropost = await create_micropost(db, user.id, "Lorem ipsum")
        micropost_id = micropost.id

        assert await get_micropost(db, micropost_id) is micropost

        await delete_micropost(db, micropost)

        with pytest.raises(NotFoundError):
            await get_micropost(db, micropost_id)
        assert await count_microposts(db, user.id) == 0


class TestFeed:
    """Tests for the status feed."""

    async def test_own_posts_newest_first(self, db: AsyncSession, user: User) -> None:
        """Test that P2 (later) comes before P1."""
        p1 = await create_micropost(db, user.id, "P1")
        p2 = await create_micropost(db, user.id, "P2")
        p1.created_at = p2.created_at - timedelta(days=1)
        await db.flush()

        assert await feed(db, user) == [p2, p1]

    async def test_includes_followed_users_posts(
        self, db: AsyncSession, user: User, other_user: User
    ) -> None:
        """Test that a followed user's posts appear until unfollowed."""
        own = await create_micropost(db, user.id, "Own post")
        followed_post = await create_micropost(db, other_user.id, "Followed post")
        await follow(db, user, other_user)

        assert await feed(db, user) == [followed_post, own]

        await unfollow(db, user, other_user)

        assert await feed(db, user) == [own]

    async def test_excludes_unfollowed_users(
        self, db: AsyncSession, user: User, other_user: User
    ) -> None:
        """Test that posts by users not followed never appear."""
        stranger = await create_user(
            db, name="Stranger", email="stranger@example.com", password="foobar"
        )
        await create_micropost(db, stranger.id, "Stranger post")
        followed_post = await create_micropost(db, other_user.id, "Followed post")
        await follow(db, user, other_user)

        result = await from_users_followed_by(db, user)

        assert result == [followed_post]

    async def test_follow_is_directed(
        self, db: AsyncSession, user: User, other_user: User
    ) -> None:
        """Test that followers do not see into the follower's feed in reverse."""
        own = await create_micropost(db, user.id, "Own post")
        await create_micropost(db, other_user.id, "Other post")
        await follow(db, other_user, user)

        assert await feed(db, user) == [own]
        assert len(await feed(db, other_user)) == 2

    async def test_feed_pagination(self, db: AsyncSession, user: User) -> None:
        """Test limit/offset on the feed."""
        posts = [await create_micropost(db, user.id, f"Post {i}") for i in range(3)]

        assert await feed(db, user, limit=1) == [posts[2]]
        assert await feed(db, user, limit=2, offset=1) == [posts[1], posts[0]]


class TestMicropostResponse:
    """Tests for the micropost read model."""

    async def test_from_model(self, db: AsyncSession, user: User) -> None:
        """Test building the read model from an ORM row."""
        micropost = await create_micropost(db, user.id, "Lorem ipsum")

        data = MicropostResponse.model_validate(micropost)

        assert data.id == micropost.id
        assert data.content == "Lorem ipsum"
        assert data.user_id == user.id
