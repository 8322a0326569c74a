"""Tests for password hashing and remember-token helpers."""

from microblog.utils.security import (
    encrypt,
    hash_password,
    new_remember_token,
    verify_password,
)


class TestPasswordHashing:
    """Tests for bcrypt password digests."""

    def test_hash_is_not_plaintext(self) -> None:
        """Test that the digest never contains the password."""
        digest = hash_password("foobar")

        assert digest != "foobar"
        assert digest.startswith("$2")

    def test_verify_correct_password(self) -> None:
        """Test that the original password verifies."""
        digest = hash_password("foobar")

        assert verify_password("foobar", digest) is True

    def test_verify_wrong_password(self) -> None:
        """Test that a different password does not verify."""
        digest = hash_password("foobar")

        assert verify_password("invalid", digest) is False

    def test_same_password_hashes_differently(self) -> None:
        """Test that each digest is salted."""
        assert hash_password("foobar") != hash_password("foobar")


class TestRememberToken:
    """Tests for remember-token generation and digests."""

    def test_new_token_is_url_safe(self) -> None:
        """Test that tokens only use URL-safe base64 characters."""
        token = new_remember_token()

        assert len(token) >= 22  # 16 bytes of base64
        assert all(c.isalnum() or c in "-_" for c in token)

    def test_new_tokens_are_unique(self) -> None:
        """Test that consecutive tokens differ."""
        tokens = {new_remember_token() for _ in range(100)}

        assert len(tokens) == 100

    def test_encrypt_is_deterministic(self) -> None:
        """Test that the same token always yields the same digest."""
        token = new_remember_token()

        assert encrypt(token) == encrypt(token)

    def test_encrypt_distinguishes_tokens(self) -> None:
        """Test that different tokens yield different digests."""
        assert encrypt("token-a") != encrypt("token-b")

    def test_encrypt_is_hex_sha256(self) -> None:
        """Test the digest format."""
        digest = encrypt("token")

        assert len(digest) == 64
        assert int(digest, 16) >= 0
        assert digest != "token"

    def test_encrypt_none(self) -> None:
        """Test that a missing token digests like an empty one."""
        assert encrypt(None) == encrypt("")
