"""Pydantic schemas for user records."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from microblog.config import get_settings

MAX_NAME_LENGTH = 50

VALID_EMAIL_REGEX = re.compile(
    r"\A[\w+\-.]+@[a-z\d\-]+(\.[a-z]+)*\.[a-z]+\Z", re.IGNORECASE | re.ASCII
)


def require_present(v: str | None) -> str:
    """Reject missing or whitespace-only strings."""
    if v is None or not v.strip():
        raise PydanticCustomError("blank", "can't be blank")
    return v


def check_max_length(v: str, maximum: int) -> str:
    if len(v) > maximum:
        raise PydanticCustomError(
            "too_long",
            "is too long (maximum is {maximum} characters)",
            {"maximum": maximum},
        )
    return v


def check_name(v: str | None) -> str:
    return check_max_length(require_present(v), MAX_NAME_LENGTH)


def check_email(v: str | None) -> str:
    v = require_present(v)
    if not VALID_EMAIL_REGEX.match(v):
        raise PydanticCustomError("invalid", "is invalid")
    return v.lower()


def check_password(v: str | None) -> str:
    v = require_present(v)
    minimum = get_settings().password_min_length
    if len(v) < minimum:
        raise PydanticCustomError(
            "too_short",
            "is too short (minimum is {minimum} characters)",
            {"minimum": minimum},
        )
    return v


def confirmation_errors(password: str | None, confirmation: str | None) -> list[str]:
    """Compare the raw password and confirmation.

    Runs on the raw inputs, outside field validation, so a mismatch is still
    reported when the password itself is invalid.
    """
    if password is not None and confirmation is not None and password != confirmation:
        return ["doesn't match Password"]
    return []


class UserCreate(BaseModel):
    """Input for signing up a new user.

    Every field is optional at the type level so that a missing value is
    reported as "can't be blank" together with every other violation.
    """

    name: str | None = Field(
        default=None, validate_default=True, description="Display name (1-50 characters)"
    )
    email: str | None = Field(
        default=None, validate_default=True, description="Email address, stored lowercase"
    )
    password: str | None = Field(
        default=None, validate_default=True, description="Plaintext password"
    )
    password_confirmation: str | None = Field(
        default=None, description="Must equal password when supplied (see confirmation_errors)"
    )
    admin: bool = Field(default=False, description="Administrator flag")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str:
        """Check the format and normalize to lowercase."""
        return check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str:
        return check_password(v)


class UserUpdate(BaseModel):
    """Input for changing an existing user.

    Only the fields that were explicitly passed are validated; a password is
    optional here but held to the same rules when present.
    """

    name: str | None = None
    email: str | None = None
    password: str | None = None
    password_confirmation: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str:
        return check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str:
        return check_password(v)


class UserResponse(BaseModel):
    """Read model for a user (excludes password and remember-token digests)."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="User ID")
    name: str = Field(description="Display name")
    email: str = Field(description="Email address")
    admin: bool = Field(description="Whether the user is an administrator")
    created_at: datetime = Field(description="When the user signed up")
    updated_at: datetime = Field(description="When the user was last changed")
