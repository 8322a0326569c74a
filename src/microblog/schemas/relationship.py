"""Pydantic schemas for follow relationships."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError


class RelationshipCreate(BaseModel):
    """Input for a follow edge."""

    follower_id: int | None = Field(
        default=None, validate_default=True, description="User doing the following"
    )
    followed_id: int | None = Field(
        default=None, validate_default=True, description="User being followed"
    )

    @field_validator("follower_id")
    @classmethod
    def validate_follower_id(cls, v: int | None) -> int:
        if v is None:
            raise PydanticCustomError("blank", "can't be blank")
        return v

    @field_validator("followed_id")
    @classmethod
    def validate_followed_id(cls, v: int | None, info: ValidationInfo) -> int:
        if v is None:
            raise PydanticCustomError("blank", "can't be blank")
        if v == info.data.get("follower_id"):
            raise PydanticCustomError("self_follow", "can't be the follower")
        return v


class RelationshipResponse(BaseModel):
    """Read model for a follow edge."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    follower_id: int
    followed_id: int
    created_at: datetime
