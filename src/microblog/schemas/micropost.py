"""Pydantic schemas for microposts."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from microblog.models.micropost import MAX_CONTENT_LENGTH
from microblog.schemas.user import check_max_length, require_present


class MicropostCreate(BaseModel):
    """Input for posting a micropost."""

    content: str | None = Field(
        default=None, validate_default=True, description="Post body (1-140 characters)"
    )
    user_id: int | None = Field(
        default=None, validate_default=True, description="Author's user ID"
    )

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str | None) -> str:
        return check_max_length(require_present(v), MAX_CONTENT_LENGTH)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: int | None) -> int:
        if v is None:
            raise PydanticCustomError("blank", "can't be blank")
        return v


class MicropostResponse(BaseModel):
    """Read model for a micropost."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Micropost ID")
    content: str = Field(description="Post body")
    user_id: int = Field(description="Author's user ID")
    created_at: datetime = Field(description="When the post was created")
    updated_at: datetime = Field(description="When the post was last changed")
