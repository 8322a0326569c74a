"""Pydantic schemas for input validation and read models."""

from microblog.schemas.micropost import MicropostCreate, MicropostResponse
from microblog.schemas.relationship import RelationshipCreate, RelationshipResponse
from microblog.schemas.user import VALID_EMAIL_REGEX, UserCreate, UserResponse, UserUpdate

__all__ = [
    "VALID_EMAIL_REGEX",
    # User schemas
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    # Micropost schemas
    "MicropostCreate",
    "MicropostResponse",
    # Relationship schemas
    "RelationshipCreate",
    "RelationshipResponse",
]
