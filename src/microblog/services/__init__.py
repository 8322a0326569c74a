"""Service layer: validation, persistence and queries for the domain models."""

from microblog.services.base import (
    ConstraintError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

__all__ = [
    "ConstraintError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
]
