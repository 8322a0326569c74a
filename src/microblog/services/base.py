"""Error taxonomy and shared helpers for the service layer."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel
from sqlalchemy import Select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Raised when input violates one or more field constraints.

    All violations are collected so callers can show every problem at once.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        super().__init__("Validation failed: " + ", ".join(self.full_messages))

    @property
    def full_messages(self) -> list[str]:
        """Human readable messages, e.g. ``"Name can't be blank"``."""
        return [
            f"{field.replace('_', ' ').capitalize()} {message}"
            for field, messages in self.errors.items()
            for message in messages
        ]


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class ConstraintError(ServiceError):
    """Raised when the database rejects a write (uniqueness, foreign key)."""

    def __init__(self, message: str = "Database constraint violated") -> None:
        super().__init__(message)


def collect_errors(
    schema: type[SchemaT], data: dict[str, Any]
) -> tuple[SchemaT | None, dict[str, list[str]]]:
    """Validate ``data`` against ``schema`` without raising.

    Returns:
        The validated schema instance (or None) and the errors keyed by field
    """
    try:
        return schema.model_validate(data), {}
    except pydantic.ValidationError as e:
        errors: dict[str, list[str]] = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "base"
            errors.setdefault(field, []).append(error["msg"])
        return None, errors


def validate(schema: type[SchemaT], data: dict[str, Any]) -> SchemaT:
    """Validate ``data`` against ``schema``, raising ValidationError on failure."""
    validated, errors = collect_errors(schema, data)
    if errors:
        raise ValidationError(errors)
    return validated


@asynccontextmanager
async def savepoint(db: AsyncSession) -> AsyncIterator[None]:
    """Run a write inside a SAVEPOINT, translating storage-level rejections.

    Changes made inside the block are flushed when it exits. If the database
    rejects them only the savepoint is rolled back; earlier writes in the
    same unit of work survive and the session stays usable.

    Raises:
        ConstraintError: If the database rejects the write
    """
    try:
        async with db.begin_nested():
            yield
    except IntegrityError as e:
        logger.warning("Constraint violation: %s", e.orig)
        raise ConstraintError(str(e.orig)) from e


def paginate(query: Select, limit: int | None = None, offset: int = 0) -> Select:
    """Apply optional limit/offset to a select."""
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query
