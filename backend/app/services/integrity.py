"""Translate store constraint failures into API errors."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import (
    FOREIGN_KEY,
    UNIQUE,
    ConflictError,
    InvalidReferenceError,
    ValidationFailed,
    constraint_kind,
)


async def flush_or_raise(
    db: AsyncSession,
    *,
    conflict: str = "A record with this information already exists",
    invalid_reference: str = "Foreign key constraint violation",
) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        kind = constraint_kind(exc)
        if kind == UNIQUE:
            raise ConflictError(conflict) from exc
        if kind == FOREIGN_KEY:
            raise InvalidReferenceError(invalid_reference) from exc
        raise ValidationFailed("Value violates a data constraint") from exc
