"""Error taxonomy shared by services, the move engine and the HTTP layer.

Every ``PanelCatalogError`` carries the HTTP status and a short ``kind``
classification that the API returns next to the human-readable message.
``ConstraintViolation`` is raised by the persistence gateway and translated by
the callers that know what the violated constraint means for them.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError


class PanelCatalogError(Exception):
    status_code: int = 500
    kind: str = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(PanelCatalogError):
    status_code = 400
    kind = "validation"


class NotFoundError(PanelCatalogError):
    status_code = 404
    kind = "not_found"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(PanelCatalogError):
    status_code = 409
    kind = "conflict"


class InvalidReferenceError(PanelCatalogError):
    status_code = 400
    kind = "invalid_reference"


class StorageError(PanelCatalogError):
    """Unexpected storage failure. ``detail`` holds the driver text."""

    status_code = 500
    kind = "internal"

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.detail = detail


# ─── Gateway-level constraint errors ───


UNIQUE = "unique"
FOREIGN_KEY = "foreign_key"
CHECK = "check"
IN_USE = "in_use"


class ConstraintViolation(Exception):
    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @classmethod
    def from_integrity_error(cls, exc: IntegrityError) -> ConstraintViolation:
        return cls(constraint_kind(exc), str(exc.orig))


def constraint_kind(exc: IntegrityError) -> str:
    """Classify an IntegrityError by SQLSTATE, falling back to SQLite text."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == "23505":
        return UNIQUE
    if sqlstate == "23503":
        return FOREIGN_KEY
    if sqlstate in ("23514", "23502"):
        return CHECK

    message = str(orig).upper()
    if "UNIQUE" in message:
        return UNIQUE
    if "FOREIGN KEY" in message:
        return FOREIGN_KEY
    return CHECK
