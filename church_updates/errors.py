"""Exception hierarchy shared by the data-access shim and the model stores."""

from __future__ import annotations

import sqlite3
from typing import Any

_PG_UNIQUE_VIOLATION = "23505"


class ChurchUpdatesError(Exception):
    """Base class for package errors."""


class ConfigurationError(ChurchUpdatesError):
    """Invalid settings, unreachable engine, or use before `initialize()`."""


class ModelError(ChurchUpdatesError):
    """Base class for model-layer validation and conflict errors."""


class InvalidPatchError(ModelError):
    """Patch payload names unknown or immutable columns, or changes nothing."""


class InvalidFieldError(ModelError):
    """A field value failed model-level validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class AlreadyExistsError(ModelError):
    """A uniqueness constraint rejected the write."""


def is_unique_violation(exc: BaseException) -> bool:
    """Return whether a native driver error is a uniqueness violation.

    SQLite reports these as `IntegrityError` with a `UNIQUE constraint failed`
    message; PostgreSQL drivers expose SQLSTATE `23505`.
    """

    if isinstance(exc, sqlite3.IntegrityError):
        return "UNIQUE constraint failed" in str(exc)

    sqlstate: Any = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
    return sqlstate == _PG_UNIQUE_VIOLATION
