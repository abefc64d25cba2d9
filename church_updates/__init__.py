"""Dual-engine data access for the church-updates backend."""

from .config import Settings, configure_logging
from .core import AccessState, DataAccess, QueryResult, RunResult, StatementKind
from .errors import (
    AlreadyExistsError,
    ChurchUpdatesError,
    ConfigurationError,
    InvalidFieldError,
    InvalidPatchError,
    ModelError,
    is_unique_violation,
)

__all__ = [
    "AccessState",
    "AlreadyExistsError",
    "ChurchUpdatesError",
    "ConfigurationError",
    "DataAccess",
    "InvalidFieldError",
    "InvalidPatchError",
    "ModelError",
    "QueryResult",
    "RunResult",
    "Settings",
    "StatementKind",
    "configure_logging",
    "is_unique_violation",
]
