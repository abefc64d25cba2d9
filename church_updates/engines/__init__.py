"""Engine adapters, dialect exports, and the settings-driven engine factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .dialects import Dialect, PostgresDialect, SQLiteDialect
from .sqlite import SQLiteEngine

if TYPE_CHECKING:
    from ..config import Settings
    from ..core.contracts import Engine


async def open_engine(settings: Settings) -> Engine:
    """Open the engine selected by `settings.database_url`.

    Raises:
        ConfigurationError: The selected engine cannot be reached.
    """

    if settings.uses_remote_database:
        from .postgres import PostgresEngine

        return await PostgresEngine.connect(
            settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            timeout=settings.connect_timeout,
        )
    return SQLiteEngine.connect(settings.database_path)


__all__ = [
    "Dialect",
    "PostgresDialect",
    "SQLiteDialect",
    "SQLiteEngine",
    "open_engine",
]
