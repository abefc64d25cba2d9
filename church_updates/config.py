"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


@dataclass(frozen=True)
class Settings:
    """Process settings for the data-access layer.

    `database_url` is the single engine selector: when it is set the
    networked PostgreSQL engine is used, otherwise the embedded SQLite file
    at `database_path`.
    """

    database_url: Optional[str] = None
    database_path: str = "updates.db"
    pool_min_size: int = 1
    pool_max_size: int = 10
    connect_timeout: float = 10.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.pool_min_size < 0:
            raise ConfigurationError("DB_POOL_MIN_SIZE must be >= 0.")
        if self.pool_max_size < 1:
            raise ConfigurationError("DB_POOL_MAX_SIZE must be >= 1.")
        if self.pool_min_size > self.pool_max_size:
            raise ConfigurationError("DB_POOL_MIN_SIZE cannot exceed DB_POOL_MAX_SIZE.")
        if self.connect_timeout <= 0:
            raise ConfigurationError("DB_CONNECT_TIMEOUT must be > 0.")

    @property
    def uses_remote_database(self) -> bool:
        return bool(self.database_url)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        dotenv: bool = True,
    ) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of `os.environ`. When given, no
                `.env` file is loaded.
            dotenv: Load the nearest `.env` file, searching up from the
                working directory, into `os.environ` first. Variables
                already present in the environment are kept.
        """

        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True), override=False)
            environ = os.environ

        database_url = (environ.get("DATABASE_URL") or "").strip() or None
        return cls(
            database_url=database_url,
            database_path=environ.get("DATABASE_PATH") or cls.database_path,
            pool_min_size=_int_setting(environ, "DB_POOL_MIN_SIZE", cls.pool_min_size),
            pool_max_size=_int_setting(environ, "DB_POOL_MAX_SIZE", cls.pool_max_size),
            connect_timeout=_float_setting(
                environ, "DB_CONNECT_TIMEOUT", cls.connect_timeout
            ),
            log_level=(environ.get("LOG_LEVEL") or cls.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a stdout handler on the root logger."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)


def _int_setting(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}.") from exc


def _float_setting(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}.") from exc
