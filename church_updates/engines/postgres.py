"""Networked-server engine backed by psycopg 3 and its async connection pool."""

from __future__ import annotations

import logging
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from ..core.types import PositionalParams, QueryResult
from ..errors import ConfigurationError
from .dialects import PostgresDialect

logger = logging.getLogger(__name__)


class PostgresEngine:
    """Pooled PostgreSQL engine with one native call returning rows and a count."""

    def __init__(self, pool: Any):
        """Create engine over an open pool.

        Args:
            pool: `psycopg_pool.AsyncConnectionPool` (or compatible object with
                an async `connection()` context manager and async `close()`).
                Its connections must use `AsyncRawCursor` so `$n` placeholders
                reach the server untouched.
        """

        self.pool = pool
        self.dialect = PostgresDialect()

    @classmethod
    async def connect(
        cls,
        url: str,
        *,
        min_size: int = 1,
        max_size: int = 10,
        timeout: float = 10.0,
    ) -> PostgresEngine:
        """Open a pool against `url` and wait until `min_size` connections exist."""

        pool = AsyncConnectionPool(
            url,
            min_size=min_size,
            max_size=max_size,
            timeout=timeout,
            open=False,
            kwargs={
                "autocommit": True,
                "row_factory": dict_row,
                "cursor_factory": psycopg.AsyncRawCursor,
            },
        )
        try:
            await pool.open(wait=True, timeout=timeout)
        except (PoolTimeout, psycopg.OperationalError) as exc:
            await pool.close()
            raise ConfigurationError(f"Cannot reach PostgreSQL server: {exc}") from exc
        logger.info("Connected to PostgreSQL (pool min=%d max=%d)", min_size, max_size)
        return cls(pool)

    async def execute(self, sql: str, params: PositionalParams = None) -> QueryResult:
        """Run one statement on a pooled connection.

        Statements that produce no result set (plain INSERT/UPDATE/DELETE,
        DDL) return an empty `rows` list.
        """

        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, list(params) if params else None)
                rows = await cur.fetchall() if cur.description is not None else []
                return QueryResult(
                    rows=[dict(row) for row in rows],
                    row_count=cur.rowcount,
                )

    async def close(self) -> None:
        """Close the pool and every pooled connection."""

        await self.pool.close()
