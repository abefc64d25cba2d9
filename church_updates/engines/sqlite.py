"""Embedded-file engine backed by the standard-library `sqlite3` driver."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Mapping, Union

from ..core._async_utils import _close_cursor, _maybe_await
from ..core.types import MaybeRow, PositionalParams, QueryResult, RowMapping, Rows
from ..errors import ConfigurationError
from .dialects import SQLiteDialect

logger = logging.getLogger(__name__)


class SQLiteEngine:
    """Single-connection SQLite engine exposing get/all/run native calls."""

    def __init__(self, conn: Any):
        """Create engine over an open connection.

        Args:
            conn: `sqlite3.Connection` or an async connection with the same
                `cursor()/execute()/fetchone()/fetchall()` surface.
        """

        self.conn = conn
        self.dialect = SQLiteDialect()
        self._closed = False

    @classmethod
    def connect(cls, path: Union[str, Path]) -> SQLiteEngine:
        """Open (creating if needed) the database file at `path`.

        The connection runs in autocommit mode with foreign keys enforced.
        """

        try:
            conn = sqlite3.connect(
                str(path),
                isolation_level=None,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            raise ConfigurationError(
                f"Cannot open SQLite database at {str(path)!r}: {exc}"
            ) from exc
        logger.info("Connected to SQLite database at %s", path)
        return cls(conn)

    def _require_open_connection(self) -> Any:
        if self._closed:
            raise RuntimeError("connection is closed")
        return self.conn

    async def _execute(self, sql: str, params: PositionalParams) -> Any:
        conn = self._require_open_connection()
        cur = await _maybe_await(conn.cursor())
        try:
            await _maybe_await(cur.execute(sql, tuple(params or ())))
        except BaseException:
            await _close_cursor(cur)
            raise
        return cur

    def _row_to_mapping(self, cursor: Any, row: Any) -> RowMapping:
        """Normalize row object to a plain dict.

        Supports mapping rows, `sqlite3.Row`, and tuple rows via
        `cursor.description`.
        """

        if isinstance(row, Mapping):
            return dict(row)

        if isinstance(row, (tuple, list)):
            desc = getattr(cursor, "description", None)
            if not desc:
                raise TypeError(
                    "Cursor has no description; cannot map tuple rows to dict."
                )
            cols = [d[0] for d in desc]
            return dict(zip(cols, row, strict=True))

        try:
            return {key: row[key] for key in row.keys()}
        except (AttributeError, TypeError):
            pass

        raise TypeError(f"Unsupported row type: {type(row)}")

    async def fetch_one(self, sql: str, params: PositionalParams = None) -> MaybeRow:
        """Execute query and return the first row, or `None`."""

        cur = await self._execute(sql, params)
        try:
            row = await _maybe_await(cur.fetchone())
            if row is None:
                return None
            return self._row_to_mapping(cur, row)
        finally:
            await _close_cursor(cur)

    async def fetch_all(self, sql: str, params: PositionalParams = None) -> Rows:
        """Execute query and return every row."""

        cur = await self._execute(sql, params)
        try:
            rows = await _maybe_await(cur.fetchall())
            return [self._row_to_mapping(cur, r) for r in rows]
        finally:
            await _close_cursor(cur)

    async def run(self, sql: str, params: PositionalParams = None) -> QueryResult:
        """Execute a mutation and report changed rows and last inserted rowid."""

        cur = await self._execute(sql, params)
        try:
            # RETURNING rows must be drained before rowcount is final.
            if getattr(cur, "description", None) is not None:
                await _maybe_await(cur.fetchall())
            # DDL reports rowcount -1.
            changes = max(getattr(cur, "rowcount", 0) or 0, 0)
            return QueryResult(
                rows=[],
                row_count=changes,
                last_id=getattr(cur, "lastrowid", None),
            )
        finally:
            await _close_cursor(cur)

    async def close(self) -> None:
        """Close the underlying connection."""

        if self._closed:
            return
        self._closed = True
        close = getattr(self.conn, "close", None)
        if callable(close):
            await _maybe_await(close())
