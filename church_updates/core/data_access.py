"""Dual-engine data-access shim.

One `DataAccess` handle owns exactly one engine, chosen on the first
`initialize()` call, and gives the model stores a single calling convention
(`all`, `get`, `run`, `insert`, `query`) over `?`-placeholder SQL. Result
shapes are normalized so callers never branch on the engine in use.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ..config import Settings
from ..errors import ConfigurationError
from .contracts import DialectPort, Engine
from .statements import classify_statement, ensure_returning_id
from .types import MaybeRow, PositionalParams, QueryResult, RowMapping, RunResult, StatementKind

logger = logging.getLogger(__name__)

EngineFactory = Callable[[Settings], Awaitable[Engine]]


class AccessState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


async def _default_engine_factory(settings: Settings) -> Engine:
    from ..engines import open_engine

    return await open_engine(settings)


class DataAccess:
    """Uniform query interface over the embedded and networked engines."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        engine_factory: Optional[EngineFactory] = None,
    ):
        """Create an uninitialized handle.

        Args:
            settings: Engine selection and pool settings. Defaults to
                `Settings.from_env()`.
            engine_factory: Coroutine function building the engine from
                settings. Defaults to `church_updates.engines.open_engine`.
        """

        self.settings = settings if settings is not None else Settings.from_env()
        self._engine_factory = engine_factory or _default_engine_factory
        self._engine: Optional[Engine] = None
        self._state = AccessState.UNINITIALIZED
        self._init_lock = asyncio.Lock()

    @property
    def state(self) -> AccessState:
        return self._state

    @property
    def engine(self) -> Engine:
        return self._require_engine()

    @property
    def dialect(self) -> DialectPort:
        return self._require_engine().dialect

    @property
    def is_networked(self) -> bool:
        """Whether the active engine takes `$n` placeholders (PostgreSQL)."""

        return self.dialect.paramstyle == "numeric"

    async def initialize(self) -> None:
        """Open the backing engine once; later and concurrent calls share it."""

        if self._state is AccessState.READY:
            return
        async with self._init_lock:
            if self._state is AccessState.READY:
                return
            engine = await self._engine_factory(self.settings)
            self._engine = engine
            self._state = AccessState.READY
            logger.info("Data access ready on %s engine", engine.dialect.name)

    async def aclose(self) -> None:
        """Release the engine and return to the uninitialized state."""

        async with self._init_lock:
            engine, self._engine = self._engine, None
            self._state = AccessState.UNINITIALIZED
            if engine is not None:
                await engine.close()

    def _require_engine(self) -> Engine:
        if self._state is not AccessState.READY or self._engine is None:
            raise ConfigurationError(
                "DataAccess is not initialized; await initialize() before querying."
            )
        return self._engine

    async def query(
        self,
        sql: str,
        params: PositionalParams = None,
        *,
        kind: Optional[StatementKind] = None,
    ) -> QueryResult:
        """Translate, dispatch, and return the engine result.

        Args:
            sql: Statement template with `?` placeholders.
            params: Positional bind values.
            kind: Native call to use on the embedded engine. When omitted it
                is inferred from the statement text. Ignored by the networked
                engine, which has a single native call.
        """

        engine = self._require_engine()
        statement = engine.dialect.prepare(sql)
        values = list(params or [])
        logger.debug("[%s] %s params=%r", engine.dialect.name, statement, values)

        try:
            if self.is_networked:
                return await engine.execute(statement, values)

            kind = kind or classify_statement(statement)
            if kind is StatementKind.SELECT_ONE:
                return QueryResult(rows=[await engine.fetch_one(statement, values)])
            if kind is StatementKind.SELECT_MANY:
                return QueryResult(rows=await engine.fetch_all(statement, values))
            return await engine.run(statement, values)
        except Exception as exc:
            logger.error(
                "[%s] query failed: %s | statement=%s | params=%r",
                engine.dialect.name,
                exc,
                statement,
                values,
            )
            raise

    async def all(self, sql: str, params: PositionalParams = None) -> List[RowMapping]:
        """Return every matching row; an empty list when nothing matches."""

        result = await self.query(sql, params)
        return [row for row in result.rows if row is not None]

    async def get(self, sql: str, params: PositionalParams = None) -> MaybeRow:
        """Return the first matching row, or `None`."""

        result = await self.query(sql, params)
        return result.rows[0] if result.rows else None

    async def run(self, sql: str, params: PositionalParams = None) -> RunResult:
        """Execute a statement and report `last_id` and `changes`."""

        result = await self.query(sql, params)
        return self._run_result(result)

    async def insert(self, sql: str, params: PositionalParams = None) -> RunResult:
        """Execute an INSERT and guarantee the new identity comes back.

        On the networked engine ` RETURNING id` is appended when the
        statement does not already return columns.
        """

        if self.is_networked:
            sql = ensure_returning_id(sql)
        result = await self.query(sql, params)
        return self._run_result(result)

    def _run_result(self, result: QueryResult) -> RunResult:
        if self.is_networked:
            first = result.rows[0] if result.rows else None
            last_id = first.get("id") if first is not None else None
            return RunResult(last_id=last_id, changes=result.row_count or 0)
        return RunResult(last_id=result.last_id, changes=result.row_count or 0)
