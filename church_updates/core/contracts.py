"""Port contracts between the shim, its engines, and the model stores."""

from __future__ import annotations

from typing import List, Optional, Protocol, Union

from .types import MaybeRow, PositionalParams, QueryResult, RowMapping, RunResult, StatementKind


class DialectPort(Protocol):
    """Dialect behavior required by the shim and schema generation."""

    name: str
    paramstyle: str
    supports_returning: bool

    def q(self, ident: str) -> str: ...

    def prepare(self, sql: str) -> str: ...

    def auto_pk_sql(self, pk_name: str) -> str: ...


class EmbeddedEnginePort(Protocol):
    """File-backed engine with distinct single-row, multi-row and run calls."""

    dialect: DialectPort

    async def fetch_one(self, sql: str, params: PositionalParams = None) -> MaybeRow: ...

    async def fetch_all(self, sql: str, params: PositionalParams = None) -> List[RowMapping]: ...

    async def run(self, sql: str, params: PositionalParams = None) -> QueryResult: ...

    async def close(self) -> None: ...


class NetworkedEnginePort(Protocol):
    """Server engine with one native call returning rows plus a row count."""

    dialect: DialectPort

    async def execute(self, sql: str, params: PositionalParams = None) -> QueryResult: ...

    async def close(self) -> None: ...


Engine = Union[EmbeddedEnginePort, NetworkedEnginePort]


class DataAccessPort(Protocol):
    """Uniform calling convention the model stores depend on."""

    @property
    def dialect(self) -> DialectPort: ...

    async def initialize(self) -> None: ...

    async def query(
        self,
        sql: str,
        params: PositionalParams = None,
        *,
        kind: Optional[StatementKind] = None,
    ) -> QueryResult: ...

    async def all(self, sql: str, params: PositionalParams = None) -> List[RowMapping]: ...

    async def get(self, sql: str, params: PositionalParams = None) -> MaybeRow: ...

    async def run(self, sql: str, params: PositionalParams = None) -> RunResult: ...

    async def insert(self, sql: str, params: PositionalParams = None) -> RunResult: ...
