"""Public core API: the data-access shim, its contracts, and SQL-text helpers."""

from .contracts import DataAccessPort, DialectPort, EmbeddedEnginePort, Engine, NetworkedEnginePort
from .data_access import AccessState, DataAccess, EngineFactory
from .statements import (
    classify_statement,
    ensure_returning_id,
    has_returning,
    prepare_statement,
    translate_placeholders,
)
from .types import (
    MaybeRow,
    PositionalParams,
    QueryResult,
    RowMapping,
    Rows,
    RunResult,
    StatementKind,
)

__all__ = [
    "AccessState",
    "DataAccess",
    "DataAccessPort",
    "DialectPort",
    "EmbeddedEnginePort",
    "Engine",
    "EngineFactory",
    "MaybeRow",
    "NetworkedEnginePort",
    "PositionalParams",
    "QueryResult",
    "RowMapping",
    "Rows",
    "RunResult",
    "StatementKind",
    "classify_statement",
    "ensure_returning_id",
    "has_returning",
    "prepare_statement",
    "translate_placeholders",
]
