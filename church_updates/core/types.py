"""Shared type aliases and result records used across the shim and engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

PositionalParams = Union[Sequence[Any], None]

RowMapping = Mapping[str, Any]
Rows = List[RowMapping]
MaybeRow = Optional[RowMapping]


class StatementKind(str, Enum):
    """Native call chosen for a statement on the embedded engine."""

    SELECT_ONE = "select_one"
    SELECT_MANY = "select_many"
    MUTATION = "mutation"


@dataclass
class QueryResult:
    """Raw result of `DataAccess.query`.

    `rows` is never `None`. On the embedded single-row path it holds exactly
    one element, which is `None` when nothing matched.
    """

    rows: List[Optional[RowMapping]] = field(default_factory=list)
    row_count: Optional[int] = None
    last_id: Optional[Any] = None


@dataclass(frozen=True)
class RunResult:
    """Normalized outcome of a mutation."""

    last_id: Optional[Any]
    changes: int
