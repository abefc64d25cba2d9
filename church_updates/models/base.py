"""Shared plumbing for the entity stores built on `DataAccess`."""

from __future__ import annotations

from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from ..core.contracts import DataAccessPort
from ..core.types import PositionalParams, RunResult
from ..errors import ModelError
from .patches import Patch
from .records import row_to_record, table_name, to_db_value, writable_columns

R = TypeVar("R")


class Store(Generic[R]):
    """Base store: row mapping plus INSERT/UPDATE/DELETE by primary key."""

    record: Type[R]

    def __init__(self, db: DataAccessPort):
        self.db = db

    @property
    def table(self) -> str:
        return table_name(self.record)

    async def _one(self, sql: str, params: PositionalParams = None) -> Optional[R]:
        row = await self.db.get(sql, params)
        return row_to_record(self.record, row) if row is not None else None

    async def _many(self, sql: str, params: PositionalParams = None) -> List[R]:
        rows = await self.db.all(sql, params)
        return [row_to_record(self.record, row) for row in rows]

    async def _insert_record(self, obj: Any) -> RunResult:
        """Insert every writable column of `obj` and return the new identity."""

        columns = writable_columns(obj)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table_name(obj)} ({', '.join(columns)}) VALUES ({placeholders})"
        return await self.db.insert(sql, [to_db_value(getattr(obj, name)) for name in columns])

    async def _apply_patch(self, key_value: Any, patch: Patch) -> int:
        sql, params = patch.update_statement(key_value)
        result = await self.db.run(sql, params)
        return result.changes

    async def _delete_by_id(self, id: Any) -> bool:
        result = await self.db.run(f"DELETE FROM {self.table} WHERE id = ?", [id])
        return result.changes > 0

    async def _get_plain(self, id: Any) -> Optional[R]:
        return await self._one(f"SELECT * FROM {self.table} WHERE id = ? LIMIT 1", [id])

    async def _reload_created(self, result: RunResult) -> R:
        if result.last_id is None:
            raise ModelError(f"Insert into {self.table} returned no id.")
        created = await self._get_plain(result.last_id)
        if created is None:
            raise ModelError(f"Inserted {self.table} row {result.last_id} not found.")
        return created


def params_of(*values: Any) -> Sequence[Any]:
    """Bind-ready positional parameters."""

    return [to_db_value(value) for value in values]
