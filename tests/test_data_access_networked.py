from __future__ import annotations

import unittest
from typing import Any, Optional

from church_updates import DataAccess, QueryResult, RunResult, Settings
from church_updates.engines import PostgresDialect

REMOTE = Settings(database_url="postgres://example/church")


class _FakeNetworkedEngine:
    """Records statements and answers from a queue of canned results."""

    def __init__(self, *results: QueryResult):
        self.dialect = PostgresDialect()
        self.calls: list[tuple[str, list[Any]]] = []
        self._results = list(results)
        self.closed = False

    async def execute(self, sql: str, params: Optional[list[Any]] = None) -> QueryResult:
        self.calls.append((sql, list(params or [])))
        if self._results:
            return self._results.pop(0)
        return QueryResult(rows=[], row_count=0)

    async def close(self) -> None:
        self.closed = True


class _FailingEngine(_FakeNetworkedEngine):
    async def execute(self, sql: str, params: Optional[list[Any]] = None) -> QueryResult:
        raise RuntimeError("duplicate key value violates unique constraint")


def _factory_for(engine: Any):
    async def factory(_settings: Settings) -> Any:
        return engine

    return factory


class DataAccessNetworkedTests(unittest.IsolatedAsyncioTestCase):
    async def _db(self, *results: QueryResult) -> tuple[DataAccess, _FakeNetworkedEngine]:
        engine = _FakeNetworkedEngine(*results)
        db = DataAccess(REMOTE, engine_factory=_factory_for(engine))
        await db.initialize()
        return db, engine

    async def test_placeholders_are_numbered_before_dispatch(self) -> None:
        db, engine = await self._db()

        await db.all("  SELECT * FROM events WHERE church_id = ? AND title = ?  ", [3, "Picnic"])

        self.assertEqual(
            engine.calls,
            [("SELECT * FROM events WHERE church_id = $1 AND title = $2", [3, "Picnic"])],
        )
        self.assertTrue(db.is_networked)

    async def test_sql_without_placeholders_is_only_trimmed(self) -> None:
        db, engine = await self._db()

        await db.all("\nSELECT * FROM churches ORDER BY id\n")

        self.assertEqual(engine.calls[0][0], "SELECT * FROM churches ORDER BY id")

    async def test_query_returns_native_result_unchanged(self) -> None:
        native = QueryResult(rows=[{"id": 1}, {"id": 2}], row_count=2)
        db, _engine = await self._db(native)

        self.assertIs(await db.query("SELECT id FROM churches LIMIT 1"), native)

    async def test_all_with_zero_matches_is_empty_list(self) -> None:
        db, _engine = await self._db(QueryResult(rows=[], row_count=0))

        self.assertEqual(await db.all("SELECT * FROM churches WHERE id = ?", [9]), [])

    async def test_get_returns_first_row_or_none(self) -> None:
        db, _engine = await self._db(
            QueryResult(rows=[{"id": 4, "name": "Grace"}], row_count=1),
            QueryResult(rows=[], row_count=0),
        )

        self.assertEqual(await db.get("SELECT * FROM churches WHERE id = ?", [4]), {"id": 4, "name": "Grace"})
        self.assertIsNone(await db.get("SELECT * FROM churches WHERE id = ?", [5]))

    async def test_insert_appends_returning_id_and_reads_identity(self) -> None:
        db, engine = await self._db(QueryResult(rows=[{"id": 17}], row_count=1))

        result = await db.insert("INSERT INTO donations (church_id, method) VALUES (?, ?);", [1, "Zelle"])

        self.assertEqual(result, RunResult(last_id=17, changes=1))
        self.assertEqual(
            engine.calls[0][0],
            "INSERT INTO donations (church_id, method) VALUES ($1, $2) RETURNING id",
        )

    async def test_insert_keeps_existing_returning_clause(self) -> None:
        db, engine = await self._db(QueryResult(rows=[{"id": 3, "email": "a@b.c"}], row_count=1))

        result = await db.insert(
            "INSERT INTO users (email) VALUES (?) returning id, email", ["a@b.c"]
        )

        self.assertEqual(result.last_id, 3)
        self.assertEqual(engine.calls[0][0], "INSERT INTO users (email) VALUES ($1) returning id, email")

    async def test_run_without_returned_rows_has_no_last_id(self) -> None:
        db, engine = await self._db(QueryResult(rows=[], row_count=2))

        result = await db.run("UPDATE events SET title = ? WHERE church_id = ?", ["New", 1])

        self.assertEqual(result, RunResult(last_id=None, changes=2))
        self.assertNotIn("RETURNING", engine.calls[0][0])

    async def test_run_with_unknown_row_count_reports_zero(self) -> None:
        db, _engine = await self._db(QueryResult(rows=[], row_count=None))

        result = await db.run("DELETE FROM events WHERE id = ?", [1])

        self.assertEqual(result.changes, 0)

    async def test_run_reads_id_from_first_returned_row(self) -> None:
        db, _engine = await self._db(QueryResult(rows=[{"id": 8}], row_count=1))

        result = await db.run("INSERT INTO churches (name) VALUES (?) RETURNING id", ["Hope"])

        self.assertEqual(result.last_id, 8)

    async def test_run_ignores_rows_without_id_column(self) -> None:
        db, _engine = await self._db(QueryResult(rows=[{"name": "Hope"}], row_count=1))

        result = await db.run("UPDATE churches SET name = ? WHERE id = ? RETURNING name", ["Hope", 1])

        self.assertIsNone(result.last_id)

    async def test_engine_errors_are_logged_and_reraised(self) -> None:
        engine = _FailingEngine()
        db = DataAccess(REMOTE, engine_factory=_factory_for(engine))
        await db.initialize()

        with self.assertLogs("church_updates.core.data_access", level="ERROR") as logs:
            with self.assertRaises(RuntimeError):
                await db.insert("INSERT INTO users (email) VALUES (?)", ["dup@example.com"])

        self.assertIn("[postgres]", logs.output[0])
        self.assertIn("VALUES ($1) RETURNING id", logs.output[0])
        self.assertIn("dup@example.com", logs.output[0])

    async def test_aclose_closes_engine(self) -> None:
        db, engine = await self._db()

        await db.aclose()

        self.assertTrue(engine.closed)


if __name__ == "__main__":
    unittest.main()
