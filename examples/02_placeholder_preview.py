"""Show how the same `?` statements reach each engine."""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "church_updates").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from church_updates.core import classify_statement, ensure_returning_id
from church_updates.engines import PostgresDialect, SQLiteDialect
from church_updates.models import Church, Event
from church_updates.models.schema import create_table_sql

STATEMENTS = [
    "SELECT * FROM users WHERE email = ? LIMIT 1",
    "SELECT * FROM events WHERE church_id = ? ORDER BY start_datetime LIMIT 10",
    "INSERT INTO donations (church_id, method, note) VALUES (?, ?, ?);",
    "UPDATE churches SET name = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
]


def show_for_dialect(name: str, dialect) -> None:  # noqa: ANN001
    print(f"\n===== {name} =====")
    for sql in STATEMENTS:
        prepared = dialect.prepare(sql)
        if dialect.paramstyle == "numeric" and sql.startswith("INSERT"):
            prepared = ensure_returning_id(prepared)
        print(f"{classify_statement(sql).value:<12} {prepared}")
    print("DDL:", create_table_sql(Church, dialect).splitlines()[1])
    print("DDL:", create_table_sql(Event, dialect).splitlines()[2])


def main() -> None:
    show_for_dialect("SQLiteDialect", SQLiteDialect())
    show_for_dialect("PostgresDialect", PostgresDialect())


if __name__ == "__main__":
    main()
