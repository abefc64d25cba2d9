"""Schema bootstrap: derive and apply table/index SQL from record dataclasses."""

from __future__ import annotations

import logging
from dataclasses import Field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterable, List, Sequence, Type, get_type_hints

from ..core.contracts import DataAccessPort, DialectPort
from .records import ALL_RECORDS, column_fields, require_record_model, table_name, unwrap_optional

logger = logging.getLogger(__name__)

_ON_DELETE_ACTIONS = frozenset({"CASCADE", "SET NULL", "RESTRICT", "NO ACTION"})


def resolve_sql_type(annotation: Any) -> str:
    """Map Python annotation to SQL scalar type."""

    base_type = unwrap_optional(annotation)

    if base_type is bool:
        return "BOOLEAN"
    if base_type is datetime:
        return "TIMESTAMP"
    if base_type is date:
        return "DATE"
    if base_type is time:
        return "TIME"
    if base_type is Decimal:
        return "NUMERIC"
    if base_type in {bytes, bytearray}:
        return "BLOB"
    if base_type is int:
        return "INTEGER"
    if base_type is float:
        return "REAL"
    return "TEXT"


def is_nullable(field: Field[Any]) -> bool:
    """Infer whether the column allows NULL (a `None` default means nullable)."""

    return field.default is None


def parse_fk_reference(raw: Any) -> tuple[str, str]:
    """Parse `field.metadata['fk']` into `(table, column)`."""

    if isinstance(raw, str):
        parts = raw.split(".", maxsplit=1)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError("fk string must have format 'table.column', e.g. 'users.id'.")
        return parts[0], parts[1]

    if isinstance(raw, Sequence) and len(raw) == 2:
        model_or_table, column = raw
        if isinstance(model_or_table, type):
            require_record_model(model_or_table)
            return table_name(model_or_table), column
        if isinstance(model_or_table, str) and model_or_table:
            return model_or_table, column

    raise TypeError("Unsupported fk format. Use 'table.column' or (Record, 'column').")


def column_sql(field: Field[Any], annotation: Any, dialect: DialectPort) -> str:
    """Build one column definition SQL fragment."""

    meta = field.metadata
    if meta.get("pk") and meta.get("auto"):
        return dialect.auto_pk_sql(field.name)

    sql_parts = [dialect.q(field.name), meta.get("sql_type") or resolve_sql_type(annotation)]
    sql_parts.append("NULL" if is_nullable(field) else "NOT NULL")

    if "default_sql" in meta:
        sql_parts.append(f"DEFAULT {meta['default_sql']}")
    if meta.get("pk"):
        sql_parts.append("PRIMARY KEY")
    if meta.get("unique"):
        sql_parts.append("UNIQUE")
    if "fk" in meta:
        ref_table, ref_column = parse_fk_reference(meta["fk"])
        sql_parts.append(f"REFERENCES {dialect.q(ref_table)} ({dialect.q(ref_column)})")
        on_delete = meta.get("on_delete")
        if on_delete:
            action = str(on_delete).upper()
            if action not in _ON_DELETE_ACTIONS:
                raise ValueError(f"Unsupported on_delete action {on_delete!r}.")
            sql_parts.append(f"ON DELETE {action}")

    return " ".join(sql_parts)


def create_table_sql(cls: Type[Any], dialect: DialectPort) -> str:
    """Build `CREATE TABLE IF NOT EXISTS` for a record class."""

    require_record_model(cls)
    hints = get_type_hints(cls)
    definitions = [column_sql(f, hints[f.name], dialect) for f in column_fields(cls)]
    for columns in getattr(cls, "__unique_together__", ()):
        quoted = ", ".join(dialect.q(name) for name in columns)
        definitions.append(f"UNIQUE ({quoted})")

    table_sql = dialect.q(table_name(cls))
    return f"CREATE TABLE IF NOT EXISTS {table_sql} (\n  " + ",\n  ".join(definitions) + "\n)"


def create_indexes_sql(cls: Type[Any], dialect: DialectPort) -> List[str]:
    """Build `CREATE INDEX IF NOT EXISTS` for fields marked with `index`."""

    table = table_name(cls)
    return [
        f"CREATE INDEX IF NOT EXISTS {dialect.q(f'idx_{table}_{f.name}')} "
        f"ON {dialect.q(table)} ({dialect.q(f.name)})"
        for f in column_fields(cls)
        if f.metadata.get("index")
    ]


def create_schema_sql(
    dialect: DialectPort,
    records: Iterable[Type[Any]] = ALL_RECORDS,
) -> List[str]:
    """Build full schema SQL list (each table followed by its indexes)."""

    statements: List[str] = []
    for cls in records:
        statements.append(create_table_sql(cls, dialect))
        statements.extend(create_indexes_sql(cls, dialect))
    return statements


async def apply_schema(
    db: DataAccessPort,
    records: Iterable[Type[Any]] = ALL_RECORDS,
) -> List[str]:
    """Create every missing table and index on an initialized handle."""

    statements = create_schema_sql(db.dialect, records)
    for sql in statements:
        await db.run(sql)
    logger.info("Schema ensured on %s (%d statements)", db.dialect.name, len(statements))
    return statements
