"""SQL dialects for the embedded and networked engines."""

from __future__ import annotations

from ..core.statements import prepare_statement


class Dialect:
    """Base dialect that defines quoting and placeholder behavior."""

    name: str = "generic"
    paramstyle: str = "qmark"
    quote_char: str = '"'
    supports_returning: bool = False

    def q(self, ident: str) -> str:
        """Quote SQL identifier."""

        return f"{self.quote_char}{ident}{self.quote_char}"

    def prepare(self, sql: str) -> str:
        """Trim a `?` template and adapt it to this dialect's paramstyle."""

        if self.paramstyle == "qmark":
            return prepare_statement(sql, numbered=False)
        if self.paramstyle == "numeric":
            return prepare_statement(sql, numbered=True)
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def auto_pk_sql(self, pk_name: str) -> str:
        """Return SQL fragment for auto-increment primary key column."""

        return f"{self.q(pk_name)} INTEGER PRIMARY KEY"


class SQLiteDialect(Dialect):
    """SQLite dialect (`?` parameters, supports `RETURNING`)."""

    name = "sqlite"
    paramstyle = "qmark"
    supports_returning = True

    def auto_pk_sql(self, pk_name: str) -> str:
        return f"{self.q(pk_name)} INTEGER PRIMARY KEY AUTOINCREMENT"


class PostgresDialect(Dialect):
    """PostgreSQL dialect (`$n` native positional parameters)."""

    name = "postgres"
    paramstyle = "numeric"
    supports_returning = True

    def auto_pk_sql(self, pk_name: str) -> str:
        return f"{self.q(pk_name)} SERIAL PRIMARY KEY"
