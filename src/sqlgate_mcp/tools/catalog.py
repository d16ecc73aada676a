"""Per-dialect catalog statements for the schema tools.

The list/describe/count tools need engine-specific SQL. Table names supplied
by the caller are either bound as parameters or quoted with sqlglot so they
can never splice extra SQL into the statement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from sqlglot import expressions as sgl_exp
from sqlglot.dialects.dialect import Dialect
from sqlglot.errors import SqlglotError

from sqlgate_mcp.errors import CatalogError

SQLALCHEMY_TO_SQLGLOT: Final[dict[str, str]] = {
    "postgresql": "postgres",
    "postgres": "postgres",
    "mysql": "mysql",
    "mariadb": "mysql",
    "sqlite": "sqlite",
}


def map_sqlalchemy_to_sqlglot(sa_dialect_name: str) -> str:
    """Map a SQLAlchemy dialect name to a sqlglot dialect name.

    Raises:
        CatalogError: If the dialect has no catalog support.
    """
    try:
        return SQLALCHEMY_TO_SQLGLOT[sa_dialect_name.lower()]
    except KeyError:
        msg = f"catalog tools are not supported for dialect '{sa_dialect_name}'"
        raise CatalogError(msg) from None


def quote_table_name(name: str, sa_dialect_name: str) -> str:
    """Render a possibly schema-qualified table name for the dialect.

    Unquoted parts stay unquoted so the engine's case folding still applies
    (``Users`` resolves to ``users`` on PostgreSQL); parts the caller quoted
    keep their quotes.

    Raises:
        CatalogError: If ``name`` is not a single plain table reference.
    """
    dialect = map_sqlalchemy_to_sqlglot(sa_dialect_name)
    cleaned = name.strip()
    if not cleaned:
        msg = "table name must not be empty"
        raise CatalogError(msg)
    try:
        parsed = Dialect.get_or_raise(dialect).parse_into(sgl_exp.Table, cleaned)
    except SqlglotError as exc:
        msg = f"invalid table name '{name}': {exc}"
        raise CatalogError(msg) from exc
    if len(parsed) != 1 or not isinstance(parsed[0], sgl_exp.Table):
        msg = f"invalid table name '{name}'"
        raise CatalogError(msg)
    ref = parsed[0]
    this, db, catalog = (ref.args.get(key) for key in ("this", "db", "catalog"))
    if (
        ref.args.get("alias") is not None
        or not isinstance(this, sgl_exp.Identifier)
        or not all(part is None or isinstance(part, sgl_exp.Identifier) for part in (db, catalog))
    ):
        msg = f"invalid table name '{name}'"
        raise CatalogError(msg)
    return sgl_exp.table_(this, db=db, catalog=catalog).sql(dialect=dialect)


def _split_schema(name: str) -> tuple[str | None, str]:
    schema, _, table = name.strip().rpartition(".")
    return (schema or None), table


@dataclass(frozen=True, slots=True)
class CatalogStatement:
    """SQL text with its bound parameters."""

    sql: str
    params: dict[str, object] | None = None


class Catalog:
    """Build catalog statements for one SQLAlchemy dialect."""

    def __init__(self, sa_dialect_name: str) -> None:
        self.dialect = sa_dialect_name.lower()
        map_sqlalchemy_to_sqlglot(self.dialect)

    def list_databases(self) -> CatalogStatement:
        if self.dialect == "postgresql":
            return CatalogStatement(
                "SELECT datname FROM pg_database WHERE datistemplate = false;"
            )
        if self.dialect in {"mysql", "mariadb"}:
            return CatalogStatement("SHOW DATABASES;")
        return CatalogStatement("SELECT name FROM pragma_database_list ORDER BY seq;")

    def list_tables(self) -> CatalogStatement:
        if self.dialect == "sqlite":
            return CatalogStatement(
                "SELECT 'main' AS table_schema, name AS table_name FROM sqlite_master "
                "WHERE type = 'table' ORDER BY name;"
            )
        return CatalogStatement(
            "SELECT table_schema, table_name FROM information_schema.tables "
            "ORDER BY table_schema, table_name;"
        )

    def describe_table(self, name: str) -> CatalogStatement:
        """CREATE TABLE text for ``name``."""
        if self.dialect in {"mysql", "mariadb"}:
            return CatalogStatement(f"SHOW CREATE TABLE {quote_table_name(name, self.dialect)};")
        schema, table = _split_schema(name)
        if self.dialect == "sqlite":
            return CatalogStatement(
                "SELECT sql AS create_table_sql FROM sqlite_master "
                "WHERE type = 'table' AND name = :name;",
                {"name": table},
            )
        return CatalogStatement(_POSTGRES_DESCRIBE, {"name": table, "schema": schema})

    def count_rows(self, name: str) -> CatalogStatement:
        return CatalogStatement(f"SELECT count(1) FROM {quote_table_name(name, self.dialect)};")


_POSTGRES_DESCRIBE: Final[str] = """SELECT
    'CREATE TABLE ' || t.table_name || ' (' ||
    string_agg(
        c.column_name || ' ' || c.data_type ||
        CASE
            WHEN c.character_maximum_length IS NOT NULL
            THEN '(' || c.character_maximum_length || ')'
            ELSE ''
        END ||
        CASE WHEN c.is_nullable = 'NO' THEN ' NOT NULL' ELSE '' END,
        ', ' ORDER BY c.ordinal_position
    ) ||
    COALESCE(', PRIMARY KEY (' || (
        SELECT string_agg(kcu.column_name, ', ' ORDER BY kcu.ordinal_position)
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
            ON kcu.constraint_name = tc.constraint_name
            AND kcu.table_schema = tc.table_schema
        WHERE tc.constraint_type = 'PRIMARY KEY'
            AND tc.table_name = t.table_name
            AND tc.table_schema = t.table_schema
    ) || ')', '') ||
    ');' AS create_table_sql
FROM information_schema.tables t
JOIN information_schema.columns c
    ON t.table_name = c.table_name AND t.table_schema = c.table_schema
WHERE t.table_name = :name
    AND t.table_schema = COALESCE(:schema, current_schema())
GROUP BY t.table_schema, t.table_name;"""
