"""Core value types for statement execution.

Defines the declared statement intent, the result cell variant and the
query result container shared by the executors and the CSV encoder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, TypeAlias

Cell: TypeAlias = int | float | bool | str | None
ResultRow: TypeAlias = dict[str, Cell]


class StatementIntent(Enum):
    """Caller-declared classification of a SQL statement.

    ``NONE`` disables the plan check; the other members carry the operation
    label an engine reports for that statement kind.
    """

    NONE = ""
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @property
    def is_checked(self) -> bool:
        return self is not StatementIntent.NONE


MUTATING_OPERATIONS: Final[frozenset[str]] = frozenset(
    {
        StatementIntent.INSERT.value,
        StatementIntent.UPDATE.value,
        StatementIntent.DELETE.value,
    }
)

# Execution options for caller-supplied SQL: the driver receives no parameter
# collection, so pyformat drivers leave `%` alone.
RAW_SQL_OPTIONS: Final[dict[str, object]] = {"no_parameters": True}


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Rows and engine-reported column order of a read query."""

    rows: list[ResultRow] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)


def normalize_cell(value: object) -> Cell:
    """Coerce a driver value into the ``Cell`` variant.

    Binary values are decoded as UTF-8 text. Scalars already in the variant
    pass through unchanged; anything else (Decimal, datetime, UUID, ...) is
    rendered with ``str``.
    """
    if value is None or isinstance(value, bool | int | float | str):
        return value
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def format_cell(value: Cell) -> str:
    """Render a cell for CSV output."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
