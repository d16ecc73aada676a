"""EXPLAIN-based intent gate.

Before a statement runs, the engine is asked for its plan and the operation
it reports is compared with the caller's declared intent. The engine's own
classification is the oracle; SQL text is never parsed here.

Engines expose plans in different shapes, so reading the operation out of a
plan row is delegated to a ``PlanInspector``:

- MySQL / MariaDB: ``EXPLAIN <sql>`` with the ``select_type`` column
- PostgreSQL: ``EXPLAIN (FORMAT JSON) <sql>``, root plan node
"""

from __future__ import annotations

from collections.abc import Mapping
import json
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from sqlgate_mcp.errors import PlanCheckError
from sqlgate_mcp.execute.models import (
    MUTATING_OPERATIONS,
    RAW_SQL_OPTIONS,
    StatementIntent,
)

if TYPE_CHECKING:
    from sqlgate_mcp.services.connection import ConnectionProvider

_logger = get_logger(__name__)

PlanRow = Mapping[str, object]

DENIED_UNKNOWN_PLAN = "unable to check query plan, denied"
DENIED_MISMATCH = "query plan does not match expected pattern, denied"


def operation_matches(intent: StatementIntent, operation: str | None) -> bool:
    """Default matching rule between a declared intent and a plan operation.

    INSERT, UPDATE and DELETE must be reported exactly. SELECT plans carry
    many labels (SIMPLE, PRIMARY, SUBQUERY, ...), so a SELECT is accepted
    whenever the operation is not one of the mutating labels.
    """
    if intent is StatementIntent.NONE:
        return True
    if intent is StatementIntent.SELECT:
        return operation not in MUTATING_OPERATIONS
    return operation == intent.value


@runtime_checkable
class PlanInspector(Protocol):
    """Engine-specific plan probe and matching predicate."""

    def explain_sql(self, sql: str) -> str:  # pragma: no cover - protocol
        ...

    def operation(self, row: PlanRow) -> str | None:  # pragma: no cover - protocol
        ...

    def matches(self, intent: StatementIntent, row: PlanRow) -> bool:  # pragma: no cover
        ...


class ColumnPlanInspector:
    """Inspector reading the operation from a named column of the plan row."""

    explain_prefix: str = "EXPLAIN"
    operation_column: str = "select_type"

    def explain_sql(self, sql: str) -> str:
        return f"{self.explain_prefix} {sql}"

    def column_value(self, row: PlanRow) -> object:
        """Return the operation column's raw value, matching names case-insensitively."""
        wanted = self.operation_column.lower()
        for key, value in row.items():
            if key.lower() == wanted:
                return value
        return None

    def operation(self, row: PlanRow) -> str | None:
        value = self.column_value(row)
        if isinstance(value, bytes | bytearray):
            return bytes(value).decode("utf-8", errors="replace")
        return None if value is None else str(value)

    def matches(self, intent: StatementIntent, row: PlanRow) -> bool:
        return operation_matches(intent, self.operation(row))


class SelectTypePlanInspector(ColumnPlanInspector):
    """MySQL / MariaDB tabular EXPLAIN output (``select_type`` column)."""


class PostgresPlanInspector(ColumnPlanInspector):
    """PostgreSQL JSON plans.

    ``EXPLAIN (FORMAT JSON)`` yields a single row whose only column holds the
    plan tree. Writes appear as a ``ModifyTable`` root with an ``Operation``
    of Insert, Update or Delete; any other root node is reported by its
    ``Node Type``.
    """

    explain_prefix = "EXPLAIN (FORMAT JSON)"
    operation_column = "QUERY PLAN"

    def operation(self, row: PlanRow) -> str | None:
        plan_doc = self.column_value(row)
        if plan_doc is None and len(row) == 1:
            plan_doc = next(iter(row.values()))
        if isinstance(plan_doc, str | bytes):
            try:
                plan_doc = json.loads(plan_doc)
            except ValueError:
                return None
        try:
            root = plan_doc[0]["Plan"]  # type: ignore[index]
        except (LookupError, TypeError):
            return None
        if not isinstance(root, dict):
            return None
        if root.get("Node Type") == "ModifyTable":
            op = root.get("Operation")
            return str(op).upper() if op is not None else None
        node = root.get("Node Type")
        return None if node is None else str(node)


_INSPECTORS: dict[str, type[ColumnPlanInspector]] = {
    "mysql": SelectTypePlanInspector,
    "mariadb": SelectTypePlanInspector,
    "postgresql": PostgresPlanInspector,
}


def inspector_for_dialect(dialect_name: str) -> PlanInspector | None:
    """Return the inspector for a SQLAlchemy dialect name, if one exists."""
    cls = _INSPECTORS.get(dialect_name.lower())
    return cls() if cls is not None else None


class PlanGuard:
    """Deny statements whose plan contradicts the declared intent."""

    def __init__(
        self,
        provider: ConnectionProvider,
        inspector: PlanInspector | None = None,
        *,
        enabled: bool = False,
    ) -> None:
        self._provider = provider
        self._inspector = inspector
        self.enabled = enabled

    def check(self, sql: str, intent: StatementIntent) -> None:
        """Probe the plan of ``sql`` and compare it with ``intent``.

        Raises:
            PlanCheckError: If the probe fails, the plan does not have exactly
                one row, or its operation does not match ``intent``.
            DatabaseConnectionError: If the database cannot be reached.
        """
        if not self.enabled or not intent.is_checked:
            return

        engine = self._provider.acquire()
        inspector = self._resolve_inspector(engine)
        rows = self._probe(engine, inspector.explain_sql(sql))

        if len(rows) != 1:
            _logger.warning("Plan check denied: %d plan rows for %s", len(rows), intent.name)
            raise PlanCheckError(DENIED_UNKNOWN_PLAN)

        if not inspector.matches(intent, rows[0]):
            _logger.warning(
                "Plan check denied: declared %s, plan reports %r",
                intent.name,
                inspector.operation(rows[0]),
            )
            raise PlanCheckError(DENIED_MISMATCH)

        _logger.debug("Plan check passed for %s", intent.name)

    # ---- internal ------------------------------------------------------------

    def _resolve_inspector(self, engine: sa.Engine) -> PlanInspector:
        if self._inspector is None:
            inspector = inspector_for_dialect(engine.dialect.name)
            if inspector is None:
                msg = (
                    f"query plan checks are not supported for dialect "
                    f"'{engine.dialect.name}', denied"
                )
                raise PlanCheckError(msg)
            self._inspector = inspector
        return self._inspector

    @staticmethod
    def _probe(engine: sa.Engine, explain: str) -> list[PlanRow]:
        _logger.debug("Plan probe: %s", explain)
        try:
            with engine.connect() as conn:
                result = conn.exec_driver_sql(explain, execution_options=RAW_SQL_OPTIONS)
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            _logger.warning("Plan probe failed: %s", exc)
            msg = f"unable to check query plan: {exc}"
            raise PlanCheckError(msg) from exc
