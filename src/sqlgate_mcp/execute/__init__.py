"""Statement execution package: EXPLAIN gate, executors and CSV encoding."""

from __future__ import annotations

from .models import Cell, QueryResult, ResultRow, StatementIntent
from .plan_guard import (
    PlanGuard,
    PlanInspector,
    PostgresPlanInspector,
    SelectTypePlanInspector,
    inspector_for_dialect,
)
from .runner import MutationExecutor, QueryExecutor
from .tabular import encode_csv

__all__ = [
    "Cell",
    "MutationExecutor",
    "PlanGuard",
    "PlanInspector",
    "PostgresPlanInspector",
    "QueryExecutor",
    "QueryResult",
    "ResultRow",
    "SelectTypePlanInspector",
    "StatementIntent",
    "encode_csv",
    "inspector_for_dialect",
]
