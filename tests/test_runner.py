from __future__ import annotations

from collections.abc import Callable

import pytest
import sqlalchemy as sa
from sqlalchemy import event

from sqlgate_mcp.errors import ExecError, PlanCheckError, QueryError
from sqlgate_mcp.execute.models import StatementIntent
from sqlgate_mcp.execute.plan_guard import ColumnPlanInspector, PlanGuard
from sqlgate_mcp.execute.runner import MutationExecutor, QueryExecutor
from sqlgate_mcp.services.connection import ConnectionProvider


def _executors(
    provider: ConnectionProvider,
    inspector: ColumnPlanInspector | None = None,
    *,
    enabled: bool = False,
) -> tuple[QueryExecutor, MutationExecutor]:
    guard = PlanGuard(provider, inspector, enabled=enabled)
    return QueryExecutor(provider, guard), MutationExecutor(provider, guard)


def test_query_preserves_engine_column_order(provider: ConnectionProvider) -> None:
    queries, _ = _executors(provider)
    result = queries.query("SELECT price, name, id FROM items ORDER BY id")
    assert result.columns == ["price", "name", "id"]
    assert result.rows[0] == {"price": 1.5, "name": "Alice", "id": 1}
    assert result.rows[2]["price"] is None
    assert len(result.rows) == 3


def test_query_decodes_binary_cells(provider: ConnectionProvider) -> None:
    queries, mutations = _executors(provider)
    mutations.execute("CREATE TABLE blobs(id INTEGER PRIMARY KEY, blob BLOB)")
    mutations.execute("INSERT INTO blobs(id, blob) VALUES (1, X'62696e6172792064617461')")

    result = queries.query("SELECT id, blob FROM blobs")
    assert result.columns == ["id", "blob"]
    assert result.rows == [{"id": 1, "blob": "binary data"}]


def test_query_passes_raw_sql_to_driver(provider: ConnectionProvider) -> None:
    queries, _ = _executors(provider)
    result = queries.query("SELECT 'a:b' AS v, ':name' AS w, '100%' AS p")
    assert result.rows == [{"v": "a:b", "w": ":name", "p": "100%"}]


def test_query_with_bound_params(provider: ConnectionProvider) -> None:
    queries, _ = _executors(provider)
    result = queries.query("SELECT name FROM items WHERE id = :id", params={"id": 2})
    assert result.rows == [{"name": "Bob"}]


def test_query_error_is_surfaced(provider: ConnectionProvider) -> None:
    queries, _ = _executors(provider)
    with pytest.raises(QueryError, match="no such table"):
        queries.query("SELECT * FROM missing_table")


def test_query_denied_by_guard(
    provider: ConnectionProvider,
    inspector: ColumnPlanInspector,
    seed_plan: Callable[..., None],
) -> None:
    seed_plan("DELETE")
    queries, _ = _executors(provider, inspector, enabled=True)
    with pytest.raises(PlanCheckError):
        queries.query("SELECT * FROM items", StatementIntent.SELECT)


def test_insert_reports_rows_and_last_id(provider: ConnectionProvider) -> None:
    _, mutations = _executors(provider)
    out = mutations.execute("INSERT INTO items(name) VALUES ('Dave')", StatementIntent.INSERT)
    assert out == "1 rows affected, last insert id: 4"


def test_update_reports_only_row_count(provider: ConnectionProvider) -> None:
    _, mutations = _executors(provider)
    out = mutations.execute(
        "UPDATE items SET price = 3.0 WHERE name IN ('Alice', 'Bob')", StatementIntent.UPDATE
    )
    assert out == "2 rows affected"


def test_delete_commits(provider: ConnectionProvider, item_count: Callable[[], int]) -> None:
    _, mutations = _executors(provider)
    assert mutations.execute("DELETE FROM items WHERE id = 1", StatementIntent.DELETE) == (
        "1 rows affected"
    )
    assert item_count() == 2


def test_ddl_without_row_count_reports_zero(provider: ConnectionProvider) -> None:
    _, mutations = _executors(provider)
    assert mutations.execute("CREATE TABLE extra(id INTEGER)") == "0 rows affected"
    assert mutations.execute("ALTER TABLE extra ADD COLUMN note TEXT") == "0 rows affected"


def test_exec_error_is_surfaced(provider: ConnectionProvider) -> None:
    _, mutations = _executors(provider)
    with pytest.raises(ExecError, match="no such table"):
        mutations.execute("INSERT INTO missing_table VALUES (1)", StatementIntent.INSERT)


def test_mismatched_plan_never_runs_the_statement(
    provider: ConnectionProvider,
    inspector: ColumnPlanInspector,
    seed_plan: Callable[..., None],
    item_count: Callable[[], int],
) -> None:
    seed_plan("DELETE")
    _, mutations = _executors(provider, inspector, enabled=True)
    with pytest.raises(PlanCheckError):
        mutations.execute("DELETE FROM items", StatementIntent.INSERT)
    assert item_count() == 3


def test_matching_plan_runs_the_statement(
    provider: ConnectionProvider,
    inspector: ColumnPlanInspector,
    seed_plan: Callable[..., None],
    item_count: Callable[[], int],
) -> None:
    seed_plan("INSERT")
    _, mutations = _executors(provider, inspector, enabled=True)
    out = mutations.execute("INSERT INTO items(name) VALUES ('Eve')", StatementIntent.INSERT)
    assert out.startswith("1 rows affected, last insert id: ")
    assert item_count() == 4


def _record_no_parameters(engine: sa.Engine) -> list[bool]:
    """Collect the ``no_parameters`` option of every statement sent to the cursor."""
    seen: list[bool] = []

    @event.listens_for(engine, "before_cursor_execute")
    def _record(conn, cursor, statement, parameters, context, executemany) -> None:  # noqa: ANN001
        seen.append(bool(context.execution_options.get("no_parameters")))

    return seen


def test_raw_sql_reaches_cursor_without_parameters(provider: ConnectionProvider) -> None:
    queries, mutations = _executors(provider)
    seen = _record_no_parameters(provider.acquire())

    result = queries.query("SELECT name FROM items WHERE name LIKE 'A%'")
    assert result.rows == [{"name": "Alice"}]
    mutations.execute("UPDATE items SET name = name || '%' WHERE id = 2", StatementIntent.UPDATE)

    assert seen == [True, True]


def test_bound_catalog_params_still_use_parameters(provider: ConnectionProvider) -> None:
    queries, _ = _executors(provider)
    seen = _record_no_parameters(provider.acquire())
    queries.query("SELECT name FROM items WHERE id = :id", params={"id": 1})
    assert seen == [False]


def test_insert_without_generated_key_support_raises(
    provider: ConnectionProvider,
    item_count: Callable[[], int],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # PostgreSQL dialects do not post-fetch lastrowid; the driver value is an OID.
    monkeypatch.setattr(provider.acquire().dialect, "postfetch_lastrowid", False)
    _, mutations = _executors(provider)
    with pytest.raises(ExecError, match="unable to determine the last insert id"):
        mutations.execute("INSERT INTO items(name) VALUES ('Zoe')", StatementIntent.INSERT)
    assert item_count() == 4
