from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import sqlalchemy as sa
from sqlalchemy import text

from sqlgate_mcp.execute.plan_guard import ColumnPlanInspector
from sqlgate_mcp.services.connection import ConnectionProvider


class CannedPlanInspector(ColumnPlanInspector):
    """Reads plan rows from a table seeded by the test instead of EXPLAIN."""

    def explain_sql(self, sql: str) -> str:
        return "SELECT select_type FROM plan_rows"


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    url = f"sqlite+pysqlite:///{tmp_path / 'test.db'}"
    engine = sa.create_engine(url)
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE items(id INTEGER PRIMARY KEY, name TEXT, price REAL)"))
        conn.execute(
            text(
                "INSERT INTO items(name, price) VALUES ('Alice', 1.5), ('Bob', 2.0), ('Carol', NULL)"
            )
        )
        conn.execute(text("CREATE TABLE plan_rows(select_type TEXT)"))
    engine.dispose()
    return url


@pytest.fixture
def provider(db_url: str) -> Iterator[ConnectionProvider]:
    prov = ConnectionProvider(db_url)
    yield prov
    prov.reset()


@pytest.fixture
def inspector() -> CannedPlanInspector:
    return CannedPlanInspector()


@pytest.fixture
def seed_plan(db_url: str) -> Callable[..., None]:
    """Replace the canned plan with one row per given operation label."""

    def _seed(*operations: str) -> None:
        engine = sa.create_engine(db_url)
        with engine.begin() as conn:
            conn.execute(text("DELETE FROM plan_rows"))
            for op in operations:
                conn.execute(text("INSERT INTO plan_rows(select_type) VALUES (:op)"), {"op": op})
        engine.dispose()

    return _seed


@pytest.fixture
def item_count(db_url: str) -> Callable[[], int]:
    def _count() -> int:
        engine = sa.create_engine(db_url)
        with engine.connect() as conn:
            n = conn.execute(text("SELECT count(*) FROM items")).scalar_one()
        engine.dispose()
        return int(n)

    return _count
