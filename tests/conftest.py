"""Top level test fixtures."""

from __future__ import annotations

import typing as t

import pytest
import sqlalchemy as sa

from etl_sdk.connectors import ConnectorRegistry

if t.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _reset_envvars(monkeypatch: pytest.MonkeyPatch):
    """Remove envvars that might interfere with tests."""
    monkeypatch.delenv("ETL_SDK_LOG_CONFIG", raising=False)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'warehouse.db'}"


@pytest.fixture
def engine(db_url: str) -> t.Generator[sa.engine.Engine, None, None]:
    engine = sa.create_engine(db_url)
    yield engine
    engine.dispose()


@pytest.fixture
def people_table(engine: sa.engine.Engine) -> str:
    """Create an empty ``people`` table."""
    with engine.begin() as conn:
        conn.exec_driver_sql("CREATE TABLE people (id INTEGER, name TEXT)")
    return "people"


@pytest.fixture
def registry(db_url: str) -> t.Generator[ConnectorRegistry, None, None]:
    registry = ConnectorRegistry({"warehouse": {"sqlalchemy_url": db_url}})
    yield registry
    registry.dispose()


@pytest.fixture
def fetch_rows(engine: sa.engine.Engine) -> t.Callable[..., list[tuple]]:
    """Return a helper which reads every row of a table, in insertion order."""

    def _fetch(table: str, columns: str = "id, name") -> list[tuple]:
        with engine.connect() as conn:
            result = conn.exec_driver_sql(
                f"SELECT {columns} FROM {table} ORDER BY rowid",  # noqa: S608
            )
            return [tuple(row) for row in result]

    return _fetch
