from __future__ import annotations

import datetime

import pytest

from etl_sdk.connectors import SQLConnector
from etl_sdk.exceptions import ConfigValidationError, ExecutionError


@pytest.fixture
def connector(db_url: str):
    connector = SQLConnector(config={"sqlalchemy_url": db_url})
    yield connector
    connector.dispose()


def test_missing_url():
    connector = SQLConnector(config={})
    with pytest.raises(ConfigValidationError, match="sqlalchemy_url"):
        _ = connector.sqlalchemy_url


def test_explicit_url_wins(db_url: str):
    connector = SQLConnector(config={}, sqlalchemy_url=db_url)
    assert connector.sqlalchemy_url == db_url


@pytest.mark.parametrize(
    ("table_name", "schema_name", "db_name", "expected"),
    [
        pytest.param("tbl", None, None, "tbl", id="table"),
        pytest.param("tbl", "sch", None, "sch.tbl", id="schema"),
        pytest.param("tbl", "sch", "db", "db.sch.tbl", id="database"),
    ],
)
def test_fully_qualified_name(table_name, schema_name, db_name, expected):
    assert (
        SQLConnector.get_fully_qualified_name(table_name, schema_name, db_name)
        == expected
    )


def test_fully_qualified_name_empty():
    with pytest.raises(ValueError, match="Could not generate fully qualified name"):
        SQLConnector.get_fully_qualified_name()


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        pytest.param({}, "people", id="default"),
        pytest.param({"use_temp_tables": True}, "people_tmp", id="temp"),
    ],
)
def test_resolve_table_name(config, expected):
    assert SQLConnector(config=config).resolve_table_name("people") == expected


def test_quote_identifier(connector: SQLConnector):
    assert connector.quote_identifier("people") == "people"
    assert connector.quote_identifier("table") == '"table"'
    assert connector.quote_identifier("Mixed Case") == '"Mixed Case"'
    assert connector.quote("main.order") == 'main."order"'


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        pytest.param(None, "NULL", id="none"),
        pytest.param(1, "1", id="int"),
        pytest.param("a", "'a'", id="str"),
        pytest.param("o'neil", "'o''neil'", id="quote"),
        pytest.param(datetime.date(2024, 1, 2), "'2024-01-02'", id="date"),
        pytest.param(
            datetime.datetime(2024, 1, 2, 3, 4, 5),  # noqa: DTZ001
            "'2024-01-02 03:04:05'",
            id="datetime",
        ),
    ],
)
def test_quote_value(connector: SQLConnector, value, expected):
    assert connector.quote_value(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        pytest.param([1, 2], id="list"),
        pytest.param({"a": 1}, id="dict"),
    ],
)
def test_quote_value_rejects_non_scalars(connector: SQLConnector, value):
    with pytest.raises(ExecutionError, match="non-scalar"):
        connector.quote_value(value)


def test_quote_value_unrenderable(connector: SQLConnector):
    with pytest.raises(ExecutionError, match="Cannot render value"):
        connector.quote_value(object())


def test_truncate_statement(connector: SQLConnector):
    assert connector.get_truncate_statement("people") == "DELETE FROM people"


def test_execute_and_truncate(connector: SQLConnector, people_table, fetch_rows):
    connector.execute_in_transaction(
        f"INSERT INTO {people_table} (id,name) VALUES (1,'a')",
    )
    assert fetch_rows(people_table) == [(1, "a")]

    connector.truncate(people_table)
    assert fetch_rows(people_table) == []


def test_execute_failure(connector: SQLConnector):
    statement = "INSERT INTO missing (id) VALUES (1)"
    with pytest.raises(ExecutionError) as exc_info:
        connector.execute_in_transaction(statement)

    assert exc_info.value.statement == statement


def test_truncate_failure(connector: SQLConnector):
    with pytest.raises(ExecutionError, match="Could not truncate table 'missing'"):
        connector.truncate("missing")


def test_connection_is_reused(connector: SQLConnector):
    assert connector.connection is connector.connection

    connector.dispose()
    assert connector._connection is None
    assert connector._engine is None
