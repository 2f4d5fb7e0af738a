from __future__ import annotations

import io
import json
import logging
import typing as t

import pytest

from etl_sdk import DestinationRunner
from etl_sdk.exceptions import ConfigValidationError, InvalidInputLine

if t.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def run_config(db_url: str) -> dict[str, t.Any]:
    return {
        "connections": {"warehouse": {"sqlalchemy_url": db_url}},
        "destination": {
            "target": "warehouse",
            "table": "people",
            "unique": ["id"],
            "buffer_size": 2,
            "append_rows": [{"id": 0, "name": "unknown"}],
        },
        "mapping": {"order": ["id", "name"]},
    }


@pytest.mark.usefixtures("people_table")
def test_run(run_config: dict, fetch_rows, caplog: pytest.LogCaptureFixture):
    lines = io.StringIO(
        "\n".join(
            [
                '{"id": 1, "name": "a"}',
                "",
                '{"id": 2, "name": "b"}',
                '{"id": 1, "name": "a again"}',
                '{"id": 3, "name": "c"}',
            ],
        ),
    )
    runner = DestinationRunner(run_config)

    with caplog.at_level(logging.INFO, logger="etl_sdk.metrics"):
        written = runner.run(lines)

    assert written == 4
    assert runner.destination.records_read == 4
    assert fetch_rows("people") == [(1, "a"), (2, "b"), (3, "c"), (0, "unknown")]

    points = [
        record.args[0].to_dict()
        for record in caplog.records
        if record.name == "etl_sdk.metrics"
    ]
    summary = {
        point["metric"]: point["value"]
        for point in points
        if point["metric"] not in {"flush_duration", "run_duration"}
    }
    assert summary == {
        "rows_read": 4,
        "rows_written": 4,
        "rows_filtered": 1,
        "batch_count": 3,
    }
    assert [point["metric"] for point in points].count("flush_duration") == 3
    assert points[-1]["metric"] == "run_duration"


@pytest.mark.usefixtures("people_table")
def test_run_infers_order_from_source(run_config: dict, fetch_rows):
    del run_config["mapping"]
    run_config["source"] = {"fields": [{"name": "id"}, {"name": "name"}]}

    DestinationRunner(run_config).run(io.StringIO('{"id": 7, "name": "x"}\n'))

    assert fetch_rows("people") == [(7, "x"), (0, "unknown")]


def test_invalid_run_config(run_config: dict):
    del run_config["connections"]

    with pytest.raises(ConfigValidationError) as exc_info:
        DestinationRunner(run_config)

    assert exc_info.value.errors == ["'connections' is a required property"]


def test_config_is_read_only(run_config: dict):
    runner = DestinationRunner(run_config)

    with pytest.raises(TypeError):
        runner.config["destination"] = {}  # type: ignore[index]


def test_from_config_sources(run_config: dict, tmp_path: Path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(run_config), encoding="utf-8")

    runner = DestinationRunner.from_config_sources([str(config_path)])

    assert runner.destination.config.table == "people"
    assert runner.destination.order == ("id", "name")


@pytest.mark.parametrize(
    "line",
    [
        pytest.param("{not json", id="malformed"),
        pytest.param("[1, 2]", id="not-an-object"),
    ],
)
def test_iter_rows_invalid_line(line: str):
    with pytest.raises(InvalidInputLine, match="line 2|Line 2"):
        list(DestinationRunner.iter_rows(['{"id": 1}', line]))


def test_iter_rows_preserves_decimals():
    (row,) = DestinationRunner.iter_rows(['{"amount": 1.10}'])
    assert str(row["amount"]) == "1.10"
