from __future__ import annotations

import logging

import pytest
import time_machine

from etl_sdk import metrics


def _points(caplog: pytest.LogCaptureFixture) -> list[dict]:
    return [
        record.args[0].to_dict()
        for record in caplog.records
        if record.name == metrics.METRICS_LOGGER_NAME
    ]


def test_point_to_dict():
    point = metrics.Point(
        metrics.Metric.ROWS_WRITTEN,
        3,
        {metrics.Tag.TABLE: "people"},
    )

    assert point.to_dict() == {
        "metric": "rows_written",
        "value": 3,
        "tags": {"table": "people"},
    }
    assert str(point) == (
        '{"metric":"rows_written","value":3,"tags":{"table":"people"}}'
    )


def test_destination_summary(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger=metrics.METRICS_LOGGER_NAME)

    stats = metrics.DestinationStats("people")
    stats.rows_read = 5
    stats.rows_written = 4
    stats.rows_filtered = 1
    stats.batches = 2
    stats.log_summary()

    for record in caplog.records:
        assert record.levelname == "INFO"
        assert record.msg.startswith("METRIC")

    assert [(point["metric"], point["value"]) for point in _points(caplog)] == [
        ("rows_read", 5),
        ("rows_written", 4),
        ("rows_filtered", 1),
        ("batch_count", 2),
    ]
    assert all(point["tags"] == {"table": "people"} for point in _points(caplog))


def test_flush_timer(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger=metrics.METRICS_LOGGER_NAME)

    traveler = time_machine.travel(0, tick=False)
    traveler.start()

    with metrics.flush_timer("people"):
        traveler.stop()

        traveler = time_machine.travel(10, tick=False)
        traveler.start()

    traveler.stop()

    (point,) = _points(caplog)
    assert point["metric"] == "flush_duration"
    assert point["tags"] == {"table": "people", "status": "succeeded"}
    assert pytest.approx(point["value"], rel=0.001) == 10.0


def test_run_timer_failure(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger=metrics.METRICS_LOGGER_NAME)

    with pytest.raises(RuntimeError), metrics.run_timer("warehouse"):
        msg = "boom"
        raise RuntimeError(msg)

    (point,) = _points(caplog)
    assert point["metric"] == "run_duration"
    assert point["tags"] == {"target": "warehouse", "status": "failed"}
