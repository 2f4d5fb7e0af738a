"""Run measurements, logged as ``METRIC: <json>`` lines.

Each destination keeps a :class:`DestinationStats` tally and logs it as one
point per figure when it closes. Flushes and whole runs are timed with
:func:`flush_timer` and :func:`run_timer`.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import typing as t
from dataclasses import dataclass, field
from time import time

from etl_sdk.helpers._util import dump_json

if t.TYPE_CHECKING:
    from collections.abc import Iterator

METRICS_LOGGER_NAME = __name__

logger = logging.getLogger(METRICS_LOGGER_NAME)


class Status(str, enum.Enum):
    """Outcome of a timed operation."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Tag(str, enum.Enum):
    """Dimensions a point can be tagged with."""

    TABLE = "table"
    TARGET = "target"
    STATUS = "status"


class Metric(str, enum.Enum):
    """Measured quantities."""

    ROWS_READ = "rows_read"
    ROWS_WRITTEN = "rows_written"
    ROWS_FILTERED = "rows_filtered"
    BATCH_COUNT = "batch_count"
    FLUSH_DURATION = "flush_duration"
    RUN_DURATION = "run_duration"


@dataclass(frozen=True)
class Point:
    """A single measured value with its tags."""

    metric: Metric
    value: float
    tags: t.Mapping[Tag, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, t.Any]:
        return {
            "metric": self.metric.value,
            "value": self.value,
            "tags": {tag.value: value for tag, value in self.tags.items()},
        }

    def __str__(self) -> str:
        return dump_json(self.to_dict())


def emit(point: Point) -> None:
    """Log a point on the metrics logger.

    Args:
        point: The measurement.
    """
    logger.info("METRIC: %s", point)


@dataclass
class DestinationStats:
    """Row and batch tallies of one destination over its lifetime."""

    table: str
    rows_read: int = 0
    rows_written: int = 0
    rows_filtered: int = 0
    batches: int = 0

    def points(self) -> list[Point]:
        """Return one point per tally, tagged with the table name.

        Returns:
            The points, in a fixed order.
        """
        tags = {Tag.TABLE: self.table}
        return [
            Point(Metric.ROWS_READ, self.rows_read, tags),
            Point(Metric.ROWS_WRITTEN, self.rows_written, tags),
            Point(Metric.ROWS_FILTERED, self.rows_filtered, tags),
            Point(Metric.BATCH_COUNT, self.batches, tags),
        ]

    def log_summary(self) -> None:
        for point in self.points():
            emit(point)


@contextlib.contextmanager
def _timed(metric: Metric, tags: dict[Tag, str]) -> Iterator[None]:
    started = time()
    status = Status.SUCCEEDED
    try:
        yield
    except Exception:
        status = Status.FAILED
        raise
    finally:
        tags[Tag.STATUS] = status.value
        emit(Point(metric, time() - started, tags))


def flush_timer(table: str) -> t.ContextManager[None]:
    """Time one flush of a destination.

    Args:
        table: The destination table name.

    Returns:
        A context manager logging the elapsed seconds and the outcome on exit.
    """
    return _timed(Metric.FLUSH_DURATION, {Tag.TABLE: table})


def run_timer(target: str) -> t.ContextManager[None]:
    """Time a whole destination run.

    Args:
        target: The logical connection target name.

    Returns:
        A context manager logging the elapsed seconds and the outcome on exit.
    """
    return _timed(Metric.RUN_DURATION, {Tag.TARGET: target})
