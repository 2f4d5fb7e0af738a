"""Destination classes persist transformed rows."""

from __future__ import annotations

import abc
import logging
import typing as t

from etl_sdk import metrics
from etl_sdk.destinations.config import MappingConfig
from etl_sdk.destinations.policies import DefaultRowPolicy

if t.TYPE_CHECKING:
    from etl_sdk.destinations.config import DestinationConfig
    from etl_sdk.destinations.policies import SourceDefinition
    from etl_sdk.destinations.protocols import IRowPolicy


class Destination(metaclass=abc.ABCMeta):
    """Abstract base class for buffered destinations.

    Rows are appended to an in-memory buffer and written by :meth:`flush`,
    either explicitly, automatically when the buffer is full, or by
    :meth:`close` at the end of a run.
    """

    logger: logging.Logger

    def __init__(
        self,
        config: DestinationConfig,
        mapping: MappingConfig | None = None,
        *,
        policy: IRowPolicy | None = None,
        source_definition: SourceDefinition | None = None,
    ) -> None:
        """Initialize the destination.

        Args:
            config: The destination settings.
            mapping: The mapping settings.
            policy: Admission, augmentation and order-inference hooks. Defaults
                to a :class:`DefaultRowPolicy` built from ``config`` and
                ``mapping``.
            source_definition: The upstream source's field definitions, used
                by the default policy to infer the column order.
        """
        self.config = config
        self.mapping = mapping or MappingConfig()
        self.policy: IRowPolicy = policy or DefaultRowPolicy.from_config(
            config,
            self.mapping,
            source_definition,
        )
        self.logger = logging.getLogger(f"etl_sdk.destinations.{config.table}")
        self.buffer: list[dict] = []
        self.stats = metrics.DestinationStats(config.table)

    # Size properties

    @property
    def current_size(self) -> int:
        """Get current buffer size.

        Returns:
            The number of buffered rows.
        """
        return len(self.buffer)

    @property
    def max_size(self) -> int:
        """Get max buffer size.

        Returns:
            Max number of rows to buffer before `is_full=True`.
        """
        return self.config.buffer_size

    @property
    def is_full(self) -> bool:
        """Check against the buffer size limit.

        Returns:
            True if the destination needs to be flushed.
        """
        return self.current_size >= self.max_size

    # Tally methods

    @t.final
    def tally_record_read(self, count: int = 1) -> None:
        """Increment the rows read tally.

        Args:
            count: Number to increase row count by.
        """
        self.stats.rows_read += count

    @t.final
    def tally_record_written(self, count: int = 1) -> None:
        """Increment the rows written tally.

        Args:
            count: Number to increase row count by.
        """
        self.stats.rows_written += count

    @t.final
    def tally_record_filtered(self, count: int = 1) -> None:
        """Increment the rows rejected by the row policy tally.

        Args:
            count: Number to increase row count by.
        """
        self.stats.rows_filtered += count

    @t.final
    def tally_batch_written(self) -> None:
        """Increment the statements executed tally."""
        self.stats.batches += 1

    @property
    def records_read(self) -> int:
        return self.stats.rows_read

    @property
    def records_written(self) -> int:
        return self.stats.rows_written

    # Row intake

    def append(self, row: dict) -> None:
        """Buffer an upstream row, flushing when the buffer is full.

        Args:
            row: The row to buffer.
        """
        self.buffer.append(row)
        self.tally_record_read()
        if self.is_full:
            self.logger.debug(
                "Buffer reached %d rows, flushing",
                self.current_size,
            )
            self.flush()

    def extend(self, rows: t.Iterable[dict]) -> None:
        """Buffer several upstream rows.

        Args:
            rows: The rows to buffer.
        """
        for row in rows:
            self.append(row)

    @abc.abstractmethod
    def flush(self) -> None:
        """Write all currently buffered rows."""

    def close(self) -> None:
        """Append the configured literal rows and flush one last time.

        This method is meant to be called exactly once per run: the literal
        rows are appended again on every call.
        """
        if self.config.append_rows:
            self.logger.debug(
                "Appending %d literal rows before close",
                len(self.config.append_rows),
            )
            self.buffer.extend(dict(row) for row in self.config.append_rows)
        try:
            self.flush()
        finally:
            self.stats.log_summary()
        self.logger.info(
            "Closed destination for table '%s' (%d rows read, %d rows written)",
            self.config.table,
            self.records_read,
            self.records_written,
        )
