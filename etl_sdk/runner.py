"""Run a database destination over a stream of JSON-lines rows."""

from __future__ import annotations

import logging
import sys
import typing as t
from types import MappingProxyType

from etl_sdk import metrics
from etl_sdk.configuration import (
    RUN_CONFIG_JSONSCHEMA,
    merge_config_sources,
    validate_config,
)
from etl_sdk.connectors import ConnectorRegistry
from etl_sdk.destinations import DatabaseDestination, DestinationConfig, MappingConfig
from etl_sdk.exceptions import InvalidInputLine
from etl_sdk.helpers._util import load_json

if t.TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from etl_sdk.destinations.protocols import IRowPolicy


class DestinationRunner:
    """Wires a run configuration into a destination and feeds it rows.

    The run configuration carries ``connections``, ``destination``, and the
    optional ``mapping`` and ``source`` sections.
    """

    def __init__(
        self,
        config: dict[str, t.Any],
        *,
        validate: bool = True,
        registry: ConnectorRegistry | None = None,
        policy: IRowPolicy | None = None,
    ) -> None:
        """Initialize the runner and build its destination.

        Args:
            config: The run configuration.
            validate: Validate ``config`` against the run configuration schema.
            registry: Connector registry to use instead of building one from the
                ``connections`` section.
            policy: Row policy to hand to the destination.

        Raises:
            ConfigValidationError: If the configuration is invalid.
        """
        if validate:
            validate_config(config, RUN_CONFIG_JSONSCHEMA)

        self._config = dict(config)
        self.logger = logging.getLogger("etl_sdk.runner")
        self.registry = registry or ConnectorRegistry(config.get("connections"))
        self.destination = DatabaseDestination(
            DestinationConfig.from_dict(config["destination"]),
            MappingConfig.from_dict(config.get("mapping")),
            registry=self.registry,
            policy=policy,
            source_definition=(config.get("source") or {}).get("fields"),
        )

    @classmethod
    def from_config_sources(
        cls,
        inputs: Iterable[str],
        **kwargs: t.Any,
    ) -> DestinationRunner:
        """Build a runner from config files and/or the environment.

        Args:
            inputs: Config file paths, or ``ENV`` to read environment variables.
            kwargs: Passed through to the constructor.

        Returns:
            A runner.
        """
        config = merge_config_sources(inputs, RUN_CONFIG_JSONSCHEMA)
        return cls(config, **kwargs)

    @property
    def config(self) -> t.Mapping[str, t.Any]:
        """Get the run configuration.

        Returns:
            A frozen (read-only) config dictionary map.
        """
        return MappingProxyType(self._config)

    @staticmethod
    def iter_rows(lines: Iterable[str]) -> Iterator[dict]:
        """Parse JSON-lines input into rows, skipping blank lines.

        Args:
            lines: The input lines.

        Yields:
            One row per non-blank line.

        Raises:
            InvalidInputLine: If a line is not a JSON object.
        """
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                row = load_json(line)
            except ValueError as exc:
                msg = f"Unable to parse line {line_number}: {line!r}"
                raise InvalidInputLine(msg) from exc
            if not isinstance(row, dict):
                msg = f"Line {line_number} is not a JSON object: {line!r}"
                raise InvalidInputLine(msg)
            yield row

    def run(self, file_input: t.IO[str] | None = None) -> int:
        """Load every input row and close the destination.

        Args:
            file_input: The input stream; standard input when omitted.

        Returns:
            The number of rows written.
        """
        stream = file_input or sys.stdin
        destination = self.destination
        self.logger.info(
            "Loading rows into table '%s' of target '%s'",
            destination.config.table,
            destination.config.target,
        )
        with metrics.run_timer(destination.config.target):
            try:
                destination.extend(self.iter_rows(stream))
                destination.close()
            finally:
                self.registry.dispose()

        return destination.records_written
