"""Lookup of connectors by logical target name."""

from __future__ import annotations

import logging
import typing as t

from etl_sdk.connectors.sql import SQLConnector
from etl_sdk.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """Hands out one connector per logical target for the lifetime of a run.

    Connectors are created on first request and cached, so every destination
    writing to the same target shares a single underlying connection.
    """

    connector_class: type[SQLConnector] = SQLConnector

    def __init__(self, connections: t.Mapping[str, dict] | None = None) -> None:
        """Initialize the registry.

        Args:
            connections: Connection settings keyed by target name.
        """
        self._connections = {
            name: dict(cfg) for name, cfg in (connections or {}).items()
        }
        self._connectors: dict[str, SQLConnector] = {}

    @property
    def targets(self) -> list[str]:
        """Names of the configured targets."""
        return list(self._connections)

    def register(self, target: str, connector: SQLConnector) -> None:
        """Register an already built connector under a target name.

        Args:
            target: The logical target name.
            connector: The connector to hand out for this target.
        """
        self._connectors[target] = connector

    def get(self, target: str) -> SQLConnector:
        """Return the connector for a target, creating it on first use.

        Args:
            target: The logical target name.

        Returns:
            The connector.

        Raises:
            ConfigValidationError: If the target is not configured.
        """
        if target not in self._connectors:
            if target not in self._connections:
                msg = f"No connection configured for target '{target}'"
                raise ConfigValidationError(msg)
            logger.debug("Creating connector for target '%s'", target)
            self._connectors[target] = self.connector_class(
                config=self._connections[target],
            )
        return self._connectors[target]

    def __contains__(self, target: object) -> bool:
        return target in self._connectors or target in self._connections

    def dispose(self) -> None:
        """Close every connector handed out by this registry."""
        for connector in self._connectors.values():
            connector.dispose()
        self._connectors.clear()
