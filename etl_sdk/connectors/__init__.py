"""Connectors for the target databases of destinations."""

from __future__ import annotations

from etl_sdk.connectors.registry import ConnectorRegistry
from etl_sdk.connectors.sql import SQLConnector

__all__ = ["ConnectorRegistry", "SQLConnector"]
