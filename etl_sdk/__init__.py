"""ETL SDK: buffered database destinations for batch pipelines."""

from __future__ import annotations

from etl_sdk.connectors import ConnectorRegistry, SQLConnector
from etl_sdk.destinations import (
    DatabaseDestination,
    DefaultRowPolicy,
    Destination,
    DestinationConfig,
    IRowPolicy,
    MappingConfig,
    SCDConfig,
)
from etl_sdk.exceptions import ConfigValidationError, ExecutionError
from etl_sdk.runner import DestinationRunner

__all__ = [
    "ConfigValidationError",
    "ConnectorRegistry",
    "DatabaseDestination",
    "DefaultRowPolicy",
    "Destination",
    "DestinationConfig",
    "DestinationRunner",
    "ExecutionError",
    "IRowPolicy",
    "MappingConfig",
    "SCDConfig",
    "SQLConnector",
]
