"""Destination classes."""

from __future__ import annotations

from etl_sdk.destinations.config import DestinationConfig, MappingConfig, SCDConfig
from etl_sdk.destinations.core import Destination
from etl_sdk.destinations.database import DatabaseDestination, resolve_column_order
from etl_sdk.destinations.policies import (
    DefaultRowPolicy,
    SCDPolicy,
    SurrogateKeyGenerator,
    UniqueKeyFilter,
    VirtualFieldInjector,
)
from etl_sdk.destinations.protocols import IRowPolicy

__all__ = [
    "DatabaseDestination",
    "DefaultRowPolicy",
    "Destination",
    "DestinationConfig",
    "IRowPolicy",
    "MappingConfig",
    "SCDConfig",
    "SCDPolicy",
    "SurrogateKeyGenerator",
    "UniqueKeyFilter",
    "VirtualFieldInjector",
    "resolve_column_order",
]
