"""Configuration parsing and validation for destination runs."""

from __future__ import annotations

from etl_sdk.configuration._dict_config import (
    merge_config_sources,
    parse_environment_config,
    validate_config,
)

CONNECTION_CONFIG_JSONSCHEMA = {
    "type": "object",
    "properties": {
        "sqlalchemy_url": {
            "type": "string",
            "description": "SQLAlchemy connection URL for the target database.",
        },
        "use_temp_tables": {
            "type": "boolean",
            "default": False,
            "description": "Write to '<table>_tmp' instead of the logical table name.",
        },
    },
    "required": ["sqlalchemy_url"],
}

SCD_CONFIG_JSONSCHEMA = {
    "type": ["object", "null"],
    "properties": {
        "type": {"enum": [1, 2]},
        "effective_date_field": {"type": "string"},
        "end_date_field": {"type": "string"},
        "latest_version_field": {"type": "string"},
    },
    "additionalProperties": False,
}

DESTINATION_CONFIG_JSONSCHEMA = {
    "type": "object",
    "properties": {
        "target": {"type": "string", "minLength": 1},
        "schema": {"type": ["string", "null"]},
        "table": {"type": "string", "minLength": 1},
        "truncate": {"type": "boolean", "default": False},
        "unique": {"type": ["array", "null"], "items": {"type": "string"}},
        "append_rows": {"type": ["array", "null"], "items": {"type": "object"}},
        "buffer_size": {"type": "integer", "minimum": 1},
        "scd": SCD_CONFIG_JSONSCHEMA,
    },
    "required": ["target", "table"],
}

MAPPING_CONFIG_JSONSCHEMA = {
    "type": "object",
    "properties": {
        "order": {"type": ["array", "null"], "items": {"type": "string"}},
        "virtual": {"type": "object"},
    },
}

SOURCE_CONFIG_JSONSCHEMA = {
    "type": "object",
    "properties": {
        "fields": {
            "type": "array",
            "items": {
                "anyOf": [
                    {"type": "string"},
                    {
                        "type": "object",
                        "properties": {"name": {"type": "string"}},
                        "required": ["name"],
                    },
                ],
            },
        },
    },
}

RUN_CONFIG_JSONSCHEMA = {
    "type": "object",
    "properties": {
        "connections": {
            "type": "object",
            "additionalProperties": CONNECTION_CONFIG_JSONSCHEMA,
        },
        "destination": DESTINATION_CONFIG_JSONSCHEMA,
        "mapping": MAPPING_CONFIG_JSONSCHEMA,
        "source": SOURCE_CONFIG_JSONSCHEMA,
    },
    "required": ["connections", "destination"],
}

__all__ = [
    "CONNECTION_CONFIG_JSONSCHEMA",
    "DESTINATION_CONFIG_JSONSCHEMA",
    "MAPPING_CONFIG_JSONSCHEMA",
    "RUN_CONFIG_JSONSCHEMA",
    "SOURCE_CONFIG_JSONSCHEMA",
    "merge_config_sources",
    "parse_environment_config",
    "validate_config",
]
