"""JSON Schema type detection used when parsing configuration from the environment."""

from __future__ import annotations

import typing as t


def _schema_types(property_schema: dict) -> t.Iterator[t.Any]:
    for property_type in property_schema.get("anyOf", [property_schema.get("type")]):
        yield (
            property_type.get("type", [])
            if isinstance(property_type, dict)
            else property_type
        )


def _is_type(property_schema: dict, type_name: str) -> bool | None:
    if "anyOf" not in property_schema and "type" not in property_schema:
        return None  # Could not detect data type
    return any(
        schema_type is not None
        and (type_name in schema_type or schema_type == type_name)
        for schema_type in _schema_types(property_schema)
    )


def is_object_type(property_schema: dict) -> bool | None:
    """Return true if the JSON Schema type is an object or None if detection fails."""
    return _is_type(property_schema, "object")


def is_array_type(property_schema: dict) -> bool | None:
    """Return true if the JSON Schema type is an array or None if detection fails."""
    return _is_type(property_schema, "array")


def is_boolean_type(property_schema: dict) -> bool | None:
    """Return true if the JSON Schema type is a boolean or None if detection fails."""
    return _is_type(property_schema, "boolean")


def is_integer_type(property_schema: dict) -> bool | None:
    """Return true if the JSON Schema type is an integer or None if detection fails."""
    return _is_type(property_schema, "integer")


def is_string_type(property_schema: dict) -> bool | None:
    """Return true if the JSON Schema type is a string or None if detection fails."""
    return _is_type(property_schema, "string")


def is_string_array_type(property_schema: dict) -> bool:
    """Return True if JSON Schema type definition is a string array."""
    if "anyOf" in property_schema:
        return any(is_string_array_type(s) for s in property_schema["anyOf"])

    return bool(is_array_type(property_schema)) and bool(
        is_string_type(property_schema.get("items", {}))
    )
