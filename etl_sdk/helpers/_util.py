"""JSON and clock helpers shared across the package."""

from __future__ import annotations

import datetime
import decimal
import typing as t
from pathlib import Path

import simplejson

from etl_sdk.exceptions import ConfigValidationError

if t.TYPE_CHECKING:
    import os

_COMPACT_SEPARATORS = (",", ":")


def dump_json(obj: t.Any) -> str:  # noqa: ANN401
    """Serialize to compact JSON; decimals stay exact, other types become strings."""
    return simplejson.dumps(
        obj,
        use_decimal=True,
        separators=_COMPACT_SEPARATORS,
        default=str,
    )


def load_json(text: str) -> t.Any:  # noqa: ANN401
    """Parse JSON, reading fractional numbers as :class:`decimal.Decimal`."""
    return simplejson.loads(text, parse_float=decimal.Decimal)


def read_json_file(path: str | os.PathLike[str]) -> dict[str, t.Any]:
    """Read a JSON configuration document.

    Args:
        path: The file to read.

    Returns:
        The top-level object of the document.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the file is not a JSON object.
    """
    config_path = Path(path)
    if not config_path.is_file():
        msg = f"Config file not found: '{config_path}'"
        raise FileNotFoundError(msg)

    try:
        document = load_json(config_path.read_text(encoding="utf-8"))
    except simplejson.JSONDecodeError as exc:
        msg = f"Config file '{config_path}' is not valid JSON: {exc}"
        raise ConfigValidationError(msg) from exc

    if not isinstance(document, dict):
        msg = f"Config file '{config_path}' must contain a JSON object"
        raise ConfigValidationError(msg)
    return document


def utc_now() -> datetime.datetime:
    """Return the current time, timezone-aware in UTC."""
    return datetime.datetime.now(datetime.timezone.utc)
