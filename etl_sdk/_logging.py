"""Console logging for the ``etl-load`` command."""

from __future__ import annotations

import logging
import logging.config
import os
import typing as t
from pathlib import Path

import yaml

from etl_sdk.logging import ConsoleFormatter

logger = logging.getLogger(__name__)

LOG_CONFIG_ENV_VAR = "ETL_SDK_LOG_CONFIG"


def load_logging_config(path: Path) -> dict[str, t.Any]:
    """Read a ``logging.config.dictConfig`` document from a YAML file."""
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def setup_logging(
    log_level: str = "info",
    *,
    config_path: str | Path | None = None,
) -> None:
    """Send log records to standard error, then apply a YAML override.

    Args:
        log_level: Root log level name, case insensitive.
        config_path: YAML logging configuration applied on top of the console
            handler. Defaults to the file named by ``ETL_SDK_LOG_CONFIG``.
    """
    root = logging.getLogger()
    root.setLevel(log_level.upper())
    console = logging.StreamHandler()
    console.setFormatter(ConsoleFormatter())
    root.addHandler(console)

    config_path = config_path or os.environ.get(LOG_CONFIG_ENV_VAR)
    if not config_path:
        return

    path = Path(config_path)
    if not path.is_file():
        logger.warning("Logging config file not found: %s", path)
        return
    logging.config.dictConfig(load_logging_config(path))
