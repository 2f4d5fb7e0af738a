"""Logging utilities for the ETL SDK."""

from __future__ import annotations

import logging
import typing as t

DEFAULT_FORMAT = "{asctime:23s} | {levelname:8s} | {name:30s} | {message}"


class ConsoleFormatter(logging.Formatter):
    """Custom formatter for console logging."""

    def __init__(self, **kwargs: t.Any) -> None:
        """Initialize the console formatter."""
        kwargs.setdefault("fmt", DEFAULT_FORMAT)
        kwargs.setdefault("style", "{")
        super().__init__(**kwargs)
