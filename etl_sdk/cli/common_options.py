"""Common CLI options for destination runs."""

from __future__ import annotations

import typing as t

import click

PLUGIN_CONFIG: t.Callable[..., t.Any] = click.option(
    "--config",
    multiple=True,
    help="Configuration file location or 'ENV' to use environment variables.",
    type=click.STRING,
    default=(),
)

PLUGIN_FILE_INPUT: t.Callable[..., t.Any] = click.option(
    "--input",
    "file_input",
    help="A path to read JSON-lines rows from instead of from standard in.",
    type=click.File("r"),
)

PLUGIN_LOG_LEVEL: t.Callable[..., t.Any] = click.option(
    "--log-level",
    help="Root log level.",
    type=click.Choice(
        ["debug", "info", "warning", "error", "critical"],
        case_sensitive=False,
    ),
    default="info",
    show_default=True,
)
