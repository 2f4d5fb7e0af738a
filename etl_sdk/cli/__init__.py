"""Command line entry point: ``etl-load``."""

from __future__ import annotations

import logging
import typing as t

import click

from etl_sdk._logging import setup_logging
from etl_sdk.cli import common_options
from etl_sdk.cli.command import LoaderCommand
from etl_sdk.exceptions import ConfigValidationError
from etl_sdk.runner import DestinationRunner

logger = logging.getLogger("etl_sdk.cli")


@click.command(
    "etl-load",
    cls=LoaderCommand,
    logger=logger,
    help="Load JSON-lines rows into a database table.",
    context_settings={"help_option_names": ["--help"]},
)
@click.version_option(package_name="etl-sdk")
@common_options.PLUGIN_CONFIG
@common_options.PLUGIN_FILE_INPUT
@common_options.PLUGIN_LOG_LEVEL
def cli(
    config: tuple[str, ...] = (),
    file_input: t.IO[str] | None = None,
    log_level: str = "info",
) -> None:
    """Run a database destination."""
    setup_logging(log_level)
    if not config:
        msg = "At least one --config is required"
        raise ConfigValidationError(msg)

    try:
        runner = DestinationRunner.from_config_sources(config)
    except FileNotFoundError as exc:
        raise ConfigValidationError(str(exc)) from exc

    written = runner.run(file_input)
    logger.info("Done, %d rows written", written)


__all__ = ["cli"]
