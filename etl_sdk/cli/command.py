"""Custom click command class for destination runs."""

from __future__ import annotations

import logging
import sys
import typing as t

import click

from etl_sdk.exceptions import ConfigValidationError, ExecutionError, InvalidInputLine

__all__ = ["LoaderCommand"]


class LoaderCommand(click.Command):
    """Click command which turns run failures into log lines and exit code 1."""

    def __init__(
        self,
        *args: t.Any,
        logger: logging.Logger,
        **kwargs: t.Any,
    ) -> None:
        """Initialize the command.

        Args:
            *args: Positional `click.Command` arguments.
            logger: A logger instance.
            **kwargs: Keyword `click.Command` arguments.
        """
        super().__init__(*args, **kwargs)
        self.logger = logger

    def invoke(self, ctx: click.Context) -> t.Any:  # noqa: ANN401
        """Invoke the command, capturing warnings and logging them.

        Args:
            ctx: The `click` context.

        Returns:
            The result of the command invocation.
        """
        logging.captureWarnings(capture=True)
        try:
            return super().invoke(ctx)
        except ConfigValidationError as exc:
            for error in exc.errors:
                self.logger.error("Config validation error: %s", error)  # noqa: TRY400
            sys.exit(1)
        except (ExecutionError, InvalidInputLine) as exc:
            self.logger.error("Load failed: %s", exc)  # noqa: TRY400
            sys.exit(1)
