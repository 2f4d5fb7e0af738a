"""Defines a common set of exceptions which developers can raise and/or catch."""

from __future__ import annotations


class ConfigValidationError(Exception):
    """Raised when a destination or run configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[str] | None = None,
    ) -> None:
        """Initialize a ConfigValidationError.

        Args:
            message: A message describing the error.
            errors: A list of errors which caused the validation error.
        """
        super().__init__(message)
        self.errors = errors or [message]


class ExecutionError(Exception):
    """Raised when a statement or truncate fails against the target database."""

    def __init__(self, message: str, statement: str | None = None) -> None:
        """Extends the default with the failed statement as an attribute.

        Args:
            message: The error message.
            statement: The SQL text that failed, if any.
        """
        super().__init__(message)
        self.statement = statement


class InvalidInputLine(Exception):
    """Raised when an input line is not a JSON object row."""
