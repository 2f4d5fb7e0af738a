"""SQLAlchemy-based connection capability used by database destinations."""

from __future__ import annotations

import datetime
import logging
import typing as t
from collections.abc import Mapping

import sqlalchemy as sa

from etl_sdk.exceptions import ConfigValidationError, ExecutionError

# Dialects without a TRUNCATE statement; emptied with DELETE instead.
_NO_TRUNCATE_DIALECTS = frozenset({"sqlite"})


class SQLConnector:
    """Base class for SQLAlchemy-based connectors.

    The connector class serves as a wrapper around the SQL connection.

    The functions of the connector are:
    - connecting to the target database, lazily and once
    - dialect-specific quoting of identifiers and literal values
    - resolving logical table names to physical ones
    - truncating tables and executing statements inside a transaction
    """

    temp_table_suffix: str = "_tmp"

    def __init__(
        self,
        config: dict | None = None,
        sqlalchemy_url: str | None = None,
    ) -> None:
        """Initialize the SQL connector.

        Args:
            config: The connection settings for one target.
            sqlalchemy_url: Optional URL for the connection.
        """
        self._config: dict[str, t.Any] = config or {}
        self._sqlalchemy_url: str | None = sqlalchemy_url or None
        self._engine: sa.engine.Engine | None = None
        self._connection: sa.engine.Connection | None = None

    @property
    def config(self) -> dict:
        """The connection settings.

        Returns:
            The settings as a dict.
        """
        return self._config

    @property
    def logger(self) -> logging.Logger:
        """Get logger.

        Returns:
            Connector logger.
        """
        return logging.getLogger("etl_sdk.connectors.sql")

    @property
    def sqlalchemy_url(self) -> str:
        """Return the SQLAlchemy URL string.

        Returns:
            The URL as a string.
        """
        if not self._sqlalchemy_url:
            self._sqlalchemy_url = self.get_sqlalchemy_url(self.config)

        return self._sqlalchemy_url

    def get_sqlalchemy_url(self, config: dict[str, t.Any]) -> str:
        """Return the SQLAlchemy URL string.

        Args:
            config: A dictionary of connection settings.

        Returns:
            The URL as a string.

        Raises:
            ConfigValidationError: If no valid sqlalchemy_url can be found.
        """
        if "sqlalchemy_url" not in config:
            msg = "Could not find or create 'sqlalchemy_url' for connection."
            raise ConfigValidationError(msg)

        return t.cast("str", config["sqlalchemy_url"])

    def create_engine(self) -> sa.engine.Engine:
        """Return a new SQLAlchemy engine using the provided config.

        Returns:
            A newly created SQLAlchemy engine object.
        """
        return sa.create_engine(self.sqlalchemy_url, echo=False)

    @property
    def engine(self) -> sa.engine.Engine:
        """Return the SQLAlchemy engine, creating it on first use.

        Returns:
            The engine object.
        """
        if self._engine is None:
            self._engine = self.create_engine()
        return self._engine

    @property
    def connection(self) -> sa.engine.Connection:
        """Return the SQLAlchemy connection, opening it on first use.

        The same connection is reused for every statement and truncate issued
        through this connector.

        Returns:
            The active SQLAlchemy connection object.
        """
        if self._connection is None:
            self.logger.debug("Opening connection to %s", self.engine.url)
            self._connection = self.engine.connect()

        return self._connection

    @property
    def _dialect(self) -> sa.engine.Dialect:
        return self.engine.dialect

    def dispose(self) -> None:
        """Close the connection and release pooled resources."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # Naming and quoting

    @staticmethod
    def get_fully_qualified_name(
        table_name: str | None = None,
        schema_name: str | None = None,
        db_name: str | None = None,
        delimiter: str = ".",
    ) -> str:
        """Concatenates a fully qualified name from the parts.

        Args:
            table_name: The name of the table.
            schema_name: The name of the schema. Defaults to None.
            db_name: The name of the database. Defaults to None.
            delimiter: Generally: '.' for SQL names.

        Raises:
            ValueError: If no name part is supplied.

        Returns:
            The fully qualified name as a string.
        """
        parts = [part for part in (db_name, schema_name, table_name) if part]

        if not parts:
            msg = (
                "Could not generate fully qualified name: "
                + ":".join(
                    [
                        db_name or "(unknown-db)",
                        schema_name or "(unknown-schema)",
                        table_name or "(unknown-table-name)",
                    ],
                )
            )
            raise ValueError(msg)

        return delimiter.join(parts)

    def resolve_table_name(self, logical_name: str) -> str:
        """Map a logical table name to the physical table to write.

        Args:
            logical_name: The table name as configured on the destination.

        Returns:
            The physical table name.
        """
        if self.config.get("use_temp_tables"):
            return f"{logical_name}{self.temp_table_suffix}"
        return logical_name

    def quote_identifier(self, name: str) -> str:
        """Quote a single identifier if the dialect requires it.

        Examples:
          "my_table" => "my_table"
          "table"    => "\"table\""

        Args:
            name: The unquoted name.

        Returns:
            The quoted name.
        """
        return self._dialect.identifier_preparer.quote(name)

    def quote(self, name: str) -> str:
        """Quote a name if it needs quoting, using '.' as a name-part delimiter.

        Args:
            name: The unquoted name.

        Returns:
            The quoted name.
        """
        return ".".join(self.quote_identifier(part) for part in name.split("."))

    def quote_value(self, value: t.Any) -> str:  # noqa: ANN401
        """Render a Python scalar as an escaped SQL literal.

        ``None`` renders as the bare ``NULL`` keyword. Date and time values are
        rendered as quoted ISO 8601 strings, everything else goes through the
        dialect's literal processors.

        Args:
            value: The value to render.

        Returns:
            The SQL literal text.

        Raises:
            ExecutionError: If the value is not a scalar the dialect can render.
        """
        if value is None:
            return "NULL"
        if isinstance(value, (Mapping, list, tuple, set)):
            msg = f"Cannot render non-scalar value as a SQL literal: {value!r}"
            raise ExecutionError(msg)
        if isinstance(value, datetime.datetime):
            value = value.isoformat(sep=" ")
        elif isinstance(value, (datetime.date, datetime.time)):
            value = value.isoformat()
        try:
            return str(
                sa.literal(value).compile(
                    dialect=self._dialect,
                    compile_kwargs={"literal_binds": True},
                ),
            )
        except sa.exc.SQLAlchemyError as ex:
            msg = f"Cannot render value as a SQL literal: {value!r}"
            raise ExecutionError(msg) from ex

    # Statement execution

    def execute_in_transaction(self, statement: str) -> None:
        """Execute a fully rendered statement inside its own transaction.

        Args:
            statement: The SQL text to execute.

        Raises:
            ExecutionError: If the database rejects the statement.
        """
        conn = self.connection
        try:
            with conn.begin():
                conn.exec_driver_sql(statement)
        except sa.exc.SQLAlchemyError as ex:
            msg = f"Statement execution failed: {ex}"
            raise ExecutionError(msg, statement=statement) from ex

    def get_truncate_statement(self, full_table_name: str) -> str:
        """Return the statement which empties a table.

        Args:
            full_table_name: The table name, optionally schema-qualified.

        Returns:
            The SQL text.
        """
        quoted = self.quote(full_table_name)
        if self._dialect.name in _NO_TRUNCATE_DIALECTS:
            return f"DELETE FROM {quoted}"
        return f"TRUNCATE TABLE {quoted}"

    def truncate(self, full_table_name: str) -> None:
        """Remove every row from a table.

        Args:
            full_table_name: The table name, optionally schema-qualified.

        Raises:
            ExecutionError: If the table could not be truncated.
        """
        statement = self.get_truncate_statement(full_table_name)
        self.logger.info("Truncating table %s", full_table_name)
        try:
            self.execute_in_transaction(statement)
        except ExecutionError as ex:
            msg = f"Could not truncate table '{full_table_name}': {ex.__cause__}"
            raise ExecutionError(msg, statement=statement) from ex.__cause__
