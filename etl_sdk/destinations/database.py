"""Destination which writes buffered rows straight into a database table."""

from __future__ import annotations

import typing as t

from etl_sdk import metrics
from etl_sdk.destinations.core import Destination
from etl_sdk.exceptions import ConfigValidationError

if t.TYPE_CHECKING:
    from collections.abc import Sequence

    from etl_sdk.connectors import ConnectorRegistry, SQLConnector
    from etl_sdk.destinations.config import DestinationConfig, MappingConfig
    from etl_sdk.destinations.policies import SourceDefinition
    from etl_sdk.destinations.protocols import IRowPolicy


def resolve_column_order(
    explicit_order: Sequence[str] | None,
    required_fields: Sequence[str],
    inferred_order: Sequence[str] | None = None,
) -> tuple[str, ...]:
    """Determine the fields written by a destination, in order.

    The explicit mapping order wins over the order inferred from the upstream
    source. Required fields are appended and repeated names dropped, keeping
    the first occurrence.

    Args:
        explicit_order: The mapping's column order, if any.
        required_fields: Fields the row policy always writes.
        inferred_order: The upstream source's field order, if known.

    Returns:
        The column order.

    Raises:
        ConfigValidationError: If no non-empty order can be determined.
    """
    base = explicit_order if explicit_order is not None else inferred_order
    if base is None:
        msg = "Order required in mapping"
        raise ConfigValidationError(msg)

    order = tuple(dict.fromkeys([*base, *required_fields]))
    if not order:
        msg = "Order required in mapping: resolved column order is empty"
        raise ConfigValidationError(msg)
    return order


class DatabaseDestination(Destination):
    """Destination which writes directly to a database table.

    Every flush turns the admitted buffered rows into a single multi-row
    ``INSERT`` executed in one transaction. This is meant for moderate
    volumes; bulk loaders are faster for large loads.

    Example:
        >>> registry = ConnectorRegistry(
        ...     {"warehouse": {"sqlalchemy_url": "sqlite:///w.db"}}
        ... )  # doctest: +SKIP
        >>> destination = DatabaseDestination(
        ...     DestinationConfig(target="warehouse", table="people"),
        ...     MappingConfig(order=("id", "name")),
        ...     registry=registry,
        ... )  # doctest: +SKIP
        >>> destination.append({"id": 1, "name": "a"})  # doctest: +SKIP
        >>> destination.close()  # doctest: +SKIP
    """

    def __init__(
        self,
        config: DestinationConfig,
        mapping: MappingConfig | None = None,
        *,
        registry: ConnectorRegistry,
        policy: IRowPolicy | None = None,
        source_definition: SourceDefinition | None = None,
    ) -> None:
        """Initialize the database destination.

        Args:
            config: The destination settings.
            mapping: The mapping settings.
            registry: Provides the connector of the configured target.
            policy: Admission, augmentation and order-inference hooks.
            source_definition: The upstream source's field definitions.

        Raises:
            ConfigValidationError: If the target is unknown to the registry or
                no column order can be resolved.
        """
        super().__init__(
            config,
            mapping,
            policy=policy,
            source_definition=source_definition,
        )
        if config.target not in registry:
            msg = f"No connection configured for target '{config.target}'"
            raise ConfigValidationError(msg)

        self.registry = registry
        self.order = resolve_column_order(
            self.mapping.order,
            self.policy.required_fields,
            self.policy.infer_order() if self.mapping.order is None else None,
        )
        self._connector: SQLConnector | None = None
        self._table_name: str | None = None

    # Lazy connection and naming

    @property
    def connector(self) -> SQLConnector:
        """The target's connector, truncating the table on first access.

        Returns:
            The connector.
        """
        if self._connector is None:
            connector = self.registry.get(self.config.target)
            if self.config.truncate:
                connector.truncate(self.full_table_name)
            self._connector = connector
        return self._connector

    @property
    def table_name(self) -> str:
        """The physical table name for the configured logical table.

        Returns:
            The table name.
        """
        if self._table_name is None:
            self._table_name = self.registry.get(
                self.config.target,
            ).resolve_table_name(self.config.table)
        return self._table_name

    @property
    def full_table_name(self) -> str:
        """The schema-qualified physical table name.

        Returns:
            The table name, prefixed with the schema when one is configured.
        """
        return self.registry.get(self.config.target).get_fully_qualified_name(
            table_name=self.table_name,
            schema_name=self.config.schema,
        )

    # Statement building

    def project_row(self, row: t.Mapping[str, t.Any]) -> list[str]:
        """Render a row's values as SQL literals following the column order.

        Args:
            row: The admitted, augmented row.

        Returns:
            One literal per column; missing fields render as ``NULL``.
        """
        return [self.connector.quote_value(row.get(name)) for name in self.order]

    def build_insert_statement(self, rows: Sequence[t.Mapping[str, t.Any]]) -> str:
        """Build one multi-row INSERT statement for the given rows.

        Args:
            rows: The admitted, augmented rows, in write order.

        Returns:
            The SQL text.
        """
        connector = self.connector
        table = connector.quote_identifier(self.table_name)
        if self.config.schema:
            table = f"{connector.quote_identifier(self.config.schema)}.{table}"
        columns = ",".join(connector.quote_identifier(name) for name in self.order)
        values = ",".join(f"({','.join(self.project_row(row))})" for row in rows)
        return f"INSERT INTO {table} ({columns}) VALUES {values}"

    # Flushing

    def flush(self) -> None:
        """Write the currently buffered rows as one transactional INSERT.

        Rows rejected by the row policy are dropped. When no row is admitted
        nothing is sent to the database. The buffer is cleared only after the
        statement succeeded; on any failure, including one raised by the row
        policy, the admission decisions are rolled back, the buffer is left
        untouched and the error propagates.

        Raises:
            ExecutionError: If truncating or inserting fails.
        """
        rows = list(self.buffer)
        try:
            admitted = [
                self.policy.augment(row) for row in rows if self.policy.admit(row)
            ]
            if admitted:
                with metrics.flush_timer(self.config.table):
                    statement = self.build_insert_statement(admitted)
                    self.logger.debug("Executing insert: %s", statement)
                    self.connector.execute_in_transaction(statement)
        except Exception:
            self.policy.rollback()
            raise

        self.policy.commit()
        self.buffer.clear()
        self.tally_record_filtered(len(rows) - len(admitted))
        if not admitted:
            if rows:
                self.logger.debug("None of %d buffered rows admitted", len(rows))
            return

        self.tally_record_written(len(admitted))
        self.tally_batch_written()
        self.logger.info(
            "Inserted %d rows into %s",
            len(admitted),
            self.full_table_name,
        )
