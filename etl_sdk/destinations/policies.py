"""Default row policies: unique-key filtering, virtual fields and SCD fields."""

from __future__ import annotations

import datetime
import typing as t
from collections.abc import Mapping

from etl_sdk.exceptions import ConfigValidationError
from etl_sdk.helpers._util import utc_now

if t.TYPE_CHECKING:
    from collections.abc import Sequence

    from etl_sdk.destinations.config import (
        DestinationConfig,
        MappingConfig,
        SCDConfig,
    )

#: Source definition entries are either a field name or ``{"name": ...}``.
SourceDefinition = t.Sequence[t.Union[str, Mapping[str, t.Any]]]

SCD_END_OF_TIME = datetime.datetime(9999, 12, 31)  # noqa: DTZ001


def order_from_definition(definition: SourceDefinition | None) -> list[str] | None:
    """Return the field names of an upstream source definition, in order.

    Args:
        definition: The source's field definitions.

    Returns:
        The field names, or None when there is no definition.

    Raises:
        ConfigValidationError: If an entry carries no field name.
    """
    if definition is None:
        return None

    order = []
    for item in definition:
        if isinstance(item, str):
            order.append(item)
        elif isinstance(item, Mapping) and item.get("name"):
            order.append(item["name"])
        else:
            msg = f"Source field definition has no name: {item!r}"
            raise ConfigValidationError(msg)
    return order


class SurrogateKeyGenerator:
    """Generate consecutive integer keys, starting at ``start``."""

    def __init__(self, start: int = 1) -> None:
        self._next_value = start

    def next(self) -> int:
        """Return the next key."""
        value = self._next_value
        self._next_value += 1
        return value

    __next__ = next

    def __iter__(self) -> SurrogateKeyGenerator:
        return self


GENERATORS: dict[str, type[SurrogateKeyGenerator]] = {
    "surrogate_key": SurrogateKeyGenerator,
}


class UniqueKeyFilter:
    """Admit only the first row seen for each compound key.

    Keys admitted by a flush are held as pending until the flush is committed,
    so a flush that fails and is retried admits the same rows again.
    """

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = tuple(fields)
        self._seen: set[tuple] = set()
        self._pending: set[tuple] = set()

    def key_for(self, row: t.Mapping[str, t.Any]) -> tuple:
        return tuple(row.get(name) for name in self.fields)

    def admit(self, row: t.Mapping[str, t.Any]) -> bool:
        key = self.key_for(row)
        if key in self._seen or key in self._pending:
            return False
        self._pending.add(key)
        return True

    def commit(self) -> None:
        self._seen |= self._pending
        self._pending = set()

    def rollback(self) -> None:
        self._pending = set()


class VirtualFieldInjector:
    """Fill in virtual fields declared by the mapping.

    A virtual value may be a literal, a callable receiving the row, a key
    generator (or generator class), or ``{"generator": <name>, ...}`` naming a
    registered generator. Rows that already carry a non-null value for a
    virtual field keep it.
    """

    def __init__(self, virtual: t.Mapping[str, t.Any] | None = None) -> None:
        self._values: dict[str, t.Any] = {
            name: self._build(name, value) for name, value in (virtual or {}).items()
        }

    @staticmethod
    def _build(name: str, value: t.Any) -> t.Any:  # noqa: ANN401
        if isinstance(value, type) and issubclass(value, SurrogateKeyGenerator):
            return value()
        if isinstance(value, Mapping) and "generator" in value:
            options = dict(value)
            generator_name = options.pop("generator")
            if generator_name not in GENERATORS:
                msg = (
                    f"Unknown generator '{generator_name}' for virtual field '{name}'"
                )
                raise ConfigValidationError(msg)
            return GENERATORS[generator_name](**options)
        return value

    @property
    def fields(self) -> list[str]:
        return list(self._values)

    def augment(self, row: dict) -> dict:
        for name, value in self._values.items():
            if row.get(name) is not None:
                continue
            if isinstance(value, SurrogateKeyGenerator):
                row[name] = value.next()
            elif callable(value):
                row[name] = value(row)
            else:
                row[name] = value
        return row


class SCDPolicy:
    """Bookkeeping fields of a slowly changing dimension.

    Type 2 dimensions require an effective date, an end date and a latest
    version flag on every written row; type 1 dimensions require nothing.
    """

    def __init__(
        self,
        config: SCDConfig | None = None,
        *,
        effective_at: datetime.datetime | None = None,
    ) -> None:
        self.config = config
        self.effective_at = effective_at or utc_now()

    @property
    def is_type_2(self) -> bool:
        return self.config is not None and self.config.type == 2  # noqa: PLR2004

    @property
    def effective_date_field(self) -> str | None:
        return self.config.effective_date_field if self.config else None

    @property
    def required_fields(self) -> tuple[str, ...]:
        if not self.is_type_2:
            return ()
        return (
            self.config.effective_date_field,
            self.config.end_date_field,
            self.config.latest_version_field,
        )

    def augment(self, row: dict) -> dict:
        if not self.is_type_2:
            return row
        if row.get(self.config.effective_date_field) is None:
            row[self.config.effective_date_field] = self.effective_at
        if row.get(self.config.end_date_field) is None:
            row[self.config.end_date_field] = SCD_END_OF_TIME
        row[self.config.latest_version_field] = True
        return row


class DefaultRowPolicy:
    """The row policy used when a destination is not given one.

    Combines unique-key deduplication, mapping virtual fields, SCD bookkeeping
    fields and column-order inference from an upstream source definition.
    """

    def __init__(
        self,
        *,
        unique: Sequence[str] | None = None,
        virtual: t.Mapping[str, t.Any] | None = None,
        scd: SCDPolicy | None = None,
        source_definition: SourceDefinition | None = None,
    ) -> None:
        self.unique_filter = UniqueKeyFilter(unique) if unique else None
        self.virtuals = VirtualFieldInjector(virtual)
        self.scd = scd or SCDPolicy()
        self.source_definition = source_definition

    @classmethod
    def from_config(
        cls,
        config: DestinationConfig,
        mapping: MappingConfig,
        source_definition: SourceDefinition | None = None,
    ) -> DefaultRowPolicy:
        """Build the default policy for a destination.

        Args:
            config: The destination settings.
            mapping: The mapping settings.
            source_definition: The upstream source's field definitions.

        Returns:
            A row policy.
        """
        return cls(
            unique=config.unique,
            virtual=mapping.virtual,
            scd=SCDPolicy(config.scd),
            source_definition=source_definition,
        )

    @property
    def required_fields(self) -> tuple[str, ...]:
        return self.scd.required_fields

    def infer_order(self) -> list[str] | None:
        return order_from_definition(self.source_definition)

    def admit(self, row: dict) -> bool:
        if self.unique_filter is None:
            return True
        return self.unique_filter.admit(row)

    def augment(self, row: dict) -> dict:
        return self.scd.augment(self.virtuals.augment(row))

    def commit(self) -> None:
        if self.unique_filter is not None:
            self.unique_filter.commit()

    def rollback(self) -> None:
        if self.unique_filter is not None:
            self.unique_filter.rollback()
