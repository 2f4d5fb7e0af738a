"""Immutable destination and mapping configuration."""

from __future__ import annotations

import typing as t
from dataclasses import dataclass, field
from types import MappingProxyType

from etl_sdk.exceptions import ConfigValidationError

DEFAULT_BUFFER_SIZE = 100

DEFAULT_SCD_EFFECTIVE_DATE_FIELD = "effective_date"
DEFAULT_SCD_END_DATE_FIELD = "end_date"
DEFAULT_SCD_LATEST_VERSION_FIELD = "latest_version"


def _dedupe(names: t.Iterable[str]) -> tuple[str, ...]:
    """Drop repeated names, keeping the first occurrence."""
    return tuple(dict.fromkeys(names))


@dataclass(frozen=True)
class SCDConfig:
    """Slowly changing dimension settings of a destination."""

    type: int = 2
    effective_date_field: str = DEFAULT_SCD_EFFECTIVE_DATE_FIELD
    end_date_field: str = DEFAULT_SCD_END_DATE_FIELD
    latest_version_field: str = DEFAULT_SCD_LATEST_VERSION_FIELD

    @classmethod
    def from_dict(cls, raw: t.Mapping[str, t.Any]) -> SCDConfig:
        """Build SCD settings from a configuration mapping.

        Args:
            raw: The ``scd`` section of a destination configuration.

        Returns:
            The SCD settings.

        Raises:
            ConfigValidationError: If the SCD type is not 1 or 2.
        """
        scd_type = raw.get("type", 2)
        if scd_type not in (1, 2):
            msg = f"Unsupported SCD type: {scd_type!r}"
            raise ConfigValidationError(msg)
        return cls(
            type=scd_type,
            effective_date_field=raw.get(
                "effective_date_field",
                DEFAULT_SCD_EFFECTIVE_DATE_FIELD,
            ),
            end_date_field=raw.get("end_date_field", DEFAULT_SCD_END_DATE_FIELD),
            latest_version_field=raw.get(
                "latest_version_field",
                DEFAULT_SCD_LATEST_VERSION_FIELD,
            ),
        )


@dataclass(frozen=True)
class DestinationConfig:
    """Settings of one database destination, fixed for its whole lifetime.

    Use :meth:`from_dict` to derive an instance from a raw configuration
    mapping; the mapping itself is never modified.
    """

    target: str
    table: str
    schema: str | None = None
    truncate: bool = False
    unique: tuple[str, ...] | None = None
    append_rows: tuple[t.Mapping[str, t.Any], ...] = ()
    buffer_size: int = DEFAULT_BUFFER_SIZE
    scd: SCDConfig | None = None

    def __post_init__(self) -> None:
        """Validate required settings and derive the unique key.

        When SCD is configured the effective-date field is added to the unique
        key, so that deduplication is scoped per effective period.

        Raises:
            ConfigValidationError: If the table or target is missing.
        """
        errors = []
        if not self.table:
            errors.append("Table required")
        if not self.target:
            errors.append("Target required")
        if errors:
            raise ConfigValidationError("; ".join(errors), errors=errors)

        if self.buffer_size < 1:
            msg = f"Buffer size must be positive, got {self.buffer_size}"
            raise ConfigValidationError(msg)

        if self.unique is not None:
            unique = [*self.unique]
            if self.scd is not None:
                unique.append(self.scd.effective_date_field)
            object.__setattr__(self, "unique", _dedupe(unique))

    @classmethod
    def from_dict(cls, configuration: t.Mapping[str, t.Any]) -> DestinationConfig:
        """Derive destination settings from a configuration mapping.

        Args:
            configuration: The ``destination`` section of a run configuration.

        Returns:
            The destination settings.

        Raises:
            ConfigValidationError: If the table or target is missing.
        """
        scd = (
            SCDConfig.from_dict(configuration["scd"])
            if configuration.get("scd")
            else None
        )

        unique = configuration.get("unique")
        buffer_size = configuration.get("buffer_size")

        return cls(
            target=configuration.get("target") or "",
            table=configuration.get("table") or "",
            schema=configuration.get("schema"),
            truncate=bool(configuration.get("truncate", False)),
            unique=tuple(unique) if unique is not None else None,
            append_rows=tuple(
                MappingProxyType(dict(row))
                for row in configuration.get("append_rows") or ()
            ),
            buffer_size=DEFAULT_BUFFER_SIZE if buffer_size is None else buffer_size,
            scd=scd,
        )


@dataclass(frozen=True)
class MappingConfig:
    """How upstream rows map onto the destination table."""

    order: tuple[str, ...] | None = None
    virtual: t.Mapping[str, t.Any] = field(
        default_factory=lambda: MappingProxyType({}),
    )

    @classmethod
    def from_dict(cls, mapping: t.Mapping[str, t.Any] | None) -> MappingConfig:
        """Derive mapping settings from a configuration mapping.

        Args:
            mapping: The ``mapping`` section of a run configuration.

        Returns:
            The mapping settings.
        """
        mapping = mapping or {}
        order = mapping.get("order")
        return cls(
            order=tuple(order) if order is not None else None,
            virtual=MappingProxyType(dict(mapping.get("virtual") or {})),
        )
