"""Protocol definitions for the per-row hooks of a destination.

A destination does not decide by itself which rows to write or which derived
fields they carry. It delegates to a row policy injected at construction time,
so that different dedup, SCD or virtual-field behaviours can be combined
without subclassing the destination.
"""

from __future__ import annotations

import typing as t
from typing import Protocol

if t.TYPE_CHECKING:
    from collections.abc import Sequence


@t.runtime_checkable
class IRowPolicy(Protocol):
    """Protocol for the admission, augmentation and ordering hooks.

    Example:
        class SkipDeleted:
            required_fields = ()

            def infer_order(self):
                return None

            def admit(self, row: dict) -> bool:
                return not row.get("deleted")

            def augment(self, row: dict) -> dict:
                return row

            def commit(self) -> None: ...

            def rollback(self) -> None: ...
    """

    @property
    def required_fields(self) -> Sequence[str]:
        """Fields that must always be written, appended to the column order."""
        ...

    def infer_order(self) -> Sequence[str] | None:
        """Return the upstream source's field order, or None if it is unknown."""
        ...

    def admit(self, row: dict) -> bool:
        """Decide whether a buffered row is written.

        Called once per buffered row at flush time, in arrival order.

        Args:
            row: The buffered row.
        """
        ...

    def augment(self, row: dict) -> dict:
        """Add computed fields to an admitted row.

        Args:
            row: The admitted row, which may be modified in place.

        Returns:
            The row to serialize.
        """
        ...

    def commit(self) -> None:
        """Make the admission decisions of the last flush permanent."""
        ...

    def rollback(self) -> None:
        """Forget the admission decisions of a flush that failed."""
        ...
