"""Abstract repository for the InventoryRecord aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Implementations must make ``save`` a single atomic
compare-and-swap: concurrent reservations against one record are
serialized by the version check, not by the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dms.domain.model.inventory import InventoryRecord, ItemKind


class InventoryRepository(ABC):

    @abstractmethod
    def get(self, kind: ItemKind, item_id: str) -> InventoryRecord | None:
        """Return a detached copy of the record, or None."""

    @abstractmethod
    def list_all(self, kind: ItemKind | None = None) -> list[InventoryRecord]:
        """Return every record, optionally restricted to one kind."""

    @abstractmethod
    def save(self, record: InventoryRecord, expected_version: int | None = None) -> None:
        """Persist a new or updated record.

        With ``expected_version`` set, the write only succeeds if the stored
        version still equals it; otherwise ConcurrencyConflictError is
        raised and nothing is written.  On success ``record.version`` is
        bumped to the stored value.
        """

    @abstractmethod
    def delete(self, kind: ItemKind, item_id: str) -> bool:
        """Remove a record.  Returns False if it did not exist."""
