"""Domain service: Stock Ledger.

One polymorphic entry point over both inventory kinds.  Every stock
movement is an optimistic read-modify-write: load the record, apply the
domain rule, and save against the version that was read.  A lost race
re-reads and tries again, so two callers reserving the same record can
never both pass the availability check on the same snapshot.
"""

from __future__ import annotations

from typing import Callable

import structlog

from dms.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    PersistenceError,
)
from dms.domain.model.inventory import PROBE_ORDER, InventoryRecord, ItemKind
from dms.domain.repository.inventory_repository import InventoryRepository

logger = structlog.get_logger(__name__)

DEFAULT_MAX_CONFLICT_RETRIES = 20


class StockLedger:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._max_conflict_retries = max_conflict_retries

    def lookup(self, kind: ItemKind, item_id: str) -> InventoryRecord:
        record = self._inventory_repo.get(kind, item_id)
        if record is None:
            raise EntityNotFoundError(f"{_describe(kind, item_id)} not found")
        return record

    def locate(self, item_id: str) -> InventoryRecord | None:
        """Find a record whose kind is unknown, manufacturing first."""
        for kind in PROBE_ORDER:
            record = self._inventory_repo.get(kind, item_id)
            if record is not None:
                return record
        return None

    def try_reserve(self, kind: ItemKind, item_id: str, quantity: int) -> InventoryRecord:
        """Atomically check availability and decrement.

        Raises InsufficientStockError or EntityNotFoundError without
        changing anything.
        """
        return self._apply(kind, item_id, lambda record: record.reserve(quantity))

    def release(self, kind: ItemKind, item_id: str, quantity: int) -> InventoryRecord:
        """Atomically increment.  Only fails if the record is gone."""
        return self._apply(kind, item_id, lambda record: record.release(quantity))

    def _apply(
        self,
        kind: ItemKind,
        item_id: str,
        mutate: Callable[[InventoryRecord], None],
    ) -> InventoryRecord:
        for attempt in range(1, self._max_conflict_retries + 1):
            record = self.lookup(kind, item_id)
            read_version = record.version
            mutate(record)
            try:
                self._inventory_repo.save(record, expected_version=read_version)
            except ConcurrencyConflictError:
                logger.debug(
                    "Stock write conflict, retrying",
                    kind=kind.value,
                    item_id=item_id,
                    attempt=attempt,
                )
                continue
            return record

        raise PersistenceError(
            f"Gave up updating {_describe(kind, item_id)} "
            f"after {self._max_conflict_retries} conflicting writes"
        )


def _describe(kind: ItemKind, item_id: str) -> str:
    label = "Manufacturing" if kind is ItemKind.MANUFACTURING else "Bought out"
    return f"{label} item {item_id}"
