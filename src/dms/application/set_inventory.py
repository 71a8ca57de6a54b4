"""Application service: Set Inventory use case.

Stands in for the inventory-management collaborators that own record
lifecycles: creates a record or overwrites its stock level.
"""

from __future__ import annotations

from datetime import datetime, timezone

from dms.domain.exceptions import ValidationError
from dms.domain.model.inventory import InventoryRecord, ItemKind
from dms.domain.repository.inventory_repository import InventoryRepository


class SetInventoryHandler:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def handle(
        self,
        item_type: str,
        item_id: str,
        quantity: int,
        code: str | None = None,
        name: str | None = None,
    ) -> InventoryRecord:
        """Set the available quantity for an item, creating it if needed."""
        if not item_id or not item_id.strip():
            raise ValidationError("Item id is required")
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        kind = ItemKind.parse(item_type)
        item_id = item_id.strip()

        existing = self._inventory_repo.get(kind, item_id)
        if existing is not None:
            read_version = existing.version
            existing.available_quantity = quantity
            existing.code = code or existing.code
            existing.name = name or existing.name
            existing.last_updated = datetime.now(timezone.utc)
            self._inventory_repo.save(existing, expected_version=read_version)
            return existing

        if not code or not name:
            raise ValidationError("Code and name are required for a new item")
        record = InventoryRecord(
            id=item_id,
            code=code,
            name=name,
            kind=kind,
            available_quantity=quantity,
        )
        self._inventory_repo.save(record)
        return record


class RemoveInventoryHandler:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def handle(self, item_type: str, item_id: str) -> bool:
        """Remove an inventory record.  Dispatches that reference it keep
        their snapshot; deleting them later reports a reconciliation gap."""
        return self._inventory_repo.delete(ItemKind.parse(item_type), item_id)
