"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from dms.domain.model.inventory import ItemKind
from dms.domain.repository.inventory_repository import InventoryRepository


@dataclass(frozen=True)
class InventoryLineDTO:
    item_id: str
    code: str
    name: str
    kind: str
    available: int
    last_updated: datetime


class ShowInventoryHandler:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def handle(self, item_type: str | None = None) -> list[InventoryLineDTO]:
        kind = ItemKind.parse(item_type) if item_type else None
        records = sorted(
            self._inventory_repo.list_all(kind),
            key=lambda r: (r.kind.value, r.code),
        )
        return [
            InventoryLineDTO(
                item_id=r.id,
                code=r.code,
                name=r.name,
                kind=r.kind.value,
                available=r.available_quantity,
                last_updated=r.last_updated,
            )
            for r in records
        ]
