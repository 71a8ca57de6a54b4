"""InventoryRecord aggregate — stock available for dispatch.

Two kinds of stock share one record type: manufacturing items (whose
available quantity is their work-in-progress stock) and bought-out
finished items.  The ``kind`` tag travels with every record so callers
never have to guess which ledger an id belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from dms.domain.exceptions import InsufficientStockError, ValidationError


class ItemKind(Enum):
    MANUFACTURING = "manufacturing"
    BOUGHT_OUT = "bought_out"

    @classmethod
    def parse(cls, raw: str) -> ItemKind:
        """Accept the enum value or a loose spelling ("boughtout", "Bought Out")."""
        normalized = raw.strip().lower().replace(" ", "_").replace("-", "_")
        if normalized == "boughtout":
            normalized = cls.BOUGHT_OUT.value
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValidationError(f"Unknown item type: {raw!r}") from exc


# Probe order used when a line does not say which ledger it belongs to.
PROBE_ORDER = (ItemKind.MANUFACTURING, ItemKind.BOUGHT_OUT)


@dataclass
class InventoryRecord:
    """Aggregate root for one stocked item.

    Invariants:
    - ``available_quantity`` is always >= 0
    - ``version`` only moves forward; the repository bumps it on every
      committed save and rejects saves made against a stale version
    """

    id: str
    code: str
    name: str
    kind: ItemKind
    available_quantity: int
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 0

    def __post_init__(self) -> None:
        if self.available_quantity < 0:
            raise ValidationError(
                f"Available quantity for {self.code} cannot be negative"
            )

    def reserve(self, quantity: int) -> None:
        """Take stock out for a dispatch.

        Raises InsufficientStockError if less than ``quantity`` is available.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.available_quantity:
            raise InsufficientStockError(
                item_id=self.id,
                item_code=self.code,
                available=self.available_quantity,
                requested=quantity,
            )
        self.available_quantity -= quantity
        self._touch()

    def release(self, quantity: int) -> None:
        """Put previously reserved stock back.  There is no upper bound."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        self.available_quantity += quantity
        self._touch()

    def _touch(self) -> None:
        self.last_updated = datetime.now(timezone.utc)
