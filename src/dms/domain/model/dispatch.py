"""Dispatch aggregate — goods leaving the facility.

A DispatchRecord owns an ordered, immutable sequence of DispatchLines.
Logistics metadata and status may change after creation; the lines and
their quantities may not, because every unit on a line corresponds to a
reservation already taken from the inventory ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from dms.domain.exceptions import ValidationError
from dms.domain.model.inventory import ItemKind
from dms.domain.model.value_objects import Quantity


class DispatchStatus(Enum):
    DISPATCHED = "Dispatched"
    IN_TRANSIT = "InTransit"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, raw: str) -> DispatchStatus:
        compact = raw.replace(" ", "").replace("_", "").lower()
        for status in cls:
            if status.value.lower() == compact:
                return status
        raise ValidationError(f"Unknown dispatch status: {raw!r}")


# Forward-only lifecycle.  Delivered and Cancelled are terminal.
ALLOWED_TRANSITIONS: dict[DispatchStatus, frozenset[DispatchStatus]] = {
    DispatchStatus.DISPATCHED: frozenset(
        {DispatchStatus.IN_TRANSIT, DispatchStatus.DELIVERED, DispatchStatus.CANCELLED}
    ),
    DispatchStatus.IN_TRANSIT: frozenset(
        {DispatchStatus.DELIVERED, DispatchStatus.CANCELLED}
    ),
    DispatchStatus.DELIVERED: frozenset(),
    DispatchStatus.CANCELLED: frozenset(),
}

DEFAULT_TRANSPORT_MODE = "Road"
DEFAULT_DISPATCHED_BY = "Admin"


@dataclass(frozen=True)
class DispatchLine:
    """One item on a dispatch.

    ``item_code`` and ``item_name`` are a snapshot of the inventory record
    taken at creation time, so the dispatch still reads correctly after the
    record is renamed or removed.  ``item_kind`` is None only for records
    written before lines were tagged.
    """

    item_id: str
    item_code: str
    item_name: str
    quantity: Quantity
    item_kind: ItemKind | None = None


@dataclass(frozen=True)
class ReconciliationGap:
    """A line whose quantity could not be put back on delete."""

    item_id: str
    item_code: str
    quantity: int
    reason: str


@dataclass
class DispatchRecord:
    """Aggregate root for dispatches.

    Use ``DispatchRecord.create()`` for new dispatches — it enforces the
    business rules.  ``__init__`` stays simple so the repository can
    reconstitute persisted records without re-validating.
    """

    id: int | None
    destination: str
    dispatch_date: date
    items: tuple[DispatchLine, ...]
    customer_name: str = ""
    address: str = ""
    contact_number: str = ""
    delivery_date: date | None = None
    transport_mode: str = DEFAULT_TRANSPORT_MODE
    vehicle_number: str = ""
    driver_name: str = ""
    driver_contact: str = ""
    dispatched_by: str = DEFAULT_DISPATCHED_BY
    remarks: str = ""
    status: DispatchStatus = DispatchStatus.DISPATCHED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW dispatches only) -------------------------------

    @staticmethod
    def create(
        destination: str,
        dispatch_date: date | None,
        items: list[DispatchLine],
        *,
        customer_name: str = "",
        address: str = "",
        contact_number: str = "",
        delivery_date: date | None = None,
        transport_mode: str = "",
        vehicle_number: str = "",
        driver_name: str = "",
        driver_contact: str = "",
        dispatched_by: str = "",
        remarks: str = "",
    ) -> DispatchRecord:
        """Create a new dispatch, enforcing all invariants."""
        if not destination or not destination.strip():
            raise ValidationError("Destination and dispatch date are required")
        if dispatch_date is None:
            raise ValidationError("Destination and dispatch date are required")
        if not items:
            raise ValidationError("Dispatch must contain at least one item")
        _check_delivery_date(dispatch_date, delivery_date)

        return DispatchRecord(
            id=None,
            destination=destination.strip(),
            dispatch_date=dispatch_date,
            items=tuple(items),
            customer_name=customer_name or "",
            address=address or "",
            contact_number=contact_number or "",
            delivery_date=delivery_date,
            transport_mode=transport_mode or DEFAULT_TRANSPORT_MODE,
            vehicle_number=vehicle_number or "",
            driver_name=driver_name or "",
            driver_contact=driver_contact or "",
            dispatched_by=dispatched_by or DEFAULT_DISPATCHED_BY,
            remarks=remarks or "",
        )

    # --- Mutations ------------------------------------------------------------

    def change_status(self, new_status: DispatchStatus) -> None:
        """Move along the lifecycle.  Re-applying the current status is a no-op."""
        if new_status == self.status:
            return
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise ValidationError(
                f"Cannot change dispatch status from {self.status.value} "
                f"to {new_status.value}"
            )
        self.status = new_status

    def update_details(
        self,
        *,
        status: DispatchStatus | None = None,
        delivery_date: date | None = None,
        vehicle_number: str | None = None,
        driver_name: str | None = None,
        driver_contact: str | None = None,
        remarks: str | None = None,
    ) -> None:
        """Apply a metadata update.  ``None`` means "leave unchanged"."""
        if delivery_date is not None:
            _check_delivery_date(self.dispatch_date, delivery_date)
        if status is not None:
            self.change_status(status)
        if delivery_date is not None:
            self.delivery_date = delivery_date
        if vehicle_number is not None:
            self.vehicle_number = vehicle_number
        if driver_name is not None:
            self.driver_name = driver_name
        if driver_contact is not None:
            self.driver_contact = driver_contact
        if remarks is not None:
            self.remarks = remarks
        self.updated_at = datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity.value for line in self.items)

    @property
    def total_items(self) -> int:
        return len(self.items)


def _check_delivery_date(dispatch_date: date, delivery_date: date | None) -> None:
    if delivery_date is not None and delivery_date < dispatch_date:
        raise ValidationError(
            f"Delivery date {delivery_date.isoformat()} is before "
            f"dispatch date {dispatch_date.isoformat()}"
        )
