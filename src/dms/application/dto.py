"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP adapters and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


# --- Input --------------------------------------------------------------------


@dataclass(frozen=True)
class DispatchItemSpec:
    """Input: one requested line.

    ``item_code`` and ``item_name`` are accepted for display in error
    messages only; the stored snapshot always comes from the inventory
    record.
    """

    item_id: str | None
    quantity: Any
    item_type: str | None = None
    item_code: str = ""
    item_name: str = ""


@dataclass(frozen=True)
class DispatchSpec:
    """Input: header fields of a new dispatch."""

    destination: str | None
    dispatch_date: date | None
    customer_name: str = ""
    address: str = ""
    contact_number: str = ""
    delivery_date: date | None = None
    transport_mode: str = ""
    vehicle_number: str = ""
    driver_name: str = ""
    driver_contact: str = ""
    dispatched_by: str = ""
    remarks: str = ""


@dataclass(frozen=True)
class DispatchUpdateSpec:
    """Input: metadata update.  ``None`` means "not supplied".

    ``items`` and ``quantity`` exist only so that an attempt to change them
    can be rejected explicitly.
    """

    status: str | None = None
    delivery_date: date | None = None
    vehicle_number: str | None = None
    driver_name: str | None = None
    driver_contact: str | None = None
    remarks: str | None = None
    items: list | None = None
    quantity: int | None = None


@dataclass(frozen=True)
class DispatchQuery:
    status: str | None = None
    destination: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = None
    page: int = 1
    limit: int = 100


# --- Output -------------------------------------------------------------------


@dataclass(frozen=True)
class DispatchLineDTO:
    item_id: str
    item_code: str
    item_name: str
    quantity: int
    item_type: str | None


@dataclass(frozen=True)
class DispatchDTO:
    """Output: a complete dispatch as displayed to the user."""

    id: int
    destination: str
    customer_name: str
    address: str
    contact_number: str
    dispatch_date: date
    delivery_date: date | None
    transport_mode: str
    vehicle_number: str
    driver_name: str
    driver_contact: str
    dispatched_by: str
    remarks: str
    status: str
    items: list[DispatchLineDTO]
    total_quantity: int
    total_items: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CreateDispatchResult:
    dispatch: DispatchDTO
    processed_items: list[DispatchLineDTO]


@dataclass(frozen=True)
class ReconciliationGapDTO:
    item_id: str
    item_code: str
    quantity: int
    reason: str


@dataclass(frozen=True)
class DeleteDispatchResult:
    dispatch_id: int
    restored_items: int
    total_items: int
    gaps: list[ReconciliationGapDTO] = field(default_factory=list)

    @property
    def fully_restored(self) -> bool:
        return not self.gaps


@dataclass(frozen=True)
class Pagination:
    current: int
    total: int
    count: int
    limit: int


@dataclass(frozen=True)
class DispatchPage:
    dispatches: list[DispatchDTO]
    pagination: Pagination


@dataclass(frozen=True)
class DispatchSummary:
    total_dispatches: int
    total_quantity: int
    total_items: int
    unique_destinations: list[str]


@dataclass(frozen=True)
class StatusBreakdown:
    status: str
    count: int
    total_quantity: int


@dataclass(frozen=True)
class MonthlyTrend:
    year: int
    month: int
    count: int
    total_quantity: int


@dataclass(frozen=True)
class DispatchStats:
    summary: DispatchSummary
    status_breakdown: list[StatusBreakdown]
    monthly_trends: list[MonthlyTrend]


@dataclass(frozen=True)
class DispatchDetailRow:
    """Output: one dispatched line, flattened for the inventory page."""

    item_code: str
    product: str
    kind: str
    quantity: int
    work_order: str
    transport_mode: str
    date: date
