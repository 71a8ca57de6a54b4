"""Pydantic request/response schemas for the Dispatch API.

These are external contracts (anti-corruption layer) — separate from the
application DTOs.  Field names are camelCase on the wire.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class DispatchItemRequest(CamelModel):
    item_id: str | None = None
    item_code: str = ""
    item_name: str = ""
    quantity: int | None = None
    item_type: str | None = None


class CreateDispatchRequest(CamelModel):
    destination: str | None = None
    customer_name: str = ""
    address: str = ""
    contact_number: str = ""
    dispatch_date: date | None = None
    delivery_date: date | None = None
    transport_mode: str = ""
    vehicle_number: str = ""
    driver_name: str = ""
    driver_contact: str = ""
    dispatched_by: str = ""
    remarks: str = ""
    items: list[DispatchItemRequest] = []


class UpdateDispatchRequest(CamelModel):
    status: str | None = None
    delivery_date: date | None = None
    vehicle_number: str | None = None
    driver_name: str | None = None
    driver_contact: str | None = None
    remarks: str | None = None
    # Accepted only so they can be rejected with a clear error.
    items: list[Any] | None = None
    quantity: int | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class DispatchLineResponse(CamelModel):
    item_id: str
    item_code: str
    item_name: str
    quantity: int
    item_type: str | None


class DispatchResponse(CamelModel):
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
    items: list[DispatchLineResponse]
    total_quantity: int
    total_items: int
    created_at: datetime
    updated_at: datetime


class CreateDispatchResponse(CamelModel):
    message: str
    dispatch: DispatchResponse
    processed_items: list[DispatchLineResponse]


class UpdateDispatchResponse(CamelModel):
    message: str
    dispatch: DispatchResponse


class ReconciliationGapResponse(CamelModel):
    item_id: str
    item_code: str
    quantity: int
    reason: str


class DeleteDispatchResponse(CamelModel):
    message: str
    dispatch_id: int
    restored_items: int
    total_items: int
    gaps: list[ReconciliationGapResponse]


class PaginationResponse(CamelModel):
    current: int
    total: int
    count: int
    limit: int


class DispatchListResponse(CamelModel):
    dispatches: list[DispatchResponse]
    pagination: PaginationResponse


class DispatchSummaryResponse(CamelModel):
    total_dispatches: int
    total_quantity: int
    total_items: int
    unique_destinations: list[str]


class StatusBreakdownResponse(CamelModel):
    status: str
    count: int
    total_quantity: int


class MonthlyTrendResponse(CamelModel):
    year: int
    month: int
    count: int
    total_quantity: int


class DispatchStatsResponse(CamelModel):
    summary: DispatchSummaryResponse
    status_breakdown: list[StatusBreakdownResponse]
    monthly_trends: list[MonthlyTrendResponse]


class DispatchDetailResponse(CamelModel):
    item_code: str
    product: str
    kind: str
    quantity: int
    work_order: str
    transport_mode: str
    dispatch_date: date = Field(alias="date")


class ErrorResponse(BaseModel):
    kind: str
    message: str
