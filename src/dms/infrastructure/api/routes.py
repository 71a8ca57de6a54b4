"""FastAPI routes for dispatches.

Endpoints are plain ``def`` functions so FastAPI runs them in its thread
pool; concurrent requests meet at the repositories, whose compare-and-swap
writes keep stock consistent.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from dms.application.create_dispatch import CreateDispatchHandler
from dms.application.delete_dispatch import DeleteDispatchHandler
from dms.application.dispatch_details import DispatchDetailsHandler
from dms.application.dispatch_stats import DispatchStatsHandler
from dms.application.dto import (
    DispatchItemSpec,
    DispatchQuery,
    DispatchSpec,
    DispatchUpdateSpec,
)
from dms.application.list_dispatches import ListDispatchesHandler
from dms.application.show_dispatch import ShowDispatchHandler
from dms.application.update_dispatch import UpdateDispatchHandler
from dms.domain.repository.dispatch_repository import DispatchRepository
from dms.domain.repository.inventory_repository import InventoryRepository
from dms.infrastructure.api.schemas import (
    CreateDispatchRequest,
    CreateDispatchResponse,
    DeleteDispatchResponse,
    DispatchDetailResponse,
    DispatchLineResponse,
    DispatchListResponse,
    DispatchResponse,
    DispatchStatsResponse,
    ErrorResponse,
    ReconciliationGapResponse,
    UpdateDispatchRequest,
    UpdateDispatchResponse,
)
from dms.infrastructure.config import Settings


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_dispatch_repo(request: Request) -> DispatchRepository:
    return request.app.state.dispatch_repo


def get_inventory_repo(request: Request) -> InventoryRepository:
    return request.app.state.inventory_repo


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# ---------------------------------------------------------------------------
# Dispatch Router
# ---------------------------------------------------------------------------
dispatch_router = APIRouter(
    prefix="/dispatches",
    tags=["dispatches"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@dispatch_router.post("", status_code=201, response_model=CreateDispatchResponse)
def create_dispatch(
    body: CreateDispatchRequest,
    dispatch_repo: DispatchRepository = Depends(get_dispatch_repo),
    inventory_repo: InventoryRepository = Depends(get_inventory_repo),
    settings: Settings = Depends(get_settings),
) -> CreateDispatchResponse:
    handler = CreateDispatchHandler(
        dispatch_repo,
        inventory_repo,
        persist_attempts=settings.persist_attempts,
        max_conflict_retries=settings.max_conflict_retries,
    )
    spec = DispatchSpec(
        destination=body.destination,
        dispatch_date=body.dispatch_date,
        customer_name=body.customer_name,
        address=body.address,
        contact_number=body.contact_number,
        delivery_date=body.delivery_date,
        transport_mode=body.transport_mode,
        vehicle_number=body.vehicle_number,
        driver_name=body.driver_name,
        driver_contact=body.driver_contact,
        dispatched_by=body.dispatched_by,
        remarks=body.remarks,
    )
    items = [
        DispatchItemSpec(
            item_id=item.item_id,
            quantity=item.quantity,
            item_type=item.item_type,
            item_code=item.item_code,
            item_name=item.item_name,
        )
        for item in body.items
    ]
    result = handler.handle(spec, items)
    return CreateDispatchResponse(
        message="Dispatch record created successfully",
        dispatch=DispatchResponse.model_validate(result.dispatch),
        processed_items=[DispatchLineResponse.model_validate(i) for i in result.processed_items],
    )


@dispatch_router.get("", response_model=DispatchListResponse)
def list_dispatches(
    status: str | None = None,
    destination: str | None = None,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=100, ge=1),
    dispatch_repo: DispatchRepository = Depends(get_dispatch_repo),
) -> DispatchListResponse:
    query = DispatchQuery(
        status=status,
        destination=destination,
        start_date=start_date,
        end_date=end_date,
        search=search,
        page=page,
        limit=limit,
    )
    return DispatchListResponse.model_validate(ListDispatchesHandler(dispatch_repo).handle(query))


@dispatch_router.get("/details", response_model=list[DispatchDetailResponse])
def dispatch_details(
    dispatch_repo: DispatchRepository = Depends(get_dispatch_repo),
) -> list[DispatchDetailResponse]:
    rows = DispatchDetailsHandler(dispatch_repo).handle()
    return [DispatchDetailResponse.model_validate(row) for row in rows]


@dispatch_router.get("/stats/summary", response_model=DispatchStatsResponse)
def dispatch_stats(
    dispatch_repo: DispatchRepository = Depends(get_dispatch_repo),
) -> DispatchStatsResponse:
    return DispatchStatsResponse.model_validate(DispatchStatsHandler(dispatch_repo).handle())


@dispatch_router.get("/{dispatch_id}", response_model=DispatchResponse)
def show_dispatch(
    dispatch_id: int,
    dispatch_repo: DispatchRepository = Depends(get_dispatch_repo),
) -> DispatchResponse:
    return DispatchResponse.model_validate(ShowDispatchHandler(dispatch_repo).handle(dispatch_id))


@dispatch_router.put("/{dispatch_id}", response_model=UpdateDispatchResponse)
def update_dispatch(
    dispatch_id: int,
    body: UpdateDispatchRequest,
    dispatch_repo: DispatchRepository = Depends(get_dispatch_repo),
) -> UpdateDispatchResponse:
    changes = DispatchUpdateSpec(
        status=body.status,
        delivery_date=body.delivery_date,
        vehicle_number=body.vehicle_number,
        driver_name=body.driver_name,
        driver_contact=body.driver_contact,
        remarks=body.remarks,
        items=body.items,
        quantity=body.quantity,
    )
    dto = UpdateDispatchHandler(dispatch_repo).handle(dispatch_id, changes)
    return UpdateDispatchResponse(
        message="Dispatch updated successfully",
        dispatch=DispatchResponse.model_validate(dto),
    )


@dispatch_router.delete("/{dispatch_id}", response_model=DeleteDispatchResponse)
def delete_dispatch(
    dispatch_id: int,
    dispatch_repo: DispatchRepository = Depends(get_dispatch_repo),
    inventory_repo: InventoryRepository = Depends(get_inventory_repo),
    settings: Settings = Depends(get_settings),
) -> DeleteDispatchResponse:
    handler = DeleteDispatchHandler(
        dispatch_repo,
        inventory_repo,
        max_conflict_retries=settings.max_conflict_retries,
    )
    result = handler.handle(dispatch_id)
    if result.fully_restored:
        message = "Dispatch deleted successfully and inventory restored"
    else:
        message = (
            f"Dispatch deleted; restored {result.restored_items} of "
            f"{result.total_items} items (some inventory records no longer exist)"
        )
    return DeleteDispatchResponse(
        message=message,
        dispatch_id=result.dispatch_id,
        restored_items=result.restored_items,
        total_items=result.total_items,
        gaps=[ReconciliationGapResponse.model_validate(g) for g in result.gaps],
    )
