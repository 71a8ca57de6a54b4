"""Domain -> DTO mapping shared by the dispatch use cases."""

from __future__ import annotations

from dms.application.dto import DispatchDTO, DispatchLineDTO, ReconciliationGapDTO
from dms.domain.model.dispatch import DispatchLine, DispatchRecord, ReconciliationGap


def to_line_dto(line: DispatchLine) -> DispatchLineDTO:
    return DispatchLineDTO(
        item_id=line.item_id,
        item_code=line.item_code,
        item_name=line.item_name,
        quantity=line.quantity.value,
        item_type=line.item_kind.value if line.item_kind else None,
    )


def to_dispatch_dto(dispatch: DispatchRecord) -> DispatchDTO:
    return DispatchDTO(
        id=dispatch.id,  # type: ignore[arg-type]
        destination=dispatch.destination,
        customer_name=dispatch.customer_name,
        address=dispatch.address,
        contact_number=dispatch.contact_number,
        dispatch_date=dispatch.dispatch_date,
        delivery_date=dispatch.delivery_date,
        transport_mode=dispatch.transport_mode,
        vehicle_number=dispatch.vehicle_number,
        driver_name=dispatch.driver_name,
        driver_contact=dispatch.driver_contact,
        dispatched_by=dispatch.dispatched_by,
        remarks=dispatch.remarks,
        status=dispatch.status.value,
        items=[to_line_dto(line) for line in dispatch.items],
        total_quantity=dispatch.total_quantity,
        total_items=dispatch.total_items,
        created_at=dispatch.created_at,
        updated_at=dispatch.updated_at,
    )


def to_gap_dto(gap: ReconciliationGap) -> ReconciliationGapDTO:
    return ReconciliationGapDTO(
        item_id=gap.item_id,
        item_code=gap.item_code,
        quantity=gap.quantity,
        reason=gap.reason,
    )
