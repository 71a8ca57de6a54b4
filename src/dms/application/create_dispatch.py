"""Application service: Create Dispatch use case.

Validates the whole request up front, then lets the reconciliation
service reserve stock for every line (all or nothing) before the
dispatch is built from the reserved snapshot and persisted.
"""

from __future__ import annotations

import structlog

from dms.application.dto import CreateDispatchResult, DispatchItemSpec, DispatchSpec
from dms.application.mapping import to_dispatch_dto, to_line_dto
from dms.domain.exceptions import ValidationError
from dms.domain.model.dispatch import DispatchRecord
from dms.domain.model.inventory import ItemKind
from dms.domain.model.value_objects import Quantity
from dms.domain.repository.dispatch_repository import DispatchRepository
from dms.domain.repository.inventory_repository import InventoryRepository
from dms.domain.service.dispatch_reconciliation_service import (
    DEFAULT_PERSIST_ATTEMPTS,
    DispatchReconciliationService,
    LineRequest,
)
from dms.domain.service.stock_ledger import DEFAULT_MAX_CONFLICT_RETRIES, StockLedger

logger = structlog.get_logger(__name__)


class CreateDispatchHandler:

    def __init__(
        self,
        dispatch_repo: DispatchRepository,
        inventory_repo: InventoryRepository,
        persist_attempts: int = DEFAULT_PERSIST_ATTEMPTS,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
    ) -> None:
        self._reconciliation = DispatchReconciliationService(
            StockLedger(inventory_repo, max_conflict_retries),
            dispatch_repo,
            persist_attempts=persist_attempts,
        )

    def handle(self, spec: DispatchSpec, item_specs: list[DispatchItemSpec]) -> CreateDispatchResult:
        """Create a dispatch and take its stock out of inventory.

        Steps:
        1. Validate header and every line (no mutation yet).
        2. Reserve each line in order; on any failure, earlier lines are
           released before the error surfaces.
        3. Build the record from the inventory snapshot, not from the
           caller's code/name.
        4. Persist (with retry); a final failure releases all stock.
        """
        requests = self._validate(spec, item_specs)

        log = self._reconciliation.reserve_lines(requests)

        try:
            dispatch = DispatchRecord.create(
                destination=spec.destination or "",
                dispatch_date=spec.dispatch_date,
                items=log.lines(),
                customer_name=spec.customer_name,
                address=spec.address,
                contact_number=spec.contact_number,
                delivery_date=spec.delivery_date,
                transport_mode=spec.transport_mode,
                vehicle_number=spec.vehicle_number,
                driver_name=spec.driver_name,
                driver_contact=spec.driver_contact,
                dispatched_by=spec.dispatched_by,
                remarks=spec.remarks,
            )
        except BaseException:
            log.rollback()
            raise

        self._reconciliation.persist_new(dispatch, log)

        logger.info(
            "Dispatch created",
            dispatch_id=dispatch.id,
            destination=dispatch.destination,
            lines=dispatch.total_items,
            quantity=dispatch.total_quantity,
        )
        dto = to_dispatch_dto(dispatch)
        return CreateDispatchResult(
            dispatch=dto,
            processed_items=[to_line_dto(line) for line in dispatch.items],
        )

    @staticmethod
    def _validate(spec: DispatchSpec, item_specs: list[DispatchItemSpec]) -> list[LineRequest]:
        if not item_specs:
            raise ValidationError("Items array is required")

        if not spec.destination or not spec.destination.strip() or spec.dispatch_date is None:
            raise ValidationError("Destination and dispatch date are required")

        if spec.delivery_date is not None and spec.delivery_date < spec.dispatch_date:
            raise ValidationError(
                f"Delivery date {spec.delivery_date.isoformat()} is before "
                f"dispatch date {spec.dispatch_date.isoformat()}"
            )

        requests: list[LineRequest] = []
        for item in item_specs:
            if not item.item_id:
                raise ValidationError("Each item must have itemId and valid quantity")
            try:
                quantity = Quantity(item.quantity)
            except ValidationError as exc:
                raise ValidationError(
                    "Each item must have itemId and valid quantity"
                ) from exc
            kind = ItemKind.parse(item.item_type) if item.item_type else None
            requests.append(
                LineRequest(item_id=str(item.item_id), quantity=quantity.value, kind=kind)
            )
        return requests
