"""Application service: Update Dispatch use case (metadata only).

Status, delivery date and driver/vehicle details can change after a
dispatch leaves.  Line items cannot: their quantities are already
reserved in the ledger, so an attempt to change them is rejected rather
than silently dropped.
"""

from __future__ import annotations

import structlog

from dms.application.dto import DispatchDTO, DispatchUpdateSpec
from dms.application.mapping import to_dispatch_dto
from dms.domain.exceptions import EntityNotFoundError, UnsupportedOperationError
from dms.domain.model.dispatch import DispatchStatus
from dms.domain.repository.dispatch_repository import DispatchRepository

logger = structlog.get_logger(__name__)


class UpdateDispatchHandler:

    def __init__(self, dispatch_repo: DispatchRepository) -> None:
        self._dispatch_repo = dispatch_repo

    def handle(self, dispatch_id: int, changes: DispatchUpdateSpec) -> DispatchDTO:
        if changes.items is not None or changes.quantity is not None:
            raise UnsupportedOperationError(
                "Dispatch items and quantities cannot be changed after creation; "
                "delete the dispatch and create a new one instead"
            )

        dispatch = self._dispatch_repo.get_by_id(dispatch_id)
        if dispatch is None:
            raise EntityNotFoundError(f"Dispatch #{dispatch_id} not found")

        dispatch.update_details(
            status=DispatchStatus.parse(changes.status) if changes.status else None,
            delivery_date=changes.delivery_date,
            vehicle_number=changes.vehicle_number,
            driver_name=changes.driver_name,
            driver_contact=changes.driver_contact,
            remarks=changes.remarks,
        )
        self._dispatch_repo.update(dispatch)

        logger.info("Dispatch updated", dispatch_id=dispatch_id, status=dispatch.status.value)
        return to_dispatch_dto(dispatch)
