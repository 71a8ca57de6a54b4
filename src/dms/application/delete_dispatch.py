"""Application service: Delete Dispatch use case.

Deleting a dispatch puts its stock back.  Lines whose inventory record
has since been removed are reported as reconciliation gaps; they do not
stop the dispatch from being deleted.
"""

from __future__ import annotations

import structlog

from dms.application.dto import DeleteDispatchResult
from dms.application.mapping import to_gap_dto
from dms.domain.exceptions import EntityNotFoundError
from dms.domain.repository.dispatch_repository import DispatchRepository
from dms.domain.repository.inventory_repository import InventoryRepository
from dms.domain.service.dispatch_reconciliation_service import (
    DispatchReconciliationService,
)
from dms.domain.service.stock_ledger import DEFAULT_MAX_CONFLICT_RETRIES, StockLedger

logger = structlog.get_logger(__name__)


class DeleteDispatchHandler:

    def __init__(
        self,
        dispatch_repo: DispatchRepository,
        inventory_repo: InventoryRepository,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
    ) -> None:
        self._dispatch_repo = dispatch_repo
        self._reconciliation = DispatchReconciliationService(
            StockLedger(inventory_repo, max_conflict_retries),
            dispatch_repo,
        )

    def handle(self, dispatch_id: int) -> DeleteDispatchResult:
        dispatch = self._dispatch_repo.get_by_id(dispatch_id)
        if dispatch is None:
            raise EntityNotFoundError(f"Dispatch #{dispatch_id} not found")

        outcome = self._reconciliation.reverse(dispatch)

        logger.info(
            "Dispatch deleted",
            dispatch_id=dispatch_id,
            restored_items=len(outcome.restored),
            total_items=dispatch.total_items,
            gaps=len(outcome.gaps),
        )
        return DeleteDispatchResult(
            dispatch_id=dispatch_id,
            restored_items=len(outcome.restored),
            total_items=dispatch.total_items,
            gaps=[to_gap_dto(gap) for gap in outcome.gaps],
        )
