"""Application service: Dispatch Details use case (query).

Flattens recent dispatches into one row per line for the inventory
page's "recently dispatched" table.
"""

from __future__ import annotations

from dms.application.dto import DispatchDetailRow
from dms.domain.repository.dispatch_repository import DispatchRepository

DEFAULT_RECENT_DISPATCHES = 50


class DispatchDetailsHandler:

    def __init__(self, dispatch_repo: DispatchRepository) -> None:
        self._dispatch_repo = dispatch_repo

    def handle(self, limit: int = DEFAULT_RECENT_DISPATCHES) -> list[DispatchDetailRow]:
        recent = sorted(
            self._dispatch_repo.list_all(),
            key=lambda d: (d.dispatch_date, d.id or 0),
            reverse=True,
        )[:limit]

        return [
            DispatchDetailRow(
                item_code=line.item_code,
                product=line.item_name,
                kind=line.item_kind.value if line.item_kind else "mixed",
                quantity=line.quantity.value,
                work_order=f"WO-{dispatch.id:06d}",
                transport_mode=dispatch.transport_mode or "N/A",
                date=dispatch.dispatch_date,
            )
            for dispatch in recent
            for line in dispatch.items
        ]
