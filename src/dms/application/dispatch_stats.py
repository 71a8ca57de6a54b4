"""Application service: Dispatch Statistics use case (query)."""

from __future__ import annotations

from collections import defaultdict

from dms.application.dto import (
    DispatchStats,
    DispatchSummary,
    MonthlyTrend,
    StatusBreakdown,
)
from dms.domain.repository.dispatch_repository import DispatchRepository

MAX_MONTHS = 12


class DispatchStatsHandler:

    def __init__(self, dispatch_repo: DispatchRepository) -> None:
        self._dispatch_repo = dispatch_repo

    def handle(self) -> DispatchStats:
        """Totals, a per-status breakdown and the latest monthly trend."""
        dispatches = self._dispatch_repo.list_all()

        by_status: dict[str, list[int]] = defaultdict(lambda: [0, 0])
        by_month: dict[tuple[int, int], list[int]] = defaultdict(lambda: [0, 0])
        for d in dispatches:
            s = by_status[d.status.value]
            s[0] += 1
            s[1] += d.total_quantity
            m = by_month[(d.dispatch_date.year, d.dispatch_date.month)]
            m[0] += 1
            m[1] += d.total_quantity

        summary = DispatchSummary(
            total_dispatches=len(dispatches),
            total_quantity=sum(d.total_quantity for d in dispatches),
            total_items=sum(d.total_items for d in dispatches),
            unique_destinations=sorted({d.destination for d in dispatches}),
        )
        status_breakdown = [
            StatusBreakdown(status=status, count=count, total_quantity=qty)
            for status, (count, qty) in sorted(by_status.items())
        ]
        monthly_trends = [
            MonthlyTrend(year=year, month=month, count=count, total_quantity=qty)
            for (year, month), (count, qty) in sorted(by_month.items(), reverse=True)
        ][:MAX_MONTHS]

        return DispatchStats(
            summary=summary,
            status_breakdown=status_breakdown,
            monthly_trends=monthly_trends,
        )
