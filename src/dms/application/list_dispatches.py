"""Application service: List Dispatches use case (query).

Filtering, free-text search and pagination over the dispatch store.
Read-only; never touches inventory.
"""

from __future__ import annotations

import math

from dms.application.dto import DispatchPage, DispatchQuery, Pagination
from dms.application.mapping import to_dispatch_dto
from dms.domain.exceptions import ValidationError
from dms.domain.model.dispatch import DispatchRecord, DispatchStatus
from dms.domain.repository.dispatch_repository import DispatchRepository


class ListDispatchesHandler:

    def __init__(self, dispatch_repo: DispatchRepository) -> None:
        self._dispatch_repo = dispatch_repo

    def handle(self, query: DispatchQuery) -> DispatchPage:
        if query.page < 1 or query.limit < 1:
            raise ValidationError("page and limit must be positive")
        if query.start_date and query.end_date and query.start_date > query.end_date:
            raise ValidationError("startDate must not be after endDate")

        status = DispatchStatus.parse(query.status) if query.status else None

        matches = [
            d for d in self._dispatch_repo.list_all()
            if self._matches(d, query, status)
        ]
        matches.sort(key=lambda d: (d.dispatch_date, d.id or 0), reverse=True)

        count = len(matches)
        start = (query.page - 1) * query.limit
        page = matches[start:start + query.limit]

        return DispatchPage(
            dispatches=[to_dispatch_dto(d) for d in page],
            pagination=Pagination(
                current=query.page,
                total=math.ceil(count / query.limit),
                count=count,
                limit=query.limit,
            ),
        )

    @staticmethod
    def _matches(
        dispatch: DispatchRecord,
        query: DispatchQuery,
        status: DispatchStatus | None,
    ) -> bool:
        if status is not None and dispatch.status != status:
            return False
        if query.destination and query.destination.lower() not in dispatch.destination.lower():
            return False
        if query.start_date and dispatch.dispatch_date < query.start_date:
            return False
        if query.end_date and dispatch.dispatch_date > query.end_date:
            return False
        if query.search:
            needle = query.search.lower()
            haystack = [
                dispatch.destination,
                dispatch.customer_name,
                dispatch.vehicle_number,
                dispatch.driver_name,
            ]
            for line in dispatch.items:
                haystack.append(line.item_code)
                haystack.append(line.item_name)
            if not any(needle in field.lower() for field in haystack):
                return False
        return True
