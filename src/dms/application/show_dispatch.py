"""Application service: Show Dispatch use case (query)."""

from __future__ import annotations

from dms.application.dto import DispatchDTO
from dms.application.mapping import to_dispatch_dto
from dms.domain.exceptions import EntityNotFoundError
from dms.domain.repository.dispatch_repository import DispatchRepository


class ShowDispatchHandler:

    def __init__(self, dispatch_repo: DispatchRepository) -> None:
        self._dispatch_repo = dispatch_repo

    def handle(self, dispatch_id: int) -> DispatchDTO:
        dispatch = self._dispatch_repo.get_by_id(dispatch_id)
        if dispatch is None:
            raise EntityNotFoundError(f"Dispatch #{dispatch_id} not found")
        return to_dispatch_dto(dispatch)
