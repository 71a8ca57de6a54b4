"""Abstract repository for the DispatchRecord aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from dms.domain.model.dispatch import DispatchRecord


class DispatchRepository(ABC):

    @abstractmethod
    def get_by_id(self, dispatch_id: int) -> DispatchRecord | None:
        """Return a dispatch by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[DispatchRecord]:
        """Return every dispatch in insertion order."""

    @abstractmethod
    def add(self, dispatch: DispatchRecord) -> None:
        """Insert a new dispatch and assign its ID."""

    @abstractmethod
    def update(self, dispatch: DispatchRecord) -> None:
        """Overwrite a stored dispatch.

        Raises EntityNotFoundError if it no longer exists, so a concurrent
        delete is never undone by a late write.
        """

    @abstractmethod
    def delete(self, dispatch_id: int) -> bool:
        """Remove a dispatch.  Returns False if it did not exist."""
