"""Domain service: Dispatch Reconciliation.

Keeps the inventory ledger and the dispatch store consistent with each
other across the dispatch lifecycle.  There is no transaction spanning
several inventory records plus a dispatch, so every multi-record change
is driven through a compensating log:

  Create — reserve each line in order, recording what was taken.  If any
           later step fails (another line, the dispatch write, or the
           caller going away) the log releases everything it holds, newest
           first, before the error propagates.
  Delete — release each line, recording what was put back.  If the store
           fails before the dispatch is gone, the released lines are taken
           out again so a retry cannot restore them twice.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from dms.domain.exceptions import (
    CompensationError,
    DomainException,
    EntityNotFoundError,
    PersistenceError,
)
from dms.domain.model.dispatch import DispatchLine, DispatchRecord, ReconciliationGap
from dms.domain.model.inventory import ItemKind
from dms.domain.model.value_objects import Quantity
from dms.domain.repository.dispatch_repository import DispatchRepository
from dms.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)

DEFAULT_PERSIST_ATTEMPTS = 3


@dataclass(frozen=True)
class LineRequest:
    """A validated request to take ``quantity`` units of one item."""

    item_id: str
    quantity: int
    kind: ItemKind | None = None


@dataclass(frozen=True)
class StockMovement:
    """One committed change to the ledger, enough to undo it."""

    kind: ItemKind
    item_id: str
    item_code: str
    item_name: str
    quantity: int

    def to_line(self) -> DispatchLine:
        return DispatchLine(
            item_id=self.item_id,
            item_code=self.item_code,
            item_name=self.item_name,
            quantity=Quantity(self.quantity),
            item_kind=self.kind,
        )


class ReservationLog:
    """Reservations taken so far for one dispatch, in the order taken."""

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger
        self._movements: list[StockMovement] = []

    @property
    def movements(self) -> list[StockMovement]:
        return list(self._movements)

    def lines(self) -> list[DispatchLine]:
        return [m.to_line() for m in self._movements]

    def reserve(self, request: LineRequest, kind: ItemKind) -> StockMovement:
        record = self._ledger.try_reserve(kind, request.item_id, request.quantity)
        movement = StockMovement(
            kind=kind,
            item_id=record.id,
            item_code=record.code,
            item_name=record.name,
            quantity=request.quantity,
        )
        self._movements.append(movement)
        return movement

    def rollback(self) -> list[StockMovement]:
        """Release every logged reservation, newest first.

        Returns the movements that could not be released.  Those are logged
        at error level; the caller is already propagating a failure.
        """
        unreleased: list[StockMovement] = []
        while self._movements:
            movement = self._movements.pop()
            try:
                self._ledger.release(movement.kind, movement.item_id, movement.quantity)
            except DomainException as exc:
                unreleased.append(movement)
                logger.error(
                    "Reservation rollback failed",
                    item_id=movement.item_id,
                    kind=movement.kind.value,
                    quantity=movement.quantity,
                    error=str(exc),
                )
            else:
                logger.warning(
                    "Reservation rolled back",
                    item_id=movement.item_id,
                    kind=movement.kind.value,
                    quantity=movement.quantity,
                )
        return unreleased


@dataclass
class RestoreOutcome:
    """What a reversal managed to put back."""

    restored: list[StockMovement] = field(default_factory=list)
    gaps: list[ReconciliationGap] = field(default_factory=list)


class DispatchReconciliationService:

    def __init__(
        self,
        ledger: StockLedger,
        dispatch_repo: DispatchRepository,
        persist_attempts: int = DEFAULT_PERSIST_ATTEMPTS,
    ) -> None:
        self._ledger = ledger
        self._dispatch_repo = dispatch_repo
        self._persist_attempts = max(1, persist_attempts)

    # --- Create ---------------------------------------------------------------

    def reserve_lines(self, requests: list[LineRequest]) -> ReservationLog:
        """Reserve every line or none of them.

        Lines are processed in the order supplied.  Any exception, including
        cancellation of the calling thread, rolls back the earlier
        reservations first.
        """
        log = ReservationLog(self._ledger)
        try:
            for request in requests:
                kind = request.kind or self._resolve_kind(request.item_id)
                log.reserve(request, kind)
        except BaseException as exc:
            _raise_if_unrecovered(exc, log.rollback(), "released")
            raise
        return log

    def persist_new(self, dispatch: DispatchRecord, log: ReservationLog) -> None:
        """Save a freshly built dispatch whose stock is held by ``log``.

        Retries the write; if every attempt fails the reservations are
        released so stock is never held without a dispatch behind it.
        """
        try:
            self._save_with_retry(dispatch)
        except BaseException as exc:
            _raise_if_unrecovered(exc, log.rollback(), "released")
            raise

    def _save_with_retry(self, dispatch: DispatchRecord) -> None:
        for attempt in range(1, self._persist_attempts + 1):
            try:
                self._dispatch_repo.add(dispatch)
                return
            except PersistenceError as exc:
                if attempt == self._persist_attempts:
                    raise
                logger.warning(
                    "Dispatch write failed, retrying",
                    attempt=attempt,
                    error=str(exc),
                )

    def _resolve_kind(self, item_id: str) -> ItemKind:
        record = self._ledger.locate(item_id)
        if record is None:
            raise EntityNotFoundError(f"Item {item_id} not found")
        return record.kind

    # --- Delete ---------------------------------------------------------------

    def reverse(self, dispatch: DispatchRecord) -> RestoreOutcome:
        """Restore every line's stock, then remove the dispatch.

        Lines whose inventory record has disappeared become
        ReconciliationGaps; they never block the delete.  If the delete
        fails and restored stock cannot be taken back out, a
        CompensationError names the lines left restored.
        """
        outcome = RestoreOutcome()
        try:
            for line in dispatch.items:
                movement = self._restore_line(dispatch, line)
                if movement is None:
                    outcome.gaps.append(
                        ReconciliationGap(
                            item_id=line.item_id,
                            item_code=line.item_code,
                            quantity=line.quantity.value,
                            reason="inventory record no longer exists",
                        )
                    )
                else:
                    outcome.restored.append(movement)

            if not self._dispatch_repo.delete(dispatch.id):  # type: ignore[arg-type]
                raise EntityNotFoundError(f"Dispatch #{dispatch.id} not found")
        except BaseException as exc:
            _raise_if_unrecovered(exc, self._retake(outcome.restored), "taken back out")
            raise
        return outcome

    def _restore_line(self, dispatch: DispatchRecord, line: DispatchLine) -> StockMovement | None:
        kind = line.item_kind
        if kind is None:
            record = self._ledger.locate(line.item_id)
            kind = record.kind if record is not None else None

        if kind is not None:
            try:
                self._ledger.release(kind, line.item_id, line.quantity.value)
            except EntityNotFoundError:
                pass
            else:
                return StockMovement(
                    kind=kind,
                    item_id=line.item_id,
                    item_code=line.item_code,
                    item_name=line.item_name,
                    quantity=line.quantity.value,
                )

        logger.warning(
            "Reconciliation gap: stock not restorable",
            dispatch_id=dispatch.id,
            item_id=line.item_id,
            item_code=line.item_code,
            quantity=line.quantity.value,
        )
        return None

    def _retake(self, restored: list[StockMovement]) -> list[StockMovement]:
        """Reserve restored lines again, newest first.  Returns the ones that failed."""
        unrecovered: list[StockMovement] = []
        for movement in reversed(restored):
            try:
                self._ledger.try_reserve(movement.kind, movement.item_id, movement.quantity)
            except DomainException as exc:
                unrecovered.append(movement)
                logger.error(
                    "Could not undo stock restoration",
                    item_id=movement.item_id,
                    kind=movement.kind.value,
                    quantity=movement.quantity,
                    error=str(exc),
                )
        return unrecovered


def _raise_if_unrecovered(
    cause: BaseException,
    unrecovered: list[StockMovement],
    undo: str,
) -> None:
    # Interrupts keep propagating as they are; the log has the details.
    if not unrecovered or not isinstance(cause, Exception):
        return
    summary = ", ".join(f"{m.quantity} x {m.item_code}" for m in unrecovered)
    raise CompensationError(
        f"{cause}; stock could not be {undo} for: {summary}",
        unrecovered,
    ) from cause
