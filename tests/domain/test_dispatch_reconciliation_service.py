"""Unit tests for the DispatchReconciliationService domain service."""

from datetime import date

import pytest

from dms.domain.exceptions import (
    CompensationError,
    EntityNotFoundError,
    InsufficientStockError,
    PersistenceError,
)
from dms.domain.model.dispatch import DispatchLine, DispatchRecord
from dms.domain.model.inventory import InventoryRecord, ItemKind
from dms.domain.model.value_objects import Quantity
from dms.domain.service.dispatch_reconciliation_service import (
    DispatchReconciliationService,
    LineRequest,
)
from dms.domain.service.stock_ledger import StockLedger
from tests.fakes import FakeDispatchRepository, FakeInventoryRepository

MFG = ItemKind.MANUFACTURING
BO = ItemKind.BOUGHT_OUT


def _rec(item_id: str, kind: ItemKind, qty: int) -> InventoryRecord:
    return InventoryRecord(
        id=item_id, code=f"C-{item_id}", name=f"Item {item_id}", kind=kind,
        available_quantity=qty,
    )


def _setup(*records: InventoryRecord, **repo_kwargs):
    inventory = FakeInventoryRepository(list(records))
    dispatches = FakeDispatchRepository(**repo_kwargs)
    svc = DispatchReconciliationService(StockLedger(inventory), dispatches)
    return svc, inventory, dispatches


def _dispatch_from(lines: list[DispatchLine]) -> DispatchRecord:
    return DispatchRecord.create("Pune", date(2024, 3, 1), lines)


class _Interrupt(BaseException):
    """Stands in for a cancellation that is not an Exception."""


class TestReserveLines:

    def test_reserves_every_line_in_order(self):
        svc, inv, _ = _setup(_rec("A", MFG, 10), _rec("B", BO, 10))
        log = svc.reserve_lines([LineRequest("A", 3, MFG), LineRequest("B", 4, BO)])

        assert [m.item_id for m in log.movements] == ["A", "B"]
        assert inv.available(MFG, "A") == 7
        assert inv.available(BO, "B") == 6

    def test_snapshot_comes_from_inventory(self):
        svc, _, _ = _setup(_rec("A", MFG, 10))
        line = svc.reserve_lines([LineRequest("A", 1, MFG)]).lines()[0]
        assert (line.item_code, line.item_name, line.item_kind) == ("C-A", "Item A", MFG)

    def test_kind_resolved_when_missing(self):
        svc, inv, _ = _setup(_rec("B", BO, 10))
        log = svc.reserve_lines([LineRequest("B", 2)])
        assert log.movements[0].kind is BO
        assert inv.available(BO, "B") == 8

    def test_unknown_item_without_kind(self):
        svc, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Item ghost not found"):
            svc.reserve_lines([LineRequest("ghost", 1)])

    @pytest.mark.parametrize("failing_index", [0, 1, 2])
    def test_failure_on_any_line_restores_all_stock(self, failing_index):
        records = [_rec("A", MFG, 10), _rec("B", BO, 10), _rec("C", BO, 10)]
        svc, inv, _ = _setup(*records)
        requests = [LineRequest(r.id, 5, r.kind) for r in records]
        requests[failing_index] = LineRequest(records[failing_index].id, 50, records[failing_index].kind)

        with pytest.raises(InsufficientStockError):
            svc.reserve_lines(requests)

        for r in records:
            assert inv.available(r.kind, r.id) == 10

    def test_same_item_on_two_lines_rolls_back_exactly(self):
        svc, inv, _ = _setup(_rec("A", BO, 10))
        with pytest.raises(InsufficientStockError):
            svc.reserve_lines([
                LineRequest("A", 6, BO),
                LineRequest("A", 6, BO),
            ])
        assert inv.available(BO, "A") == 10

    def test_cancellation_mid_batch_rolls_back(self, monkeypatch):
        svc, inv, _ = _setup(_rec("A", MFG, 10), _rec("B", BO, 10))
        real_reserve = StockLedger.try_reserve

        def interrupted(self, kind, item_id, quantity):
            if item_id == "B":
                raise _Interrupt()
            return real_reserve(self, kind, item_id, quantity)

        monkeypatch.setattr(StockLedger, "try_reserve", interrupted)
        with pytest.raises(_Interrupt):
            svc.reserve_lines([LineRequest("A", 3, MFG), LineRequest("B", 3, BO)])

        assert inv.available(MFG, "A") == 10


class TestPersistNew:

    def test_retries_transient_failure(self):
        svc, inv, dispatches = _setup(_rec("A", BO, 10), fail_saves=2)
        log = svc.reserve_lines([LineRequest("A", 4, BO)])
        dispatch = _dispatch_from(log.lines())

        svc.persist_new(dispatch, log)

        assert dispatch.id == 1
        assert dispatches.save_attempts == 3
        assert inv.available(BO, "A") == 6

    def test_permanent_failure_releases_stock(self):
        svc, inv, dispatches = _setup(_rec("A", BO, 10), fail_saves=10)
        log = svc.reserve_lines([LineRequest("A", 4, BO)])

        with pytest.raises(PersistenceError):
            svc.persist_new(_dispatch_from(log.lines()), log)

        assert inv.available(BO, "A") == 10
        assert dispatches.list_all() == []


class TestReverse:

    def _create(self, svc, dispatches, requests):
        log = svc.reserve_lines(requests)
        dispatch = _dispatch_from(log.lines())
        svc.persist_new(dispatch, log)
        return dispatches.get_by_id(dispatch.id)

    def test_restores_every_line_and_deletes(self):
        svc, inv, dispatches = _setup(_rec("A", MFG, 10), _rec("B", BO, 10))
        dispatch = self._create(svc, dispatches, [LineRequest("A", 3, MFG), LineRequest("B", 4, BO)])

        outcome = svc.reverse(dispatch)

        assert len(outcome.restored) == 2
        assert outcome.gaps == []
        assert inv.available(MFG, "A") == 10
        assert inv.available(BO, "B") == 10
        assert dispatches.get_by_id(dispatch.id) is None

    def test_missing_item_becomes_gap(self):
        svc, inv, dispatches = _setup(_rec("A", MFG, 10), _rec("B", BO, 10))
        dispatch = self._create(svc, dispatches, [LineRequest("A", 3, MFG), LineRequest("B", 4, BO)])
        inv.delete(BO, "B")

        outcome = svc.reverse(dispatch)

        assert len(outcome.restored) == 1
        assert [(g.item_id, g.quantity) for g in outcome.gaps] == [("B", 4)]
        assert inv.available(MFG, "A") == 10
        assert dispatches.get_by_id(dispatch.id) is None

    def test_untagged_line_is_probed(self):
        svc, inv, dispatches = _setup(_rec("B", BO, 6))
        legacy = DispatchRecord.create(
            "Pune", date(2024, 3, 1),
            [DispatchLine("B", "C-B", "Item B", Quantity(4), item_kind=None)],
        )
        dispatches.add(legacy)

        outcome = svc.reverse(dispatches.get_by_id(legacy.id))

        assert len(outcome.restored) == 1
        assert inv.available(BO, "B") == 10

    def test_failed_delete_takes_stock_back_out(self):
        svc, inv, dispatches = _setup(_rec("A", MFG, 10), _rec("B", BO, 10))
        dispatch = self._create(svc, dispatches, [LineRequest("A", 3, MFG), LineRequest("B", 4, BO)])
        dispatches.fail_deletes = 1

        with pytest.raises(PersistenceError):
            svc.reverse(dispatch)

        assert inv.available(MFG, "A") == 7
        assert inv.available(BO, "B") == 6
        assert dispatches.get_by_id(dispatch.id) is not None

        # A retry now succeeds without restoring anything twice.
        svc.reverse(dispatch)
        assert inv.available(MFG, "A") == 10
        assert inv.available(BO, "B") == 10

    def test_failed_release_midway_takes_earlier_lines_back(self):
        svc, inv, dispatches = _setup(_rec("A", MFG, 10), _rec("B", BO, 10))
        dispatch = self._create(svc, dispatches, [LineRequest("A", 3, MFG), LineRequest("B", 4, BO)])
        inv.fail_release_of.add("B")

        with pytest.raises(PersistenceError):
            svc.reverse(dispatch)

        assert inv.available(MFG, "A") == 7
        assert inv.available(BO, "B") == 6

    def test_second_delete_of_same_dispatch_does_not_double_restore(self):
        svc, inv, dispatches = _setup(_rec("A", BO, 10))
        dispatch = self._create(svc, dispatches, [LineRequest("A", 4, BO)])
        stale_copy = dispatches.get_by_id(dispatch.id)

        svc.reverse(dispatch)
        with pytest.raises(EntityNotFoundError):
            svc.reverse(stale_copy)

        assert inv.available(BO, "A") == 10


class TestIncompleteCompensation:

    def test_failed_rollback_is_reported(self):
        svc, inv, _ = _setup(_rec("A", MFG, 10), _rec("B", BO, 1))
        inv.fail_release_of.add("A")

        with pytest.raises(CompensationError) as info:
            svc.reserve_lines([LineRequest("A", 3, MFG), LineRequest("B", 5, BO)])

        assert [(m.item_id, m.quantity) for m in info.value.unrecovered] == [("A", 3)]
        assert isinstance(info.value.__cause__, InsufficientStockError)
        assert "3 x C-A" in str(info.value)
        assert inv.available(MFG, "A") == 7

    def test_failed_retake_is_reported(self, monkeypatch):
        svc, inv, dispatches = _setup(_rec("A", BO, 10))
        log = svc.reserve_lines([LineRequest("A", 4, BO)])
        dispatch = _dispatch_from(log.lines())
        svc.persist_new(dispatch, log)

        def delete_after_stock_is_taken(dispatch_id):
            # Another request takes everything that was just restored.
            StockLedger(inv).try_reserve(BO, "A", 10)
            raise PersistenceError("dispatch store unavailable")

        monkeypatch.setattr(dispatches, "delete", delete_after_stock_is_taken)

        with pytest.raises(CompensationError) as info:
            svc.reverse(dispatches.get_by_id(dispatch.id))

        assert isinstance(info.value, PersistenceError)
        assert isinstance(info.value.__cause__, PersistenceError)
        assert [(m.item_id, m.quantity) for m in info.value.unrecovered] == [("A", 4)]
        assert inv.available(BO, "A") == 0
        assert dispatches.get_by_id(dispatch.id) is not None
