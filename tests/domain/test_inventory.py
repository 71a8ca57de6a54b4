"""Unit tests for the InventoryRecord aggregate."""

from datetime import datetime, timezone

import pytest

from dms.domain.exceptions import InsufficientStockError, ValidationError
from dms.domain.model.inventory import InventoryRecord, ItemKind


def _record(qty: int = 10, kind: ItemKind = ItemKind.BOUGHT_OUT) -> InventoryRecord:
    return InventoryRecord(
        id="X", code="BO-001", name="Bearing", kind=kind, available_quantity=qty,
        last_updated=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestInventoryRecordReserve:

    def test_reserve_reduces_available(self):
        rec = _record(10)
        rec.reserve(4)
        assert rec.available_quantity == 6

    def test_reserve_all_available(self):
        rec = _record(10)
        rec.reserve(10)
        assert rec.available_quantity == 0

    def test_reserve_more_than_available_rejected(self):
        rec = _record(5, ItemKind.MANUFACTURING)
        with pytest.raises(InsufficientStockError) as info:
            rec.reserve(8)
        assert info.value.available == 5
        assert info.value.requested == 8
        assert rec.available_quantity == 5

    def test_insufficient_stock_is_a_validation_error(self):
        with pytest.raises(ValidationError, match="Insufficient stock for BO-001"):
            _record(1).reserve(2)

    def test_reserve_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _record().reserve(0)

    def test_reserve_stamps_last_updated(self):
        rec = _record()
        rec.reserve(1)
        assert rec.last_updated > datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestInventoryRecordRelease:

    def test_release_increases_available(self):
        rec = _record(6)
        rec.release(4)
        assert rec.available_quantity == 10

    def test_release_has_no_upper_bound(self):
        rec = _record(0)
        rec.release(1_000_000)
        assert rec.available_quantity == 1_000_000

    def test_release_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _record().release(-1)


class TestInventoryRecordConstruction:

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            _record(-1)


class TestItemKindParse:

    @pytest.mark.parametrize("raw", ["manufacturing", "Manufacturing", " MANUFACTURING "])
    def test_manufacturing_spellings(self, raw):
        assert ItemKind.parse(raw) is ItemKind.MANUFACTURING

    @pytest.mark.parametrize("raw", ["bought_out", "boughtout", "Bought Out", "bought-out"])
    def test_bought_out_spellings(self, raw):
        assert ItemKind.parse(raw) is ItemKind.BOUGHT_OUT

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError, match="Unknown item type"):
            ItemKind.parse("consumable")
