"""Unit tests for the DispatchRecord aggregate and its business rules."""

from datetime import date

import pytest

from dms.domain.exceptions import ValidationError
from dms.domain.model.dispatch import DispatchLine, DispatchRecord, DispatchStatus
from dms.domain.model.inventory import ItemKind
from dms.domain.model.value_objects import Quantity


def _line(item_id: str = "X", qty: int = 4) -> DispatchLine:
    return DispatchLine(
        item_id=item_id,
        item_code=f"C-{item_id}",
        item_name=f"Item {item_id}",
        quantity=Quantity(qty),
        item_kind=ItemKind.BOUGHT_OUT,
    )


def _dispatch(**kwargs) -> DispatchRecord:
    defaults = dict(destination="Pune", dispatch_date=date(2024, 3, 1), items=[_line()])
    defaults.update(kwargs)
    return DispatchRecord.create(**defaults)


class TestDispatchCreation:

    def test_happy_path(self):
        d = _dispatch(items=[_line("A", 2), _line("B", 3)])
        assert d.status == DispatchStatus.DISPATCHED
        assert d.id is None  # assigned by repository
        assert d.total_quantity == 5
        assert d.total_items == 2

    def test_defaults_for_optional_fields(self):
        d = _dispatch()
        assert d.transport_mode == "Road"
        assert d.dispatched_by == "Admin"
        assert d.customer_name == ""

    def test_destination_required(self):
        with pytest.raises(ValidationError, match="Destination and dispatch date"):
            _dispatch(destination="  ")

    def test_dispatch_date_required(self):
        with pytest.raises(ValidationError, match="Destination and dispatch date"):
            _dispatch(dispatch_date=None)

    def test_items_required(self):
        with pytest.raises(ValidationError, match="at least one item"):
            _dispatch(items=[])

    def test_delivery_before_dispatch_rejected(self):
        with pytest.raises(ValidationError, match="before dispatch date"):
            _dispatch(delivery_date=date(2024, 2, 28))

    def test_lines_are_immutable(self):
        d = _dispatch()
        assert isinstance(d.items, tuple)
        with pytest.raises(AttributeError):
            d.items[0].quantity = Quantity(100)  # type: ignore[misc]


class TestDispatchStatusTransitions:

    def test_dispatched_to_in_transit_to_delivered(self):
        d = _dispatch()
        d.change_status(DispatchStatus.IN_TRANSIT)
        d.change_status(DispatchStatus.DELIVERED)
        assert d.status == DispatchStatus.DELIVERED

    def test_same_status_is_noop(self):
        d = _dispatch()
        d.change_status(DispatchStatus.DISPATCHED)
        assert d.status == DispatchStatus.DISPATCHED

    def test_delivered_is_terminal(self):
        d = _dispatch()
        d.change_status(DispatchStatus.DELIVERED)
        with pytest.raises(ValidationError, match="from Delivered to Dispatched"):
            d.change_status(DispatchStatus.DISPATCHED)

    def test_cancelled_is_terminal(self):
        d = _dispatch()
        d.change_status(DispatchStatus.CANCELLED)
        with pytest.raises(ValidationError, match="Cannot change dispatch status"):
            d.change_status(DispatchStatus.IN_TRANSIT)

    def test_in_transit_cannot_go_back(self):
        d = _dispatch()
        d.change_status(DispatchStatus.IN_TRANSIT)
        with pytest.raises(ValidationError):
            d.change_status(DispatchStatus.DISPATCHED)

    @pytest.mark.parametrize("raw", ["InTransit", "In Transit", "in_transit", "intransit"])
    def test_status_parse(self, raw):
        assert DispatchStatus.parse(raw) is DispatchStatus.IN_TRANSIT

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError, match="Unknown dispatch status"):
            DispatchStatus.parse("Lost")


class TestDispatchUpdateDetails:

    def test_only_supplied_fields_change(self):
        d = _dispatch(vehicle_number="MH12", driver_name="Ravi", remarks="fragile")
        d.update_details(driver_name="Sunil")
        assert d.driver_name == "Sunil"
        assert d.vehicle_number == "MH12"
        assert d.remarks == "fragile"

    def test_empty_string_clears_field(self):
        d = _dispatch(remarks="fragile")
        d.update_details(remarks="")
        assert d.remarks == ""

    def test_update_bumps_updated_at(self):
        d = _dispatch()
        before = d.updated_at
        d.update_details(remarks="x")
        assert d.updated_at >= before

    def test_bad_delivery_date_leaves_record_untouched(self):
        d = _dispatch()
        with pytest.raises(ValidationError):
            d.update_details(status=DispatchStatus.DELIVERED, delivery_date=date(2023, 1, 1))
        assert d.status == DispatchStatus.DISPATCHED
        assert d.delivery_date is None
