"""Integration tests for the ListDispatches and ShowDispatch queries."""

from datetime import date

import pytest

from dms.application.dto import DispatchQuery
from dms.application.list_dispatches import ListDispatchesHandler
from dms.application.show_dispatch import ShowDispatchHandler
from dms.domain.exceptions import EntityNotFoundError, ValidationError
from dms.domain.model.dispatch import DispatchLine, DispatchRecord, DispatchStatus
from dms.domain.model.inventory import ItemKind
from dms.domain.model.value_objects import Quantity
from tests.fakes import FakeDispatchRepository


def _dispatch(destination: str, day: date, code: str = "BO-100", qty: int = 1, **extra) -> DispatchRecord:
    return DispatchRecord.create(
        destination, day,
        [DispatchLine("X", code, f"{code} part", Quantity(qty), ItemKind.BOUGHT_OUT)],
        **extra,
    )


def _setup() -> FakeDispatchRepository:
    repo = FakeDispatchRepository()
    repo.add(_dispatch("Pune Plant", date(2024, 1, 10), customer_name="Acme"))
    repo.add(_dispatch("Mumbai Port", date(2024, 2, 5), code="MF-200", vehicle_number="MH01"))
    repo.add(_dispatch("Pune Depot", date(2024, 2, 20), driver_name="Ravi"))
    delivered = _dispatch("Nashik", date(2024, 3, 1))
    delivered.change_status(DispatchStatus.DELIVERED)
    repo.add(delivered)
    return repo


def _list(repo, **query):
    return ListDispatchesHandler(repo).handle(DispatchQuery(**query))


class TestListDispatches:

    def test_newest_first(self):
        page = _list(_setup())
        assert [d.destination for d in page.dispatches] == [
            "Nashik", "Pune Depot", "Mumbai Port", "Pune Plant",
        ]

    def test_same_date_ordered_by_id_descending(self):
        repo = FakeDispatchRepository()
        repo.add(_dispatch("A", date(2024, 1, 1)))
        repo.add(_dispatch("B", date(2024, 1, 1)))
        assert [d.id for d in _list(repo).dispatches] == [2, 1]

    def test_status_filter(self):
        page = _list(_setup(), status="delivered")
        assert [d.destination for d in page.dispatches] == ["Nashik"]

    def test_destination_substring_case_insensitive(self):
        page = _list(_setup(), destination="pune")
        assert {d.destination for d in page.dispatches} == {"Pune Plant", "Pune Depot"}

    def test_date_range_inclusive(self):
        page = _list(_setup(), start_date=date(2024, 2, 5), end_date=date(2024, 2, 20))
        assert {d.destination for d in page.dispatches} == {"Mumbai Port", "Pune Depot"}

    @pytest.mark.parametrize("needle, expected", [
        ("acme", "Pune Plant"),
        ("mh01", "Mumbai Port"),
        ("ravi", "Pune Depot"),
        ("mf-200", "Mumbai Port"),
        ("nashik", "Nashik"),
    ])
    def test_search(self, needle, expected):
        page = _list(_setup(), search=needle)
        assert [d.destination for d in page.dispatches] == [expected]

    def test_pagination(self):
        page = _list(_setup(), page=2, limit=3)
        assert [d.destination for d in page.dispatches] == ["Pune Plant"]
        p = page.pagination
        assert (p.current, p.total, p.count, p.limit) == (2, 2, 4, 3)

    def test_page_past_end_is_empty(self):
        page = _list(_setup(), page=5, limit=3)
        assert page.dispatches == []
        assert page.pagination.count == 4

    def test_empty_store(self):
        page = _list(FakeDispatchRepository())
        assert page.dispatches == []
        assert page.pagination.total == 0

    @pytest.mark.parametrize("query", [
        {"page": 0},
        {"limit": 0},
        {"start_date": date(2024, 3, 1), "end_date": date(2024, 1, 1)},
        {"status": "Lost"},
    ])
    def test_invalid_query(self, query):
        with pytest.raises(ValidationError):
            _list(_setup(), **query)

    def test_listing_never_mutates(self):
        repo = _setup()
        before = repo.list_all()
        _list(repo, search="pune")
        assert repo.list_all() == before


class TestShowDispatch:

    def test_show(self):
        repo = _setup()
        dto = ShowDispatchHandler(repo).handle(1)
        assert dto.destination == "Pune Plant"
        assert dto.items[0].item_type == "bought_out"

    def test_not_found(self):
        with pytest.raises(EntityNotFoundError, match="Dispatch #42 not found"):
            ShowDispatchHandler(FakeDispatchRepository()).handle(42)
