"""JSON-file-backed implementation of DispatchRepository."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from dms.domain.exceptions import EntityNotFoundError
from dms.domain.model.dispatch import DispatchLine, DispatchRecord, DispatchStatus
from dms.domain.model.inventory import ItemKind
from dms.domain.model.value_objects import Quantity
from dms.domain.repository.dispatch_repository import DispatchRepository
from dms.infrastructure.persistence.json_file import JsonFile


class JsonDispatchRepository(DispatchRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- DispatchRepository interface -----------------------------------------

    def get_by_id(self, dispatch_id: int) -> DispatchRecord | None:
        with self._file.lock:
            for raw in self._file.load():
                if raw["id"] == dispatch_id:
                    return self._to_domain(raw)
        return None

    def list_all(self) -> list[DispatchRecord]:
        with self._file.lock:
            return [self._to_domain(raw) for raw in self._file.load()]

    def add(self, dispatch: DispatchRecord) -> None:
        with self._file.lock:
            dispatches = self._file.load()
            new_id = max((d["id"] for d in dispatches), default=0) + 1
            dispatches.append(self._to_raw(dispatch, new_id))
            self._file.persist(dispatches)
            dispatch.id = new_id

    def update(self, dispatch: DispatchRecord) -> None:
        with self._file.lock:
            dispatches = self._file.load()
            for i, existing in enumerate(dispatches):
                if existing["id"] == dispatch.id:
                    dispatches[i] = self._to_raw(dispatch, dispatch.id)
                    break
            else:
                raise EntityNotFoundError(f"Dispatch #{dispatch.id} not found")
            self._file.persist(dispatches)

    def delete(self, dispatch_id: int) -> bool:
        with self._file.lock:
            dispatches = self._file.load()
            kept = [d for d in dispatches if d["id"] != dispatch_id]
            if len(kept) == len(dispatches):
                return False
            self._file.persist(kept)
            return True

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(dispatch: DispatchRecord, dispatch_id: int) -> dict:
        return {
            "id": dispatch_id,
            "destination": dispatch.destination,
            "customer_name": dispatch.customer_name,
            "address": dispatch.address,
            "contact_number": dispatch.contact_number,
            "dispatch_date": dispatch.dispatch_date.isoformat(),
            "delivery_date": (
                dispatch.delivery_date.isoformat() if dispatch.delivery_date else None
            ),
            "transport_mode": dispatch.transport_mode,
            "vehicle_number": dispatch.vehicle_number,
            "driver_name": dispatch.driver_name,
            "driver_contact": dispatch.driver_contact,
            "dispatched_by": dispatch.dispatched_by,
            "remarks": dispatch.remarks,
            "status": dispatch.status.value,
            "created_at": dispatch.created_at.isoformat(),
            "updated_at": dispatch.updated_at.isoformat(),
            "items": [
                {
                    "item_id": line.item_id,
                    "item_code": line.item_code,
                    "item_name": line.item_name,
                    "quantity": line.quantity.value,
                    "item_kind": line.item_kind.value if line.item_kind else None,
                }
                for line in dispatch.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> DispatchRecord:
        items = tuple(
            DispatchLine(
                item_id=i["item_id"],
                item_code=i["item_code"],
                item_name=i["item_name"],
                quantity=Quantity(i["quantity"]),
                item_kind=ItemKind(i["item_kind"]) if i.get("item_kind") else None,
            )
            for i in raw["items"]
        )
        return DispatchRecord(
            id=raw["id"],
            destination=raw["destination"],
            dispatch_date=date.fromisoformat(raw["dispatch_date"]),
            items=items,
            customer_name=raw.get("customer_name", ""),
            address=raw.get("address", ""),
            contact_number=raw.get("contact_number", ""),
            delivery_date=(
                date.fromisoformat(raw["delivery_date"]) if raw.get("delivery_date") else None
            ),
            transport_mode=raw.get("transport_mode", ""),
            vehicle_number=raw.get("vehicle_number", ""),
            driver_name=raw.get("driver_name", ""),
            driver_contact=raw.get("driver_contact", ""),
            dispatched_by=raw.get("dispatched_by", ""),
            remarks=raw.get("remarks", ""),
            status=DispatchStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
