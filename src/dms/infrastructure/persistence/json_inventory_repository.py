"""JSON-file-backed implementation of InventoryRepository.

Both kinds live in one file; a record is addressed by ``(kind, id)``.
``save`` with an expected version is checked and written inside the same
critical section, which is what makes a stock movement atomic.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from dms.domain.exceptions import ConcurrencyConflictError
from dms.domain.model.inventory import InventoryRecord, ItemKind
from dms.domain.repository.inventory_repository import InventoryRepository
from dms.infrastructure.persistence.json_file import JsonFile


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- InventoryRepository interface ----------------------------------------

    def get(self, kind: ItemKind, item_id: str) -> InventoryRecord | None:
        with self._file.lock:
            for raw in self._file.load():
                if self._key(raw) == (kind.value, item_id):
                    return self._to_domain(raw)
        return None

    def list_all(self, kind: ItemKind | None = None) -> list[InventoryRecord]:
        with self._file.lock:
            records = [self._to_domain(raw) for raw in self._file.load()]
        if kind is not None:
            records = [r for r in records if r.kind is kind]
        return records

    def save(self, record: InventoryRecord, expected_version: int | None = None) -> None:
        key = (record.kind.value, record.id)
        with self._file.lock:
            records = self._file.load()
            index = next(
                (i for i, raw in enumerate(records) if self._key(raw) == key), None
            )
            stored_version = records[index]["version"] if index is not None else None

            if expected_version is not None and stored_version != expected_version:
                raise ConcurrencyConflictError(
                    f"{record.kind.value} item {record.id} changed since it was read "
                    f"(expected version {expected_version}, found {stored_version})"
                )

            new_version = stored_version + 1 if stored_version is not None else record.version
            raw = self._to_raw(record, new_version)
            if index is None:
                records.append(raw)
            else:
                records[index] = raw
            self._file.persist(records)
            record.version = new_version

    def delete(self, kind: ItemKind, item_id: str) -> bool:
        with self._file.lock:
            records = self._file.load()
            kept = [raw for raw in records if self._key(raw) != (kind.value, item_id)]
            if len(kept) == len(records):
                return False
            self._file.persist(kept)
            return True

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _key(raw: dict) -> tuple[str, str]:
        return raw["kind"], raw["id"]

    @staticmethod
    def _to_raw(record: InventoryRecord, version: int) -> dict:
        return {
            "id": record.id,
            "kind": record.kind.value,
            "code": record.code,
            "name": record.name,
            "available_quantity": record.available_quantity,
            "last_updated": record.last_updated.isoformat(),
            "version": version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryRecord:
        return InventoryRecord(
            id=raw["id"],
            kind=ItemKind(raw["kind"]),
            code=raw["code"],
            name=raw["name"],
            available_quantity=raw["available_quantity"],
            last_updated=datetime.fromisoformat(raw["last_updated"]),
            version=raw.get("version", 0),
        )
