"""A JSON array on disk, guarded by an in-process lock.

Writes go to a sibling temp file and are moved into place with
``os.replace`` so a crash never leaves a half-written store.  Any
``OSError`` or malformed content surfaces as PersistenceError.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path

from dms.domain.exceptions import PersistenceError


class JsonFile:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self.lock = threading.RLock()
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> list[dict]:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not read {self._file_path.name}: {exc}") from exc
        if not isinstance(raw, list):
            raise PersistenceError(f"{self._file_path.name} does not contain a JSON array")
        return raw

    def persist(self, records: list[dict]) -> None:
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, self._file_path)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self._file_path.name}: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
            except OSError as exc:
                raise PersistenceError(
                    f"Could not create {self._file_path.name}: {exc}"
                ) from exc
