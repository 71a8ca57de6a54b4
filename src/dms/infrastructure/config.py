"""Runtime settings, read once from the environment.

    DMS_DATA_DIR               directory holding the JSON stores
    DMS_LOG_LEVEL              stdlib level name (INFO)
    DMS_LOG_FORMAT             "console" or "json"
    DMS_PERSIST_ATTEMPTS       dispatch write attempts before giving up (3)
    DMS_MAX_CONFLICT_RETRIES   optimistic retries per stock write (20)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

LOG_FORMATS = ("console", "json")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = "INFO"
    log_format: str = "console"
    persist_attempts: int = 3
    max_conflict_retries: int = 20

    @property
    def inventory_file(self) -> Path:
        return self.data_dir / "inventory.json"

    @property
    def dispatch_file(self) -> Path:
        return self.data_dir / "dispatches.json"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    log_format = env.get("DMS_LOG_FORMAT", "console").lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"DMS_LOG_FORMAT must be one of {LOG_FORMATS}, got {log_format!r}")

    return Settings(
        data_dir=Path(env["DMS_DATA_DIR"]) if env.get("DMS_DATA_DIR") else DEFAULT_DATA_DIR,
        log_level=env.get("DMS_LOG_LEVEL", "INFO").upper(),
        log_format=log_format,
        persist_attempts=_positive_int(env, "DMS_PERSIST_ATTEMPTS", 3),
        max_conflict_retries=_positive_int(env, "DMS_MAX_CONFLICT_RETRIES", 20),
    )


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value
