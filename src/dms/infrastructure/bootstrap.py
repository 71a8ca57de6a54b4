"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Repositories are cached per process: their locks are what serialize
concurrent stock writes, so every request must share the same instance.
"""

from __future__ import annotations

from functools import lru_cache

from dms.infrastructure.config import Settings, load_settings
from dms.infrastructure.persistence.json_dispatch_repository import (
    JsonDispatchRepository,
)
from dms.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)


@lru_cache(maxsize=None)
def settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=None)
def inventory_repository() -> JsonInventoryRepository:
    return JsonInventoryRepository(settings().inventory_file)


@lru_cache(maxsize=None)
def dispatch_repository() -> JsonDispatchRepository:
    return JsonDispatchRepository(settings().dispatch_file)


def reset() -> None:
    """Forget cached settings and repositories (e.g. after DMS_DATA_DIR changes)."""
    settings.cache_clear()
    inventory_repository.cache_clear()
    dispatch_repository.cache_clear()
