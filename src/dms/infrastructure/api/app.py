"""DMS FastAPI application.

Usage:
    uvicorn dms.infrastructure.api.app:app --host 0.0.0.0 --port 8000

or ``dms serve``.  Authentication is handled upstream; the API trusts the
``dispatchedBy`` it is given.
"""

from __future__ import annotations

from functools import lru_cache

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dms.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
    PersistenceError,
)
from dms.domain.repository.dispatch_repository import DispatchRepository
from dms.domain.repository.inventory_repository import InventoryRepository
from dms.infrastructure import bootstrap
from dms.infrastructure.api.routes import dispatch_router
from dms.infrastructure.config import Settings

logger = structlog.get_logger(__name__)


def create_app(
    dispatch_repo: DispatchRepository | None = None,
    inventory_repo: InventoryRepository | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the app.  Missing collaborators come from the composition root."""
    app = FastAPI(
        title="DMS API",
        description="Dispatch management — stock reconciliation for outbound goods",
    )
    app.state.settings = settings if settings is not None else bootstrap.settings()
    app.state.dispatch_repo = (
        dispatch_repo if dispatch_repo is not None else bootstrap.dispatch_repository()
    )
    app.state.inventory_repo = (
        inventory_repo if inventory_repo is not None else bootstrap.inventory_repository()
    )

    app.add_exception_handler(DomainException, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(dispatch_router)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse(content={"status": "ok"})

    return app


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
def _status_for(exc: DomainException) -> int:
    if isinstance(exc, EntityNotFoundError):
        return 404
    if isinstance(exc, PersistenceError):
        return 500
    return 400


async def _domain_error_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = _status_for(exc)
    body: dict = {"kind": exc.kind, "message": str(exc)}

    if isinstance(exc, InsufficientStockError):
        body.update(itemId=exc.item_id, available=exc.available, requested=exc.requested)
    elif isinstance(exc, PersistenceError):
        body["message"] = "The dispatch store is unavailable; the operation was not applied"
        body["detail"] = str(exc)

    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, kind=exc.kind, error=str(exc))
    return JSONResponse(status_code=status_code, content=body)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "kind": "ValidationError",
            "message": "Malformed request",
            "errors": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ],
        },
    )


@lru_cache(maxsize=None)
def default_app() -> FastAPI:
    """The process-wide app wired to the composition root."""
    return create_app()


def __getattr__(name: str):
    # ``uvicorn dms.infrastructure.api.app:app`` builds the app lazily so that
    # importing this module (e.g. in tests) does not touch the data directory.
    if name == "app":
        return default_app()
    raise AttributeError(name)
