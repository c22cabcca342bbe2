"""Sync endpoints: POST /api/sync/{products,pricelists,images}."""

from typing import Any, Awaitable, Callable

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from catalog_sync.errors import ApplicationError, CatalogSyncError, TotalFailureError
from catalog_sync.pipeline.pipeline import SyncResult

from ..auth import verify_sync_token

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/sync", dependencies=[Depends(verify_sync_token)])


def _error_details(error: Exception) -> Any:
    """Extra payload for a failed run: CRM body, delivery summary or error context."""
    if isinstance(error, ApplicationError):
        return error.body
    if isinstance(error, TotalFailureError) and error.summary is not None:
        return error.summary.to_dict()
    if isinstance(error, CatalogSyncError):
        return error.context or None
    return None


async def _run(
    label: str,
    run: Callable[[], Awaitable[SyncResult]],
):
    log = logger.bind(sync=label)
    log.info("sync.requested")
    try:
        result = await run()
    except Exception as e:
        log.error("sync.request_failed", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=500,
            content={
                "message": f"{label} Sync Failed",
                "error": getattr(e, "message", str(e)),
                "details": _error_details(e),
            },
        )
    return result.to_dict()


@router.post("/products")
async def sync_products(request: Request):
    """Sweep products changed since the last clean run."""
    return await _run("Product", request.app.state.pipeline.sync_products)


@router.post("/pricelists")
async def sync_price_lists(request: Request):
    """Push every price list in bulk."""
    return await _run("PriceList", request.app.state.pipeline.sync_price_lists)


@router.post("/images")
async def sync_images(request: Request):
    """Push image entries in bulk."""
    return await _run("Image", request.app.state.pipeline.sync_images)
