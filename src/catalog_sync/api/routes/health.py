"""Banner and health check endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

router = APIRouter()

BANNER = "Catalog sync API is running. Use POST /api/sync/... endpoints to trigger syncs."


@router.get("/", response_class=PlainTextResponse)
async def banner() -> str:
    """Describe how to trigger a sync."""
    return BANNER


@router.get("/health")
async def health(request: Request):
    """Check SQL source connectivity."""
    if await request.app.state.source.verify_connectivity():
        return {
            "status": "ok",
            "product_watermark": request.app.state.state.product_watermark.isoformat(),
        }
    return JSONResponse(status_code=503, content={"status": "unhealthy"})
