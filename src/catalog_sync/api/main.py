"""FastAPI application for the catalog sync service."""

from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
import structlog
from fastapi import FastAPI

from catalog_sync.clients.auth import CrmTokenProvider
from catalog_sync.clients.crm_client import CrmClient, CrmEndpoints
from catalog_sync.clients.sql_source import SqlRowSource
from catalog_sync.delivery.upserter import Upserter
from catalog_sync.pipeline.pipeline import SyncPipeline
from catalog_sync.state import SyncState

from .config import Settings, get_settings
from .routes.health import router as health_router
from .routes.sync import router as sync_router

logger = structlog.get_logger(__name__)


def build_pipeline(
    settings: Settings,
    source: SqlRowSource,
    http: httpx.AsyncClient,
    state: SyncState | None = None,
) -> SyncPipeline:
    """Wire a SyncPipeline from settings around an open source and HTTP client."""
    options = settings.to_sync_options()
    tokens = CrmTokenProvider(
        http=http,
        auth_url=settings.CRM_AUTH_URL,
        client_id=settings.CRM_CLIENT_ID,
        client_secret=settings.CRM_CLIENT_SECRET,
        ttl=timedelta(seconds=settings.CRM_TOKEN_TTL_SECONDS),
    )
    crm = CrmClient(tokens=tokens, http=http, timeout=options.request_timeout)
    return SyncPipeline(
        source=source,
        upserter=Upserter(crm, options),
        endpoints=CrmEndpoints(
            product_url=settings.CRM_PRODUCT_URL,
            price_list_url=settings.CRM_PRICE_LIST_URL,
            image_url=settings.CRM_IMAGE_URL,
        ),
        state=state if state is not None else SyncState(product_watermark=settings.INITIAL_WATERMARK),
        options=options,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize persistent clients at startup, clean up at shutdown."""
    settings = get_settings()

    logger.info(
        "lifespan.startup",
        product_url=settings.CRM_PRODUCT_URL,
        initial_watermark=settings.INITIAL_WATERMARK.isoformat(),
    )

    # SQL source
    source = SqlRowSource(
        database_url=settings.SOURCE_DATABASE_URL,
        product_group=settings.SOURCE_PRODUCT_GROUP,
        image_group=settings.SOURCE_IMAGE_GROUP,
    )
    await source.connect()
    if not await source.verify_connectivity():
        logger.warning("lifespan.source_connectivity_failed")

    # CRM: one HTTP client and one token cache for the whole process
    http = httpx.AsyncClient(timeout=settings.to_sync_options().request_timeout)
    pipeline = build_pipeline(settings, source, http)

    # Store on app.state for request handlers
    app.state.source = source
    app.state.http = http
    app.state.state = pipeline.state
    app.state.pipeline = pipeline

    logger.info("lifespan.ready")
    yield

    # Shutdown
    logger.info("lifespan.shutdown")
    await http.aclose()
    await source.close()


app = FastAPI(
    title="catalog-sync",
    description="Pushes products, price lists and images from the ERP database to the CRM",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(sync_router)
