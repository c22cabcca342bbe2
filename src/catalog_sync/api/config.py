"""Configuration for the catalog sync FastAPI service."""

from datetime import datetime
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from catalog_sync.config import SyncOptions
from catalog_sync.state import DEFAULT_INITIAL_WATERMARK


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Source database (SQLAlchemy async URL, e.g. mssql+aioodbc://...)
    SOURCE_DATABASE_URL: str
    SOURCE_PRODUCT_GROUP: str = "ALPHA"
    SOURCE_IMAGE_GROUP: str = "JETA"

    # CRM
    CRM_AUTH_URL: str
    CRM_CLIENT_ID: str
    CRM_CLIENT_SECRET: str
    CRM_PRODUCT_URL: str
    CRM_PRICE_LIST_URL: str | None = None
    CRM_IMAGE_URL: str | None = None
    CRM_TOKEN_TTL_SECONDS: int = Field(default=55 * 60, ge=1)

    # Product watermark used until the first clean sweep
    INITIAL_WATERMARK: datetime = DEFAULT_INITIAL_WATERMARK

    # Auth for the sync endpoints (open when unset)
    SYNC_API_KEY: str | None = None

    # Tuning
    SYNC_PAGE_SIZE: int = Field(default=500, ge=1)
    SYNC_CONCURRENCY: int = Field(default=5, ge=1)
    SYNC_BATCH_SIZE: int = Field(default=200, ge=1)
    SYNC_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    SYNC_RETRY_BASE_DELAY: float = Field(default=1.0, ge=0)
    SYNC_REQUEST_TIMEOUT: float = Field(default=30.0, gt=0)
    SYNC_RAISE_ON_TOTAL_FAILURE: bool = True

    def to_sync_options(self) -> SyncOptions:
        """Build the pipeline tuning options from the SYNC_* fields."""
        return SyncOptions(
            page_size=self.SYNC_PAGE_SIZE,
            concurrency=self.SYNC_CONCURRENCY,
            batch_size=self.SYNC_BATCH_SIZE,
            max_attempts=self.SYNC_MAX_ATTEMPTS,
            retry_base_delay=self.SYNC_RETRY_BASE_DELAY,
            request_timeout=self.SYNC_REQUEST_TIMEOUT,
            raise_on_total_failure=self.SYNC_RAISE_ON_TOTAL_FAILURE,
        )


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
