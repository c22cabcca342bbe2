"""
Sync pipeline orchestrator.

One entry point per domain:
- sync_products: paginated by offset/limit over rows updated since the
  watermark; each page is grouped, built and delivered one document per
  call before the next page is fetched
- sync_price_lists: all priced rows at once, grouped by product and price
  list, delivered in bulk batches
- sync_images: all image rows at once, projected one-to-one, delivered in
  bulk batches

Run-level failures (SourceError, AuthError, TotalFailureError) propagate to
the caller. The product watermark only moves after a sweep that completed
with zero failed documents, so the next run re-sends the same window
otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable
from uuid import uuid4

from ..config import SyncOptions
from ..delivery.summary import DeliveryOutcome, DeliverySummary, summarize
from ..errors import CatalogSyncError
from ..logging import PipelineTimer, get_logger, logging_context
from .builder import (
    build_image_documents,
    build_price_list_documents,
    build_product_documents,
)
from .grouper import group_price_lists, group_products

if TYPE_CHECKING:
    from ..clients.crm_client import CrmEndpoints
    from ..clients.sql_source import SqlRowSource
    from ..delivery.upserter import Upserter
    from ..state import SyncState

logger = get_logger(__name__)

PRODUCTS = 'products'
PRICE_LISTS = 'price_lists'
IMAGES = 'images'


@dataclass
class SyncResult:
    """Result of one sync run for one domain."""

    domain: str
    run_id: str
    message: str = ''

    # Counts
    fetched: int = 0
    mapped: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_identifiers: list[str] = field(default_factory=list)
    batches: list[DeliveryOutcome] = field(default_factory=list)

    # Watermark (products only)
    watermark: datetime | None = None
    watermark_advanced: bool = False

    # Timing
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    processing_time_ms: int | None = None
    stage_timings: dict[str, float] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True if no document failed delivery."""
        return self.failed == 0

    def absorb(self, summary: DeliverySummary) -> None:
        """Add one delivery summary (one page, or the whole run) to the totals."""
        self.succeeded += summary.success_count
        self.failed += summary.failed_count
        self.failed_identifiers.extend(summary.failed_identifiers)
        self.batches.extend(summary.batches)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'message': self.message,
            'domain': self.domain,
            'run_id': self.run_id,
            'total_fetched': self.fetched,
            'total_mapped': self.mapped,
            'total_success': self.succeeded,
            'total_failed': self.failed,
            'failed_identifiers': self.failed_identifiers,
            'batches': [b.to_dict() for b in self.batches],
            'watermark': self.watermark.isoformat() if self.watermark else None,
            'watermark_advanced': self.watermark_advanced,
            'processing_time_ms': self.processing_time_ms,
            'stage_timings': self.stage_timings,
            'success': self.success,
        }


def _code(document: Any) -> str:
    return document.code


def _payload(document: Any) -> dict[str, Any]:
    return document.to_payload()


class SyncPipeline:
    """
    Drives rows from the SQL source to the CRM for each domain.

    Args:
        source: Producer of flat rows
        upserter: Delivery orchestrator
        endpoints: CRM endpoint URLs per domain
        state: Process-wide watermark holder
        options: Page size and delivery tuning
        clock: Returns "now" for the watermark (injected by tests)
    """

    def __init__(
        self,
        source: SqlRowSource,
        upserter: Upserter,
        endpoints: CrmEndpoints,
        state: SyncState,
        options: SyncOptions,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.source = source
        self.upserter = upserter
        self.endpoints = endpoints
        self.state = state
        self.options = options
        self._clock = clock

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    async def sync_products(self) -> SyncResult:
        """
        Sweep product rows changed since the watermark, page by page.

        Returns:
            SyncResult (also on partial failure)

        Raises:
            SourceError, AuthError, TotalFailureError: Run failed; the
            watermark is left unchanged
        """
        result = SyncResult(domain=PRODUCTS, run_id=uuid4().hex)
        watermark = self.state.product_watermark
        result.watermark = watermark
        timer = PipelineTimer()
        page_size = self.options.page_size

        with logging_context(run_id=result.run_id, domain=PRODUCTS):
            logger.info('sync.started', watermark=watermark.isoformat(), page_size=page_size)

            try:
                offset = 0
                while True:
                    with timer.stage('fetch'):
                        rows = await self.source.fetch_product_rows(watermark, offset, page_size)
                    if not rows:
                        break

                    result.fetched += len(rows)
                    with timer.stage('group'):
                        groups = group_products(rows)
                    with timer.stage('build'):
                        documents = build_product_documents(groups)
                    result.mapped += len(documents)

                    logger.info(
                        'sync.page_mapped',
                        offset=offset,
                        rows=len(rows),
                        documents=len(documents),
                    )

                    with timer.stage('deliver'):
                        summary = await self.upserter.deliver(
                            self.endpoints.products,
                            documents,
                            identify=_code,
                            serialize=_payload,
                            bulk=False,
                            raise_on_total_failure=False,
                        )
                    result.absorb(summary)
                    offset += page_size

                # Total failure is judged over the whole sweep, not per page
                summarize(result.batches, raise_on_total_failure=self.options.raise_on_total_failure)
            except CatalogSyncError as e:
                self._log_failure(e, result)
                raise

            if result.success:
                self.state.advance_product_watermark(self._clock())
                result.watermark = self.state.product_watermark
                result.watermark_advanced = True

            result.message = (
                'Product Sync Completed Successfully'
                if result.success
                else 'Product Sync Completed with some failures'
            )
            return self._finish(result, timer)

    # -------------------------------------------------------------------------
    # Price lists
    # -------------------------------------------------------------------------

    async def sync_price_lists(self) -> SyncResult:
        """Sync every price list, grouped per product, in bulk batches."""
        result = SyncResult(domain=PRICE_LISTS, run_id=uuid4().hex)
        timer = PipelineTimer()

        with logging_context(run_id=result.run_id, domain=PRICE_LISTS):
            logger.info('sync.started')

            try:
                with timer.stage('fetch'):
                    rows = await self.source.fetch_price_list_rows()
                result.fetched = len(rows)
                if not rows:
                    result.message = 'No price data found.'
                    return self._finish(result, timer)

                with timer.stage('group'):
                    groups = group_price_lists(rows)
                with timer.stage('build'):
                    documents = build_price_list_documents(groups)
                result.mapped = len(documents)

                with timer.stage('deliver'):
                    summary = await self.upserter.deliver(
                        self.endpoints.price_lists,
                        documents,
                        identify=_code,
                        serialize=_payload,
                        bulk=True,
                    )
                result.absorb(summary)
            except CatalogSyncError as e:
                self._log_failure(e, result)
                raise

            result.message = (
                'PriceList Sync Success'
                if result.success
                else 'PriceList Sync Completed with some failures'
            )
            return self._finish(result, timer)

    # -------------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------------

    async def sync_images(self) -> SyncResult:
        """Sync image entries, one document per row, in bulk batches."""
        result = SyncResult(domain=IMAGES, run_id=uuid4().hex)
        timer = PipelineTimer()

        with logging_context(run_id=result.run_id, domain=IMAGES):
            logger.info('sync.started')

            try:
                with timer.stage('fetch'):
                    rows = await self.source.fetch_image_rows()
                result.fetched = len(rows)
                if not rows:
                    result.message = 'No image data to sync.'
                    return self._finish(result, timer)

                with timer.stage('build'):
                    documents = build_image_documents(rows)
                result.mapped = len(documents)

                with timer.stage('deliver'):
                    summary = await self.upserter.deliver(
                        self.endpoints.images,
                        documents,
                        identify=_code,
                        serialize=_payload,
                        bulk=True,
                    )
                result.absorb(summary)
            except CatalogSyncError as e:
                self._log_failure(e, result)
                raise

            result.message = (
                'Image Sync Success'
                if result.success
                else 'Image Sync Completed with some failures'
            )
            return self._finish(result, timer)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _finish(self, result: SyncResult, timer: PipelineTimer) -> SyncResult:
        result.completed_at = datetime.now()
        result.processing_time_ms = int(timer.total_ms)
        result.stage_timings = timer.summary()['stages']

        logger.info(
            'sync.complete',
            fetched=result.fetched,
            mapped=result.mapped,
            succeeded=result.succeeded,
            failed=result.failed,
            watermark_advanced=result.watermark_advanced,
            processing_time_ms=result.processing_time_ms,
        )
        return result

    @staticmethod
    def _log_failure(error: CatalogSyncError, result: SyncResult) -> None:
        logger.error(
            'sync.failed',
            error=str(error),
            error_type=type(error).__name__,
            fetched=result.fetched,
            succeeded=result.succeeded,
            failed=result.failed,
        )
