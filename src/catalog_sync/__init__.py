"""
Catalog Sync

Pushes product, price list and image data from an ERP SQL database to a CRM's
upsert APIs, with bounded concurrency, retries and per-record fault isolation.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .pipeline import (
    SyncPipeline,
    SyncResult,
    group_products,
    group_price_lists,
    build_product_documents,
    build_price_list_documents,
    build_image_documents,
    partition,
)
from .delivery import (
    Upserter,
    RetryExecutor,
    DeliveryOutcome,
    DeliverySummary,
    run_all,
    summarize,
    verify_response,
)
from .state import SyncState
from .config import SyncOptions
from .logging import (
    configure_logging,
    get_logger,
    logging_context,
    PipelineTimer,
)
from .errors import (
    CatalogSyncError,
    ClientError,
    TransportError,
    ApplicationError,
    AuthError,
    SourceError,
    DeliveryError,
    ExhaustedRetryError,
    TotalFailureError,
)

__all__ = [
    # Version
    '__version__',
    # Main Pipeline
    'SyncPipeline',
    'SyncResult',
    'SyncState',
    'SyncOptions',
    # Transformation
    'group_products',
    'group_price_lists',
    'build_product_documents',
    'build_price_list_documents',
    'build_image_documents',
    'partition',
    # Delivery
    'Upserter',
    'RetryExecutor',
    'DeliveryOutcome',
    'DeliverySummary',
    'run_all',
    'summarize',
    'verify_response',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    'PipelineTimer',
    # Errors
    'CatalogSyncError',
    'ClientError',
    'TransportError',
    'ApplicationError',
    'AuthError',
    'SourceError',
    'DeliveryError',
    'ExhaustedRetryError',
    'TotalFailureError',
]
