"""
Resilient delivery of documents to the CRM.

Components:
- run_all: Bounded concurrency pool with per-task fault isolation
- RetryExecutor: Fixed attempt budget with linear back-off
- verify_response: Detects failures hidden in 2xx responses
- summarize / DeliverySummary: Outcome aggregation
- Upserter: Composes the above for one endpoint
"""

from .pool import run_all
from .retry import RetryExecutor
from .summary import DeliveryOutcome, DeliverySummary, summarize
from .upserter import Upserter
from .verify import verify_response

__all__ = [
    'run_all',
    'RetryExecutor',
    'verify_response',
    'DeliveryOutcome',
    'DeliverySummary',
    'summarize',
    'Upserter',
]
