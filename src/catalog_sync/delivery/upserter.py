"""
Delivery orchestrator: documents in, DeliverySummary out.

Composes the delivery primitives for one endpoint:
1. Partition documents into units (batches on bulk endpoints, single
   documents otherwise)
2. Wrap each unit's POST in RetryExecutor
3. Run the units through the bounded pool
4. Turn each unit's result into a DeliveryOutcome and summarize

Per-unit failures become failed outcomes. AuthError and unexpected
exceptions are run-level failures and propagate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Sequence, TypeVar

from ..config import SyncOptions
from ..errors import AuthError, ExhaustedRetryError
from ..logging import get_logger
from ..pipeline.partitioner import partition
from .pool import run_all
from .retry import RetryExecutor
from .summary import DeliveryOutcome, DeliverySummary, summarize

if TYPE_CHECKING:
    from ..clients.crm_client import CrmClient, CrmResponse

logger = get_logger(__name__)

DocT = TypeVar('DocT')


class Upserter:
    """
    Delivers documents to CRM upsert endpoints.

    Args:
        client: CRM client used for every attempt
        options: Concurrency, batch size and retry settings
        retry: Override the RetryExecutor built from options (tests)
    """

    def __init__(
        self,
        client: CrmClient,
        options: SyncOptions,
        retry: RetryExecutor | None = None,
    ):
        self.client = client
        self.options = options
        self.retry = retry or RetryExecutor(
            max_attempts=options.max_attempts,
            base_delay=options.retry_base_delay,
        )

    async def deliver(
        self,
        url: str,
        documents: Sequence[DocT],
        identify: Callable[[DocT], str],
        serialize: Callable[[DocT], Any],
        bulk: bool = False,
        raise_on_total_failure: bool | None = None,
    ) -> DeliverySummary:
        """
        Deliver documents to one endpoint.

        Args:
            url: Endpoint URL
            documents: Documents in delivery order
            identify: Returns the identifier reported for a failed document
            serialize: Returns the JSON-ready payload of a document
            bulk: POST batches of options.batch_size documents as arrays;
                  otherwise POST one document per call
            raise_on_total_failure: Overrides options.raise_on_total_failure;
                  callers that deliver one run in several calls pass False
                  and apply the policy to the combined outcomes

        Returns:
            DeliverySummary

        Raises:
            TotalFailureError: Every unit failed (when options say so)
            AuthError: The CRM credential could not be obtained
        """
        if not documents:
            return DeliverySummary()

        # Surface credential problems before any unit starts
        await self.client.tokens.get_credential()

        units = partition(documents, self.options.batch_size if bulk else 1)

        log = logger.bind(url=url, documents=len(documents), units=len(units), bulk=bulk)
        log.info('delivery.started', concurrency=self.options.concurrency)

        tasks = [self._unit_task(url, unit, bulk, serialize) for unit in units]
        results = await run_all(tasks, self.options.concurrency)

        outcomes = []
        for index, (unit, result) in enumerate(zip(units, results)):
            identifiers = tuple(identify(doc) for doc in unit)
            outcomes.append(self._to_outcome(index, identifiers, result))

        if raise_on_total_failure is None:
            raise_on_total_failure = self.options.raise_on_total_failure
        summary = summarize(outcomes, raise_on_total_failure=raise_on_total_failure)
        log.info(
            'delivery.complete',
            succeeded=summary.success_count,
            failed=summary.failed_count,
        )
        return summary

    def _unit_task(
        self,
        url: str,
        unit: list[DocT],
        bulk: bool,
        serialize: Callable[[DocT], Any],
    ) -> Callable[[], Any]:
        payload = [serialize(doc) for doc in unit] if bulk else serialize(unit[0])
        label = f'{url} [{len(unit)} document(s)]'

        async def task() -> CrmResponse:
            return await self.retry.execute(
                lambda: self.client.post_json(url, payload),
                label=label,
            )

        return task

    @staticmethod
    def _to_outcome(
        index: int,
        identifiers: tuple[str, ...],
        result: Any,
    ) -> DeliveryOutcome:
        if isinstance(result, ExhaustedRetryError):
            logger.warning(
                'delivery.unit_failed',
                index=index,
                identifiers=list(identifiers),
                attempts=result.attempts,
                status_code=result.status_code,
                error=str(result.last_error),
            )
            return DeliveryOutcome(
                index=index,
                identifiers=identifiers,
                success=False,
                status_code=result.status_code,
                error=str(result.last_error),
                attempts=result.attempts,
            )
        if isinstance(result, Exception):
            if not isinstance(result, AuthError):
                logger.error(
                    'delivery.unit_crashed',
                    index=index,
                    error=str(result),
                    error_type=type(result).__name__,
                )
            raise result

        return DeliveryOutcome(
            index=index,
            identifiers=identifiers,
            success=True,
            status_code=result.status_code,
            body=result.body,
        )
