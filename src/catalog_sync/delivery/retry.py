"""
Retry with linear back-off around a single async delivery attempt.

Attempt n (1-based) that fails with a retryable error is followed by a wait
of base_delay * n seconds, then attempt n + 1. The final failed attempt is
not followed by a wait: ExhaustedRetryError is raised at once, carrying the
last attempt's exception.

Retryable: TransportError (network, timeout, non-2xx) and ApplicationError
(2xx with an error body). Anything else, AuthError included, propagates on
the attempt that raised it.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from ..errors import ApplicationError, ExhaustedRetryError, TransportError
from ..logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

RETRYABLE_ERRORS = (TransportError, ApplicationError)


class RetryExecutor:
    """
    Runs an attempt factory up to max_attempts times.

    The attempt must be safe to repeat; CRM upserts are.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Args:
            max_attempts: Total attempts including the first
            base_delay: Seconds; the wait after attempt n is base_delay * n
            sleep: Awaitable sleep function (injected by tests)
        """
        if max_attempts < 1:
            raise ValueError('max_attempts must be a positive integer')
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    async def execute(self, attempt: Callable[[], Awaitable[T]], label: str) -> T:
        """
        Run `attempt` until it succeeds or the budget is spent.

        Args:
            attempt: Zero-argument callable producing a fresh awaitable per try
            label: Identifies the unit in logs and errors

        Raises:
            ExhaustedRetryError: Every attempt failed with a retryable error
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.base_delay, increment=self.base_delay),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            sleep=self._sleep,
            before_sleep=self._log_retry(label),
        )

        try:
            async for attempt_state in retrying:
                with attempt_state:
                    return await attempt()
        except RetryError as e:
            last_attempt = e.last_attempt
            last_error = last_attempt.exception()
            logger.warning(
                'retry.exhausted',
                label=label,
                attempts=last_attempt.attempt_number,
                error=str(last_error),
                error_type=type(last_error).__name__,
            )
            raise ExhaustedRetryError(
                label=label,
                attempts=last_attempt.attempt_number,
                last_error=last_error,
            ) from last_error

        # AsyncRetrying either returns from the loop body or raises
        raise AssertionError('unreachable')

    @staticmethod
    def _log_retry(label: str) -> Callable[[RetryCallState], None]:
        def before_sleep(state: RetryCallState) -> None:
            error = state.outcome.exception() if state.outcome else None
            logger.info(
                'retry.attempt_failed',
                label=label,
                attempt=state.attempt_number,
                next_delay_s=state.next_action.sleep if state.next_action else None,
                error=str(error),
                status_code=getattr(error, 'status_code', None),
            )

        return before_sleep
