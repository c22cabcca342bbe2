"""
Bounded concurrency pool for async delivery units.

A fixed set of workers each claim the next unstarted task, run it to
completion, then claim another. Results land in the slot of the task's
input index, whatever order the tasks finish in.

Fault isolation: a task that raises has its exception stored in its slot.
Sibling tasks and the pool keep running (the same guarantee the asyncio
gather(return_exceptions=True) idiom gives, with a bound on parallelism).
"""

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from ..logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

Task = Callable[[], Awaitable[T]]


async def run_all(
    tasks: Sequence[Task[T]],
    concurrency: int,
) -> list[T | Exception]:
    """
    Run tasks with at most `concurrency` in flight.

    Args:
        tasks: Zero-argument callables returning awaitables. A task is not
               started until a worker picks it up.
        concurrency: Maximum tasks in flight; capped at len(tasks)

    Returns:
        One entry per task, in input order: the task's result, or the
        Exception it raised

    Raises:
        ValueError: If concurrency is not a positive integer
    """
    if concurrency < 1:
        raise ValueError('concurrency must be a positive integer')
    if not tasks:
        return []

    results: list[T | Exception] = [None] * len(tasks)  # type: ignore[list-item]
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        # Single event loop thread: claiming an index needs no lock
        while next_index < len(tasks):
            index = next_index
            next_index += 1
            try:
                results[index] = await tasks[index]()
            except Exception as e:
                logger.debug(
                    'pool.task_failed',
                    index=index,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                results[index] = e

    worker_count = min(concurrency, len(tasks))
    await asyncio.gather(*(worker() for _ in range(worker_count)))
    return results
