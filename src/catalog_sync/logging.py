"""
Structured logging configuration for the catalog sync service.

Uses structlog for structured, context-aware logging with:
- JSON output for production
- Pretty console output for development
- Per-stage timing for sync runs
- Run ID and domain propagation through context variables
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Generator

import structlog
from structlog.types import Processor

from .config import config

QUIET_LOGGERS = ('httpx', 'httpcore', 'sqlalchemy.engine', 'sqlalchemy.pool')

# Context variables for run-scoped data
_run_id: ContextVar[str | None] = ContextVar('run_id', default=None)
_domain: ContextVar[str | None] = ContextVar('domain', default=None)


def get_run_id() -> str | None:
    """Get the current sync run ID from context."""
    return _run_id.get()


def get_domain() -> str | None:
    """Get the current sync domain (products, price_lists, images) from context."""
    return _domain.get()


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor that adds context variables to log entries."""
    run_id = get_run_id()
    domain = get_domain()

    if run_id:
        event_dict['run_id'] = run_id
    if domain:
        event_dict['domain'] = domain

    return event_dict


def configure_logging(
    json_output: bool = False,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog for the service.

    Args:
        json_output: Emit one JSON object per line (deployed service);
                     otherwise render for a terminal
        log_level: Override log level (defaults to config.LOG_LEVEL)
    """
    level_num = getattr(logging, (log_level or config.LOG_LEVEL).upper(), logging.INFO)

    logging.basicConfig(format='%(message)s', stream=sys.stdout, level=level_num)
    # Per-request chatter from the HTTP and SQL drivers drowns the sync events
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level_num, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_info,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
    ]
    if json_output:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


@contextmanager
def logging_context(
    run_id: str | None = None,
    domain: str | None = None,
) -> Generator[None, None, None]:
    """
    Context manager for setting logging context variables.

    Usage:
        with logging_context(run_id="abc123", domain="products"):
            logger.info("sync.started")  # Includes run_id and domain
    """
    old_run_id = _run_id.get()
    old_domain = _domain.get()

    try:
        if run_id is not None:
            _run_id.set(run_id)
        if domain is not None:
            _domain.set(domain)
        yield
    finally:
        _run_id.set(old_run_id)
        _domain.set(old_domain)


class PipelineTimer:
    """
    Timer for tracking sync stage durations.

    Stages recorded more than once (e.g. one "deliver" per product page)
    accumulate.

    Usage:
        timer = PipelineTimer()
        with timer.stage("fetch"):
            rows = await source.fetch_price_list_rows()
        print(timer.summary())
    """

    def __init__(self):
        self.stages: dict[str, float] = {}
        self.start_time: float = time.perf_counter()

    @contextmanager
    def stage(self, name: str) -> Generator[None, None, None]:
        """Time a pipeline stage."""
        stage_start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - stage_start) * 1000
            self.stages[name] = self.stages.get(name, 0.0) + elapsed_ms

    @property
    def total_ms(self) -> float:
        """Total elapsed time since timer creation in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get timing summary as a dictionary."""
        return {
            'total_ms': round(self.total_ms, 2),
            'stages': {k: round(v, 2) for k, v in self.stages.items()},
        }


# Initialize logging on module import (development mode by default)
configure_logging(json_output=config.LOG_JSON)
