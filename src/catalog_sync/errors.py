"""
Custom exceptions and error handling for the catalog sync service.

Provides:
- Typed exception hierarchy for source, auth and delivery failures
- Error context preservation for debugging
- Wrappers that translate httpx / SQLAlchemy exceptions into the hierarchy
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from .delivery.summary import DeliverySummary


class CatalogSyncError(Exception):
    """Base exception for all catalog sync errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Client Errors
# =============================================================================


class ClientError(CatalogSyncError):
    """Base class for errors raised by external collaborators."""

    pass


class TransportError(ClientError):
    """Network failure, timeout or non-2xx status on a delivery attempt."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.status_code = status_code


class ApplicationError(ClientError):
    """A 2xx response whose body reports a failure."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.status_code = status_code
        self.body = body


class AuthError(ClientError):
    """Failed to obtain or refresh the CRM credential."""

    pass


class SourceError(ClientError):
    """Failed to fetch rows from the SQL data source."""

    pass


# =============================================================================
# Delivery Errors
# =============================================================================


class DeliveryError(CatalogSyncError):
    """Base class for delivery pipeline errors."""

    pass


class ExhaustedRetryError(DeliveryError):
    """A delivery unit failed on every attempt of its retry budget."""

    def __init__(
        self,
        label: str,
        attempts: int,
        last_error: BaseException,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            f"{label} failed after {attempts} attempt(s): {last_error}",
            context=context,
        )
        self.label = label
        self.attempts = attempts
        self.last_error = last_error

    @property
    def status_code(self) -> int | None:
        """HTTP status of the last attempt, when one was received."""
        return getattr(self.last_error, 'status_code', None)


class TotalFailureError(DeliveryError):
    """Every delivery unit of a run failed."""

    def __init__(
        self,
        message: str,
        summary: DeliverySummary | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.summary = summary


# =============================================================================
# Error Handling Utilities
# =============================================================================


def wrap_http_error(exc: Exception, context: dict[str, Any] | None = None) -> TransportError:
    """
    Wrap an httpx exception in our typed error hierarchy.

    Args:
        exc: The original exception
        context: Additional context for debugging

    Returns:
        TransportError carrying the response status when there is one
    """
    ctx = context or {}
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return TransportError(f"CRM returned HTTP {status}", status_code=status, context=ctx)
    if isinstance(exc, httpx.TimeoutException):
        return TransportError(f"CRM request timed out: {exc}", context=ctx)
    return TransportError(f"CRM request failed: {exc}", context=ctx)


def wrap_sql_error(exc: Exception, context: dict[str, Any] | None = None) -> SourceError:
    """
    Wrap a database exception in our typed error hierarchy.

    Args:
        exc: The original exception
        context: Additional context for debugging

    Returns:
        SourceError
    """
    ctx = context or {}
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__

    error_str = str(exc).lower()
    if 'connection' in error_str or 'connect' in error_str or 'login' in error_str:
        return SourceError(f"SQL source connection failed: {exc}", context=ctx)
    return SourceError(f"SQL source query failed: {exc}", context=ctx)
