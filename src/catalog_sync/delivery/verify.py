"""
Response verification for CRM upsert calls.

The CRM sometimes reports failures inside a 200 envelope, so a 2xx status
alone is not trusted. A response is a failure when:
- the status is outside 200-299 (TransportError)
- the body carries a success/status flag set to false or an error value
- the body is an array and any element signals failure
- the body holds a non-empty error-shaped key (errorCode, errorMessage,
  exceptionMessage, ...) at any depth
The last three raise ApplicationError.
"""

import json
from typing import Any

import httpx

from ..errors import ApplicationError, TransportError

_SUCCESS_FLAGS = frozenset({'success', 'issuccess'})
_STATUS_FLAGS = frozenset({'status'})
_FAILED_STATUS_VALUES = frozenset({'error', 'failed', 'failure', 'false'})
_ERROR_KEYS = frozenset({'errorcode', 'errormessage', 'exceptionmessage'})


def parse_body(response: httpx.Response) -> Any:
    """Return the JSON body, the raw text when it is not JSON, or None when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def verify_response(response: httpx.Response) -> Any:
    """
    Verify a CRM response and return its parsed body.

    Raises:
        TransportError: Non-2xx status
        ApplicationError: 2xx status with a body that reports failure
    """
    body = parse_body(response)
    status = response.status_code

    if not 200 <= status < 300:
        raise TransportError(
            f"CRM returned HTTP {status}",
            status_code=status,
            context={'body': _preview(body)},
        )

    reason = find_failure(body)
    if reason is not None:
        raise ApplicationError(
            f"CRM reported failure in a {status} response: {reason}",
            status_code=status,
            body=body,
            context={'body': _preview(body)},
        )
    return body


def find_failure(body: Any) -> str | None:
    """Return a description of the first failure signal in body, or None."""
    if isinstance(body, list):
        for index, item in enumerate(body):
            if isinstance(item, dict):
                reason = _flag_failure(item)
                if reason is not None:
                    return f"item {index}: {reason}"
    elif isinstance(body, dict):
        reason = _flag_failure(body)
        if reason is not None:
            return reason

    return _error_key(body)


def _flag_failure(obj: dict[str, Any]) -> str | None:
    for key, value in obj.items():
        normalized = key.lower()
        if normalized in _SUCCESS_FLAGS and value is False:
            return f"{key}=false"
        if normalized in _STATUS_FLAGS:
            if value is False:
                return f"{key}=false"
            if isinstance(value, str) and value.lower() in _FAILED_STATUS_VALUES:
                return f"{key}={value}"
    return None


def _error_key(body: Any) -> str | None:
    if isinstance(body, dict):
        for key, value in body.items():
            if key.lower().replace('_', '') in _ERROR_KEYS and value not in (None, '', [], {}):
                return f"{key}={value}"
            found = _error_key(value)
            if found is not None:
                return found
    elif isinstance(body, list):
        for item in body:
            found = _error_key(item)
            if found is not None:
                return found
    return None


def _preview(body: Any, limit: int = 500) -> str:
    text = body if isinstance(body, str) else json.dumps(body, default=str)
    return text[:limit]
