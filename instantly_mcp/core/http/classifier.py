"""Classification of HTTP responses and transport errors into attempt outcomes.

Status boundary, checked in order:

* 2xx: success
* 404: fatal, the endpoint does not exist
* 401: fatal, the API key was rejected
* 429: rate limited, wait for ``retry-after`` seconds (60 when missing)
* other < 500: fatal client error
* >= 500: retriable

408 and 409 fall in the fatal client error bucket.
"""

from __future__ import annotations

import json
import math
from typing import Any

import httpx

from instantly_mcp.core.http.models import (
    AttemptOutcome,
    CallDescriptor,
    CauseKind,
    FailureCause,
    FatalFailure,
    RateLimited,
    RetriableFailure,
    Success,
)

DEFAULT_RETRY_AFTER_SECONDS = 60
INVALID_API_KEY_MESSAGE = "invalid API key"


def parse_retry_after(value: str | None) -> int:
    """Convert a ``retry-after`` header in seconds to milliseconds.

    Missing, unparseable and negative values fall back to 60 seconds.
    """
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS * 1000
    try:
        seconds = float(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS * 1000
    if not math.isfinite(seconds) or seconds < 0:
        return DEFAULT_RETRY_AFTER_SECONDS * 1000
    return int(seconds * 1000)


def parse_body(response: httpx.Response) -> Any:
    """Decoded JSON body, raw text when it is not JSON, ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def describe_cause(body: Any, fallback: str) -> str:
    """Pick the most specific error description available.

    Prefers the body's ``error`` field, then its ``message`` field, then
    ``fallback``.
    """
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value, default=str)
    return fallback


def classify_response(response: httpx.Response, descriptor: CallDescriptor) -> AttemptOutcome:
    """Map a received response to an attempt outcome."""
    status = response.status_code
    body = parse_body(response)

    if 200 <= status < 300:
        return Success(body)

    if status == 404:
        return FatalFailure(
            FailureCause(CauseKind.NOT_FOUND, f"endpoint not found: {descriptor.endpoint}", status, body)
        )

    if status == 401:
        return FatalFailure(FailureCause(CauseKind.UNAUTHORIZED, INVALID_API_KEY_MESSAGE, status, body))

    fallback = f"request failed with status code {status}"

    if status == 429:
        retry_after_ms = parse_retry_after(response.headers.get("retry-after"))
        cause = FailureCause(CauseKind.RATE_LIMITED, describe_cause(body, fallback), status, body)
        return RateLimited(retry_after_ms, cause)

    if status < 500:
        return FatalFailure(FailureCause(CauseKind.CLIENT_ERROR, describe_cause(body, fallback), status, body))

    return RetriableFailure(FailureCause(CauseKind.SERVER_ERROR, describe_cause(body, fallback), status, body))


def classify_transport_error(exc: httpx.RequestError) -> RetriableFailure:
    """Map a failure where no response was received."""
    message = str(exc) or type(exc).__name__
    return RetriableFailure(FailureCause(CauseKind.NETWORK, message))


__all__ = [
    "DEFAULT_RETRY_AFTER_SECONDS",
    "INVALID_API_KEY_MESSAGE",
    "classify_response",
    "classify_transport_error",
    "describe_cause",
    "parse_body",
    "parse_retry_after",
]
