"""Call descriptors, attempt outcomes and execution results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from instantly_mcp.core.exceptions import ErrorCode, RequestFailedError


class HttpMethod(str, Enum):
    """HTTP methods used by the API."""

    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class CallDescriptor:
    """One logical remote call: endpoint, method and optional payload."""

    endpoint: str
    method: HttpMethod = HttpMethod.GET
    payload: Any = None

    def __post_init__(self) -> None:
        if not self.endpoint.startswith("/"):
            raise ValueError(f"endpoint must begin with '/', got {self.endpoint!r}")
        if not isinstance(self.method, HttpMethod):
            try:
                method = HttpMethod(str(self.method).upper())
            except ValueError as exc:
                allowed = ", ".join(m.value for m in HttpMethod)
                raise ValueError(f"Unsupported method {self.method!r}. Allowed values: {allowed}") from exc
            object.__setattr__(self, "method", method)
        # GET payloads become query parameters
        if self.method is HttpMethod.GET and self.payload is not None and not isinstance(self.payload, Mapping):
            raise ValueError(f"GET payload must be a mapping, got {type(self.payload).__name__}")


class CauseKind(str, Enum):
    """Classification of a failed attempt."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CLIENT_ERROR = "client_error"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    CANCELLED = "cancelled"


_ERROR_CODES = {
    CauseKind.NOT_FOUND: ErrorCode.NOT_FOUND,
    CauseKind.UNAUTHORIZED: ErrorCode.AUTHENTICATION_ERROR,
    CauseKind.CLIENT_ERROR: ErrorCode.CLIENT_ERROR,
    CauseKind.RATE_LIMITED: ErrorCode.RATE_LIMIT_ERROR,
    CauseKind.SERVER_ERROR: ErrorCode.SERVER_ERROR,
    CauseKind.NETWORK: ErrorCode.NETWORK_ERROR,
    CauseKind.CANCELLED: ErrorCode.CANCELLED,
}


@dataclass(frozen=True, slots=True)
class FailureCause:
    """What went wrong on an attempt.

    ``message`` holds the most specific detail available: the response body's
    ``error`` field, then its ``message`` field, then the transport error text.
    """

    kind: CauseKind
    message: str
    status_code: int | None = None
    body: Any = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class Success:
    """A 2xx response. ``body`` is passed through unmodified."""

    body: Any
    attempts: int = 1


@dataclass(frozen=True, slots=True)
class RetriableFailure:
    """A 5xx response or a network failure."""

    cause: FailureCause


@dataclass(frozen=True, slots=True)
class FatalFailure:
    """A failure that must not be retried (401, 404 and other 4xx)."""

    cause: FailureCause


@dataclass(frozen=True, slots=True)
class RateLimited:
    """A 429 response; the server asked us to wait ``retry_after_ms``."""

    retry_after_ms: int
    cause: FailureCause


AttemptOutcome = Union[Success, RetriableFailure, FatalFailure, RateLimited]


@dataclass(frozen=True, slots=True)
class TerminalError:
    """The single failure value returned once the executor gives up."""

    attempts: int
    cause: FailureCause
    message: str

    @property
    def error_code(self) -> ErrorCode:
        return _ERROR_CODES[self.cause.kind]

    def to_exception(self) -> RequestFailedError:
        return RequestFailedError(self)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.error_code.value,
            "message": self.message,
            "attempts": self.attempts,
            "cause": self.cause.kind.value,
        }
        if self.cause.status_code is not None:
            payload["status_code"] = self.cause.status_code
        return payload


ExecutionResult = Union[Success, TerminalError]


def unwrap(result: ExecutionResult) -> Any:
    """Return the body of a success or raise the terminal error."""

    if isinstance(result, TerminalError):
        raise result.to_exception()
    return result.body


__all__ = [
    "AttemptOutcome",
    "CallDescriptor",
    "CauseKind",
    "ExecutionResult",
    "FailureCause",
    "FatalFailure",
    "HttpMethod",
    "RateLimited",
    "RetriableFailure",
    "Success",
    "TerminalError",
    "unwrap",
]
