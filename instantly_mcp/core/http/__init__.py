"""HTTP request execution with retry and failure classification."""

from instantly_mcp.core.http.classifier import (
    classify_response,
    classify_transport_error,
    describe_cause,
    parse_retry_after,
)
from instantly_mcp.core.http.executor import RequestExecutor
from instantly_mcp.core.http.models import (
    AttemptOutcome,
    CallDescriptor,
    CauseKind,
    ExecutionResult,
    FailureCause,
    FatalFailure,
    HttpMethod,
    RateLimited,
    RetriableFailure,
    Success,
    TerminalError,
    unwrap,
)

__all__ = [
    "AttemptOutcome",
    "CallDescriptor",
    "CauseKind",
    "ExecutionResult",
    "FailureCause",
    "FatalFailure",
    "HttpMethod",
    "RateLimited",
    "RequestExecutor",
    "RetriableFailure",
    "Success",
    "TerminalError",
    "classify_response",
    "classify_transport_error",
    "describe_cause",
    "parse_retry_after",
    "unwrap",
]
