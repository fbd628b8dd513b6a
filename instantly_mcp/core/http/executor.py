"""Resilient request executor.

Turns a :class:`CallDescriptor` into a :class:`Success` or a single
:class:`TerminalError`, retrying 5xx responses, network failures and 429s
according to the injected :class:`RetryPolicy`.

State machine::

    Attempting --2xx--------------------------------> Success
    Attempting --401/404/other 4xx------------------> Failed
    Attempting --429/5xx/network, attempts left-----> RetryWait --sleep--> Attempting
    Attempting --429/5xx/network, none left---------> Failed
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any

import httpx

from instantly_mcp.core.http.classifier import classify_response, classify_transport_error
from instantly_mcp.core.http.models import (
    AttemptOutcome,
    CallDescriptor,
    CauseKind,
    ExecutionResult,
    FailureCause,
    FatalFailure,
    HttpMethod,
    RateLimited,
    Success,
    TerminalError,
)
from instantly_mcp.core.logging import get_logger, log_context, redact
from instantly_mcp.core.patterns.retry import RetryPolicy

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]

BODY_LOG_LIMIT = 500


@dataclass
class _ExecutionState:
    attempts: int = 0
    last_cause: FailureCause | None = None


class RequestExecutor:
    """Executes calls against the API, absorbing transient failures.

    The executor holds no per-call state, so one instance can serve any
    number of concurrent calls.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: RetryPolicy,
        *,
        sleep: SleepFn = asyncio.sleep,
        body_log_limit: int = BODY_LOG_LIMIT,
    ) -> None:
        """Initialize the executor.

        Args:
            client: HTTP client preconfigured with base URL and auth headers
            policy: Retry policy applied to every call
            sleep: Coroutine function used for inter-attempt waits, in seconds
            body_log_limit: Maximum response body characters written to logs
        """
        self._client = client
        self.policy = policy
        self._sleep = sleep
        self._body_log_limit = body_log_limit

    async def execute(self, descriptor: CallDescriptor, *, timeout: float | None = None) -> ExecutionResult:
        """Execute one logical call to completion.

        Args:
            descriptor: Endpoint, method and payload of the call
            timeout: Optional deadline in seconds for the whole execution,
                retries and waits included

        Returns:
            ``Success`` with the parsed body, or a ``TerminalError``
        """
        state = _ExecutionState()
        with log_context(endpoint=descriptor.endpoint, method=descriptor.method.value):
            deadline = asyncio.timeout(timeout)
            try:
                async with deadline:
                    return await self._run(descriptor, state)
            except TimeoutError:
                # Raised by something other than our own deadline
                if not deadline.expired():
                    raise
                reason = f"deadline of {timeout}s exceeded"
                cause = FailureCause(CauseKind.CANCELLED, reason)
                terminal = TerminalError(
                    attempts=state.attempts,
                    cause=cause,
                    message=f"request cancelled after {_attempts_text(state.attempts)}: {reason}",
                )
                logger.bind(attempt=state.attempts, error_code=terminal.error_code.value).error(terminal.message)
                return terminal
            except asyncio.CancelledError:
                logger.bind(attempt=state.attempts).warning(
                    f"{descriptor.method.value} {descriptor.endpoint} cancelled by caller"
                )
                raise

    async def _run(self, descriptor: CallDescriptor, state: _ExecutionState) -> ExecutionResult:
        max_attempts = self.policy.max_attempts

        while state.attempts < max_attempts:
            state.attempts += 1
            outcome = await self._attempt(descriptor, state.attempts)

            if isinstance(outcome, Success):
                return replace(outcome, attempts=state.attempts)

            if isinstance(outcome, FatalFailure):
                return self._fail(descriptor, state.attempts, outcome.cause)

            state.last_cause = outcome.cause
            if state.attempts >= max_attempts:
                break

            if isinstance(outcome, RateLimited):
                delay_ms = float(outcome.retry_after_ms)
                logger.bind(attempt=state.attempts, delay_ms=delay_ms).warning(
                    f"Rate limited. Waiting {delay_ms:.0f}ms before retry..."
                )
            else:
                delay_ms = self.policy.backoff_delay_ms(state.attempts)
                logger.bind(attempt=state.attempts, delay_ms=delay_ms).warning(
                    f"Retrying in {delay_ms:.0f}ms... (Attempt {state.attempts}/{max_attempts})"
                )
            await self._sleep(delay_ms / 1000)

        if state.last_cause is None:
            raise RuntimeError("Retry loop completed without an attempt")
        return self._fail(descriptor, state.attempts, state.last_cause)

    async def _attempt(self, descriptor: CallDescriptor, attempt: int) -> AttemptOutcome:
        method = descriptor.method.value
        logger.bind(attempt=attempt).debug(f"{method} {descriptor.endpoint} attempt {attempt}/{self.policy.max_attempts}")

        try:
            response = await self._send(descriptor)
        except httpx.RequestError as exc:
            outcome = classify_transport_error(exc)
            logger.bind(attempt=attempt, status=None, error=outcome.cause.message).warning(
                f"{method} {descriptor.endpoint} failed without a response: {type(exc).__name__}"
            )
            return outcome

        outcome = classify_response(response, descriptor)
        bound = logger.bind(attempt=attempt, status=response.status_code)
        if isinstance(outcome, Success):
            bound.info(f"{method} {descriptor.endpoint} -> {response.status_code}")
        else:
            bound.bind(body=self._truncate(response.text)).warning(
                f"{method} {descriptor.endpoint} -> {response.status_code} ({outcome.cause.kind.value})"
            )
        return outcome

    async def _send(self, descriptor: CallDescriptor) -> httpx.Response:
        if descriptor.method is HttpMethod.GET:
            return await self._client.request(
                descriptor.method.value,
                descriptor.endpoint,
                params=_query_params(descriptor.payload),
            )
        return await self._client.request(
            descriptor.method.value,
            descriptor.endpoint,
            json=descriptor.payload,
        )

    def _fail(self, descriptor: CallDescriptor, attempts: int, cause: FailureCause) -> TerminalError:
        if cause.kind in (CauseKind.NOT_FOUND, CauseKind.UNAUTHORIZED):
            message = cause.message
        else:
            message = f"Instantly API error after {_attempts_text(attempts)}: {cause.message}"

        terminal = TerminalError(attempts=attempts, cause=cause, message=message)
        logger.bind(attempt=attempts, status=cause.status_code, error_code=terminal.error_code.value).error(
            f"{descriptor.method.value} {descriptor.endpoint} failed: {message}"
        )
        return terminal

    def _truncate(self, text: str) -> str:
        # Mask first, a key split by the cut no longer matches
        text = redact(text)
        if len(text) <= self._body_log_limit:
            return text
        return text[: self._body_log_limit] + "...[truncated]"


def _query_params(payload: Any) -> dict[str, Any] | None:
    if payload is None:
        return None
    params: dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            value = json.dumps(value)
        params[key] = value
    return params


def _attempts_text(attempts: int) -> str:
    return f"{attempts} attempt" if attempts == 1 else f"{attempts} attempts"


__all__ = ["RequestExecutor", "SleepFn", "BODY_LOG_LIMIT"]
