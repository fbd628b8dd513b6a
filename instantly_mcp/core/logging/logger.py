"""JSON-lines logging on loguru with trace ids, call context and secret redaction.

Every record passes through :func:`_patch_record` before reaching a sink, so a
registered secret or a ``Bearer`` token never leaves the process, whichever
sink is installed.
"""

from __future__ import annotations

import json
import re
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger
from loguru._logger import Logger as _LoguruLogger  # type: ignore[attr-defined]

from instantly_mcp.core.logging.config import LogConfig

REDACTED = "***"

# Context keys promoted to the top level of each JSON line
_PROMOTED_KEYS = ("endpoint", "error_code")

_trace_id: ContextVar[str | None] = ContextVar("instantly_trace_id", default=None)
_call_context: ContextVar[dict[str, Any] | None] = ContextVar("instantly_call_context", default=None)

_BEARER_TOKEN = re.compile(r"(Bearer\s+)[^\s\"',}]+", re.IGNORECASE)
_secrets: set[str] = set()


def register_secret(value: str | None) -> None:
    """Register a value that must never reach a log sink."""

    if value:
        _secrets.add(value)


def redact(text: str) -> str:
    """Mask registered secrets and bearer tokens in ``text``."""

    for secret in _secrets:
        text = text.replace(secret, REDACTED)
    return _BEARER_TOKEN.sub(rf"\g<1>{REDACTED}", text)


def current_trace_id() -> str:
    """Return the active trace id, starting a new trace when there is none."""

    trace_id = _trace_id.get()
    if trace_id is None:
        trace_id = uuid4().hex
        _trace_id.set(trace_id)
    return trace_id


def _patch_record(record: dict[str, Any]) -> None:
    record["message"] = redact(record["message"])

    extra = record["extra"]
    for key, value in (_call_context.get() or {}).items():
        extra.setdefault(key, value)
    for key, value in extra.items():
        if isinstance(value, str):
            extra[key] = redact(value)
    extra.setdefault("trace_id", current_trace_id())


def _render(record: dict[str, Any]) -> str:
    extra = dict(record["extra"])
    payload: dict[str, Any] = {
        "timestamp": record["time"].astimezone(timezone.utc).isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "trace_id": extra.pop("trace_id", None),
    }
    for key in _PROMOTED_KEYS:
        payload[key] = extra.pop(key, None)
    if extra:
        payload["context"] = extra
    if record["exception"] is not None:
        exc_type, exc_value, _ = record["exception"]
        name = exc_type.__name__ if exc_type else "Exception"
        payload["exception"] = redact(f"{name}: {exc_value}")
    return json.dumps(payload, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class _JsonLinesSink:
    """Write one JSON document per record to a text stream."""

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream

    def __call__(self, message: Any) -> None:
        self._stream.write(_render(message.record) + "\n")
        self._stream.flush()


def _install(config: LogConfig) -> None:
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        # stdout carries command output
        stream = config.console_stream or sys.stderr
        handlers.append({"sink": _JsonLinesSink(stream), "level": config.level})
    logger.configure(handlers=handlers, patcher=_patch_record)


def configure_logging(level: str = "INFO", **kwargs: Any) -> None:
    """Replace every installed sink according to ``level`` and ``LogConfig`` options."""

    _install(LogConfig(level=level, **kwargs))


class StructuredLogger:
    """A configured loguru logger plus the trace-aware context helper."""

    def __init__(self, config: LogConfig | None = None) -> None:
        self.config = config or LogConfig()
        _install(self.config)
        self.logger: _LoguruLogger = logger

    @contextmanager
    def context(self, *, trace_id: str | None = None, **extra: Any) -> Iterator[str]:
        with log_context(trace_id=trace_id, **extra) as active_trace:
            yield active_trace


def get_logger(name: str | None = None) -> _LoguruLogger:
    """Return the shared logger, bound to ``name`` when given."""

    if name:
        return logger.bind(logger_name=name)
    return logger


@contextmanager
def log_context(*, trace_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Attach a trace id and extra fields to every record logged inside the block.

    Nested blocks inherit and may override the fields of enclosing ones.
    """

    context_token = _call_context.set({**(_call_context.get() or {}), **extra})
    active_trace = trace_id or uuid4().hex
    trace_token = _trace_id.set(active_trace)
    try:
        yield active_trace
    finally:
        _trace_id.reset(trace_token)
        _call_context.reset(context_token)


configure_logging()


__all__ = [
    "REDACTED",
    "StructuredLogger",
    "configure_logging",
    "current_trace_id",
    "get_logger",
    "log_context",
    "logger",
    "redact",
    "register_secret",
]
