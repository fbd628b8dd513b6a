"""Logging utilities for monitoring and debugging."""

from instantly_mcp.core.logging.config import LogConfig
from instantly_mcp.core.logging.logger import (
    REDACTED,
    StructuredLogger,
    configure_logging,
    current_trace_id,
    get_logger,
    log_context,
    logger,
    redact,
    register_secret,
)

__all__ = [
    "LogConfig",
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
