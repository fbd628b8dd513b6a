"""Resilience patterns."""

from instantly_mcp.core.patterns.retry import RetryPolicy

__all__ = ["RetryPolicy"]
