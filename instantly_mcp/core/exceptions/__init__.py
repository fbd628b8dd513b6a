"""Exception handling module."""

from instantly_mcp.core.exceptions.base import (
    ConfigurationError,
    InstantlyError,
    RequestFailedError,
)
from instantly_mcp.core.exceptions.codes import ErrorCode

__all__ = [
    "InstantlyError",
    "ConfigurationError",
    "RequestFailedError",
    "ErrorCode",
]
