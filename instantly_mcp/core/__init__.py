"""Core: configuration, request execution and the API client."""

from instantly_mcp.core.client import InstantlyClient, create_http_client
from instantly_mcp.core.config import InstantlyConfig, load_config_from_env
from instantly_mcp.core.exceptions import ConfigurationError, InstantlyError, RequestFailedError
from instantly_mcp.core.http import CallDescriptor, HttpMethod, RequestExecutor, TerminalError
from instantly_mcp.core.patterns import RetryPolicy

__all__ = [
    "CallDescriptor",
    "ConfigurationError",
    "HttpMethod",
    "InstantlyClient",
    "InstantlyConfig",
    "InstantlyError",
    "RequestExecutor",
    "RequestFailedError",
    "RetryPolicy",
    "TerminalError",
    "create_http_client",
    "load_config_from_env",
]
