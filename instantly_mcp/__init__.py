"""instantly-mcp: resilient client for the Instantly.ai API v2."""

__version__ = "0.1.0"

from instantly_mcp.core import (  # noqa: E402
    CallDescriptor,
    ConfigurationError,
    HttpMethod,
    InstantlyClient,
    InstantlyConfig,
    InstantlyError,
    RequestExecutor,
    RequestFailedError,
    RetryPolicy,
    TerminalError,
    load_config_from_env,
)

__all__ = [
    "__version__",
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
    "load_config_from_env",
]
