"""Configuration management module."""

from instantly_mcp.core.config.settings import (
    DEFAULT_BASE_URL,
    LOG_LEVELS,
    HttpConfig,
    InstantlyConfig,
    load_config_from_env,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "LOG_LEVELS",
    "HttpConfig",
    "InstantlyConfig",
    "load_config_from_env",
]
