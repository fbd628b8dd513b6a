"""Configuration management: environment driven, loaded once at startup."""

from __future__ import annotations

import math
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Mapping, TypeVar

from instantly_mcp import __version__
from instantly_mcp.core.exceptions import ConfigurationError
from instantly_mcp.core.logging import register_secret
from instantly_mcp.core.patterns.retry import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_INITIAL_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY_MS,
    RetryPolicy,
)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.instantly.ai/api/v2"
DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"

ENV_API_KEY = "INSTANTLY_API_KEY"
ENV_API_URL = "INSTANTLY_API_URL"
ENV_RETRY_MAX_ATTEMPTS = "INSTANTLY_RETRY_MAX_ATTEMPTS"
ENV_RETRY_INITIAL_DELAY = "INSTANTLY_RETRY_INITIAL_DELAY"
ENV_RETRY_MAX_DELAY = "INSTANTLY_RETRY_MAX_DELAY"
ENV_RETRY_BACKOFF_FACTOR = "INSTANTLY_RETRY_BACKOFF_FACTOR"
ENV_HTTP_TIMEOUT = "INSTANTLY_HTTP_TIMEOUT"
ENV_LOG_LEVEL = "INSTANTLY_LOG_LEVEL"

_POLICY_ENV_NAMES = {
    "max_attempts": ENV_RETRY_MAX_ATTEMPTS,
    "initial_delay_ms": ENV_RETRY_INITIAL_DELAY,
    "max_delay_ms": ENV_RETRY_MAX_DELAY,
    "backoff_factor": ENV_RETRY_BACKOFF_FACTOR,
}

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class HttpConfig:
    """HTTP client settings."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = f"instantly-mcp/{__version__}"

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty", setting=ENV_API_URL)
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"base_url must be an http(s) URL, got {self.base_url!r}",
                setting=ENV_API_URL,
            )
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be a positive finite number, got {self.timeout!r}",
                setting=ENV_HTTP_TIMEOUT,
            )


@dataclass(frozen=True)
class InstantlyConfig:
    """Process-wide configuration. The API key is kept out of ``repr``."""

    api_key: str = field(repr=False)
    http: HttpConfig = field(default_factory=HttpConfig)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(f"{ENV_API_KEY} environment variable is required", setting=ENV_API_KEY)
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level {self.log_level!r}", setting=ENV_LOG_LEVEL)
        register_secret(self.api_key)

    @property
    def masked_api_key(self) -> str:
        """The API key with everything but its last four characters hidden."""
        if len(self.api_key) <= 4:
            return "*" * len(self.api_key)
        return "*" * (len(self.api_key) - 4) + self.api_key[-4:]

    def to_dict(self) -> dict[str, Any]:
        """Serializable view with the key masked."""
        return {
            "api_key": self.masked_api_key,
            "http": asdict(self.http),
            "retry": {
                "max_attempts": self.retry.max_attempts,
                "initial_delay_ms": self.retry.initial_delay_ms,
                "max_delay_ms": self.retry.max_delay_ms,
                "backoff_factor": self.retry.backoff_factor,
            },
            "log_level": self.log_level,
        }

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "InstantlyConfig":
        return load_config_from_env(environ)


def _read(environ: Mapping[str, str], name: str, parse: Callable[[str], T], default: T) -> T:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}", setting=name) from exc


def load_config_from_env(environ: Mapping[str, str] | None = None) -> InstantlyConfig:
    """Build an :class:`InstantlyConfig` from environment variables.

    Args:
        environ: Mapping to read from, ``os.environ`` when omitted

    Returns:
        The validated configuration

    Raises:
        ConfigurationError: When the API key is missing or a value is invalid
    """
    env = os.environ if environ is None else environ

    api_key = env.get(ENV_API_KEY, "").strip()
    if not api_key:
        raise ConfigurationError(f"{ENV_API_KEY} environment variable is required", setting=ENV_API_KEY)

    try:
        retry = RetryPolicy(
            max_attempts=_read(env, ENV_RETRY_MAX_ATTEMPTS, int, DEFAULT_MAX_ATTEMPTS),
            initial_delay_ms=_read(env, ENV_RETRY_INITIAL_DELAY, int, DEFAULT_INITIAL_DELAY_MS),
            max_delay_ms=_read(env, ENV_RETRY_MAX_DELAY, int, DEFAULT_MAX_DELAY_MS),
            backoff_factor=_read(env, ENV_RETRY_BACKOFF_FACTOR, float, DEFAULT_BACKOFF_FACTOR),
        )
    except ConfigurationError as exc:
        # Report policy violations against the variable the operator set
        if exc.setting in _POLICY_ENV_NAMES:
            raise ConfigurationError(exc.message, setting=_POLICY_ENV_NAMES[exc.setting]) from exc
        raise

    http = HttpConfig(
        base_url=env.get(ENV_API_URL, "").strip() or DEFAULT_BASE_URL,
        timeout=_read(env, ENV_HTTP_TIMEOUT, float, DEFAULT_TIMEOUT),
    )

    return InstantlyConfig(
        api_key=api_key,
        http=http,
        retry=retry,
        log_level=env.get(ENV_LOG_LEVEL, "").strip().upper() or DEFAULT_LOG_LEVEL,
    )


__all__ = [
    "DEFAULT_BASE_URL",
    "LOG_LEVELS",
    "HttpConfig",
    "InstantlyConfig",
    "load_config_from_env",
]
