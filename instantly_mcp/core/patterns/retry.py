"""Retry policy and backoff computation."""

from __future__ import annotations

import math
from dataclasses import dataclass

from instantly_mcp.core.exceptions import ConfigurationError

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 10000
DEFAULT_BACKOFF_FACTOR = 2.0


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Immutable retry configuration shared by every request.

    Attributes:
        max_attempts: Total attempts allowed, the first one included
        initial_delay_ms: Delay before the first retry
        max_delay_ms: Ceiling on any computed backoff delay
        backoff_factor: Multiplier applied per retry
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR

    def __post_init__(self) -> None:
        """Validate the policy so bad settings fail at startup."""
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise ConfigurationError(
                f"max_attempts must be an integer, got {self.max_attempts!r}",
                setting="max_attempts",
            )
        for name in ("initial_delay_ms", "max_delay_ms", "backoff_factor"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a finite number, got {getattr(self, name)!r}", setting=name)
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {self.max_attempts}",
                setting="max_attempts",
            )
        if self.initial_delay_ms < 0:
            raise ConfigurationError(
                f"initial_delay_ms must be non-negative, got {self.initial_delay_ms}",
                setting="initial_delay_ms",
            )
        if self.max_delay_ms < self.initial_delay_ms:
            raise ConfigurationError(
                f"max_delay_ms ({self.max_delay_ms}) must be >= initial_delay_ms ({self.initial_delay_ms})",
                setting="max_delay_ms",
            )
        if self.backoff_factor < 1:
            raise ConfigurationError(
                f"backoff_factor must be at least 1, got {self.backoff_factor}",
                setting="backoff_factor",
            )

    def backoff_delay_ms(self, attempt: int) -> float:
        """Delay to wait after failed attempt number ``attempt`` (1-based).

        Args:
            attempt: Number of the attempt that just failed

        Returns:
            Delay in milliseconds, capped at ``max_delay_ms``
        """
        if attempt < 1:
            return 0.0

        try:
            delay = self.initial_delay_ms * (self.backoff_factor ** (attempt - 1))
        except OverflowError:
            return float(self.max_delay_ms)
        return float(min(delay, self.max_delay_ms))


__all__ = [
    "RetryPolicy",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_INITIAL_DELAY_MS",
    "DEFAULT_MAX_DELAY_MS",
    "DEFAULT_BACKOFF_FACTOR",
]
