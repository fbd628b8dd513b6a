"""Logging configuration primitives for structured logging."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class LogConfig(BaseModel):
    """Options accepted by :func:`configure_logging`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: str = "INFO"
    console_output: bool = True
    console_stream: Any = None

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.upper()


__all__ = ["LogConfig"]
