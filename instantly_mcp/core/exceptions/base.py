"""Core exception classes for instantly-mcp."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from instantly_mcp.core.exceptions.codes import ErrorCode

if TYPE_CHECKING:
    from instantly_mcp.core.http.models import TerminalError


class InstantlyError(Exception):
    """Base exception for instantly-mcp."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human readable error message
            error_code: Machine readable error code
            details: Additional context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        payload: dict[str, Any] = {"code": self.error_code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


class ConfigurationError(InstantlyError):
    """Missing or invalid configuration; fatal at startup."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if setting:
            super_details["setting"] = setting
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR.value, super_details)
        self.setting = setting


class RequestFailedError(InstantlyError):
    """Exception form of a terminal request failure."""

    def __init__(self, terminal: TerminalError):
        details: dict[str, Any] = {
            "attempts": terminal.attempts,
            "cause": terminal.cause.kind.value,
        }
        if terminal.cause.status_code is not None:
            details["status_code"] = terminal.cause.status_code
        super().__init__(terminal.message, terminal.error_code.value, details)
        self.terminal = terminal

    @property
    def attempts(self) -> int:
        return self.terminal.attempts


__all__ = ["InstantlyError", "ConfigurationError", "RequestFailedError"]
