"""Standardized error codes."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes carried by :class:`InstantlyError` instances."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Request failures, one per failure cause
    NOT_FOUND = "NOT_FOUND"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    CANCELLED = "CANCELLED"


__all__ = ["ErrorCode"]
