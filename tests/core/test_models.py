"""Tests for call descriptors and execution results."""

import pytest

from instantly_mcp.core.exceptions import ErrorCode, RequestFailedError
from instantly_mcp.core.http import (
    CallDescriptor,
    CauseKind,
    FailureCause,
    HttpMethod,
    Success,
    TerminalError,
    unwrap,
)


class TestCallDescriptor:
    """Test CallDescriptor validation."""

    def test_defaults(self):
        descriptor = CallDescriptor("/campaigns")
        assert descriptor.method is HttpMethod.GET
        assert descriptor.payload is None

    @pytest.mark.parametrize("method", ["post", "Post", "POST"])
    def test_method_string_is_coerced(self, method):
        assert CallDescriptor("/leads", method).method is HttpMethod.POST

    def test_unsupported_method(self):
        with pytest.raises(ValueError, match="Unsupported method"):
            CallDescriptor("/leads", "PUT")

    def test_endpoint_requires_leading_slash(self):
        with pytest.raises(ValueError, match="must begin with '/'"):
            CallDescriptor("campaigns")

    def test_get_payload_must_be_mapping(self):
        with pytest.raises(ValueError, match="GET payload must be a mapping"):
            CallDescriptor("/campaigns", HttpMethod.GET, ["a", "b"])

    def test_post_payload_may_be_any_json_value(self):
        descriptor = CallDescriptor("/leads/merge", HttpMethod.POST, [1, 2])
        assert descriptor.payload == [1, 2]

    def test_descriptor_is_immutable(self):
        descriptor = CallDescriptor("/campaigns")
        with pytest.raises(AttributeError):
            descriptor.endpoint = "/leads"  # type: ignore[misc]


class TestTerminalError:
    """Test the terminal failure value."""

    def _terminal(self, kind=CauseKind.SERVER_ERROR, status=503):
        cause = FailureCause(kind, "unavailable", status)
        return TerminalError(attempts=3, cause=cause, message="Instantly API error after 3 attempts: unavailable")

    @pytest.mark.parametrize(
        ("kind", "code"),
        [
            (CauseKind.NOT_FOUND, ErrorCode.NOT_FOUND),
            (CauseKind.UNAUTHORIZED, ErrorCode.AUTHENTICATION_ERROR),
            (CauseKind.CLIENT_ERROR, ErrorCode.CLIENT_ERROR),
            (CauseKind.RATE_LIMITED, ErrorCode.RATE_LIMIT_ERROR),
            (CauseKind.SERVER_ERROR, ErrorCode.SERVER_ERROR),
            (CauseKind.NETWORK, ErrorCode.NETWORK_ERROR),
            (CauseKind.CANCELLED, ErrorCode.CANCELLED),
        ],
    )
    def test_error_code_per_cause(self, kind, code):
        assert self._terminal(kind).error_code is code

    def test_payload(self):
        payload = self._terminal().to_payload()
        assert payload == {
            "code": "SERVER_ERROR",
            "message": "Instantly API error after 3 attempts: unavailable",
            "attempts": 3,
            "cause": "server_error",
            "status_code": 503,
        }

    def test_payload_without_status(self):
        payload = self._terminal(CauseKind.NETWORK, None).to_payload()
        assert "status_code" not in payload

    def test_unwrap_success_returns_body(self):
        assert unwrap(Success({"id": 1}, attempts=2)) == {"id": 1}

    def test_unwrap_terminal_raises(self):
        terminal = self._terminal()
        with pytest.raises(RequestFailedError) as exc_info:
            unwrap(terminal)

        error = exc_info.value
        assert error.terminal is terminal
        assert error.attempts == 3
        assert error.error_code == "SERVER_ERROR"
        assert error.details == {"attempts": 3, "cause": "server_error", "status_code": 503}
        assert str(error) == terminal.message
