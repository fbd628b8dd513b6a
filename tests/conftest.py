"""Pytest configuration for the instantly-mcp test suite."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from instantly_mcp.core.config import HttpConfig, InstantlyConfig
from instantly_mcp.core.logging import configure_logging
from instantly_mcp.core.patterns import RetryPolicy

TEST_API_KEY = "sk-test-0123456789abcd"
TEST_BASE_URL = "https://api.instantly.test/api/v2"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--instantly-run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that call the live Instantly API.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker."""

    config.addinivalue_line(
        "markers",
        "integration: marks tests requiring network access and a real API key",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--instantly-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --instantly-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _silence_logging() -> None:
    """Drop log output unless a test installs its own sink."""

    configure_logging(console_output=False)


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ScriptedTransport:
    """Mock transport handler replaying responses and exceptions in order.

    The last step repeats once the script runs out.
    """

    def __init__(self, *steps: httpx.Response | Exception) -> None:
        self.steps = list(steps)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        if isinstance(step, Exception):
            raise step
        return step

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, initial_delay_ms=100, max_delay_ms=1000, backoff_factor=2)


@pytest.fixture
def config(policy: RetryPolicy) -> InstantlyConfig:
    return InstantlyConfig(api_key=TEST_API_KEY, http=HttpConfig(base_url=TEST_BASE_URL), retry=policy)


@pytest.fixture
def scripted() -> Callable[..., ScriptedTransport]:
    def factory(*steps: httpx.Response | Exception) -> ScriptedTransport:
        return ScriptedTransport(*steps)

    return factory

