"""Commands that talk to the API: ``request`` and ``verify``."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import typer

from instantly_mcp.core.client import InstantlyClient
from instantly_mcp.core.config import InstantlyConfig
from instantly_mcp.core.exceptions import ErrorCode
from instantly_mcp.core.http import CallDescriptor, HttpMethod, Success, TerminalError

from .constants import CONFIG_EXIT_CODE, MIN_PYTHON, REQUEST_EXIT_CODE, VALIDATION_EXIT_CODE
from .utils import emit_error, emit_json, load_cli_config


def register(app: typer.Typer) -> None:
    """Register request commands on the root CLI application."""

    app.command("request")(request_command)
    app.command("verify")(verify_command)


def get_client(config: InstantlyConfig) -> InstantlyClient:
    """Factory hook returning an :class:`InstantlyClient` instance."""

    return InstantlyClient(config)


def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(..., help="HTTP method: GET, POST, PATCH or DELETE."),
    endpoint: str = typer.Argument(..., help="Endpoint path, e.g. /campaigns."),
    data: str | None = typer.Option(
        None,
        "--data",
        "-d",
        help="JSON payload. Sent as query parameters for GET, as the body otherwise.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Deadline in seconds for the whole call, retries included.",
    ),
) -> None:
    """Execute one API call with retries and print the response body."""

    payload = _parse_payload(data)
    try:
        descriptor = CallDescriptor(endpoint, method, payload)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    config = load_cli_config(ctx)
    result = asyncio.run(_execute(config, descriptor, timeout))

    if isinstance(result, TerminalError):
        emit_error(result.to_payload())
        raise typer.Exit(code=REQUEST_EXIT_CODE)
    emit_json(result.body)


def verify_command(
    ctx: typer.Context,
    ping: bool = typer.Option(
        False,
        "--ping",
        help="Also call GET /campaigns?limit=1 to check the key against the API.",
    ),
) -> None:
    """Verify the setup: runtime, configuration and, optionally, API access."""

    version = python_version()
    required = ".".join(str(part) for part in MIN_PYTHON)
    found = ".".join(str(part) for part in version)
    if version[:2] < MIN_PYTHON:
        emit_error(
            {
                "code": ErrorCode.CONFIGURATION_ERROR.value,
                "message": f"Python {required} or newer is required, found {found}",
            }
        )
        raise typer.Exit(code=CONFIG_EXIT_CODE)
    typer.echo(f"OK  Python {found} (>= {required})")

    config = load_cli_config(ctx)
    typer.echo(f"OK  INSTANTLY_API_KEY is set ({config.masked_api_key})")
    typer.echo(f"OK  base URL: {config.http.base_url}")
    typer.echo(
        "OK  retry policy: "
        f"{config.retry.max_attempts} attempts, "
        f"{config.retry.initial_delay_ms}ms initial, "
        f"{config.retry.max_delay_ms}ms max, "
        f"x{config.retry.backoff_factor:g}"
    )

    if not ping:
        return

    descriptor = CallDescriptor("/campaigns", HttpMethod.GET, {"limit": 1})
    result = asyncio.run(_execute(config, descriptor, None))
    if isinstance(result, Success):
        typer.echo(f"OK  API reachable ({result.attempts} attempt(s))")
        return

    emit_error(result.to_payload())
    raise typer.Exit(code=REQUEST_EXIT_CODE)


def python_version() -> tuple[int, ...]:
    """Running interpreter version as ``(major, minor, micro)``."""

    return tuple(sys.version_info[:3])


async def _execute(config: InstantlyConfig, descriptor: CallDescriptor, timeout: float | None):
    async with get_client(config) as client:
        return await client.call(descriptor, timeout=timeout)


def _parse_payload(data: str | None) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        message = f"--data is not valid JSON: {exc.msg}"
        emit_error({"code": ErrorCode.VALIDATION_ERROR.value, "message": message})
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc


__all__ = ["register", "get_client", "python_version", "request_command", "verify_command"]
