"""Output and configuration helpers for CLI commands."""

from __future__ import annotations

import json
from typing import Any, Mapping

import typer

from instantly_mcp.core.config import InstantlyConfig, load_config_from_env
from instantly_mcp.core.exceptions import ConfigurationError
from instantly_mcp.core.logging import configure_logging

from .constants import CONFIG_EXIT_CODE


def load_cli_config(ctx: typer.Context) -> InstantlyConfig:
    """Load configuration from the environment or exit with a configuration error.

    Also applies the effective log level: ``--log-level`` when given, the
    configured level otherwise.
    """

    obj = ctx.ensure_object(dict)
    try:
        config = load_config_from_env()
    except ConfigurationError as error:
        emit_error(error.to_payload())
        raise typer.Exit(code=CONFIG_EXIT_CODE) from error

    configure_logging(level=obj.get("log_level") or config.log_level)
    return config


def emit_json(value: Any) -> None:
    """Print ``value`` as indented JSON to stdout."""

    typer.echo(json.dumps(value, ensure_ascii=False, indent=2, default=str))


def emit_error(payload: Mapping[str, Any]) -> None:
    """Print an error payload as one JSON line on stderr."""

    typer.echo(json.dumps(dict(payload), ensure_ascii=False, default=str), err=True)


__all__ = ["emit_error", "emit_json", "load_cli_config"]
