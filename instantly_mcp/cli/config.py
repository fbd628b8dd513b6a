"""Configuration inspection commands."""

from __future__ import annotations

import typer
from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table

from .utils import load_cli_config

config_app = typer.Typer(help="Configuration utilities.")


def register(app: typer.Typer) -> None:
    """Register config commands on the root CLI application."""

    app.add_typer(config_app, name="config", help="Inspect resolved configuration")


@config_app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Show the resolved configuration with the API key masked."""

    config = load_cli_config(ctx)
    table = Table(box=SIMPLE, show_lines=False)
    table.add_column("setting")
    table.add_column("value")

    table.add_row("api_key", config.masked_api_key)
    table.add_row("base_url", config.http.base_url)
    table.add_row("timeout", f"{config.http.timeout:g}s")
    table.add_row("retry.max_attempts", str(config.retry.max_attempts))
    table.add_row("retry.initial_delay_ms", str(config.retry.initial_delay_ms))
    table.add_row("retry.max_delay_ms", str(config.retry.max_delay_ms))
    table.add_row("retry.backoff_factor", f"{config.retry.backoff_factor:g}")
    table.add_row("log_level", config.log_level)

    Console(no_color=True, width=120).print(table)


__all__ = ["register", "config_app", "show_command"]
