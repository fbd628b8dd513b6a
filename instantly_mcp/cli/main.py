"""Main entry point for the instantly-mcp command line interface."""

from __future__ import annotations

from pathlib import Path

import typer
from dotenv import load_dotenv

from instantly_mcp.core.config import LOG_LEVELS

from .config import register as register_config_commands
from .request import register as register_request_commands


def create_app() -> typer.Typer:
    """Create a Typer application instance."""

    app = typer.Typer(add_completion=False, help="Instantly.ai API command line interface")

    @app.callback()
    def main(
        ctx: typer.Context,
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Log level; defaults to INSTANTLY_LOG_LEVEL or INFO.",
        ),
        env_file: Path | None = typer.Option(
            None,
            "--env-file",
            help="Load environment variables from this file instead of ./.env.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        if log_level and log_level.upper() not in LOG_LEVELS:
            allowed = ", ".join(sorted(LOG_LEVELS))
            raise typer.BadParameter(f"Unknown log level '{log_level}'. Allowed values: {allowed}", param_hint="--log-level")
        # Real environment variables take precedence over the file
        load_dotenv(dotenv_path=env_file or Path.cwd() / ".env", override=False)
        ctx.obj.update({"log_level": log_level.upper() if log_level else None})

    register_request_commands(app)
    register_config_commands(app)
    return app


app = create_app()
