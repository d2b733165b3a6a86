"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from helm_updater.config.settings import LOG_LEVELS

app = typer.Typer(
    name="helm-updater",
    help="Helm Updater - Detect chart updates for GitOps manifests.",
    no_args_is_help=True,
)


def configure_logging(level: str) -> None:
    """Route all log records through a stderr RichHandler at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def root(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="debug, info, warning or error"),
) -> None:
    if log_level and log_level.lower() not in LOG_LEVELS:
        raise typer.BadParameter(f"must be one of: {', '.join(LOG_LEVELS)}", param_hint="--log-level")
    ctx.obj = {"log_level": log_level.lower() if log_level else None}
    configure_logging(log_level or "info")


def _register_commands() -> None:
    from helm_updater.cli.commands.check_cmd import app as check_app
    from helm_updater.cli.commands.versions_cmd import app as versions_app

    app.add_typer(check_app, name="check", help="Check dependencies for chart updates")
    app.add_typer(versions_app, name="versions", help="List available versions of a chart")


_register_commands()


def main() -> None:
    app()
