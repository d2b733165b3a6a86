"""Shared CLI options."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from helm_updater.config.settings import Settings, load_settings
from helm_updater.errors import ConfigError

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
ConfigOption = typer.Option(None, "--config", "-c", help="Updater config file (default: .argocd-updater.yml)")
StrategyOption = typer.Option(None, "--strategy", "-s", help="Override update strategy: major, minor, patch, all")


def load_cli_settings(ctx: typer.Context, config: Optional[Path]) -> Settings:
    """Load the config file, exiting with status 2 when it is invalid.

    The config's log-level applies unless --log-level was given.
    """
    try:
        cfg = load_settings(config)
    except ConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    obj = ctx.find_root().obj or {}
    if not obj.get("log_level"):
        logging.getLogger().setLevel(cfg.log_level.upper())
    return cfg
