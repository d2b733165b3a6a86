"""helm-updater check <dependencies-file> - Detect available chart updates."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from helm_updater.cli.options import ConfigOption, OutputOption, StrategyOption, load_cli_settings
from helm_updater.core.update_checker import check_updates
from helm_updater.errors import ConfigError
from helm_updater.models import UpdateStrategy
from helm_updater.output.formatters import output_report
from helm_updater.utils.dependency_file import load_dependencies

app = typer.Typer()
console = Console(stderr=True)


@app.callback(invoke_without_command=True)
def check(
    ctx: typer.Context,
    dependencies_file: Path = typer.Argument(help="YAML/JSON file of extracted chart dependencies"),
    output: str = OutputOption,
    config: Optional[Path] = ConfigOption,
    strategy: Optional[str] = StrategyOption,
    allow_prereleases: bool = typer.Option(False, "--allow-prereleases", help="Consider pre-release versions"),
    fail_on_error: bool = typer.Option(False, "--fail-on-error", help="Exit 1 if any repository could not be fetched"),
) -> None:
    """Check extracted dependencies against their repositories."""
    cfg = load_cli_settings(ctx, config)
    if strategy:
        try:
            cfg.update_strategy = UpdateStrategy(strategy)
        except ValueError:
            raise typer.BadParameter("must be one of: major, minor, patch, all", param_hint="--strategy")
    if allow_prereleases:
        cfg.allow_prereleases = True

    try:
        dependencies = load_dependencies(dependencies_file)
    except ConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)

    if not dependencies:
        console.print("[dim]No dependencies found.[/dim]")
        return

    with console.status("[bold cyan]Checking repositories…") as status:
        def on_progress(i: int, total: int, chart: str) -> None:
            status.update(f"[bold cyan]Checking repositories… [dim]({i}/{total})[/dim] {chart}")

        report = check_updates(dependencies, cfg, on_progress=on_progress)

    output_report(report, output)

    if fail_on_error and report.failures:
        raise typer.Exit(code=1)
