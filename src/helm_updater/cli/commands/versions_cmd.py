"""helm-updater versions <repo-url> <chart> - List versions published for a chart."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from helm_updater.cli.options import ConfigOption, OutputOption, load_cli_settings
from helm_updater.core.version_resolver import VersionResolver
from helm_updater.models import RepoType
from helm_updater.output.formatters import output_versions
from helm_updater.utils.version_compare import parse_version

app = typer.Typer()


@app.callback(invoke_without_command=True)
def versions(
    ctx: typer.Context,
    repo_url: str = typer.Argument(help="Helm repository URL or OCI registry (oci://host)"),
    chart: str = typer.Argument(help="Chart name"),
    output: str = OutputOption,
    config: Optional[Path] = ConfigOption,
    oci: bool = typer.Option(False, "--oci", help="Treat the repository as an OCI registry"),
) -> None:
    """List the versions a repository publishes for a chart, newest first."""
    cfg = load_cli_settings(ctx, config)
    repo_type = RepoType.OCI if oci or repo_url.startswith("oci://") else RepoType.HELM

    result = asyncio.run(VersionResolver(cfg).list_versions(repo_url, chart, repo_type))
    if not result.ok:
        typer.echo(f"Failed to fetch versions: {result.error}", err=True)
        raise typer.Exit(code=1)

    found = result.value
    if not found:
        typer.echo(f"Chart '{chart}' not found in {repo_url}.", err=True)
        raise typer.Exit(code=1)

    # Non-semver tags sort last, in published order.
    semver = sorted((v for v in found if parse_version(v.version) is not None), key=lambda v: parse_version(v.version), reverse=True)
    ranked = semver + [v for v in found if parse_version(v.version) is None]
    output_versions(chart, ranked, output)
