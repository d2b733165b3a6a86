"""Rich table builders for each command."""

from __future__ import annotations

from rich.table import Table

from helm_updater.models.repo import ChartVersionInfo
from helm_updater.models.update import UpdateReport
from helm_updater.output.themes import styled_update_type


def update_table(report: UpdateReport) -> Table:
    table = Table(title="Chart Updates", expand=True)
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Manifest", style="blue")
    table.add_column("Current", style="dim")
    table.add_column("New", style="bold")
    table.add_column("Update Type", no_wrap=True)
    table.add_column("Repository", style="dim", max_width=40)

    for u in report.updates:
        table.add_row(
            u.chart_name,
            f"{u.dependency.manifest_path}#{u.dependency.document_index}",
            u.current_version,
            u.new_version,
            styled_update_type(u.update_type),
            u.dependency.repo_url,
        )
    return table


def failure_table(report: UpdateReport) -> Table:
    table = Table(title="Unreachable Repositories", expand=True)
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("URL", style="dim")
    table.add_column("Error", style="red")
    for key in report.failed_charts:
        error = report.failures[key]
        table.add_row(key, error.url, str(error))
    return table


def versions_table(chart_name: str, versions: list[ChartVersionInfo]) -> Table:
    table = Table(title=f"Available Versions: {chart_name}", expand=True)
    table.add_column("Version", style="bold")
    table.add_column("App Version", style="cyan")
    table.add_column("Created", style="dim", no_wrap=True)
    table.add_column("Digest", style="dim", max_width=24)
    for v in versions:
        created = v.created.strftime("%Y-%m-%d %H:%M:%S") if v.created else ""
        table.add_row(v.version, v.app_version or "-", created, v.digest)
    return table
