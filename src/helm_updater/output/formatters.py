"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from helm_updater.models.repo import ChartVersionInfo
from helm_updater.models.update import UpdateReport, VersionUpdate

console = Console()


def _update_to_dict(u: VersionUpdate) -> dict[str, Any]:
    return {
        "chart": u.chart_name,
        "manifest_path": u.dependency.manifest_path,
        "document_index": u.dependency.document_index,
        "repo_url": u.dependency.repo_url,
        "repo_type": u.dependency.repo_type.value,
        "current_version": u.current_version,
        "new_version": u.new_version,
        "update_type": u.update_type,
        "version_path": list(u.dependency.version_path),
    }


def _version_to_dict(v: ChartVersionInfo) -> dict[str, Any]:
    return {
        "version": v.version,
        "app_version": v.app_version,
        "created": v.created.isoformat() if v.created else None,
        "digest": v.digest,
    }


def report_to_dict(report: UpdateReport) -> dict[str, Any]:
    return {
        "updates": [_update_to_dict(u) for u in report.updates],
        "failures": [
            {"chart": key, "url": report.failures[key].url, "error": str(report.failures[key])}
            for key in report.failed_charts
        ],
    }


def output_report(report: UpdateReport, fmt: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps(report_to_dict(report), indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump(report_to_dict(report), default_flow_style=False, sort_keys=False))
    else:
        from helm_updater.output.tables import failure_table, update_table
        if report.updates:
            console.print(update_table(report))
            console.print(f"\n[yellow]{len(report.updates)} update(s) available[/yellow]")
        elif report.failures:
            console.print("[yellow]No updates found among the charts that could be checked[/yellow]")
        else:
            console.print("[green]All charts are up to date[/green]")
        if report.failures:
            console.print(failure_table(report))


def output_versions(chart_name: str, versions: list[ChartVersionInfo], fmt: str) -> None:
    if fmt == "json":
        data = [_version_to_dict(v) for v in versions]
        console.print_json(json.dumps(data, indent=2))
    elif fmt == "yaml":
        data = [_version_to_dict(v) for v in versions]
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))
    else:
        from helm_updater.output.tables import versions_table
        console.print(versions_table(chart_name, versions))
