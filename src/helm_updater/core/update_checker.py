"""Synchronous entry point for update detection."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

import httpx

from helm_updater.config.settings import Settings
from helm_updater.core.version_resolver import ProgressCallback, VersionResolver
from helm_updater.models.dependency import HelmDependency
from helm_updater.models.update import UpdateReport

logger = logging.getLogger(__name__)


def check_updates(
    dependencies: Sequence[HelmDependency],
    cfg: Settings | None = None,
    on_progress: ProgressCallback | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> UpdateReport:
    """Check a list of dependencies for available updates."""
    resolver = VersionResolver(cfg, transport=transport)
    report = asyncio.run(resolver.check(dependencies, on_progress=on_progress))
    log_summary(report)
    return report


def log_summary(report: UpdateReport) -> None:
    """Log the outcome, keeping failed repositories apart from up-to-date charts."""
    logger.info(
        "Checked %d dependenc%s using %d repository fetch(es)",
        report.dependencies_checked,
        "y" if report.dependencies_checked == 1 else "ies",
        report.repositories_fetched,
    )
    if report.failures:
        logger.warning(
            "%d chart(s) could not be checked because their repository failed: %s",
            len(report.failures), ", ".join(report.failed_charts),
        )
    if report.updates:
        logger.info("Updates detected: %d", len(report.updates))
    elif not report.failures:
        logger.info("No updates found. All charts are up to date.")
    else:
        logger.info("No updates found among the charts that could be checked.")
