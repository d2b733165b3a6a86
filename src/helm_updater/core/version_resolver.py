"""Resolve available chart versions and detect updates.

One VersionResolver call builds its own HTTP client and RepositoryCache,
fetches every distinct repository concurrently and turns the results into
a resolution table keyed by ``repoURL/chartName``.  A repository that
cannot be fetched is logged and left out of the table; it never aborts the
other fetches and never raises out of the resolver.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Sequence

import httpx

from helm_updater.config.settings import Settings, settings
from helm_updater.core.fetchers import FetchResult, fetcher_for
from helm_updater.core.http_client import build_client
from helm_updater.core.repo_cache import RepositoryCache
from helm_updater.core.update_strategy import is_dependency_ignored, select_update
from helm_updater.errors import FetchError, HttpError
from helm_updater.models import RepoType
from helm_updater.models.dependency import HelmDependency
from helm_updater.models.repo import ChartVersionInfo
from helm_updater.models.update import UpdateReport, VersionUpdate

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
ResolutionTable = dict[str, list[ChartVersionInfo]]

_CREDENTIALS_HINT = (
    "To configure credentials, add them to the updater configuration:\n"
    "  registry-credentials:\n"
    "    - registry: <registry-host>\n"
    "      username: <username>\n"
    "      password: <password>\n"
    "      auth-type: basic  # or \"bearer\""
)


class VersionResolver:
    """Queries Helm repositories and OCI registries for chart versions."""

    def __init__(
        self,
        cfg: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = cfg or settings
        self._transport = transport

    async def resolve_versions(self, dependencies: Sequence[HelmDependency]) -> ResolutionTable:
        """Map ``repoURL/chartName`` to the versions available for it."""
        table, _, _ = await self._resolve(dependencies)
        return table

    async def check_for_updates(self, dependencies: Sequence[HelmDependency]) -> list[VersionUpdate]:
        """Return one VersionUpdate per dependency with an eligible newer version."""
        report = await self.check(dependencies)
        return report.updates

    async def check(
        self,
        dependencies: Sequence[HelmDependency],
        on_progress: ProgressCallback | None = None,
    ) -> UpdateReport:
        """Resolve and evaluate, keeping track of repositories that failed."""
        table, failures, fetch_count = await self._resolve(dependencies, on_progress)
        return UpdateReport(
            updates=self.evaluate(dependencies, table),
            failures=failures,
            dependencies_checked=len(dependencies),
            repositories_fetched=fetch_count,
        )

    def evaluate(
        self,
        dependencies: Sequence[HelmDependency],
        table: ResolutionTable,
    ) -> list[VersionUpdate]:
        """Run the update strategy for each dependency against a resolution table."""
        cfg = self.settings
        updates: list[VersionUpdate] = []
        for dep in dependencies:
            available = table.get(dep.lookup_key)
            if available is None:
                continue
            if is_dependency_ignored(dep.chart_name, cfg.ignore):
                logger.info("Ignoring dependency %s (matched ignore rule)", dep.chart_name)
                continue
            new_version = select_update(
                dep.current_version,
                available,
                strategy=cfg.update_strategy,
                ignore_rules=cfg.ignore,
                dependency_name=dep.chart_name,
                allow_prereleases=cfg.allow_prereleases,
            )
            if new_version is None:
                continue
            logger.info(
                "Update available for %s in %s: %s → %s",
                dep.chart_name, dep.manifest_path, dep.current_version, new_version,
            )
            updates.append(VersionUpdate(
                dependency=dep,
                current_version=dep.current_version,
                new_version=new_version,
            ))
        return updates

    async def list_versions(
        self,
        repo_url: str,
        chart_name: str,
        repo_type: RepoType = RepoType.HELM,
    ) -> FetchResult:
        """Fetch the versions of a single chart, bypassing the resolution table."""
        fetcher = fetcher_for(repo_type)
        async with build_client(self.settings, self._transport) as client:
            return await fetcher.fetch(client, repo_url, chart_name, self.settings.registry_credentials)

    # ------------------------------------------------------------------

    async def _resolve(
        self,
        dependencies: Sequence[HelmDependency],
        on_progress: ProgressCallback | None = None,
    ) -> tuple[ResolutionTable, dict[str, FetchError], int]:
        unique: dict[str, HelmDependency] = {}
        for dep in dependencies:
            unique.setdefault(dep.lookup_key, dep)
        if not unique:
            return {}, {}, 0

        cache = RepositoryCache()
        semaphore = asyncio.Semaphore(max(self.settings.max_concurrency, 1))
        done = 0
        total = len(unique)

        async def resolve_one(dep: HelmDependency) -> FetchResult:
            nonlocal done
            result = await self._fetch_versions(dep, client, cache, semaphore)
            done += 1
            if on_progress:
                on_progress(done, total, dep.chart_name)
            return result

        async with build_client(self.settings, self._transport) as client:
            try:
                results = await asyncio.gather(*(resolve_one(dep) for dep in unique.values()))
            finally:
                cache.cancel_pending()

        table: ResolutionTable = {}
        failures: dict[str, FetchError] = {}
        for dep, result in zip(unique.values(), results):
            if result.ok:
                table[dep.lookup_key] = result.value
            else:
                failures[dep.lookup_key] = result.error

        self._log_failures(unique, failures)
        logger.debug(
            "Resolved %d of %d chart(s) with %d fetch(es)", len(table), total, cache.fetch_count,
        )
        return table, failures, cache.fetch_count

    async def _fetch_versions(
        self,
        dep: HelmDependency,
        client: httpx.AsyncClient,
        cache: RepositoryCache,
        semaphore: asyncio.Semaphore,
    ) -> FetchResult:
        fetcher = fetcher_for(dep.repo_type)
        url = fetcher.fetch_url(dep.repo_url, dep.chart_name)
        credentials = self.settings.registry_credentials

        async def fetch() -> FetchResult:
            async with semaphore:
                logger.debug("Fetching %s", url)
                return await fetcher.fetch_document(client, url, credentials)

        try:
            result = await cache.get_or_fetch(url, fetch)
            if not result.ok:
                return result
            return FetchResult.success(fetcher.select(result.value, dep.chart_name))
        except Exception as e:
            logger.debug("Unexpected failure resolving %s", dep.lookup_key, exc_info=True)
            return FetchResult.failure(FetchError(url, f"Unexpected error reading {url}: {e}"))

    @staticmethod
    def _log_failures(unique: dict[str, HelmDependency], failures: dict[str, FetchError]) -> None:
        # Charts from one index share a failure; report it once per URL.
        by_url: dict[str, list[str]] = {}
        errors: dict[str, FetchError] = {}
        for key, error in failures.items():
            by_url.setdefault(error.url, []).append(unique[key].chart_name)
            errors[error.url] = error

        for url, charts in by_url.items():
            error = errors[url]
            logger.error(
                "Failed to fetch versions from %s for chart(s) %s: %s",
                url, ", ".join(sorted(charts)), error,
            )
            if isinstance(error, HttpError) and error.is_auth_error:
                logger.error("Authentication failed for %s\n%s", url, _CREDENTIALS_HINT)
