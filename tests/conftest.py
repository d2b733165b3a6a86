"""Shared fixtures: dependency factories and a fake chart repository server."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field

import httpx
import pytest
import yaml

from helm_updater.config.settings import Settings
from helm_updater.models import RepoType
from helm_updater.models.dependency import HelmDependency

BITNAMI = "https://charts.bitnami.com/bitnami"
BITNAMI_INDEX = f"{BITNAMI}/index.yaml"


def index_yaml(entries: dict[str, list[str]]) -> str:
    """Render a minimal Helm index.yaml with the given chart versions."""
    doc = {
        "apiVersion": "v1",
        "entries": {
            name: [{"name": name, "version": v} for v in versions]
            for name, versions in entries.items()
        },
    }
    return yaml.safe_dump(doc)


@dataclass
class Route:
    status: int = 200
    body: str = ""
    exc: Exception | None = None
    delay: float = 0.0


@dataclass
class FakeRepositoryServer:
    """httpx.MockTransport backend that records every request it serves."""

    routes: dict[str, Route] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def index(self, url: str, entries: dict[str, list[str]], **kw) -> None:
        self.routes[url] = Route(body=index_yaml(entries), **kw)

    def tags(self, url: str, name: str, tags: list[str] | None, **kw) -> None:
        self.routes[url] = Route(body=json.dumps({"name": name, "tags": tags}), **kw)

    def raw(self, url: str, body: str, status: int = 200, **kw) -> None:
        self.routes[url] = Route(status=status, body=body, **kw)

    def fail(self, url: str, exc: Exception | None = None, status: int = 0, **kw) -> None:
        if exc is None and not status:
            exc = httpx.ConnectError("connection refused")
        self.routes[url] = Route(status=status or 500, exc=exc, **kw)

    def calls(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url) == url)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if route.delay:
            await asyncio.sleep(route.delay)
        if route.exc is not None:
            raise route.exc
        return httpx.Response(route.status, text=route.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def server() -> FakeRepositoryServer:
    return FakeRepositoryServer()


@pytest.fixture
def cfg() -> Settings:
    return Settings(http_timeout=5.0, max_concurrency=4)


@pytest.fixture
def make_dep():
    """Factory for HelmDependency records with sensible defaults."""

    def _make(
        chart: str = "nginx",
        version: str = "15.8.0",
        repo_url: str = BITNAMI,
        repo_type: RepoType = RepoType.HELM,
        manifest: str | None = None,
    ) -> HelmDependency:
        return HelmDependency(
            manifest_path=manifest or f"apps/{chart.split('/')[-1]}.yaml",
            chart_name=chart,
            repo_url=repo_url,
            repo_type=repo_type,
            current_version=version,
            document_index=0,
            version_path=("spec", "source", "targetRevision"),
        )

    return _make
