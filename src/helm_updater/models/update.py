"""Update policy and update result models."""

from __future__ import annotations

from dataclasses import dataclass, field

from helm_updater.errors import FetchError
from helm_updater.models import UpdateType
from helm_updater.models.dependency import HelmDependency
from helm_updater.utils.version_compare import classify_update


@dataclass(frozen=True)
class IgnoreRule:
    dependency_name: str
    update_types: frozenset[UpdateType] = field(default_factory=frozenset)
    versions: tuple[str, ...] = ()

    @property
    def ignores_everything(self) -> bool:
        return not self.update_types and not self.versions


@dataclass(frozen=True)
class VersionUpdate:
    dependency: HelmDependency
    current_version: str
    new_version: str

    @property
    def chart_name(self) -> str:
        return self.dependency.chart_name

    @property
    def update_type(self) -> str:
        return classify_update(self.current_version, self.new_version)


@dataclass
class UpdateReport:
    """Outcome of one update check."""

    updates: list[VersionUpdate] = field(default_factory=list)
    # lookup key -> error, for dependencies whose repository could not be read
    failures: dict[str, FetchError] = field(default_factory=dict)
    dependencies_checked: int = 0
    repositories_fetched: int = 0

    @property
    def failed_charts(self) -> list[str]:
        return sorted(self.failures)
