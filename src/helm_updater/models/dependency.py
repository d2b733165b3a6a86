"""Chart dependency records produced by the manifest extractor."""

from __future__ import annotations

from dataclasses import dataclass, field

from helm_updater.errors import ConfigError
from helm_updater.models import RepoType

_REQUIRED_KEYS = ("manifestPath", "chartName", "repoURL", "repoType", "currentVersion")


@dataclass(frozen=True)
class HelmDependency:
    manifest_path: str
    chart_name: str
    repo_url: str
    repo_type: RepoType
    current_version: str
    document_index: int = 0
    version_path: tuple[str, ...] = field(default_factory=tuple)

    @property
    def lookup_key(self) -> str:
        """Key of this dependency in a resolution table."""
        return f"{self.repo_url}/{self.chart_name}"

    @classmethod
    def from_dict(cls, d: dict) -> HelmDependency:
        if not isinstance(d, dict):
            raise ConfigError(f"Dependency record must be a mapping, got {type(d).__name__}")
        missing = [k for k in _REQUIRED_KEYS if not d.get(k)]
        if missing:
            raise ConfigError(
                f"Dependency record {d.get('chartName', '<unnamed>')!r} is incomplete",
                [f"missing field {k!r}" for k in missing],
            )
        name = d["chartName"]
        try:
            repo_type = RepoType.from_str(d["repoType"])
        except ValueError as e:
            raise ConfigError(str(e)) from e
        try:
            document_index = int(d.get("documentIndex") or 0)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Dependency record {name!r} has a non-numeric documentIndex") from e
        version_path = d.get("versionPath") or []
        if not isinstance(version_path, list):
            raise ConfigError(f"Dependency record {name!r}: versionPath must be a list")
        return cls(
            manifest_path=d["manifestPath"],
            chart_name=d["chartName"],
            repo_url=d["repoURL"],
            repo_type=repo_type,
            current_version=str(d["currentVersion"]),
            document_index=document_index,
            version_path=tuple(str(p) for p in version_path),
        )
