"""Repository wire records and credential models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from helm_updater.errors import ParseError
from helm_updater.models import AuthType

logger = logging.getLogger(__name__)


def _parse_created(raw: object) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class ChartVersionInfo:
    version: str
    app_version: str = ""
    created: datetime | None = None
    digest: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ChartVersionInfo:
        return cls(
            version=str(d["version"]),
            app_version=str(d.get("appVersion") or ""),
            created=_parse_created(d.get("created")),
            digest=str(d.get("digest") or ""),
        )


@dataclass
class HelmIndex:
    """Parsed Helm repository ``index.yaml``."""

    api_version: str = ""
    entries: dict[str, list[ChartVersionInfo]] = field(default_factory=dict)

    def versions_for(self, chart_name: str) -> list[ChartVersionInfo]:
        return list(self.entries.get(chart_name, []))

    @classmethod
    def parse(cls, data: object, url: str) -> HelmIndex:
        """Validate a decoded index document.

        Raises ParseError when the document is not a mapping with an
        ``entries`` mapping.  Malformed charts and entries without a
        version are skipped so one bad chart does not hide the others.
        """
        if not isinstance(data, dict) or "entries" not in data:
            raise ParseError(url, f"Invalid Helm repository index at {url}: missing 'entries'")
        raw_entries = data["entries"] or {}
        if not isinstance(raw_entries, dict):
            raise ParseError(url, f"Invalid Helm repository index at {url}: 'entries' is not a mapping")

        entries: dict[str, list[ChartVersionInfo]] = {}
        for chart_name, chart_entries in raw_entries.items():
            if chart_entries is None:
                entries[str(chart_name)] = []
                continue
            if not isinstance(chart_entries, list):
                logger.warning("Skipping chart %r at %s: entries are not a list", chart_name, url)
                continue
            versions: list[ChartVersionInfo] = []
            for entry in chart_entries:
                if not isinstance(entry, dict) or entry.get("version") in (None, ""):
                    logger.debug("Skipping entry without a version for chart %r at %s", chart_name, url)
                    continue
                versions.append(ChartVersionInfo.from_dict(entry))
            entries[str(chart_name)] = versions

        return cls(api_version=str(data.get("apiVersion") or ""), entries=entries)


@dataclass
class OCITagList:
    """Parsed OCI distribution ``tags/list`` response."""

    name: str = ""
    tags: list[str] = field(default_factory=list)

    def versions(self) -> list[ChartVersionInfo]:
        return [ChartVersionInfo(version=t) for t in self.tags]

    @classmethod
    def parse(cls, data: object, url: str) -> OCITagList:
        if not isinstance(data, dict):
            raise ParseError(url, f"Invalid tag list at {url}: expected a JSON object")
        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ParseError(url, f"Invalid tag list at {url}: 'tags' must be a list of strings")
        return cls(name=str(data.get("name") or ""), tags=list(tags))


@dataclass(frozen=True)
class RegistryCredential:
    registry: str
    password: str = field(repr=False)
    auth_type: AuthType = AuthType.BASIC
    username: str = ""
