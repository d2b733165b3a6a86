"""Read dependency records written by the manifest extractor."""

from __future__ import annotations

from pathlib import Path

import yaml

from helm_updater.errors import ConfigError
from helm_updater.models.dependency import HelmDependency


def parse_dependencies(text: str, source: str = "<string>") -> list[HelmDependency]:
    """Parse a YAML or JSON stream of dependency records.

    Each document is either a list of records or a mapping with a
    ``dependencies`` list.  Empty documents are skipped.
    """
    deps: list[HelmDependency] = []
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {source}: {e}") from e

    for doc in documents:
        if not doc:
            continue
        if isinstance(doc, dict):
            doc = doc.get("dependencies") or []
        if not isinstance(doc, list):
            raise ConfigError(f"{source}: expected a list of dependency records")
        deps.extend(HelmDependency.from_dict(d) for d in doc)
    return deps


def load_dependencies(path: Path) -> list[HelmDependency]:
    if not path.exists():
        raise ConfigError(f"Dependencies file not found: {path}")
    return parse_dependencies(path.read_text(encoding="utf-8"), source=str(path))

