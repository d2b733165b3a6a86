"""Pick the version a dependency should be updated to."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from semantic_version import Version

from helm_updater.models import STRATEGY_ALLOWS, UpdateStrategy, UpdateType
from helm_updater.models.repo import ChartVersionInfo
from helm_updater.models.update import IgnoreRule
from helm_updater.utils.version_compare import parse_version, satisfies, update_type

logger = logging.getLogger(__name__)


def rules_for(dependency_name: str, ignore_rules: Sequence[IgnoreRule]) -> list[IgnoreRule]:
    return [r for r in ignore_rules if r.dependency_name == dependency_name]


def is_dependency_ignored(dependency_name: str, ignore_rules: Sequence[IgnoreRule]) -> bool:
    """True if a rule without update types or versions names this dependency."""
    return any(r.ignores_everything for r in rules_for(dependency_name, ignore_rules))


def _is_update_ignored(version: str, kind: UpdateType, rules: list[IgnoreRule]) -> bool:
    for rule in rules:
        if kind in rule.update_types:
            return True
        if any(satisfies(version, pattern) for pattern in rule.versions):
            return True
    return False


def select_update(
    current: str,
    available: Iterable[ChartVersionInfo | str],
    strategy: UpdateStrategy = UpdateStrategy.ALL,
    ignore_rules: Sequence[IgnoreRule] = (),
    dependency_name: str = "",
    allow_prereleases: bool = False,
) -> str | None:
    """Return the highest eligible version above ``current``, or None.

    Candidates must be valid semantic versions, strictly newer than
    ``current``, allowed by ``strategy`` and not suppressed by an ignore
    rule for ``dependency_name``.  Pre-releases are skipped unless
    ``allow_prereleases`` is set.  The returned string is the candidate as
    published, including any build metadata.
    """
    cur = parse_version(current)
    if cur is None:
        logger.debug("Current version %r of %s is not a semantic version", current, dependency_name)
        return None

    rules = rules_for(dependency_name, ignore_rules)
    if any(r.ignores_everything for r in rules):
        return None

    allowed = STRATEGY_ALLOWS[strategy]
    best: tuple[Version, str] | None = None

    for entry in available:
        version = entry.version if isinstance(entry, ChartVersionInfo) else str(entry)
        cand = parse_version(version)
        if cand is None or cand <= cur:
            continue
        if cand.prerelease and not allow_prereleases:
            continue
        kind = update_type(cur, cand)
        if kind not in allowed:
            continue
        if rules and _is_update_ignored(version, kind, rules):
            continue
        # Strict comparison keeps the first of equal-precedence strings.
        if best is None or cand > best[0]:
            best = (cand, version)

    return best[1] if best else None
