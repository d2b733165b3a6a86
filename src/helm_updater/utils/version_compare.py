"""Semver comparison utilities."""

from __future__ import annotations

from functools import lru_cache

from semantic_version import NpmSpec, Version

from helm_updater.models import UpdateType


def parse_version(v: str) -> Version | None:
    """Parse a semantic version string, returning None on failure.

    Accepts ``MAJOR.MINOR.PATCH`` with an optional leading ``v``, an optional
    ``-prerelease`` and optional ``+build`` metadata.  Build metadata is
    dropped because it does not affect precedence.
    """
    if not v:
        return None
    try:
        parsed = Version(v.strip().removeprefix("v"))
    except ValueError:
        return None
    return parsed.truncate("prerelease")


def update_type(current: Version, candidate: Version) -> UpdateType:
    """Classify a bump from ``current`` to a newer ``candidate``."""
    if candidate.major != current.major:
        return UpdateType.MAJOR
    if candidate.minor != current.minor:
        return UpdateType.MINOR
    return UpdateType.PATCH


def classify_update(current: str, latest: str) -> str:
    """Classify the update type between two version strings.

    Returns: "major", "minor", "patch", "up-to-date", or "unknown".
    """
    cur = parse_version(current)
    lat = parse_version(latest)

    if cur is None or lat is None:
        return "unknown"
    if lat <= cur:
        return "up-to-date"
    return update_type(cur, lat).value


# Ignore rules use npm-style ranges: "16.x", "^1.2.0", ">=1.0.0 <2.0.0",
# "1.0.0 - 2.0.0", "1.x || 3.x".

@lru_cache(maxsize=256)
def parse_constraint(pattern: str) -> NpmSpec:
    """Parse an npm-style semver range.

    Raises ValueError for empty or malformed patterns.
    """
    if not pattern or not pattern.strip():
        raise ValueError("Empty version pattern")
    try:
        return NpmSpec(pattern.strip())
    except ValueError as e:
        raise ValueError(f"Invalid version pattern {pattern!r}: {e}") from e


def satisfies(version: str, pattern: str) -> bool:
    """Return True if version matches the range pattern; invalid input never matches."""
    parsed = parse_version(version)
    if parsed is None:
        return False
    try:
        return parse_constraint(pattern).match(parsed)
    except ValueError:
        return False
