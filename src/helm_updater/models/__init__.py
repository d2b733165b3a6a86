"""Data models for Helm Updater."""

from __future__ import annotations

import enum


class RepoType(enum.Enum):
    HELM = "helm"
    OCI = "oci"

    @classmethod
    def from_str(cls, s: str) -> RepoType:
        for member in cls:
            if member.value == s:
                return member
        raise ValueError(f"Unknown repository type: {s!r}")


class UpdateStrategy(enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    ALL = "all"


class UpdateType(enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class AuthType(enum.Enum):
    BASIC = "basic"
    BEARER = "bearer"


# Update types each strategy lets through; MAJOR and ALL are equivalent.
STRATEGY_ALLOWS: dict[UpdateStrategy, frozenset[UpdateType]] = {
    UpdateStrategy.PATCH: frozenset({UpdateType.PATCH}),
    UpdateStrategy.MINOR: frozenset({UpdateType.PATCH, UpdateType.MINOR}),
    UpdateStrategy.MAJOR: frozenset(UpdateType),
    UpdateStrategy.ALL: frozenset(UpdateType),
}
