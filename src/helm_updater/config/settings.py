"""Application configuration and defaults."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from helm_updater.errors import ConfigError
from helm_updater.models import AuthType, UpdateStrategy, UpdateType
from helm_updater.models.repo import RegistryCredential
from helm_updater.models.update import IgnoreRule
from helm_updater.utils.version_compare import parse_constraint

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".argocd-updater.yml"
LOG_LEVELS = ("debug", "info", "warning", "error")

_HOSTNAME_RE = re.compile(
    r"^(\*\.)?[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?)*(:\d+)?$"
)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def _default_timeout() -> float:
    return _env_float("HELM_UPDATER_TIMEOUT", 30.0)


def _default_max_concurrency() -> int:
    return max(1, int(_env_float("HELM_UPDATER_MAX_CONCURRENCY", 8)))


def default_config_path() -> Path:
    """Return the config file path, honoring HELM_UPDATER_CONFIG."""
    override = os.environ.get("HELM_UPDATER_CONFIG", "")
    if override:
        return Path(override)
    return Path.cwd() / DEFAULT_CONFIG_FILE


@dataclass
class Settings:
    update_strategy: UpdateStrategy = UpdateStrategy.ALL
    allow_prereleases: bool = False
    registry_credentials: tuple[RegistryCredential, ...] = ()
    ignore: tuple[IgnoreRule, ...] = ()
    log_level: str = "info"
    http_timeout: float = field(default_factory=_default_timeout)
    max_concurrency: int = field(default_factory=_default_max_concurrency)
    max_redirects: int = 5
    user_agent: str = "helm-updater/0.1.0"


# ---------------------------------------------------------------------------
# Config file parsing
#
# Keys are accepted in kebab-case (the config file convention) and in
# camelCase (the shape dependency records use).
# ---------------------------------------------------------------------------

def _get(d: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in d:
            return d[key]
    return default


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _parse_credential(raw: Any, problems: list[str]) -> RegistryCredential | None:
    if not isinstance(raw, dict):
        problems.append("registry credential entries must be mappings")
        return None
    registry = str(_get(raw, "registry", default="") or "").strip()
    username = os.path.expandvars(str(_get(raw, "username", default="") or ""))
    password = os.path.expandvars(str(_get(raw, "password", default="") or ""))
    auth_raw = str(_get(raw, "auth-type", "authType", "auth_type", default="basic") or "basic")

    start = len(problems)
    if not registry:
        problems.append("registry credential is missing 'registry'")
    elif not _HOSTNAME_RE.match(registry) and "://" not in registry:
        problems.append(f"invalid registry URL or hostname: {registry}")
    try:
        auth_type = AuthType(auth_raw.lower())
    except ValueError:
        problems.append(f"invalid auth-type {auth_raw!r} for {registry or '<unnamed>'}: must be basic or bearer")
        auth_type = AuthType.BASIC
    if not password:
        problems.append(f"registry credential for {registry or '<unnamed>'} is missing 'password'")
    if auth_type == AuthType.BASIC and not username:
        problems.append(f"basic auth for {registry or '<unnamed>'} requires 'username'")
    if len(problems) > start:
        return None
    return RegistryCredential(registry=registry, password=password, auth_type=auth_type, username=username)


def _parse_ignore_rule(raw: Any, problems: list[str]) -> IgnoreRule | None:
    if not isinstance(raw, dict):
        problems.append("ignore rules must be mappings")
        return None
    name = str(_get(raw, "dependency-name", "dependencyName", "dependency_name", default="") or "")
    start = len(problems)
    if not name:
        problems.append("ignore rule must include dependency-name")

    update_types: set[UpdateType] = set()
    for t in _as_list(_get(raw, "update-types", "updateTypes", "update_types")):
        try:
            update_types.add(UpdateType(str(t)))
        except ValueError:
            problems.append(f"invalid ignore rule update type: {t}. Must be one of: major, minor, patch")

    versions: list[str] = []
    for v in _as_list(_get(raw, "versions")):
        v = str(v).strip()
        if not v:
            problems.append("ignore rule version patterns must not be empty strings")
            continue
        try:
            parse_constraint(v)
        except ValueError as e:
            logger.warning("Ignore rule for %s has a version pattern that will never match: %s", name, e)
        versions.append(v)

    if len(problems) > start:
        return None
    return IgnoreRule(dependency_name=name, update_types=frozenset(update_types), versions=tuple(versions))


def settings_from_dict(data: dict | None, base: Settings | None = None) -> Settings:
    """Build Settings from a decoded config document.

    Raises ConfigError listing every problem found.
    """
    result = base or Settings()
    if not data:
        return result
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    problems: list[str] = []

    strategy_raw = _get(data, "update-strategy", "updateStrategy")
    if strategy_raw is not None:
        try:
            result.update_strategy = UpdateStrategy(str(strategy_raw))
        except ValueError:
            problems.append(
                f"invalid update-strategy: {strategy_raw}. Must be one of: "
                + ", ".join(s.value for s in UpdateStrategy)
            )

    allow_pre = _get(data, "allow-prereleases", "allowPrereleases")
    if allow_pre is not None:
        result.allow_prereleases = bool(allow_pre)

    log_level = _get(data, "log-level", "logLevel")
    if log_level is not None:
        level = "warning" if str(log_level).lower() == "warn" else str(log_level).lower()
        if level not in LOG_LEVELS:
            problems.append(f"invalid log-level: {log_level}. Must be one of: {', '.join(LOG_LEVELS)}")
        else:
            result.log_level = level

    creds = [_parse_credential(c, problems) for c in _as_list(_get(data, "registry-credentials", "registryCredentials"))]
    rules = [_parse_ignore_rule(r, problems) for r in _as_list(_get(data, "ignore"))]

    if problems:
        raise ConfigError("Invalid configuration", problems)

    result.registry_credentials = tuple(c for c in creds if c is not None)
    result.ignore = tuple(r for r in rules if r is not None)
    return result


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a YAML config file.

    A missing file at the default location yields defaults; a missing file
    that was asked for explicitly is an error.
    """
    explicit = path is not None
    config_path = path if explicit else default_config_path()
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return Settings()
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_path}: {e}") from e
    logger.debug("Loaded configuration from %s", config_path)
    return settings_from_dict(data)


# Global defaults
settings = Settings()
