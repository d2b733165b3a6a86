"""Exception hierarchy for Helm Updater."""

from __future__ import annotations

import enum


class FetchErrorKind(enum.Enum):
    NETWORK = "network"
    HTTP = "http"
    PARSE = "parse"


class HelmUpdaterError(Exception):
    """Base class for all errors raised by helm_updater."""


class ConfigError(HelmUpdaterError):
    """Invalid configuration or input file."""

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = problems or []
        if self.problems:
            message = message + ":\n" + "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(message)


class FetchError(HelmUpdaterError):
    """A repository could not be fetched or understood."""

    kind: FetchErrorKind = FetchErrorKind.NETWORK

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(message)


class NetworkError(FetchError):
    """Connection-level failure, including timeouts."""

    kind = FetchErrorKind.NETWORK


class HttpError(FetchError):
    """Non-2xx HTTP response."""

    kind = FetchErrorKind.HTTP

    def __init__(self, url: str, status: int, message: str = ""):
        self.status = status
        super().__init__(url, message or f"HTTP {status} from {url}")

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)


class ParseError(FetchError):
    """Response body is not a valid index or tag list."""

    kind = FetchErrorKind.PARSE
