"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer
and to a non-zero exit at the CLI.  Inner layers raise these; the outermost
handlers translate them.
"""

from __future__ import annotations


class RulesyncFetchError(Exception):
    """Base exception for the entire application."""


# ── Locator / input errors ──────────────────────────────────────────────────


class LocatorError(RulesyncFetchError):
    """The source string could not be turned into a locator."""


class SourceParseError(LocatorError):
    """The source string is malformed (empty ref, empty path, missing repo)."""


class UnknownProviderError(LocatorError):
    """The URL host is not a supported hosting provider."""


class InvalidOptionsError(RulesyncFetchError):
    """A fetch option has an unsupported value."""


# ── Provider errors ─────────────────────────────────────────────────────────


class RepositoryClientError(RulesyncFetchError):
    """Any error reported by the hosting-provider client."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnsupportedProviderError(RepositoryClientError):
    """The provider is recognised but has no client implementation."""


class RemoteNotFoundError(RepositoryClientError):
    """A remote path does not exist (404)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class RepositoryNotFoundError(RemoteNotFoundError):
    """The repository does not exist or is not accessible."""


class RepositoryAccessDeniedError(RepositoryClientError):
    """Authentication failed or access was forbidden (401 / 403)."""


class RateLimitError(RepositoryClientError):
    """Provider API rate limit exceeded."""


class ContentFetchError(RepositoryClientError):
    """Network or provider failure while downloading file content."""


# ── Safety bounds ───────────────────────────────────────────────────────────


class PathTraversalError(RulesyncFetchError):
    """A path would resolve outside of its intended root directory."""


class SizeLimitExceededError(RulesyncFetchError):
    """A remote file is larger than the allowed maximum."""


class RecursionDepthExceededError(RulesyncFetchError):
    """A remote tree nests deeper than the allowed maximum."""


# ── Conversion ──────────────────────────────────────────────────────────────


class ConversionError(RulesyncFetchError):
    """A feature converter failed for a supported target."""
