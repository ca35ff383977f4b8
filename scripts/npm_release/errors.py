"""Exception hierarchy for the npm release helper."""

from __future__ import annotations

__all__ = [
    "ConfigError",
    "DownloadError",
    "ExtractionError",
    "ManifestError",
    "PublishError",
    "ReleaseError",
    "UsageError",
]


class ReleaseError(RuntimeError):
    """Base class for every failure that aborts a release run."""


class ConfigError(ReleaseError):
    """Raised when the release configuration file is missing keys or invalid."""


class ManifestError(ReleaseError):
    """Raised when a ``package.json`` cannot be read, parsed, or rewritten."""


class DownloadError(ReleaseError):
    """Raised when a release archive cannot be downloaded.

    Parameters
    ----------
    message : str
        Human readable description of the failure.
    status : int | None
        HTTP status code of the failing response, or ``None`` when the request
        never produced a response (connection errors, redirect loops).
    url : str
        URL that was being requested when the failure occurred.
    """

    def __init__(self, message: str, *, status: int | None, url: str) -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class ExtractionError(ReleaseError):
    """Raised when a binary cannot be extracted from a release archive."""


class PublishError(ReleaseError):
    """Raised when an ``npm publish`` invocation fails."""


class UsageError(ReleaseError):
    """Raised when the command line is missing required input."""
