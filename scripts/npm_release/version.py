"""Release version normalisation."""

from __future__ import annotations

import dataclasses

from .errors import UsageError

__all__ = ["ReleaseVersion", "normalise_version"]

TAG_PREFIX = "v"


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseVersion:
    """Version supplied on the command line and its stripped form.

    Examples
    --------
    >>> version = ReleaseVersion.parse("v1.2.3")
    >>> version.clean, version.tag
    ('1.2.3', 'v1.2.3')
    """

    raw: str
    clean: str

    @property
    def tag(self) -> str:
        """Git tag naming the GitHub release that hosts the archives."""
        return f"{TAG_PREFIX}{self.clean}"

    @classmethod
    def parse(cls, value: str | None) -> ReleaseVersion:
        """Build a :class:`ReleaseVersion`, rejecting empty input."""
        raw = (value or "").strip()
        clean = normalise_version(raw)
        if not clean:
            message = "A release version is required (for example 1.2.3)"
            raise UsageError(message)
        return cls(raw=raw, clean=clean)


def normalise_version(version: str) -> str:
    """Strip surrounding whitespace and a single leading ``v``."""
    return version.strip().removeprefix(TAG_PREFIX)
