"""Platform matrix describing every npm package that carries a binary.

Each :class:`PlatformTarget` maps one GoReleaser ``(os, arch)`` pair onto the
npm package directory that ships the matching executable. The default matrix
mirrors the archives attached to every GitHub release.

Examples
--------
>>> target = DEFAULT_PLATFORM_MATRIX[0]
>>> archive_name("xsql", "1.2.3", target)
'xsql_1.2.3_linux_amd64.tar.gz'
>>> binary_name("xsql", DEFAULT_PLATFORM_MATRIX[-1])
'xsql.exe'
"""

from __future__ import annotations

import dataclasses
import enum

__all__ = [
    "ArchiveFormat",
    "DEFAULT_PLATFORM_MATRIX",
    "PlatformMatrix",
    "PlatformTarget",
    "archive_name",
    "binary_name",
]


class ArchiveFormat(enum.Enum):
    """Container formats produced by the release build."""

    TAR_GZ = "tar.gz"
    ZIP = "zip"

    @property
    def extension(self) -> str:
        """Filename extension without the leading dot."""
        return self.value

    @classmethod
    def parse(cls, value: str) -> ArchiveFormat:
        """Return the member matching ``value`` (``"tar.gz"`` or ``"zip"``)."""
        normalised = value.strip().lower().lstrip(".")
        for member in cls:
            if member.value == normalised:
                return member
        message = f"Unsupported archive format: {value!r}"
        raise ValueError(message)


@dataclasses.dataclass(frozen=True, slots=True)
class PlatformTarget:
    """Describe one platform package.

    Attributes
    ----------
    os : str
        Operating system identifier used in archive names (``"linux"``).
    arch : str
        Architecture identifier used in archive names (``"amd64"``).
    package_suffix : str
        npm package directory and name fragment (``"linux-x64"``).
    bin_ext : str
        Executable suffix, ``""`` everywhere except Windows (``".exe"``).
    archive_format : ArchiveFormat
        Container format of the release archive.
    """

    os: str
    arch: str
    package_suffix: str
    bin_ext: str = ""
    archive_format: ArchiveFormat = ArchiveFormat.TAR_GZ

    @property
    def needs_exec_bit(self) -> bool:
        """Whether the extracted binary must be marked executable."""
        return not self.bin_ext


PlatformMatrix = tuple[PlatformTarget, ...]

DEFAULT_PLATFORM_MATRIX: PlatformMatrix = (
    PlatformTarget("linux", "amd64", "linux-x64"),
    PlatformTarget("linux", "arm64", "linux-arm64"),
    PlatformTarget("darwin", "amd64", "darwin-x64"),
    PlatformTarget("darwin", "arm64", "darwin-arm64"),
    PlatformTarget("windows", "amd64", "win32-x64", ".exe", ArchiveFormat.ZIP),
    PlatformTarget("windows", "arm64", "win32-arm64", ".exe", ArchiveFormat.ZIP),
)


def archive_name(tool_name: str, version: str, target: PlatformTarget) -> str:
    """Return the release archive filename for ``target``.

    ``version`` must already be stripped of its ``v`` tag marker.
    """
    return (
        f"{tool_name}_{version}_{target.os}_{target.arch}"
        f".{target.archive_format.extension}"
    )


def binary_name(tool_name: str, target: PlatformTarget) -> str:
    """Return the executable name stored inside the archive for ``target``."""
    return f"{tool_name}{target.bin_ext}"
