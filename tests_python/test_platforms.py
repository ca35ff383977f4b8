"""Tests for the platform matrix and archive naming helpers."""

from __future__ import annotations

import dataclasses

import pytest


def test_archive_names_match_release_template(npm_release: object) -> None:
    """Every default target renders the GoReleaser archive name exactly."""
    from npm_release.platforms import archive_name

    names = [
        archive_name("xsql", "1.2.3", target)
        for target in npm_release.DEFAULT_PLATFORM_MATRIX
    ]

    assert names == [
        "xsql_1.2.3_linux_amd64.tar.gz",
        "xsql_1.2.3_linux_arm64.tar.gz",
        "xsql_1.2.3_darwin_amd64.tar.gz",
        "xsql_1.2.3_darwin_arm64.tar.gz",
        "xsql_1.2.3_windows_amd64.zip",
        "xsql_1.2.3_windows_arm64.zip",
    ], "Archive names must follow {tool}_{version}_{os}_{arch}.{ext}"


def test_default_matrix_package_suffixes(npm_release: object) -> None:
    """Targets map onto the npm platform package directories in publish order."""
    suffixes = [target.package_suffix for target in npm_release.DEFAULT_PLATFORM_MATRIX]

    assert suffixes == [
        "linux-x64",
        "linux-arm64",
        "darwin-x64",
        "darwin-arm64",
        "win32-x64",
        "win32-arm64",
    ]
    assert len(set(suffixes)) == len(suffixes), "Each target needs its own package"


def test_binary_name_and_exec_bit_follow_extension(npm_release: object) -> None:
    """Only extension-less binaries are marked executable."""
    from npm_release.platforms import binary_name

    linux, *_rest, windows = npm_release.DEFAULT_PLATFORM_MATRIX

    assert binary_name("xsql", linux) == "xsql"
    assert binary_name("xsql", windows) == "xsql.exe"
    assert linux.needs_exec_bit is True
    assert windows.needs_exec_bit is False


def test_platform_targets_are_immutable(npm_release: object) -> None:
    """The matrix cannot be altered at runtime."""
    target = npm_release.DEFAULT_PLATFORM_MATRIX[0]

    with pytest.raises(dataclasses.FrozenInstanceError):
        target.arch = "riscv64"  # type: ignore[misc]
    assert isinstance(npm_release.DEFAULT_PLATFORM_MATRIX, tuple)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("tar.gz", "TAR_GZ"), (".zip", "ZIP"), (" TAR.GZ ", "TAR_GZ")],
)
def test_archive_format_parse(npm_release: object, value: str, expected: str) -> None:
    """Archive formats are parsed case-insensitively with an optional dot."""
    assert npm_release.ArchiveFormat.parse(value) is npm_release.ArchiveFormat[expected]


def test_archive_format_rejects_unknown(npm_release: object) -> None:
    """Only the two release container formats are accepted."""
    with pytest.raises(ValueError, match="Unsupported archive format"):
        npm_release.ArchiveFormat.parse("tar.xz")


@pytest.mark.parametrize(
    ("raw", "clean", "tag"),
    [
        ("v1.2.3", "1.2.3", "v1.2.3"),
        ("1.2.3", "1.2.3", "v1.2.3"),
        (" v2.0.0-rc.1 ", "2.0.0-rc.1", "v2.0.0-rc.1"),
    ],
)
def test_release_version_strips_tag_marker(
    npm_release: object, raw: str, clean: str, tag: str
) -> None:
    """The ``v`` marker is removed for filenames but kept for the release tag."""
    version = npm_release.ReleaseVersion.parse(raw)

    assert version.clean == clean
    assert version.tag == tag


@pytest.mark.parametrize("raw", [None, "", "   ", "v"])
def test_release_version_rejects_empty(npm_release: object, raw: str | None) -> None:
    """An empty version is a usage error."""
    with pytest.raises(npm_release.UsageError):
        npm_release.ReleaseVersion.parse(raw)
