"""Tests for extracting platform binaries from release archives."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest
from npm_release.errors import ExtractionError
from npm_release.extract import extract_member
from npm_release.platforms import ArchiveFormat
from release_test_helpers import make_tar_gz, make_zip


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_extracts_tarball_member_as_executable(tmp_path: Path) -> None:
    """Only the named member is extracted and it becomes executable."""
    archive = make_tar_gz(
        tmp_path / "xsql_1.2.3_linux_amd64.tar.gz",
        {"xsql": b"#!binary", "README.md": b"docs", "LICENSE": b"MIT"},
    )
    bin_dir = tmp_path / "npm" / "linux-x64" / "bin"

    extracted = extract_member(
        archive, ArchiveFormat.TAR_GZ, "xsql", bin_dir, executable=True
    )

    assert extracted == bin_dir / "xsql"
    assert extracted.read_bytes() == b"#!binary"
    assert sorted(path.name for path in bin_dir.iterdir()) == ["xsql"]
    assert stat.S_IMODE(extracted.stat().st_mode) == 0o755


def test_extracts_zip_member_without_exec_bit(tmp_path: Path) -> None:
    """Windows binaries come from zip archives and keep their mode."""
    archive = make_zip(
        tmp_path / "xsql_1.2.3_windows_amd64.zip",
        {"xsql.exe": b"MZ", "README.md": b"docs"},
    )
    bin_dir = tmp_path / "npm" / "win32-x64" / "bin"

    extracted = extract_member(
        archive, ArchiveFormat.ZIP, "xsql.exe", bin_dir, executable=False
    )

    assert extracted.read_bytes() == b"MZ"
    assert sorted(path.name for path in bin_dir.iterdir()) == ["xsql.exe"]


def test_extraction_replaces_existing_binary(tmp_path: Path) -> None:
    """A binary left by an earlier release is overwritten."""
    archive = make_tar_gz(tmp_path / "a.tar.gz", {"xsql": b"new"})
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    (bin_dir / "xsql").write_bytes(b"old release")

    extract_member(archive, ArchiveFormat.TAR_GZ, "xsql", bin_dir, executable=False)

    assert (bin_dir / "xsql").read_bytes() == b"new"


@pytest.mark.parametrize(
    ("fmt", "builder"),
    [(ArchiveFormat.TAR_GZ, make_tar_gz), (ArchiveFormat.ZIP, make_zip)],
)
def test_missing_member_raises(tmp_path: Path, fmt: ArchiveFormat, builder) -> None:
    """An archive without the binary is an extraction failure."""
    archive = builder(tmp_path / f"archive.{fmt.extension}", {"other": b"x"})

    with pytest.raises(ExtractionError, match="xsql not found"):
        extract_member(archive, fmt, "xsql", tmp_path / "bin", executable=True)

    assert (tmp_path / "bin").is_dir(), "Destination is created before extraction"


@pytest.mark.parametrize("fmt", [ArchiveFormat.TAR_GZ, ArchiveFormat.ZIP])
def test_corrupt_archive_raises(tmp_path: Path, fmt: ArchiveFormat) -> None:
    """Truncated or non-archive downloads are rejected."""
    archive = tmp_path / f"broken.{fmt.extension}"
    archive.write_bytes(b"<html>Not Found</html>")

    with pytest.raises(ExtractionError, match="extraction of broken"):
        extract_member(archive, fmt, "xsql", tmp_path / "bin", executable=False)
