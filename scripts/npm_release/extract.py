"""Extract platform binaries from release archives."""

from __future__ import annotations

import shutil
import tarfile
import typing as typ
import zipfile
from pathlib import Path, PurePosixPath

from .errors import ExtractionError
from .platforms import ArchiveFormat

__all__ = ["EXECUTABLE_MODE", "extract_member"]

EXECUTABLE_MODE = 0o755


def extract_member(
    archive: Path,
    archive_format: ArchiveFormat,
    member: str,
    destination: Path,
    *,
    executable: bool,
) -> Path:
    """Extract ``member`` from ``archive`` into ``destination``.

    Parameters
    ----------
    archive : Path
        Downloaded ``.tar.gz`` or ``.zip`` archive.
    archive_format : ArchiveFormat
        Container format of ``archive``.
    member : str
        Name of the archive entry to extract (``"xsql"`` or ``"xsql.exe"``).
    destination : Path
        Directory receiving the file; created with parents when absent.
    executable : bool
        When ``True`` the extracted file is marked ``0o755``.

    Returns
    -------
    Path
        Path of the extracted file.

    Raises
    ------
    ExtractionError
        If the archive cannot be read, ``member`` is missing or is not a
        regular file, or the destination cannot be written.

    Examples
    --------
    >>> extract_member(  # doctest: +SKIP
    ...     Path(".npm-tmp/xsql_1.2.3_linux_amd64.tar.gz"),
    ...     ArchiveFormat.TAR_GZ,
    ...     "xsql",
    ...     Path("npm/linux-x64/bin"),
    ...     executable=True,
    ... )
    PosixPath('npm/linux-x64/bin/xsql')
    """
    destination.mkdir(parents=True, exist_ok=True)
    target = destination / PurePosixPath(member).name

    if archive_format is ArchiveFormat.TAR_GZ:
        _extract_from_tar(archive, member, target)
    else:
        _extract_from_zip(archive, member, target)

    if executable:
        try:
            target.chmod(EXECUTABLE_MODE)
        except OSError as exc:
            message = f"Failed to mark {target} executable: {exc}"
            raise ExtractionError(message) from exc
    return target


def _extract_from_tar(archive: Path, member: str, target: Path) -> None:
    try:
        with tarfile.open(archive, "r:gz") as tar:
            try:
                info = tar.getmember(member)
            except KeyError as exc:
                message = f"{member} not found in {archive.name}"
                raise ExtractionError(message) from exc
            if not info.isreg():
                message = f"{member} in {archive.name} is not a regular file"
                raise ExtractionError(message)
            source = tar.extractfile(info)
            if source is None:
                message = f"{member} in {archive.name} has no data"
                raise ExtractionError(message)
            with source:
                _copy_to(source, target)
    except (tarfile.TarError, OSError) as exc:
        message = f"Tar extraction of {archive.name} failed: {exc}"
        raise ExtractionError(message) from exc


def _extract_from_zip(archive: Path, member: str, target: Path) -> None:
    try:
        with zipfile.ZipFile(archive) as zf:
            try:
                info = zf.getinfo(member)
            except KeyError as exc:
                message = f"{member} not found in {archive.name}"
                raise ExtractionError(message) from exc
            if info.is_dir():
                message = f"{member} in {archive.name} is not a regular file"
                raise ExtractionError(message)
            with zf.open(info) as source:
                _copy_to(source, target)
    except (zipfile.BadZipFile, OSError) as exc:
        message = f"Zip extraction of {archive.name} failed: {exc}"
        raise ExtractionError(message) from exc


def _copy_to(source: typ.IO[bytes], target: Path) -> None:
    if target.exists():
        target.unlink()
    with target.open("wb") as handle:
        shutil.copyfileobj(source, handle)
