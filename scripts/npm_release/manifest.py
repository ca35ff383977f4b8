"""Version synchronisation for npm ``package.json`` manifests."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

from .errors import ManifestError

__all__ = ["read_manifest", "synchronize_manifest", "write_manifest"]

DEPENDENCY_FIELD = "optionalDependencies"


def read_manifest(path: Path) -> dict[str, typ.Any]:
    """
    Load and return the parsed ``package.json`` at ``path``.

    Parameters
    ----------
    path : Path
        Path to the manifest file.

    Returns
    -------
    dict[str, Any]
        Parsed manifest, preserving key order.

    Raises
    ------
    ManifestError
        If the file does not exist, cannot be read, is not valid JSON, or its
        top level is not a JSON object.
    """
    if not path.is_file():
        message = f"Manifest {path} does not exist"
        raise ManifestError(message)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        message = f"Failed to read manifest {path}: {exc}"
        raise ManifestError(message) from exc
    except json.JSONDecodeError as exc:
        message = f"Manifest {path} is not valid JSON: {exc}"
        raise ManifestError(message) from exc
    if not isinstance(data, dict):
        message = f"Manifest {path} must contain a JSON object"
        raise ManifestError(message)
    return data


def write_manifest(path: Path, manifest: dict[str, typ.Any]) -> None:
    """Persist ``manifest`` with two-space indentation and a trailing newline."""
    text = json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        message = f"Failed to write manifest {path}: {exc}"
        raise ManifestError(message) from exc


def synchronize_manifest(path: Path, version: str) -> dict[str, typ.Any]:
    """
    Set the manifest version and pin every optional dependency to it.

    Platform packages and the umbrella package are released in lockstep, so
    the umbrella's ``optionalDependencies`` are rewritten to the exact release
    version rather than a range.

    Parameters
    ----------
    path : Path
        Manifest to rewrite in place.
    version : str
        Release version without its ``v`` tag marker.

    Returns
    -------
    dict[str, Any]
        The manifest as written to disk.

    Raises
    ------
    ManifestError
        If the manifest cannot be parsed or ``optionalDependencies`` is not an
        object.

    Examples
    --------
    >>> synchronize_manifest(Path("npm/xsql/package.json"), "1.2.3")  # doctest: +SKIP
    {'name': 'xsql-cli', 'version': '1.2.3', ...}
    """
    manifest = read_manifest(path)
    manifest["version"] = version

    dependencies = manifest.get(DEPENDENCY_FIELD)
    if dependencies is not None:
        if not isinstance(dependencies, dict):
            message = f"{DEPENDENCY_FIELD} in {path} must be an object"
            raise ManifestError(message)
        for name in dependencies:
            dependencies[name] = version

    write_manifest(path, manifest)
    print(f"Updated {path} to v{version}")
    return manifest
