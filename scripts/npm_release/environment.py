"""Environment helpers shared by the release CLI."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from .errors import UsageError

__all__ = ["coerce_bool", "resolve_dry_run", "resolve_workspace"]


def resolve_workspace(
    explicit: Path | None, environ: typ.Mapping[str, str] = os.environ
) -> Path:
    """Return the repository root used to resolve configured paths.

    Parameters
    ----------
    explicit:
        Value of ``--workspace`` when supplied.
    environ:
        Environment mapping; ``GITHUB_WORKSPACE`` is honoured when set.
    """
    if explicit is not None:
        return Path(explicit)
    if value := environ.get("GITHUB_WORKSPACE"):
        return Path(value)
    return Path.cwd()


def coerce_bool(value: object) -> bool:
    """Return ``value`` as a strict boolean."""
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        message = f"Cannot interpret {value!r} as a boolean"
        raise UsageError(message)
    normalised = value.strip().lower()
    if normalised in {"", "false", "0", "no", "off"}:
        return False
    if normalised in {"true", "1", "yes", "on"}:
        return True
    message = f"Cannot interpret {value!r} as a boolean"
    raise UsageError(message)


def resolve_dry_run(
    flag: bool, environ: typ.Mapping[str, str] = os.environ
) -> bool:
    """Combine ``--dry-run`` with the ``INPUT_DRY_RUN`` workflow input."""
    if flag:
        return True
    if env_flag := environ.get("INPUT_DRY_RUN"):
        return coerce_bool(env_flag)
    return False
