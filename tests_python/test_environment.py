"""Tests for environment-derived CLI settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from npm_release.environment import coerce_bool, resolve_dry_run, resolve_workspace
from npm_release.errors import UsageError


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, True),
        (False, False),
        ("true", True),
        ("false", False),
        ("YES", True),
        ("no", False),
        ("1", True),
        ("0", False),
        (" on ", True),
        (" off ", False),
        ("", False),
    ],
)
def test_coerce_bool_handles_common_inputs(value: object, expected: bool) -> None:
    """The coercion helper accepts boolean strings in various casings."""
    assert coerce_bool(value) is expected


@pytest.mark.parametrize("value", ["maybe", 1])
def test_coerce_bool_rejects_unknown_input(value: object) -> None:
    """Unexpected values surface a descriptive error."""
    with pytest.raises(UsageError, match="Cannot interpret"):
        coerce_bool(value)


def test_dry_run_flag_wins() -> None:
    """``--dry-run`` cannot be overridden by the environment."""
    assert resolve_dry_run(True, {"INPUT_DRY_RUN": "false"}) is True


@pytest.mark.parametrize(
    ("environ", "expected"),
    [({}, False), ({"INPUT_DRY_RUN": "true"}, True), ({"INPUT_DRY_RUN": ""}, False)],
)
def test_dry_run_from_workflow_input(environ: dict[str, str], expected: bool) -> None:
    """The ``INPUT_DRY_RUN`` workflow input enables dry-run mode."""
    assert resolve_dry_run(False, environ) is expected


def test_workspace_resolution_order(tmp_path: Path) -> None:
    """Explicit paths beat ``GITHUB_WORKSPACE``, which beats the cwd."""
    env = {"GITHUB_WORKSPACE": str(tmp_path / "ci")}

    assert resolve_workspace(tmp_path / "cli", env) == tmp_path / "cli"
    assert resolve_workspace(None, env) == tmp_path / "ci"
    assert resolve_workspace(None, {}) == Path.cwd()
