"""Shared fixtures for the npm release test suite."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
MODULE_DIR = REPO_ROOT / "scripts"


@pytest.fixture(scope="session")
def npm_release() -> object:
    """Load the release helper package once for reuse across tests."""
    sys_path = str(MODULE_DIR)

    sys.path.insert(0, sys_path)
    try:
        return importlib.import_module("npm_release")
    finally:
        sys.path.remove(sys_path)


@pytest.fixture
def pipeline_module(npm_release: object) -> object:
    """Expose the pipeline module for plan-level assertions."""

    return importlib.import_module("npm_release.pipeline")


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an isolated workspace and set ``GITHUB_WORKSPACE`` accordingly."""
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.setenv("GITHUB_WORKSPACE", str(root))
    monkeypatch.delenv("INPUT_DRY_RUN", raising=False)
    return root
