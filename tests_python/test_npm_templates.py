"""Consistency checks for the checked-in npm package templates."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
NPM_ROOT = REPO_ROOT / "npm"


def _manifest(package: str) -> dict[str, object]:
    return json.loads((NPM_ROOT / package / "package.json").read_text("utf-8"))


@pytest.mark.parametrize(
    "package", sorted(path.parent.name for path in NPM_ROOT.glob("*/package.json"))
)
def test_bin_entries_point_at_shipped_files(package: str) -> None:
    """Every ``bin`` entry resolves to a file inside the published ``files``."""
    manifest = _manifest(package)
    bins = manifest.get("bin", {})

    for command, relative in bins.items():
        assert (NPM_ROOT / package / relative).is_file(), (
            f"{package}: bin {command!r} points at missing {relative}"
        )
        assert relative.split("/", 1)[0] in manifest["files"]


def test_umbrella_depends_on_every_default_target(npm_release: object) -> None:
    """The umbrella lists one optional dependency per default platform."""
    deps = _manifest("xsql")["optionalDependencies"]

    expected = {
        f"@xsql-cli/{target.package_suffix}"
        for target in npm_release.DEFAULT_PLATFORM_MATRIX
    }
    assert set(deps) == expected
    for target in npm_release.DEFAULT_PLATFORM_MATRIX:
        suffix = target.package_suffix
        assert _manifest(suffix)["name"] == f"@xsql-cli/{suffix}"
