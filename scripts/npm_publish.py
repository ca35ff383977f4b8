# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "cyclopts>=3.24.0,<4.0.0",
#   "httpx>=0.27",
#   "plumbum>=1.8",
# ]
# ///

"""Publish the npm distribution of a GitHub-released command-line tool.

The helper pins every ``package.json`` under ``npm/`` to the release version,
downloads the per-platform archives attached to the GitHub release, extracts
each binary into its platform package, and publishes the platform packages
followed by the umbrella package.

Examples
--------
Rehearse a release without touching the registry::

    uv run scripts/npm_publish.py v1.2.3 --dry-run

Publish for real from a GitHub Actions job::

    uv run scripts/npm_publish.py "${GITHUB_REF_NAME}"
"""

from __future__ import annotations

import sys
from pathlib import Path

import cyclopts
from npm_release import (
    DEFAULT_CONFIG_PATH,
    ReleaseError,
    UsageError,
    load_config,
    resolve_dry_run,
    resolve_workspace,
    run_release,
)

app = cyclopts.App(
    help="Publish platform binaries from a GitHub release to npm.",
    version_flags=[],
)

USAGE_LINES = (
    "Usage: npm_publish.py <version> [--dry-run]",
    "Example: npm_publish.py 1.2.3",
)


@app.default
def main(
    version: str | None = None,
    /,
    *,
    dry_run: bool = False,
    config_file: Path | None = None,
    workspace: Path | None = None,
) -> None:
    """Publish ``version`` to npm.

    Parameters
    ----------
    version:
        Release version, with or without the leading ``v`` of its Git tag.
    dry_run:
        Pass ``--dry-run`` to every ``npm publish``. Manifests are still
        rewritten and binaries still extracted.
    config_file:
        Release configuration; defaults to ``.github/npm-release.toml`` in the
        workspace.
    workspace:
        Repository root; defaults to ``GITHUB_WORKSPACE`` or the current
        directory.
    """
    if not version or not version.strip():
        for line in USAGE_LINES:
            print(line, file=sys.stderr)
        raise SystemExit(1)

    try:
        root = resolve_workspace(workspace)
        config = load_config(
            config_file or root / DEFAULT_CONFIG_PATH,
            root,
            required=config_file is not None,
        )
        result = run_release(config, version, dry_run=resolve_dry_run(dry_run))
    except UsageError as exc:
        print(f"::error title=Usage Error::{exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    except ReleaseError as exc:
        print(f"::error title=Publish Failure::{exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if result.skipped:
        skipped = ", ".join(result.skipped)
        print(
            f"::warning title=Publish Skipped::Already published: {skipped}",
            file=sys.stderr,
        )
    print(f"\nDone! {config.tool_name} v{result.version.clean} published to npm.")


if __name__ == "__main__":
    app()
