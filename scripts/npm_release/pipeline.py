"""Release pipeline: version sync, fetch and extract, then publish.

The run is an ordered list of :class:`ReleaseTask` descriptors executed by a
single driver loop. The first task that raises ends the run; nothing already
done is reverted, and the staging directory is left on disk for inspection.
Task order encodes the release invariants:

* every manifest is rewritten before any archive is downloaded;
* every binary is extracted before any package is published;
* every platform package is published before the umbrella package, which
  pins them at the exact release version.
"""

from __future__ import annotations

import contextlib
import dataclasses
import enum
import functools
import shutil
import typing as typ
from pathlib import Path

from .commands import CommandRunner, PlumbumCommandRunner, npm_publish_args
from .errors import ReleaseError
from .extract import extract_member
from .fetch import ArtifactFetcher
from .manifest import read_manifest, synchronize_manifest
from .platforms import PlatformTarget, archive_name, binary_name
from .run_state import RunState
from .version import ReleaseVersion

if typ.TYPE_CHECKING:
    from .config import ReleaseConfig

__all__ = [
    "ReleaseResult",
    "ReleaseTask",
    "Stage",
    "build_release_plan",
    "execute_plan",
    "run_release",
]

MANIFEST_NAME = "package.json"


class Fetcher(typ.Protocol):
    def fetch(self, url: str, destination: Path) -> Path: ...


class Stage(enum.Enum):
    """Pipeline stages in execution order."""

    VERSION_SYNC = "version-sync"
    FETCH_EXTRACT = "fetch-extract"
    PUBLISH_PLATFORMS = "publish-platforms"
    PUBLISH_UMBRELLA = "publish-umbrella"
    CLEANUP = "cleanup"


_STAGE_HEADINGS = {
    Stage.VERSION_SYNC: "==> Updating versions...",
    Stage.FETCH_EXTRACT: "==> Downloading binaries from GitHub release...",
    Stage.PUBLISH_PLATFORMS: "==> Publishing platform packages...",
    Stage.PUBLISH_UMBRELLA: "==> Publishing main package...",
    Stage.CLEANUP: "==> Cleaning up...",
}


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseTask:
    """One step of the release plan."""

    stage: Stage
    label: str
    action: typ.Callable[[], None]


@dataclasses.dataclass(slots=True)
class ReleaseResult:
    """Outcome of :func:`run_release`.

    Attributes
    ----------
    version : ReleaseVersion
        Version that was released.
    dry_run : bool
        Whether publishes ran with ``--dry-run``.
    completed : list[str]
        Labels of tasks that finished, in execution order.
    skipped : list[str]
        Package directories whose publish was skipped because the run log
        already recorded them.
    """

    version: ReleaseVersion
    dry_run: bool
    completed: list[str] = dataclasses.field(default_factory=list)
    skipped: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(slots=True)
class _ReleaseContext:
    """State shared by the task actions of one run."""

    config: ReleaseConfig
    version: ReleaseVersion
    dry_run: bool
    fetcher: Fetcher
    runner: CommandRunner
    state: RunState | None
    result: ReleaseResult


def build_release_plan(
    config: ReleaseConfig,
    version: ReleaseVersion,
    *,
    dry_run: bool,
    fetcher: Fetcher,
    runner: CommandRunner,
    state: RunState | None = None,
    result: ReleaseResult | None = None,
) -> list[ReleaseTask]:
    """Return the ordered task list for releasing ``version``.

    Parameters
    ----------
    config : ReleaseConfig
        Paths, release host, and platform matrix.
    version : ReleaseVersion
        Parsed release version.
    dry_run : bool
        Append ``--dry-run`` to every ``npm publish``.
    fetcher : Fetcher
        Downloads archives into the staging directory.
    runner : CommandRunner
        Executes ``npm publish``.
    state : RunState | None
        Run log consulted before live publishes; ``None`` disables it.
    result : ReleaseResult | None
        Receives skipped publishes; a fresh result is created when omitted.
    """
    ctx = _ReleaseContext(
        config=config,
        version=version,
        dry_run=dry_run,
        fetcher=fetcher,
        runner=runner,
        state=state,
        result=(
            result
            if result is not None
            else ReleaseResult(version=version, dry_run=dry_run)
        ),
    )
    umbrella = config.umbrella_dir
    tasks = [
        ReleaseTask(
            Stage.VERSION_SYNC,
            f"sync {umbrella.name}",
            functools.partial(_sync_version, ctx, umbrella),
        )
    ]
    tasks.extend(
        ReleaseTask(
            Stage.VERSION_SYNC,
            f"sync {target.package_suffix}",
            functools.partial(_sync_version, ctx, config.platform_dir(target)),
        )
        for target in config.targets
    )
    tasks.append(
        ReleaseTask(
            Stage.FETCH_EXTRACT,
            "prepare staging",
            functools.partial(_initialize_staging_dir, config.staging_path),
        )
    )
    tasks.extend(
        ReleaseTask(
            Stage.FETCH_EXTRACT,
            f"fetch {target.package_suffix}",
            functools.partial(_fetch_and_extract, ctx, target),
        )
        for target in config.targets
    )
    tasks.extend(
        ReleaseTask(
            Stage.PUBLISH_PLATFORMS,
            f"publish {target.package_suffix}",
            functools.partial(
                _publish_package, ctx, config.platform_dir(target), "public"
            ),
        )
        for target in config.targets
    )
    tasks.append(
        ReleaseTask(
            Stage.PUBLISH_UMBRELLA,
            f"publish {umbrella.name}",
            functools.partial(_publish_package, ctx, umbrella, None),
        )
    )
    tasks.append(
        ReleaseTask(Stage.CLEANUP, "cleanup", functools.partial(_cleanup, ctx))
    )
    return tasks


def execute_plan(
    tasks: typ.Iterable[ReleaseTask], result: ReleaseResult
) -> ReleaseResult:
    """Run ``tasks`` in order, stopping at the first exception.

    The exception propagates unchanged; ``result.completed`` then lists the
    tasks that finished before the failure.
    """
    current: Stage | None = None
    for task in tasks:
        if task.stage is not current:
            current = task.stage
            print(f"\n{_STAGE_HEADINGS[current]}")
        task.action()
        result.completed.append(task.label)
    return result


def run_release(
    config: ReleaseConfig,
    version: str | ReleaseVersion,
    *,
    dry_run: bool = False,
    fetcher: Fetcher | None = None,
    runner: CommandRunner | None = None,
) -> ReleaseResult:
    """Synchronise, download, extract, and publish every npm package.

    Parameters
    ----------
    config : ReleaseConfig
        Release configuration.
    version : str | ReleaseVersion
        Release version, with or without its ``v`` tag marker.
    dry_run : bool
        Run ``npm publish --dry-run``; manifests and binaries are still
        written.
    fetcher : Fetcher | None
        Archive downloader; an :class:`ArtifactFetcher` built from ``config``
        is used and closed when omitted.
    runner : CommandRunner | None
        Command runner; :class:`PlumbumCommandRunner` when omitted.

    Returns
    -------
    ReleaseResult
        Completed task labels and skipped publishes.

    Raises
    ------
    ReleaseError
        Any failure; later tasks are not run and earlier ones are not
        reverted.

    Examples
    --------
    >>> run_release(ReleaseConfig(workspace=Path(".")), "v1.2.3", dry_run=True)  # doctest: +SKIP
    ReleaseResult(version=ReleaseVersion(raw='v1.2.3', clean='1.2.3'), ...)
    """
    if not isinstance(version, ReleaseVersion):
        version = ReleaseVersion.parse(version)

    suffix = " (dry-run)" if dry_run else ""
    print(f"Publishing {config.tool_name} v{version.clean} to npm{suffix}...")

    state = None if dry_run else RunState.load(config.state_path, version.clean)
    result = ReleaseResult(version=version, dry_run=dry_run)

    with contextlib.ExitStack() as stack:
        if fetcher is None:
            fetcher = stack.enter_context(
                ArtifactFetcher(
                    user_agent=config.effective_user_agent,
                    max_redirects=config.max_redirects,
                    timeout=config.timeout,
                )
            )
        tasks = build_release_plan(
            config,
            version,
            dry_run=dry_run,
            fetcher=fetcher,
            runner=runner or PlumbumCommandRunner(),
            state=state,
            result=result,
        )
        return execute_plan(tasks, result)


def _sync_version(ctx: _ReleaseContext, package_dir: Path) -> None:
    synchronize_manifest(package_dir / MANIFEST_NAME, ctx.version.clean)


def _initialize_staging_dir(staging_dir: Path) -> None:
    """Create an empty staging directory, discarding leftovers of failed runs."""
    try:
        if staging_dir.exists():
            shutil.rmtree(staging_dir)
        staging_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        message = f"Failed to prepare staging directory {staging_dir}: {exc}"
        raise ReleaseError(message) from exc


def _fetch_and_extract(ctx: _ReleaseContext, target: PlatformTarget) -> None:
    config = ctx.config
    archive = archive_name(config.tool_name, ctx.version.clean, target)
    url = config.download_url(ctx.version.tag, archive)
    archive_path = config.staging_path / archive
    bin_dir = config.platform_dir(target) / "bin"

    print(f"  Downloading {archive}...")
    ctx.fetcher.fetch(url, archive_path)

    print(f"  Extracting to {target.package_suffix}/bin/...")
    extract_member(
        archive_path,
        target.archive_format,
        binary_name(config.tool_name, target),
        bin_dir,
        executable=target.needs_exec_bit,
    )


def _publish_package(
    ctx: _ReleaseContext, package_dir: Path, access: str | None
) -> None:
    name = read_manifest(package_dir / MANIFEST_NAME).get("name", package_dir.name)
    if ctx.state is not None and ctx.state.is_published(package_dir):
        print(f"  Skipping {name}: already published in a previous run")
        ctx.result.skipped.append(package_dir.name)
        return

    print(f"  Publishing {name}...")
    argv = npm_publish_args(access=access, dry_run=ctx.dry_run)
    ctx.runner.run(argv, cwd=package_dir)
    if ctx.state is not None:
        ctx.state.record(package_dir)


def _cleanup(ctx: _ReleaseContext) -> None:
    staging_dir = ctx.config.staging_path
    try:
        if staging_dir.exists():
            shutil.rmtree(staging_dir)
    except OSError as exc:
        message = f"Failed to remove staging directory {staging_dir}: {exc}"
        raise ReleaseError(message) from exc
    if ctx.state is not None:
        ctx.state.clear()
