"""Process execution boundary for registry commands."""

from __future__ import annotations

import shlex
import typing as typ
from pathlib import Path

from plumbum import FG, local
from plumbum.commands import CommandNotFound, ProcessExecutionError

from .errors import PublishError

__all__ = [
    "CommandRunner",
    "PlumbumCommandRunner",
    "npm_publish_args",
]


class CommandRunner(typ.Protocol):
    """Execute an external command inside ``cwd``."""

    def run(self, argv: typ.Sequence[str], *, cwd: Path) -> None:
        """Run ``argv`` and raise :class:`PublishError` when it fails."""
        ...


class PlumbumCommandRunner:
    """Run commands in the foreground through :mod:`plumbum`.

    Output is streamed straight to the terminal so ``npm``'s own progress and
    dry-run tarball listing stay visible in the workflow log.
    """

    def run(self, argv: typ.Sequence[str], *, cwd: Path) -> None:
        if not argv:
            message = "Cannot run an empty command"
            raise PublishError(message)
        print(f"$ {shlex.join(argv)}")
        try:
            command = local[argv[0]][tuple(argv[1:])]
            with local.cwd(cwd):
                command & FG
        except CommandNotFound as exc:
            message = f"{argv[0]} is not available on PATH"
            raise PublishError(message) from exc
        except ProcessExecutionError as exc:
            message = (
                f"{shlex.join(argv)} failed in {cwd} with exit code {exc.retcode}"
            )
            raise PublishError(message) from exc


def npm_publish_args(*, access: str | None, dry_run: bool) -> list[str]:
    """Return the ``npm publish`` argument vector.

    Examples
    --------
    >>> npm_publish_args(access="public", dry_run=True)
    ['npm', 'publish', '--access', 'public', '--dry-run']
    >>> npm_publish_args(access=None, dry_run=False)
    ['npm', 'publish']
    """
    argv = ["npm", "publish"]
    if access:
        argv.extend(["--access", access])
    if dry_run:
        argv.append("--dry-run")
    return argv
