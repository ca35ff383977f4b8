"""Configuration model and loader for the npm release helper.

The release is described by a small TOML file. Every key is optional; the
built-in defaults publish ``xsql`` from the ``zx06/xsql`` GitHub releases using
the six-target default matrix.

Usage
-----
Load the configuration for the current checkout::

    from pathlib import Path
    from npm_release.config import load_config

    config = load_config(Path(".github/npm-release.toml"), Path.cwd())
    print(config.umbrella_dir)
"""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path

import tomllib

from .errors import ConfigError
from .platforms import (
    DEFAULT_PLATFORM_MATRIX,
    ArchiveFormat,
    PlatformMatrix,
    PlatformTarget,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ReleaseConfig",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path(".github") / "npm-release.toml"

_DEFAULT_TOOL = "xsql"
_DEFAULT_REPOSITORY = "zx06/xsql"


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Concrete configuration produced by :func:`load_config`.

    Parameters
    ----------
    workspace : Path
        Repository root; relative paths below are resolved against it.
    tool_name : str
        Executable and archive base name (``"xsql"``).
    repository : str
        ``owner/project`` slug of the GitHub repository hosting releases.
    release_host : str, default="https://github.com"
        Scheme and host serving release downloads.
    npm_dir : str, default="npm"
        Directory containing the umbrella and platform package directories.
    umbrella_package : str | None, optional
        Directory name of the umbrella package; defaults to ``tool_name``.
    staging_dir : str, default=".npm-tmp"
        Directory receiving downloaded archives during a run. Must be a
        relative path below ``workspace`` outside the npm package tree.
    state_file : str, default=".npm-publish-state.json"
        Run log recording completed live publishes.
    user_agent : str | None, optional
        ``User-Agent`` sent with downloads; defaults to
        ``"<tool_name>-npm-publish"``.
    max_redirects : int, default=10
        Maximum redirect hops followed per download.
    timeout : float, default=60.0
        Network timeout in seconds for each download request.
    targets : PlatformMatrix
        Ordered platform targets; also the platform publish order.

    Examples
    --------
    >>> config = ReleaseConfig(workspace=Path("/repo"))
    >>> config.platform_dir(config.targets[0]).as_posix()
    '/repo/npm/linux-x64'
    """

    workspace: Path
    tool_name: str = _DEFAULT_TOOL
    repository: str = _DEFAULT_REPOSITORY
    release_host: str = "https://github.com"
    npm_dir: str = "npm"
    umbrella_package: str | None = None
    staging_dir: str = ".npm-tmp"
    state_file: str = ".npm-publish-state.json"
    user_agent: str | None = None
    max_redirects: int = 10
    timeout: float = 60.0
    targets: PlatformMatrix = DEFAULT_PLATFORM_MATRIX

    def __post_init__(self) -> None:
        _validate_staging_dir(self.workspace, self.staging_dir, self.npm_dir)

    @property
    def npm_root(self) -> Path:
        """Absolute directory holding every npm package."""
        return self.workspace / self.npm_dir

    @property
    def umbrella_dir(self) -> Path:
        """Absolute directory of the umbrella package."""
        return self.npm_root / (self.umbrella_package or self.tool_name)

    @property
    def staging_path(self) -> Path:
        """Absolute staging directory for downloaded archives."""
        return self.workspace / self.staging_dir

    @property
    def state_path(self) -> Path:
        """Absolute path of the resumable run log."""
        return self.workspace / self.state_file

    @property
    def effective_user_agent(self) -> str:
        """``User-Agent`` header value sent with downloads."""
        return self.user_agent or f"{self.tool_name}-npm-publish"

    def platform_dir(self, target: PlatformTarget) -> Path:
        """Return the npm package directory for ``target``."""
        return self.npm_root / target.package_suffix

    def download_url(self, tag: str, archive: str) -> str:
        """Return the release download URL for ``archive`` under ``tag``."""
        host = self.release_host.rstrip("/")
        return f"{host}/{self.repository}/releases/download/{tag}/{archive}"


def load_config(
    config_file: Path | None, workspace: Path, *, required: bool = False
) -> ReleaseConfig:
    """Load the release configuration from ``config_file``.

    Parameters
    ----------
    config_file : Path | None
        TOML file to read. ``None`` or a missing default file yields the
        built-in configuration.
    workspace : Path
        Repository root recorded on the resulting configuration.
    required : bool, default=False
        Fail instead of falling back to defaults when the file is absent.

    Returns
    -------
    ReleaseConfig
        Fully realised configuration.

    Raises
    ------
    ConfigError
        Raised when the file is required but missing, cannot be parsed, or
        contains invalid values.
    """
    if config_file is None or not config_file.is_file():
        if required:
            message = f"Configuration file not found at {config_file}"
            raise ConfigError(message)
        return ReleaseConfig(workspace=workspace)

    data = _load_toml(config_file)
    common = data.get("common", {})
    if not isinstance(common, dict):
        message = f"[common] must be a table in {config_file}"
        raise ConfigError(message)

    targets = _make_targets(data.get("targets"), config_file)
    settings = {
        "tool_name": _string(common, "tool_name", _DEFAULT_TOOL, config_file),
        "repository": _string(common, "repository", _DEFAULT_REPOSITORY, config_file),
        "release_host": _string(
            common, "release_host", "https://github.com", config_file
        ),
        "npm_dir": _string(common, "npm_dir", "npm", config_file),
        "umbrella_package": _optional_string(common, "umbrella_package", config_file),
        "staging_dir": _string(common, "staging_dir", ".npm-tmp", config_file),
        "state_file": _string(
            common, "state_file", ".npm-publish-state.json", config_file
        ),
        "user_agent": _optional_string(common, "user_agent", config_file),
        "max_redirects": int(_positive(common, "max_redirects", 10, config_file)),
        "timeout": float(_positive(common, "timeout", 60.0, config_file)),
    }
    try:
        return ReleaseConfig(
            workspace=workspace,
            targets=targets or DEFAULT_PLATFORM_MATRIX,
            **settings,
        )
    except ConfigError as exc:
        message = f"[common].{exc} in {config_file}"
        raise ConfigError(message) from exc


def _load_toml(path: Path) -> dict[str, typ.Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        message = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(message) from exc


def _string(
    section: dict[str, typ.Any], key: str, default: str, config_path: Path
) -> str:
    value = section.get(key, default)
    if not isinstance(value, str) or not value:
        message = f"[common].{key} must be a non-empty string in {config_path}"
        raise ConfigError(message)
    return value


def _optional_string(
    section: dict[str, typ.Any], key: str, config_path: Path
) -> str | None:
    if key not in section:
        return None
    return _string(section, key, "", config_path)


def _validate_staging_dir(workspace: Path, staging_dir: str, npm_dir: str) -> None:
    """Reject staging locations whose removal would destroy other files.

    The staging directory is deleted at the start and end of every run, so it
    must be a dedicated directory below the workspace that neither contains
    nor lives inside the npm package tree.
    """
    relative = Path(staging_dir)
    if relative.is_absolute() or ".." in relative.parts:
        message = (
            f"staging_dir {staging_dir!r} must be a relative path inside the "
            "workspace"
        )
        raise ConfigError(message)
    if not relative.parts:
        message = f"staging_dir {staging_dir!r} must not be the workspace itself"
        raise ConfigError(message)

    staging = Path(os.path.normpath(workspace / relative))
    npm_root = Path(os.path.normpath(workspace / npm_dir))
    if npm_root.is_relative_to(staging) or staging.is_relative_to(npm_root):
        message = (
            f"staging_dir {staging_dir!r} must not overlap the npm package "
            f"directory {npm_dir!r}"
        )
        raise ConfigError(message)


def _positive(
    section: dict[str, typ.Any], key: str, default: float, config_path: Path
) -> typ.Any:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        message = f"[common].{key} must be a positive number in {config_path}"
        raise ConfigError(message)
    return value


def _make_targets(value: object, config_path: Path) -> PlatformMatrix:
    """Return the ``[targets.*]`` tables as an ordered platform matrix."""
    if value is None:
        return ()
    if not isinstance(value, dict):
        message = f"[targets] must be a table of tables in {config_path}"
        raise ConfigError(message)

    targets: list[PlatformTarget] = []
    for suffix, entry in value.items():
        if not isinstance(entry, dict):
            message = f"[targets.{suffix}] must be a table in {config_path}"
            raise ConfigError(message)
        if missing := sorted(key for key in ("os", "arch") if key not in entry):
            joined = ", ".join(missing)
            message = (
                f"Missing required key(s) {joined} in [targets.{suffix}] "
                f"section of {config_path}"
            )
            raise ConfigError(message)
        try:
            archive_format = ArchiveFormat.parse(entry.get("archive", "tar.gz"))
        except ValueError as exc:
            message = f"{exc} in [targets.{suffix}] of {config_path}"
            raise ConfigError(message) from exc
        targets.append(
            PlatformTarget(
                os=entry["os"],
                arch=entry["arch"],
                package_suffix=suffix,
                bin_ext=entry.get("bin_ext", ""),
                archive_format=archive_format,
            )
        )
    return tuple(targets)
