"""Public interface for the npm release helper package."""

from .config import DEFAULT_CONFIG_PATH, ReleaseConfig, load_config
from .environment import resolve_dry_run, resolve_workspace
from .errors import (
    ConfigError,
    DownloadError,
    ExtractionError,
    ManifestError,
    PublishError,
    ReleaseError,
    UsageError,
)
from .pipeline import ReleaseResult, Stage, run_release
from .platforms import DEFAULT_PLATFORM_MATRIX, ArchiveFormat, PlatformTarget
from .version import ReleaseVersion

__all__ = [
    "ArchiveFormat",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PLATFORM_MATRIX",
    "DownloadError",
    "ExtractionError",
    "load_config",
    "ManifestError",
    "PlatformTarget",
    "PublishError",
    "ReleaseConfig",
    "ReleaseError",
    "ReleaseResult",
    "ReleaseVersion",
    "resolve_dry_run",
    "resolve_workspace",
    "run_release",
    "Stage",
    "UsageError",
]
