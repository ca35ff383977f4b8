"""Run log that lets an interrupted release skip completed publishes.

npm refuses to publish the same version twice, so re-running a release after
a mid-way failure would stop at the first package that already went out. The
run log records each live publish as it completes; a retried run for the same
version skips those packages. Dry runs never touch the log.
"""

from __future__ import annotations

import dataclasses
import json
import sys
from pathlib import Path

from .errors import PublishError

__all__ = ["RunState"]


@dataclasses.dataclass(slots=True)
class RunState:
    """Published package directories for one release version."""

    path: Path
    version: str
    published: list[str] = dataclasses.field(default_factory=list)

    @classmethod
    def load(cls, path: Path, version: str) -> RunState:
        """Return the log at ``path`` if it belongs to ``version``.

        A log for another version, or one that cannot be parsed, is ignored
        and will be overwritten on the next record.
        """
        if not path.is_file():
            return cls(path=path, version=version)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            print(
                f"::warning title=Run State Ignored::Unreadable {path}: {exc}",
                file=sys.stderr,
            )
            return cls(path=path, version=version)
        if not isinstance(data, dict) or data.get("version") != version:
            return cls(path=path, version=version)
        published = [str(item) for item in data.get("published", [])]
        return cls(path=path, version=version, published=published)

    def is_published(self, package_dir: Path) -> bool:
        return package_dir.name in self.published

    def record(self, package_dir: Path) -> None:
        """Append ``package_dir`` to the log and persist it immediately."""
        if package_dir.name not in self.published:
            self.published.append(package_dir.name)
        payload = {"version": self.version, "published": self.published}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload, indent=2) + "\n", encoding="utf-8"
            )
        except OSError as exc:
            message = f"Failed to write run log {self.path}: {exc}"
            raise PublishError(message) from exc

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            message = f"Failed to remove run log {self.path}: {exc}"
            raise PublishError(message) from exc
