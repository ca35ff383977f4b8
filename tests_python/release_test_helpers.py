"""Shared helpers for the npm release test suites."""

from __future__ import annotations

import dataclasses
import io
import json
import tarfile
import typing as typ
import zipfile
from pathlib import Path

import httpx
from npm_release.errors import PublishError

__all__ = [
    "RecordingRunner",
    "ReleaseServer",
    "archive_bytes",
    "make_tar_gz",
    "make_zip",
    "write_package_tree",
]


def make_tar_gz(path: Path, members: typ.Mapping[str, bytes]) -> Path:
    """Write a gzip-compressed tarball containing ``members``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(archive_bytes("tar.gz", members))
    return path


def make_zip(path: Path, members: typ.Mapping[str, bytes]) -> Path:
    """Write a zip archive containing ``members``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(archive_bytes("zip", members))
    return path


def archive_bytes(fmt: str, members: typ.Mapping[str, bytes]) -> bytes:
    """Return an in-memory archive in ``fmt`` (``"tar.gz"`` or ``"zip"``)."""
    buffer = io.BytesIO()
    if fmt == "zip":
        with zipfile.ZipFile(buffer, "w") as zf:
            for name, data in members.items():
                zf.writestr(name, data)
    else:
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for name, data in members.items():
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def write_package_tree(
    npm_root: Path,
    umbrella: str,
    suffixes: typ.Iterable[str],
    *,
    version: str = "0.0.0",
) -> None:
    """Populate ``npm_root`` with an umbrella and platform ``package.json``."""
    suffixes = list(suffixes)
    umbrella_manifest = {
        "name": f"{umbrella}-cli",
        "version": version,
        "optionalDependencies": {
            f"@{umbrella}-cli/{suffix}": version for suffix in suffixes
        },
    }
    _write_json(npm_root / umbrella / "package.json", umbrella_manifest)
    for suffix in suffixes:
        _write_json(
            npm_root / suffix / "package.json",
            {"name": f"@{umbrella}-cli/{suffix}", "version": version},
        )


def _write_json(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


@dataclasses.dataclass(slots=True)
class RecordingRunner:
    """Command runner that records invocations instead of executing them."""

    calls: list[tuple[tuple[str, ...], Path]] = dataclasses.field(
        default_factory=list
    )
    fail_in: str | None = None

    def run(self, argv: typ.Sequence[str], *, cwd: Path) -> None:
        self.calls.append((tuple(argv), cwd))
        if self.fail_in is not None and cwd.name == self.fail_in:
            message = f"npm publish failed in {cwd}"
            raise PublishError(message)

    @property
    def directories(self) -> list[str]:
        return [cwd.name for _argv, cwd in self.calls]


@dataclasses.dataclass(slots=True)
class ReleaseServer:
    """Fake GitHub release host serving archives behind a storage redirect.

    Release URLs answer ``302`` pointing at an object-storage host, which then
    serves the archive bytes. Archives listed in ``missing`` answer ``404``.
    """

    archives: dict[str, bytes]
    missing: set[str] = dataclasses.field(default_factory=set)
    requests: list[str] = dataclasses.field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        name = request.url.path.rsplit("/", 1)[-1]
        if name in self.missing:
            return httpx.Response(404)
        if request.url.host == "github.com":
            return httpx.Response(
                302, headers={"Location": f"https://objects.example.com/{name}"}
            )
        if name in self.archives:
            return httpx.Response(200, content=self.archives[name])
        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))
