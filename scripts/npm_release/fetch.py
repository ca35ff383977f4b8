"""Download release archives from the release host.

Redirects are followed by hand so that the hop count stays bounded and every
hop is visible in error messages. GitHub serves release assets through a
redirect to its object storage, so at least one hop is expected.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import httpx

from .errors import DownloadError

__all__ = ["ArtifactFetcher", "DEFAULT_MAX_REDIRECTS"]

DEFAULT_MAX_REDIRECTS = 10
_CHUNK_SIZE = 64 * 1024


class ArtifactFetcher:
    """Fetch archives over HTTP(S) into a staging directory.

    Parameters
    ----------
    client : httpx.Client | None
        Client used for requests. When omitted a client is created and closed
        by :meth:`close`. Supplied clients are left open.
    user_agent : str
        ``User-Agent`` header sent with every request.
    max_redirects : int
        Maximum number of redirect hops followed for a single download.
    timeout : float
        Timeout in seconds applied to the created client.

    Examples
    --------
    >>> with ArtifactFetcher(user_agent="xsql-npm-publish") as fetcher:  # doctest: +SKIP
    ...     fetcher.fetch(url, Path(".npm-tmp/xsql_1.2.3_linux_amd64.tar.gz"))
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        user_agent: str,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        timeout: float = 60.0,
    ) -> None:
        if max_redirects < 0:
            message = "max_redirects must not be negative"
            raise ValueError(message)
        self._owns_client = client is None
        self._client = (
            client if client is not None else httpx.Client(timeout=timeout)
        )
        self._headers = {"User-Agent": user_agent}
        self._max_redirects = max_redirects

    def __enter__(self) -> ArtifactFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client when this fetcher created it."""
        if self._owns_client:
            self._client.close()

    def fetch(self, url: str, destination: Path) -> Path:
        """Download ``url`` to ``destination`` and return ``destination``.

        The file is fully written and closed before this method returns.

        Raises
        ------
        DownloadError
            On a non-200 final status, a redirect without ``Location``, more
            than ``max_redirects`` hops, or a transport failure.
        """
        current = httpx.URL(url)
        for _hop in range(self._max_redirects + 1):
            try:
                with self._client.stream(
                    "GET", current, headers=self._headers, follow_redirects=False
                ) as response:
                    if location := _redirect_target(response):
                        current = current.join(location)
                        continue
                    if response.status_code != httpx.codes.OK:
                        message = (
                            f"Download failed: {response.status_code} for {current}"
                        )
                        raise DownloadError(
                            message, status=response.status_code, url=str(current)
                        )
                    _write_stream(
                        response.iter_bytes(_CHUNK_SIZE), destination, str(current)
                    )
                    return destination
            except httpx.HTTPError as exc:
                message = f"Download failed: {exc} for {current}"
                raise DownloadError(message, status=None, url=str(current)) from exc

        message = (
            f"Download failed: exceeded {self._max_redirects} redirects for {url}"
        )
        raise DownloadError(message, status=None, url=url)


def _redirect_target(response: httpx.Response) -> str | None:
    """Return the ``Location`` of a 3xx response, or ``None``."""
    if 300 <= response.status_code < 400:
        return response.headers.get("location") or None
    return None


def _write_stream(
    chunks: typ.Iterable[bytes], destination: Path, url: str
) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        with destination.open("wb") as handle:
            for chunk in chunks:
                handle.write(chunk)
    except OSError as exc:
        message = f"Failed to write {destination}: {exc}"
        raise DownloadError(message, status=None, url=url) from exc
