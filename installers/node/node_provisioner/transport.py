"""HTTP transport used for the release catalog and artifact batches."""

from __future__ import annotations

import http.client
import logging
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from urllib.parse import urlsplit

import certifi

from . import __version__
from .errors import FetchFailed

logger = logging.getLogger(__name__)

USER_AGENT = f"node-provisioner/{__version__}"
MAX_WORKERS = 4


def _build_ssl_context(ca_bundle: str | None = None) -> ssl.SSLContext:
    """Create TLS context with an explicit CA bundle."""
    if ca_bundle:
        return ssl.create_default_context(cafile=ca_bundle)
    return ssl.create_default_context(cafile=certifi.where())


def _urlopen(url: str, timeout: int, ca_bundle: str | None = None, accept: str = "*/*"):
    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": accept,
        },
    )
    return urllib.request.urlopen(request, timeout=timeout, context=_build_ssl_context(ca_bundle))


def fetch_bytes(url: str, timeout: int = 30, ca_bundle: str | None = None, accept: str = "*/*") -> bytes:
    with _urlopen(url, timeout=timeout, ca_bundle=ca_bundle, accept=accept) as response:
        return response.read()


def file_name(url: str) -> str:
    """Last path segment of a URL, used as the on-disk name of a fetched file."""
    return urlsplit(url).path.rsplit("/", 1)[-1]


def fetch(
    destination_dir: Path,
    urls: Sequence[str],
    timeout: int = 180,
    ca_bundle: str | None = None,
) -> Mapping[str, bytes]:
    """Fetch every URL as one batch and store the files in ``destination_dir``.

    Requests run concurrently; the call returns only after all of them
    finished. If any URL failed, ``FetchFailed`` names the first failing URL
    in request order and nothing is written to disk.
    """
    if not urls:
        return {}

    def _get(url: str) -> bytes:
        return fetch_bytes(url, timeout=timeout, ca_bundle=ca_bundle)

    with ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(urls))) as pool:
        futures = [(url, pool.submit(_get, url)) for url in urls]

    results: dict[str, bytes] = {}
    for url, future in futures:
        exc = future.exception()
        if exc is None:
            results[url] = future.result()
            continue
        if isinstance(exc, urllib.error.HTTPError):
            reason = f"HTTP {exc.code}"
        elif isinstance(exc, urllib.error.URLError):
            reason = str(exc.reason)
        elif isinstance(exc, http.client.HTTPException):
            reason = f"{type(exc).__name__}: {exc}"
        elif isinstance(exc, (OSError, ValueError)):
            reason = str(exc)
        else:
            raise exc
        logger.warning("fetch failed url=%s reason=%s", url, reason, extra={"event": "fetch_failed"})
        raise FetchFailed(url, reason) from exc

    written: list[Path] = []
    for url, payload in results.items():
        dest = destination_dir / file_name(url)
        try:
            dest.write_bytes(payload)
        except OSError as exc:
            if dest.is_file():
                written.append(dest)
            for path in written:
                path.unlink(missing_ok=True)
            raise FetchFailed(url, f"cannot write {dest}: {exc}") from exc
        written.append(dest)
        logger.info("fetched %s (%d bytes)", url, len(payload), extra={"event": "fetched"})

    return results
