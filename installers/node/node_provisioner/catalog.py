"""Node.js release catalog: record model, parsing and the process-wide cache."""

from __future__ import annotations

import http.client
import json
import logging
import threading
import urllib.error
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import semver

from .errors import CatalogCorrupt, CatalogUnavailable, MalformedField
from .transport import fetch_bytes

logger = logging.getLogger(__name__)

CATALOG_URL = "https://nodejs.org/dist/index.json"
NOT_LTS = "false"

_OPTIONAL_FIELDS = {
    "npm_version": "npm",
    "uv_version": "uv",
    "zlib_version": "zlib",
    "openssl_version": "openssl",
    "abi_modules": "modules",
}


def decode_lts(value: Any) -> str:
    """Collapse the bool-or-string ``lts`` wire value to one string.

    ``false`` (boolean or string) becomes ``NOT_LTS``; a channel codename such
    as ``"Dubnium"`` is returned unchanged. ``true``, empty strings and any
    other type are rejected.
    """
    if isinstance(value, bool):
        if value:
            raise MalformedField("lts", value)
        return NOT_LTS
    if isinstance(value, str) and value:
        return value
    raise MalformedField("lts", value)


def _require_str(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise MalformedField(key, value)
    return value


def _optional_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return value
    raise MalformedField(key, value)


@dataclass(frozen=True)
class ReleaseEntry:
    version: str
    release_date: str
    available_files: tuple[str, ...]
    v8_version: str
    lts_channel: str
    npm_version: str | None = None
    uv_version: str | None = None
    zlib_version: str | None = None
    openssl_version: str | None = None
    abi_modules: str | None = None

    @property
    def is_lts(self) -> bool:
        return self.lts_channel != NOT_LTS

    @property
    def parsed_version(self) -> semver.Version:
        return parse_version(self.version)

    @classmethod
    def from_json(cls, raw: Any) -> "ReleaseEntry":
        if not isinstance(raw, dict):
            raise MalformedField("<entry>", raw)

        version = _require_str(raw, "version")
        if not semver.Version.is_valid(_strip_v(version)):
            raise MalformedField("version", version)

        files = raw.get("files")
        if not isinstance(files, list) or not files or not all(isinstance(f, str) for f in files):
            raise MalformedField("files", files)

        if "lts" not in raw:
            raise MalformedField("lts", None)

        return cls(
            version=version,
            release_date=_require_str(raw, "date"),
            available_files=tuple(files),
            v8_version=_require_str(raw, "v8"),
            lts_channel=decode_lts(raw["lts"]),
            **{attr: _optional_str(raw, key) for attr, key in _OPTIONAL_FIELDS.items()},
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "version": self.version,
            "date": self.release_date,
            "files": list(self.available_files),
            "v8": self.v8_version,
        }
        for attr, key in _OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        out["lts"] = False if self.lts_channel == NOT_LTS else self.lts_channel
        return out


ReleaseCatalog = tuple[ReleaseEntry, ...]


def _strip_v(version: str) -> str:
    return version[1:] if version.startswith("v") else version


def parse_version(version: str) -> semver.Version:
    return semver.Version.parse(_strip_v(version))


def parse_catalog(raw: bytes | str) -> ReleaseCatalog:
    """Parse the whole catalog document; any bad entry rejects the document."""
    try:
        payload = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise CatalogCorrupt(f"invalid JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise CatalogCorrupt(f"expected a JSON array, got {type(payload).__name__}")

    entries: list[ReleaseEntry] = []
    seen: set[str] = set()
    for index, item in enumerate(payload):
        try:
            entry = ReleaseEntry.from_json(item)
        except MalformedField as exc:
            raise CatalogCorrupt(str(exc), index=index) from exc
        if entry.version in seen:
            raise CatalogCorrupt(f"duplicate version {entry.version}", index=index)
        seen.add(entry.version)
        entries.append(entry)

    return tuple(entries)


class CatalogLoader:
    """Loads the catalog once and hands out the same snapshot afterwards.

    Concurrent first calls are serialized on a lock so exactly one fetch
    happens. A failed load caches nothing.
    """

    def __init__(
        self,
        url: str = CATALOG_URL,
        fetcher: Callable[[str], bytes] | None = None,
    ) -> None:
        self.url = url
        self._fetcher = fetcher or (lambda u: fetch_bytes(u, accept="application/json"))
        self._lock = threading.Lock()
        self._snapshot: ReleaseCatalog | None = None

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    def load(self) -> ReleaseCatalog:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._fetch_and_parse()
            return self._snapshot

    def _fetch_and_parse(self) -> ReleaseCatalog:
        logger.info("loading release catalog from %s", self.url, extra={"event": "catalog_load"})
        try:
            raw = self._fetcher(self.url)
        except urllib.error.HTTPError as exc:
            raise CatalogUnavailable(self.url, f"HTTP {exc.code}") from exc
        except urllib.error.URLError as exc:
            raise CatalogUnavailable(self.url, str(exc.reason)) from exc
        except http.client.HTTPException as exc:
            raise CatalogUnavailable(self.url, f"{type(exc).__name__}: {exc}") from exc
        except (OSError, ValueError) as exc:
            raise CatalogUnavailable(self.url, str(exc)) from exc

        catalog = parse_catalog(raw)
        logger.info("release catalog loaded: %d entries", len(catalog), extra={"event": "catalog_loaded"})
        return catalog


_default_loader = CatalogLoader()


def default_loader() -> CatalogLoader:
    return _default_loader


def load_catalog() -> ReleaseCatalog:
    return _default_loader.load()
