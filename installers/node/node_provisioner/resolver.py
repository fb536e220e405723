"""Channel filtering and version selection over the release catalog."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .catalog import ReleaseEntry
from .errors import NoCandidates, VersionNotFound

LTS = "lts"
LATEST = "latest"


def filter_by_channel(catalog: Iterable[ReleaseEntry], selector: str) -> Iterator[ReleaseEntry]:
    """Yield catalog entries matching ``selector`` in catalog order.

    ``"lts"`` matches every entry with an LTS codename; any other selector is
    compared to ``version`` as an exact string, ``v`` prefix included.
    """
    if selector == LTS:
        return (entry for entry in catalog if entry.is_lts)
    return (entry for entry in catalog if entry.version == selector)


def highest_version(entries: Iterable[ReleaseEntry]) -> ReleaseEntry:
    candidates = iter(entries)
    try:
        best = next(candidates)
    except StopIteration:
        raise NoCandidates() from None

    best_version = best.parsed_version
    for entry in candidates:
        version = entry.parsed_version
        if version > best_version:
            best, best_version = entry, version
    return best


def normalize_selector(selector: str) -> str:
    s = selector.strip()
    if s.lower() in (LTS, LATEST):
        return s.lower()
    return s if s.startswith("v") else f"v{s}"


def resolve_version(catalog: Iterable[ReleaseEntry], selector: str) -> ReleaseEntry:
    """Pick one release for ``selector`` (``lts``, ``latest`` or an exact version)."""
    normalized = normalize_selector(selector)
    if normalized == LATEST:
        candidates = list(catalog)
    else:
        candidates = list(filter_by_channel(catalog, normalized))

    if not candidates:
        raise VersionNotFound(selector)
    return highest_version(candidates)
