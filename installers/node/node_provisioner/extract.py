"""Archive extraction for downloaded runtime tarballs."""

from __future__ import annotations

import logging
import tarfile
from pathlib import Path

from .errors import ExtractionFailed

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".tar.gz", ".tgz", ".tar.xz", ".tar")


def is_supported(archive: Path) -> bool:
    return archive.name.lower().endswith(SUPPORTED_SUFFIXES)


def extract_all(archive: Path, destination_dir: Path) -> list[str]:
    """Unpack ``archive`` into ``destination_dir`` and return the top-level names.

    Members that would land outside the destination (absolute paths, ``..``,
    links pointing out of the tree, device files) are refused by the tarfile
    ``data`` filter and reported as ``ExtractionFailed``.
    """
    if not is_supported(archive):
        raise ExtractionFailed(archive, "unsupported archive format")
    if not archive.is_file():
        raise ExtractionFailed(archive, "archive not found")

    try:
        with tarfile.open(archive, "r:*") as tar:
            members = tar.getmembers()
            tar.extractall(destination_dir, members=members, filter="data")
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ExtractionFailed(archive, str(exc)) from exc

    names = (m.name.removeprefix("./") for m in members)
    top_level = sorted({name.split("/", 1)[0] for name in names if name not in ("", ".")})
    logger.info(
        "extracted %s into %s (%d members)",
        archive.name,
        destination_dir,
        len(members),
        extra={"event": "extracted"},
    )
    return top_level
