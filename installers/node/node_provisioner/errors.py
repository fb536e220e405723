"""Typed failures raised by the catalog, resolver and install pipeline."""

from __future__ import annotations

from pathlib import Path


class ProvisionError(RuntimeError):
    """Base class for every failure surfaced to the host tool."""


class CatalogUnavailable(ProvisionError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Release catalog unavailable at {url}: {reason}")
        self.url = url
        self.reason = reason


class CatalogCorrupt(ProvisionError):
    def __init__(self, reason: str, index: int | None = None) -> None:
        where = f" (entry {index})" if index is not None else ""
        super().__init__(f"Release catalog corrupt{where}: {reason}")
        self.reason = reason
        self.index = index


class MalformedField(ProvisionError):
    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Malformed value for field {field!r}: {value!r}")
        self.field = field
        self.value = value


class NoCandidates(ProvisionError):
    def __init__(self) -> None:
        super().__init__("highest_version() called with no candidate entries")


class VersionNotFound(ProvisionError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"No release matches selector {selector!r}")
        self.selector = selector


class DestinationUnavailable(ProvisionError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Destination {path} unavailable: {reason}")
        self.path = path
        self.reason = reason


class FetchFailed(ProvisionError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Fetch failed for {url}: {reason}")
        self.url = url
        self.reason = reason


class ChecksumMismatch(ProvisionError):
    def __init__(self, path: Path, expected: str | None, actual: str) -> None:
        if expected is None:
            msg = f"No checksum entry for {path.name}"
        else:
            msg = f"Checksum mismatch for {path.name}: expected {expected}, got {actual}"
        super().__init__(msg)
        self.path = path
        self.expected = expected
        self.actual = actual


class ExtractionFailed(ProvisionError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Extraction of {path} failed: {reason}")
        self.path = path
        self.reason = reason
