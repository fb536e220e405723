"""Install pipeline: idempotency check, prepare, fetch, verify, extract."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tarfile
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from .errors import (
    ChecksumMismatch,
    DestinationUnavailable,
    ExtractionFailed,
    FetchFailed,
    ProvisionError,
)
from .extract import extract_all
from .target import CHECKSUM_MANIFEST, TargetDescriptor, runtime_dir_name
from .transport import fetch, file_name

logger = logging.getLogger(__name__)

RECEIPT_NAME = ".node-provisioner.json"

FetchFn = Callable[[Path, Sequence[str]], Mapping[str, bytes]]
ExtractFn = Callable[[Path, Path], object]
ProgressCallback = Callable[[str], None]


class InstallState(Enum):
    NOT_STARTED = "not_started"
    PREPARING = "preparing"
    FETCHING = "fetching"
    VERIFYING = "verifying"
    EXTRACTING = "extracting"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallRequest:
    descriptor: TargetDescriptor
    artifact_url: str
    destination: Path
    auxiliary_urls: tuple[str, ...] = ()

    @property
    def urls(self) -> list[str]:
        return [self.artifact_url, *self.auxiliary_urls]

    @property
    def archive_path(self) -> Path:
        return self.destination / file_name(self.artifact_url)

    @property
    def runtime_dir(self) -> Path:
        return self.destination / runtime_dir_name(self.descriptor)


@dataclass(frozen=True)
class InstallReceipt:
    version: str
    os_name: str
    arch: str
    artifact: str
    files: list[str] = field(default_factory=list)
    installed_at_utc: str = ""

    def matches(self, descriptor: TargetDescriptor) -> bool:
        return (self.version, self.os_name, self.arch) == (descriptor.version, descriptor.os_name, descriptor.arch)


@dataclass(frozen=True)
class InstallResult:
    state: InstallState
    runtime_dir: Path
    skipped: bool = False
    files: tuple[str, ...] = ()


def read_receipt(destination: Path) -> InstallReceipt | None:
    path = destination / RECEIPT_NAME
    if not path.is_file():
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return InstallReceipt(
            version=str(raw["version"]),
            os_name=str(raw["os_name"]),
            arch=str(raw["arch"]),
            artifact=str(raw["artifact"]),
            files=[str(f) for f in raw.get("files", [])],
            installed_at_utc=str(raw.get("installed_at_utc", "")),
        )
    except (OSError, ValueError, KeyError, TypeError):
        logger.warning("ignoring unreadable receipt %s", path, extra={"event": "receipt_unreadable"})
        return None


def write_receipt(destination: Path, receipt: InstallReceipt) -> Path:
    path = destination / RECEIPT_NAME
    path.write_text(json.dumps(asdict(receipt), indent=2, sort_keys=True), encoding="utf-8")
    return path


def already_installed(destination: Path, descriptor: TargetDescriptor) -> bool:
    """True when the receipt and the extracted runtime for ``descriptor`` exist."""
    receipt = read_receipt(destination)
    if receipt is None or not receipt.matches(descriptor):
        return False
    return (destination / runtime_dir_name(descriptor)).is_dir()


def remove_install(destination: Path) -> list[Path]:
    """Delete what the receipt in ``destination`` recorded; return removed paths."""
    receipt = read_receipt(destination)
    if receipt is None:
        return []

    removed: list[Path] = []
    runtime_dir = destination / runtime_dir_name(TargetDescriptor(receipt.version, receipt.os_name, receipt.arch))
    if runtime_dir.is_dir():
        shutil.rmtree(runtime_dir)
        removed.append(runtime_dir)
    for name in receipt.files:
        path = destination / name
        if path.is_file():
            path.unlink()
            removed.append(path)
    receipt_path = destination / RECEIPT_NAME
    receipt_path.unlink()
    removed.append(receipt_path)
    return removed


def parse_checksums(text: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for line in text.splitlines():
        parts = line.strip().split()
        if len(parts) >= 2:
            out[parts[1].lstrip("*")] = parts[0]
    return out


def sha256_bytes(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


def verify_checksum(archive: Path, payload: bytes, manifest: str) -> None:
    expected = parse_checksums(manifest).get(archive.name)
    actual = sha256_bytes(payload)
    if expected is None or expected.lower() != actual:
        raise ChecksumMismatch(archive, expected, actual)


class InstallOrchestrator:
    """Drives one install request through its states within a single call.

    Any typed failure moves the orchestrator to ``FAILED`` and is re-raised
    unchanged. The orchestrator keeps no state between runs.
    """

    def __init__(
        self,
        fetch: FetchFn = fetch,
        extract: ExtractFn = extract_all,
        verify: bool = True,
        progress: ProgressCallback | None = None,
    ) -> None:
        self._fetch = fetch
        self._extract = extract
        self.verify = verify
        self._progress = progress or (lambda _msg: None)
        self.state = InstallState.NOT_STARTED
        self.history: list[InstallState] = [self.state]

    def _transition(self, state: InstallState) -> None:
        logger.info("install state %s -> %s", self.state.value, state.value, extra={"event": "install_state"})
        self.state = state
        self.history.append(state)

    def run(self, request: InstallRequest) -> InstallResult:
        if already_installed(request.destination, request.descriptor):
            self._progress(f"node v{request.descriptor.version} already installed")
            self._transition(InstallState.INSTALLED)
            return InstallResult(state=self.state, runtime_dir=request.runtime_dir, skipped=True)

        try:
            self._prepare(request)
            fetched = self._fetch_all(request)
            self._verify(request, fetched)
            self._extract_archive(request)
            files = self._record(request)
        except ProvisionError as exc:
            self._transition(InstallState.FAILED)
            logger.error("install failed: %s", exc, extra={"event": "install_failed"})
            raise

        self._transition(InstallState.INSTALLED)
        self._progress("Install complete")
        return InstallResult(state=self.state, runtime_dir=request.runtime_dir, files=files)

    def _prepare(self, request: InstallRequest) -> None:
        self._transition(InstallState.PREPARING)
        self._progress(f"Preparing {request.destination}")
        self._remove_previous(request)
        try:
            request.destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DestinationUnavailable(request.destination, exc.strerror or str(exc)) from exc
        if not os.access(request.destination, os.W_OK | os.X_OK):
            raise DestinationUnavailable(request.destination, "not writable")

    def _remove_previous(self, request: InstallRequest) -> None:
        """Drop an install of another version; one runtime per destination."""
        previous = read_receipt(request.destination)
        if previous is None or previous.matches(request.descriptor):
            return
        logger.info(
            "replacing node v%s in %s", previous.version, request.destination, extra={"event": "replace_previous"}
        )
        try:
            remove_install(request.destination)
        except OSError as exc:
            raise DestinationUnavailable(request.destination, f"cannot remove v{previous.version}: {exc}") from exc

    def _fetch_all(self, request: InstallRequest) -> Mapping[str, bytes]:
        self._transition(InstallState.FETCHING)
        self._progress(f"Downloading {request.archive_path.name}")
        fetched = self._fetch(request.destination, request.urls)
        for url in request.urls:
            if url not in fetched:
                raise FetchFailed(url, "missing from fetched batch")
        return fetched

    def _verify(self, request: InstallRequest, fetched: Mapping[str, bytes]) -> None:
        manifest_url = next((u for u in request.auxiliary_urls if file_name(u) == CHECKSUM_MANIFEST), None)
        if not self.verify or manifest_url is None:
            logger.warning(
                "checksum verification skipped for %s", request.archive_path.name, extra={"event": "verify_skipped"}
            )
            return

        self._transition(InstallState.VERIFYING)
        self._progress("Verifying checksum")
        manifest = fetched[manifest_url].decode("utf-8", errors="replace")
        verify_checksum(request.archive_path, fetched[request.artifact_url], manifest)
        # Signature files stay on disk; they are not checked.

    def _extract_archive(self, request: InstallRequest) -> None:
        self._transition(InstallState.EXTRACTING)
        self._progress(f"Extracting {request.archive_path.name}")
        try:
            outcome = self._extract(request.archive_path, request.destination)
        except (tarfile.TarError, OSError) as exc:
            raise ExtractionFailed(request.archive_path, str(exc)) from exc
        if outcome is False:
            raise ExtractionFailed(request.archive_path, "extractor reported failure")

    def _record(self, request: InstallRequest) -> tuple[str, ...]:
        files = tuple(file_name(url) for url in request.urls)
        receipt = InstallReceipt(
            version=request.descriptor.version,
            os_name=request.descriptor.os_name,
            arch=request.descriptor.arch,
            artifact=request.archive_path.name,
            files=list(files),
            installed_at_utc=datetime.now(timezone.utc).isoformat(),
        )
        try:
            write_receipt(request.destination, receipt)
        except OSError as exc:
            raise DestinationUnavailable(request.destination, f"cannot write receipt: {exc}") from exc
        return files
