"""Lifecycle entry points the host tool calls to provision Node.js."""

from __future__ import annotations

import logging
import platform
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from . import transport
from .catalog import CATALOG_URL, CatalogLoader, ReleaseEntry, default_loader
from .config import ProvisionerConfig, load_config
from .errors import DestinationUnavailable, ProvisionError
from .extract import extract_all
from .orchestrator import (
    ExtractFn,
    FetchFn,
    InstallOrchestrator,
    InstallRequest,
    InstallResult,
    ProgressCallback,
    already_installed,
    remove_install,
)
from .resolver import LATEST, LTS, normalize_selector, resolve_version
from .target import TargetDescriptor, artifact_url, auxiliary_urls, build_descriptor, runtime_dir_name

logger = logging.getLogger(__name__)

LIFECYCLE_STEPS = ("pre_install", "install", "post_install")


class NodePlugin:
    def __init__(
        self,
        config: ProvisionerConfig | None = None,
        loader: CatalogLoader | None = None,
        fetch: FetchFn | None = None,
        extract: ExtractFn = extract_all,
        progress: ProgressCallback | None = None,
        host: tuple[str, str] | None = None,
    ) -> None:
        self.config = config or load_config()
        if loader is None and (self.config.catalog_url != CATALOG_URL or self.config.ca_bundle):
            loader = CatalogLoader(self.config.catalog_url, fetcher=self._fetch_catalog)
        self.loader = loader or default_loader()
        self._fetch = fetch or self._default_fetch
        self._extract = extract
        self._progress = progress or (lambda _msg: None)
        self._host = host or (platform.system(), platform.machine())
        self.last_result: InstallResult | None = None

    def _fetch_catalog(self, url: str) -> bytes:
        return transport.fetch_bytes(url, ca_bundle=self.config.ca_bundle, accept="application/json")

    def _default_fetch(self, destination_dir: Path, urls: Sequence[str]) -> Mapping[str, bytes]:
        return transport.fetch(destination_dir, urls, ca_bundle=self.config.ca_bundle)

    def resolve_release(self, selector: str | None = None) -> ReleaseEntry:
        return resolve_version(self.loader.load(), selector or self.config.version)

    def descriptor(self) -> TargetDescriptor:
        """Target for the configured selector; channels go through the catalog."""
        selector = normalize_selector(self.config.version)
        if selector in (LTS, LATEST):
            version = self.resolve_release(selector).version
        else:
            version = selector
        return build_descriptor(version, *self._host)

    def build_request(self, descriptor: TargetDescriptor | None = None) -> InstallRequest:
        descriptor = descriptor or self.descriptor()
        aux = auxiliary_urls(descriptor, self.config.dist_url) if self.config.fetch_auxiliary else []
        return InstallRequest(
            descriptor=descriptor,
            artifact_url=artifact_url(descriptor, self.config.dist_url),
            destination=self.config.install_dir,
            auxiliary_urls=tuple(aux),
        )

    def already_installed(self) -> bool:
        return already_installed(self.config.install_dir, self.descriptor())

    def pre_install(self) -> InstallResult:
        request = self.build_request()
        orchestrator = InstallOrchestrator(
            fetch=self._fetch,
            extract=self._extract,
            verify=self.config.verify_checksums,
            progress=self._progress,
        )
        self.last_result = orchestrator.run(request)
        return self.last_result

    def install(self) -> None:
        logger.info("install step: runtime already unpacked by pre_install", extra={"event": "install"})

    def post_install(self) -> Path:
        bin_dir = self.config.install_dir / runtime_dir_name(self.descriptor()) / "bin"
        logger.info("node available at %s", bin_dir, extra={"event": "post_install"})
        return bin_dir

    def uninstall(self) -> list[Path]:
        try:
            removed = remove_install(self.config.install_dir)
        except OSError as exc:
            raise DestinationUnavailable(self.config.install_dir, str(exc)) from exc
        logger.info("uninstall removed %d path(s)", len(removed), extra={"event": "uninstall"})
        return removed


@dataclass
class LifecycleReport:
    completed: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: ProvisionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_lifecycle(plugin: NodePlugin) -> LifecycleReport:
    """Run the install steps in order, stopping at the first typed failure."""
    report = LifecycleReport()
    for step in LIFECYCLE_STEPS:
        try:
            getattr(plugin, step)()
        except ProvisionError as exc:
            logger.error("%s failed: %s", step, exc, extra={"event": "lifecycle_failed"})
            report.failed_step = step
            report.error = exc
            break
        report.completed.append(step)
    return report
