"""Node.js runtime provisioner: release catalog resolution and install pipeline."""

__version__ = "0.1.0"

from .catalog import CatalogLoader, ReleaseEntry, load_catalog, parse_catalog
from .config import ProvisionerConfig, load_config
from .errors import (
    CatalogCorrupt,
    CatalogUnavailable,
    ChecksumMismatch,
    DestinationUnavailable,
    ExtractionFailed,
    FetchFailed,
    MalformedField,
    NoCandidates,
    ProvisionError,
    VersionNotFound,
)
from .orchestrator import InstallOrchestrator, InstallRequest, InstallResult, InstallState, already_installed
from .plugin import LifecycleReport, NodePlugin, run_lifecycle
from .resolver import filter_by_channel, highest_version, resolve_version
from .target import TargetDescriptor, artifact_url, auxiliary_urls, build_descriptor, host_descriptor

__all__ = [
    "CatalogCorrupt",
    "CatalogLoader",
    "CatalogUnavailable",
    "ChecksumMismatch",
    "DestinationUnavailable",
    "ExtractionFailed",
    "FetchFailed",
    "InstallOrchestrator",
    "InstallRequest",
    "InstallResult",
    "InstallState",
    "LifecycleReport",
    "MalformedField",
    "NoCandidates",
    "NodePlugin",
    "ProvisionError",
    "ProvisionerConfig",
    "ReleaseEntry",
    "TargetDescriptor",
    "VersionNotFound",
    "__version__",
    "already_installed",
    "artifact_url",
    "auxiliary_urls",
    "build_descriptor",
    "filter_by_channel",
    "highest_version",
    "host_descriptor",
    "load_catalog",
    "load_config",
    "parse_catalog",
    "resolve_version",
    "run_lifecycle",
]
