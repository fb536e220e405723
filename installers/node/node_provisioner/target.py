"""Platform target normalization and artifact URL construction."""

from __future__ import annotations

import platform
from dataclasses import dataclass

DIST_URL = "https://nodejs.org/dist"
CHECKSUM_MANIFEST = "SHASUMS256.txt"

_OS_ALIASES = {
    "darwin": "darwin",
    "macos": "darwin",
    "mac os x": "darwin",
    "linux": "linux",
    "windows": "win",
    "win32": "win",
    "sunos": "sunos",
    "aix": "aix",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "armv7l": "armv7l",
    "armv6l": "armv6l",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


@dataclass(frozen=True)
class TargetDescriptor:
    version: str
    os_name: str
    arch: str


def _normalize_os(system: str) -> str:
    return _OS_ALIASES.get(system.strip().lower(), system)


def _normalize_arch(machine: str) -> str:
    return _ARCH_ALIASES.get(machine.strip().lower(), machine)


def build_descriptor(version: str, host_os: str, host_arch: str) -> TargetDescriptor:
    version = version.strip()
    if version.startswith("v"):
        version = version[1:]
    return TargetDescriptor(version=version, os_name=_normalize_os(host_os), arch=_normalize_arch(host_arch))


def host_descriptor(version: str) -> TargetDescriptor:
    return build_descriptor(version, platform.system(), platform.machine())


def runtime_dir_name(descriptor: TargetDescriptor) -> str:
    return f"node-v{descriptor.version}-{descriptor.os_name}-{descriptor.arch}"


def artifact_name(descriptor: TargetDescriptor) -> str:
    return f"{runtime_dir_name(descriptor)}.tar.gz"


def _release_base(descriptor: TargetDescriptor, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/v{descriptor.version}"


def artifact_url(descriptor: TargetDescriptor, base_url: str = DIST_URL) -> str:
    return f"{_release_base(descriptor, base_url)}/{artifact_name(descriptor)}"


def auxiliary_urls(descriptor: TargetDescriptor, base_url: str = DIST_URL) -> list[str]:
    """Checksum manifest, its ASCII-armored signature and its detached signature."""
    base = _release_base(descriptor, base_url)
    return [
        f"{base}/{CHECKSUM_MANIFEST}",
        f"{base}/{CHECKSUM_MANIFEST}.asc",
        f"{base}/{CHECKSUM_MANIFEST}.sig",
    ]
