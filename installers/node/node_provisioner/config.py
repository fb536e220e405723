"""Environment-driven settings, read once when the plugin starts."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .catalog import CATALOG_URL
from .target import DIST_URL

DEFAULT_VERSION = "10.15.0"
DEFAULT_INSTALL_DIR = "node_runtime"

_FALSE_WORDS = ("0", "false", "no", "off")


@dataclass(frozen=True)
class ProvisionerConfig:
    version: str = DEFAULT_VERSION
    install_dir: Path = Path(DEFAULT_INSTALL_DIR)
    dist_url: str = DIST_URL
    catalog_url: str = CATALOG_URL
    verify_checksums: bool = True
    fetch_auxiliary: bool = True
    ca_bundle: str | None = None


def _text(environ: Mapping[str, str], key: str, default: str) -> str:
    value = environ.get(key, "").strip()
    return value or default


def _flag(environ: Mapping[str, str], key: str, default: bool) -> bool:
    value = environ.get(key, "").strip().lower()
    if not value:
        return default
    return value not in _FALSE_WORDS


def _url(environ: Mapping[str, str], key: str, default: str) -> str:
    return _text(environ, key, default).rstrip("/")


def load_config(environ: Mapping[str, str] | None = None) -> ProvisionerConfig:
    env = os.environ if environ is None else environ
    return ProvisionerConfig(
        version=_text(env, "NODE_VERSION", DEFAULT_VERSION),
        install_dir=Path(_text(env, "NODE_INSTALL_DIR", DEFAULT_INSTALL_DIR)).expanduser(),
        dist_url=_url(env, "NODE_DIST_URL", DIST_URL),
        catalog_url=_url(env, "NODE_CATALOG_URL", CATALOG_URL),
        verify_checksums=_flag(env, "NODE_VERIFY_CHECKSUMS", True),
        fetch_auxiliary=_flag(env, "NODE_FETCH_AUX", True),
        ca_bundle=env.get("NODE_PROVISIONER_CA_BUNDLE", "").strip() or None,
    )
