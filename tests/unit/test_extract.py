from __future__ import annotations

import io
import tarfile

import pytest

from node_provisioner.errors import ExtractionFailed
from node_provisioner.extract import extract_all


def _add(tar: tarfile.TarFile, name: str, data: bytes = b"", mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    tar.addfile(info, io.BytesIO(data))


def _tarball(path, members: dict[str, bytes]) -> None:
    with tarfile.open(path, "w:gz") as tar:
        for name, data in members.items():
            _add(tar, name, data, mode=0o755)


def test_extract_runtime_layout(tmp_path) -> None:
    archive = tmp_path / "node-v10.15.1-linux-x64.tar.gz"
    _tarball(archive, {
        "node-v10.15.1-linux-x64/bin/node": b"#!/bin/sh\necho v10.15.1\n",
        "node-v10.15.1-linux-x64/README.md": b"node",
    })
    dest = tmp_path / "out"
    dest.mkdir()

    top = extract_all(archive, dest)

    assert top == ["node-v10.15.1-linux-x64"]
    assert (dest / "node-v10.15.1-linux-x64" / "bin" / "node").read_bytes().startswith(b"#!/bin/sh")


def test_path_traversal_rejected(tmp_path) -> None:
    archive = tmp_path / "evil.tar.gz"
    _tarball(archive, {"../escaped.txt": b"nope"})
    dest = tmp_path / "out"
    dest.mkdir()

    with pytest.raises(ExtractionFailed):
        extract_all(archive, dest)
    assert not (tmp_path / "escaped.txt").exists()


def test_corrupt_archive(tmp_path) -> None:
    archive = tmp_path / "node-v1.0.0-linux-x64.tar.gz"
    archive.write_bytes(b"definitely not gzip")

    with pytest.raises(ExtractionFailed) as excinfo:
        extract_all(archive, tmp_path)
    assert excinfo.value.path == archive


def test_unsupported_and_missing(tmp_path) -> None:
    with pytest.raises(ExtractionFailed):
        extract_all(tmp_path / "node.zip", tmp_path)
    with pytest.raises(ExtractionFailed):
        extract_all(tmp_path / "missing.tar.gz", tmp_path)
