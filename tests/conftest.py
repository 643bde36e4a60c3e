"""Shared test fixtures."""

from __future__ import annotations

import base64
import hashlib
import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest


@dataclass(frozen=True, slots=True)
class Tarball:
    path: Path
    data: bytes
    url: str
    integrity: str


@pytest.fixture
def make_tarball(tmp_path: Path) -> Callable[[str, bytes], Tarball]:
    """Write a fake package tarball and return its ``file://`` URL and SRI digest."""

    def _make(name: str, data: bytes) -> Tarball:
        path = tmp_path / "registry" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        digest = base64.b64encode(hashlib.sha512(data).digest()).decode("ascii")
        return Tarball(path=path, data=data, url=path.as_uri(), integrity=f"sha512-{digest}")

    return _make


@pytest.fixture
def write_lockfile(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Write a lockfile with deliberately non-canonical formatting."""

    def _write(payload: dict[str, Any]) -> Path:
        path = tmp_path / "project" / "package-lock.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=4) + "\n\n", encoding="utf-8")
        return path

    return _write
