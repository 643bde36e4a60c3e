"""On-disk path derivation for the npm ``cacache`` layout."""

from __future__ import annotations

import hashlib
from pathlib import Path

CONTENT_DIR = "content-v2"
INDEX_DIR = "index-v5"

# Index records carry no wall-clock time so output trees hash identically.
INDEX_TIME = 0


def content_path(root: Path, algorithm: str, hex_digest: str) -> Path:
    return _sharded(root / CONTENT_DIR / algorithm, hex_digest)


def index_path(root: Path, key: str) -> Path:
    """Return the index bucket for ``key``; distinct keys may share a bucket."""
    return _sharded(root / INDEX_DIR, index_bucket_hash(key))


def index_bucket_hash(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def _sharded(base: Path, hex_digest: str) -> Path:
    return base / hex_digest[0:2] / hex_digest[2:4] / hex_digest[4:]
