"""Content-addressed cache store in npm's ``cacache`` on-disk format.

Content blobs live under ``content-v2/<algo>/`` keyed by their own digest and
are never rewritten. Lookup keys map to index buckets under ``index-v5/``;
each ``put`` appends one hash-prefixed JSON line, and readers treat the last
valid line for a key as authoritative.
"""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from npmdeps.cache.keys import INDEX_TIME, content_path, index_path
from npmdeps.errors import CacheIoError, IntegrityError, IntegrityMismatchError
from npmdeps.integrity import Digest, compute_digest, parse_integrity


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    integrity: str | None
    time: int
    size: int
    url: str | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> CacheEntry | None:
        key = record.get("key")
        integrity = record.get("integrity")
        stamp = record.get("time")
        size = record.get("size", 0)
        metadata = record.get("metadata")
        if not isinstance(key, str) or not isinstance(stamp, int):
            return None
        if integrity is not None and not isinstance(integrity, str):
            return None
        url = metadata.get("url") if isinstance(metadata, dict) else None
        return cls(
            key=key,
            integrity=integrity,
            time=stamp,
            size=size if isinstance(size, int) else 0,
            url=url if isinstance(url, str) else None,
        )


class ContentCache:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._bucket_locks: dict[Path, threading.Lock] = {}
        self._bucket_locks_guard = threading.Lock()

    def put(self, key: str, url: str, data: bytes, integrity: str | None = None) -> str:
        """Store ``data`` under ``key`` and return its SRI digest.

        When ``integrity`` is given the content is hashed with its algorithm
        and must match it; nothing is written otherwise. A declared digest that
        cannot be decoded can never match and is reported the same way.
        """
        if integrity is not None:
            expected = self._declared_digest(key, url, integrity)
            digest = compute_digest(data, expected.algorithm)
            if digest.raw != expected.raw:
                raise IntegrityMismatchError(
                    "Fetched content does not match the declared integrity.",
                    hint="The lockfile digest or the upstream tarball has changed.",
                    context={
                        "operation": "cache_put",
                        "key": key,
                        "url": url,
                        "expected": integrity,
                        "actual": digest.sri,
                    },
                )
        else:
            digest = compute_digest(data)

        self._write_content(digest, data)
        self._append_index(
            key,
            {
                "key": key,
                "integrity": digest.sri,
                "time": INDEX_TIME,
                "size": len(data),
                "metadata": {"url": url, "options": {"compress": True}},
            },
        )
        return digest.sri

    def entries(self, key: str) -> list[CacheEntry]:
        """Return every valid index record for ``key`` in append order."""
        bucket = index_path(self.root, key)
        try:
            raw = bucket.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise self._io_error("cache_read", bucket, exc) from exc

        found: list[CacheEntry] = []
        for line in raw.split("\n"):
            record = _decode_index_line(line)
            if record is None or record.get("key") != key:
                continue
            entry = CacheEntry.from_record(record)
            if entry is not None:
                found.append(entry)
        return found

    def get(self, key: str) -> CacheEntry | None:
        found = self.entries(key)
        if not found or found[-1].integrity is None:
            return None
        return found[-1]

    def contains(self, integrity: str) -> bool:
        digest = parse_integrity(integrity)
        return content_path(self.root, digest.algorithm, digest.hex).exists()

    def read(self, integrity: str) -> bytes:
        """Return the blob for ``integrity``, re-verifying it on the way out."""
        digest = parse_integrity(integrity)
        path = content_path(self.root, digest.algorithm, digest.hex)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise self._io_error("cache_read", path, exc) from exc
        actual = compute_digest(data, digest.algorithm)
        if actual.raw != digest.raw:
            raise IntegrityMismatchError(
                "Cached content blob is corrupted.",
                hint="Delete the cache directory and prefetch again.",
                context={
                    "operation": "cache_read",
                    "path": str(path),
                    "expected": integrity,
                    "actual": actual.sri,
                },
            )
        return data

    @staticmethod
    def _declared_digest(key: str, url: str, integrity: str) -> Digest:
        try:
            return parse_integrity(integrity)
        except IntegrityError as exc:
            raise IntegrityMismatchError(
                "Declared integrity digest is malformed.",
                hint="Regenerate the lockfile entry for this package.",
                context={
                    **exc.context,
                    "operation": "cache_put",
                    "key": key,
                    "url": url,
                    "expected": integrity,
                },
            ) from exc

    def _write_content(self, digest: Digest, data: bytes) -> None:
        path = content_path(self.root, digest.algorithm, digest.hex)
        if path.exists():
            return
        temp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(prefix=".tmp-", dir=path.parent)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.chmod(temp_name, 0o644)
            os.replace(temp_name, path)
            temp_name = None
        except OSError as exc:
            raise self._io_error("cache_put", path, exc) from exc
        finally:
            if temp_name is not None and os.path.exists(temp_name):
                os.unlink(temp_name)

    def _append_index(self, key: str, record: dict[str, Any]) -> None:
        bucket = index_path(self.root, key)
        payload = json.dumps(record, separators=(",", ":"), ensure_ascii=False)
        line = f"\n{hashlib.sha1(payload.encode('utf-8')).hexdigest()}\t{payload}"
        with self._bucket_lock(bucket):
            try:
                bucket.parent.mkdir(parents=True, exist_ok=True)
                with bucket.open("a", encoding="utf-8") as handle:
                    handle.write(line)
            except OSError as exc:
                raise self._io_error("cache_put", bucket, exc) from exc

    def _bucket_lock(self, bucket: Path) -> threading.Lock:
        with self._bucket_locks_guard:
            lock = self._bucket_locks.get(bucket)
            if lock is None:
                lock = self._bucket_locks[bucket] = threading.Lock()
            return lock

    @staticmethod
    def _io_error(operation: str, path: Path, exc: OSError) -> CacheIoError:
        return CacheIoError(
            "Cache directory is not writable or readable.",
            hint=str(exc),
            context={"operation": operation, "path": str(path)},
        )


def _decode_index_line(line: str) -> dict[str, Any] | None:
    checksum, sep, payload = line.partition("\t")
    if not sep or hashlib.sha1(payload.encode("utf-8")).hexdigest() != checksum:
        return None
    try:
        record = json.loads(payload)
    except json.JSONDecodeError:
        return None
    return record if isinstance(record, dict) else None
