"""Subresource-integrity (SRI) digest selection and computation."""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass

from npmdeps.errors import AmbiguousDigestError, IntegrityError

# Fixed precedence when a lockfile offers several digests.
PREFERRED_PREFIXES = ("sha512-", "sha1-")
DEFAULT_ALGORITHM = "sha512"


@dataclass(frozen=True, slots=True)
class Digest:
    algorithm: str
    raw: bytes

    @property
    def hex(self) -> str:
        return self.raw.hex()

    @property
    def sri(self) -> str:
        return f"{self.algorithm}-{base64.b64encode(self.raw).decode('ascii')}"


def select_digest(integrity: str) -> str:
    """Pick the one digest that content is verified against."""
    tokens = integrity.split()
    if len(tokens) == 1:
        return tokens[0]
    for prefix in PREFERRED_PREFIXES:
        for token in tokens:
            if token.startswith(prefix):
                return token
    raise AmbiguousDigestError(
        "Not sure which hash to select from the integrity field.",
        hint="Expected a single digest, or one prefixed with `sha512-` or `sha1-`.",
        context={"operation": "select_digest", "integrity": integrity},
    )


def parse_integrity(token: str) -> Digest:
    """Decode one SRI token.

    Malformed tokens raise plain ``IntegrityError``; ``ContentCache.put``
    reports a malformed declared digest as ``IntegrityMismatchError``.
    """
    algorithm, sep, encoded = token.partition("-")
    # SRI allows `?opt` suffixes; they carry nothing npm verifies.
    encoded = encoded.split("?", 1)[0]
    if not sep or not algorithm or not encoded:
        raise IntegrityError(
            "Malformed integrity digest.",
            hint="Expected `<algorithm>-<base64 digest>`.",
            context={"operation": "parse_integrity", "integrity": token},
        )
    hasher = _hasher(algorithm, token)
    try:
        raw = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise IntegrityError(
            "Integrity digest is not valid base64.",
            context={"operation": "parse_integrity", "integrity": token},
        ) from exc
    if len(raw) != hasher.digest_size:
        raise IntegrityError(
            "Integrity digest has the wrong length for its algorithm.",
            context={
                "operation": "parse_integrity",
                "integrity": token,
                "expected_bytes": str(hasher.digest_size),
                "actual_bytes": str(len(raw)),
            },
        )
    return Digest(algorithm=algorithm, raw=raw)


def compute_digest(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> Digest:
    hasher = _hasher(algorithm, algorithm)
    hasher.update(data)
    return Digest(algorithm=algorithm, raw=hasher.digest())


def compute_integrity(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    return compute_digest(data, algorithm).sri


def _hasher(algorithm: str, token: str) -> hashlib._Hash:
    try:
        return hashlib.new(algorithm)
    except ValueError as exc:
        raise IntegrityError(
            f"Unsupported integrity algorithm `{algorithm}`.",
            context={"operation": "parse_integrity", "integrity": token},
        ) from exc


__all__ = [
    "DEFAULT_ALGORITHM",
    "Digest",
    "compute_digest",
    "compute_integrity",
    "parse_integrity",
    "select_digest",
]
