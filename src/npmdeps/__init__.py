"""Public package entrypoint for the npm lockfile prefetcher."""

from .cache import CacheEntry, ContentCache
from .errors import (
    AmbiguousDigestError,
    CacheIoError,
    ErrorCode,
    FetchError,
    HashToolError,
    IntegrityError,
    IntegrityMismatchError,
    LockfileError,
    NpmDepsError,
    PolicyError,
    UnsupportedSchemaError,
    UrlRewriteError,
    ValidationError,
)
from .fetch import FetchTarget, hosted_tarball_url
from .integrity import select_digest
from .lockfile import Package, PackageLock, normalize, parse_lockfile, read_lockfile
from .policy import Policy
from .prefetch import Prefetcher, prefetch_lockfile
from .report import FetchedPackage, FetchReport

__all__ = [
    "AmbiguousDigestError",
    "CacheEntry",
    "CacheIoError",
    "ContentCache",
    "ErrorCode",
    "FetchError",
    "FetchReport",
    "FetchTarget",
    "FetchedPackage",
    "HashToolError",
    "IntegrityError",
    "IntegrityMismatchError",
    "LockfileError",
    "NpmDepsError",
    "Package",
    "PackageLock",
    "Policy",
    "PolicyError",
    "Prefetcher",
    "UnsupportedSchemaError",
    "UrlRewriteError",
    "ValidationError",
    "hosted_tarball_url",
    "normalize",
    "parse_lockfile",
    "prefetch_lockfile",
    "read_lockfile",
    "select_digest",
]
