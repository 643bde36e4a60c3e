"""Lockfile parsing and normalization APIs."""

from .io import parse_lockfile, read_lockfile
from .model import LegacyPackage, Opaque, Package, PackageLock, Url, UrlOrString, parse_url_or_string
from .normalize import flatten_legacy, normalize, rewrite_shorthand

__all__ = [
    "LegacyPackage",
    "Opaque",
    "Package",
    "PackageLock",
    "Url",
    "UrlOrString",
    "flatten_legacy",
    "normalize",
    "parse_lockfile",
    "parse_url_or_string",
    "read_lockfile",
    "rewrite_shorthand",
]
