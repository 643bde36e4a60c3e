"""Lockfile typed model."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

LEGACY_VERSION = 1
FLAT_VERSIONS = (2, 3)

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:.")


@dataclass(frozen=True, slots=True)
class Url:
    """A specifier that parsed as a URL, held in canonical text form."""

    text: str

    @classmethod
    def parse(cls, text: str) -> Url:
        return cls(urlunsplit(urlsplit(text)))

    @classmethod
    def build(
        cls,
        *,
        scheme: str,
        netloc: str,
        path: str,
        query: str = "",
        fragment: str | None = None,
    ) -> Url:
        return cls(urlunsplit((scheme, netloc, path, query, fragment or "")))

    @property
    def scheme(self) -> str:
        return urlsplit(self.text).scheme

    @property
    def netloc(self) -> str:
        return urlsplit(self.text).netloc

    @property
    def host(self) -> str | None:
        return urlsplit(self.text).hostname

    @property
    def path(self) -> str:
        return urlsplit(self.text).path

    @property
    def fragment(self) -> str | None:
        return urlsplit(self.text).fragment or None

    def path_segments(self) -> list[str]:
        """Split the path on ``/`` after its leading slash."""
        path = self.path
        if path.startswith("/"):
            path = path[1:]
        return path.split("/")

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Opaque:
    """A specifier that is not a URL; rendered exactly as written."""

    text: str

    def __str__(self) -> str:
        return self.text


UrlOrString = Url | Opaque


def parse_url_or_string(value: str) -> UrlOrString:
    """Tag ``value`` as a URL when it parses as one; anything else stays opaque."""
    if _SCHEME_PATTERN.match(value):
        try:
            return Url.parse(value)
        except ValueError:
            return Opaque(value)
    return Opaque(value)


@dataclass(frozen=True, slots=True)
class Package:
    """A flattened lockfile entry: where to download it and what it must hash to."""

    resolved: UrlOrString | None = None
    integrity: str | None = None


@dataclass(frozen=True, slots=True)
class LegacyPackage:
    """A ``lockfileVersion: 1`` dependency node; children nest under ``dependencies``."""

    version: UrlOrString
    resolved: UrlOrString | None = None
    integrity: str | None = None
    dependencies: dict[str, LegacyPackage] | None = None


@dataclass(frozen=True, slots=True)
class PackageLock:
    version: int
    dependencies: dict[str, LegacyPackage] | None = None
    packages: dict[str, Package] | None = None


__all__ = [
    "FLAT_VERSIONS",
    "LEGACY_VERSION",
    "LegacyPackage",
    "Opaque",
    "Package",
    "PackageLock",
    "Url",
    "UrlOrString",
    "parse_url_or_string",
]
