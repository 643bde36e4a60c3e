"""Tarball download and hosted-git URL rewriting."""

from __future__ import annotations

from dataclasses import dataclass

from .hosted import GIT_SCHEMES, HostedTarball, hosted_tarball, hosted_tarball_url
from .http import download

CACHE_NAMESPACE = "make-fetch-happen:request-cache"


@dataclass(frozen=True, slots=True)
class FetchTarget:
    """The URL actually downloaded and the cache key it is indexed under."""

    url: str
    cache_key: str

    @classmethod
    def for_url(cls, url: str) -> FetchTarget:
        return cls(url=url, cache_key=f"{CACHE_NAMESPACE}:{url}")


__all__ = [
    "CACHE_NAMESPACE",
    "FetchTarget",
    "GIT_SCHEMES",
    "HostedTarball",
    "download",
    "hosted_tarball",
    "hosted_tarball_url",
]
