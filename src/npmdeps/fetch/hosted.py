"""Rewrite git remotes on known code hosts into tarball download URLs."""

from __future__ import annotations

from dataclasses import dataclass

from npmdeps.lockfile.model import Url

GIT_SCHEMES = frozenset({"git", "http", "https", "ssh", "git+ssh", "git+https"})


@dataclass(frozen=True, slots=True)
class HostedTarball:
    url: Url
    ref: str


def hosted_tarball_url(url: Url) -> Url | None:
    """Return the archive URL for a hosted git dependency.

    ``None`` means the URL should be fetched as-is: either the host is not a
    recognized provider, or the URL already points at a downloadable archive.
    """
    tarball = hosted_tarball(url)
    return None if tarball is None else tarball.url


def hosted_tarball(url: Url) -> HostedTarball | None:
    if url.scheme not in GIT_SCHEMES:
        return None

    host = url.host
    segments = url.path_segments()
    if host == "github.com":
        return _github(url, segments)
    if host == "bitbucket.org":
        return _bitbucket(url, segments)
    if host == "gitlab.com":
        return _gitlab(url, segments)
    if host == "git.sr.ht":
        return _sourcehut(url, segments)
    return None


def _github(url: Url, segments: list[str]) -> HostedTarball | None:
    user, project = _user_project(segments)
    if user is None or project is None:
        return None
    kind = _segment(segments, 2)
    if kind is None:
        commit = url.fragment
    elif kind == "tree":
        commit = _segment(segments, 3)
    else:
        return None
    if not commit:
        return None
    archive = f"https://codeload.github.com/{user}/{project}/tar.gz/{commit}"
    return HostedTarball(url=Url.parse(archive), ref=commit)


def _bitbucket(url: Url, segments: list[str]) -> HostedTarball | None:
    user, project = _user_project(segments)
    if user is None or project is None or _segment(segments, 2) == "get":
        return None
    commit = url.fragment
    if commit is None:
        return None
    archive = f"https://bitbucket.org/{user}/{project}/get/{commit}.tar.gz"
    return HostedTarball(url=Url.parse(archive), ref=commit)


def _gitlab(url: Url, segments: list[str]) -> HostedTarball | None:
    path = url.path[1:]
    if "/~/" in path or "/archive.tar.gz" in path:
        return None
    user, project = _user_project(segments)
    commit = url.fragment
    if user is None or project is None or commit is None:
        return None
    archive = f"https://gitlab.com/{user}/{project}/repository/archive.tar.gz?ref={commit}"
    return HostedTarball(url=Url.parse(archive), ref=commit)


def _sourcehut(url: Url, segments: list[str]) -> HostedTarball | None:
    user, project = _user_project(segments)
    if user is None or project is None or _segment(segments, 2) == "archive":
        return None
    commit = url.fragment
    if commit is None:
        return None
    archive = f"https://git.sr.ht/{user}/{project}/archive/{commit}.tar.gz"
    return HostedTarball(url=Url.parse(archive), ref=commit)


def _user_project(segments: list[str]) -> tuple[str | None, str | None]:
    user = _segment(segments, 0)
    project = _segment(segments, 1)
    if project is not None:
        project = project.removesuffix(".git")
    return user, project


def _segment(segments: list[str], index: int) -> str | None:
    return segments[index] if index < len(segments) else None
