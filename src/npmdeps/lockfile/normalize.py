"""Normalize every lockfile generation into one flat package map."""

from __future__ import annotations

from npmdeps.errors import UnsupportedSchemaError, UrlRewriteError
from npmdeps.lockfile.model import (
    FLAT_VERSIONS,
    LEGACY_VERSION,
    LegacyPackage,
    Opaque,
    Package,
    PackageLock,
    Url,
    UrlOrString,
)

# Shorthand scheme -> the host its canonical git remote lives on.
SHORTHAND_HOSTS = (
    ("github", "github.com"),
    ("bitbucket", "bitbucket.org"),
    ("gitlab", "gitlab.com"),
)

# Rewritten shorthands borrow scheme and user from this remote.
PLACEHOLDER_REMOTE = "git+ssh://git@a.b"

ALIAS_SCHEME = "npm"


def normalize(lock: PackageLock) -> dict[str, Package]:
    """Return the canonical ``key -> Package`` map for any supported lockfile."""
    if lock.version == LEGACY_VERSION:
        return flatten_legacy(lock.dependencies or {})
    if lock.version in FLAT_VERSIONS:
        return dict(lock.packages or {})
    raise UnsupportedSchemaError(
        f"Unsupported lockfile version {lock.version}.",
        hint="Only lockfileVersion 1, 2 and 3 are understood; please file an issue.",
        context={"operation": "normalize", "lockfile_version": str(lock.version)},
    )


def flatten_legacy(dependencies: dict[str, LegacyPackage]) -> dict[str, Package]:
    """Flatten a v1 nested dependency tree into ``"<name>-<version>"`` keys.

    Nodes are visited depth-first in lockfile order, each node before its
    children. A later node whose key collides with an earlier one replaces it.

    URL versions become their own ``resolved`` and appear in the key, so a
    git shorthand yields ``"<name>-git+ssh://git@github.com/<user>/<repo>.git#<ref>"``.
    ``npm:`` aliases are keyed and resolved by the node's ``resolved`` URL
    instead, giving ``"<name>-https://registry.../<real>-<version>.tgz"``.
    """
    flat: dict[str, Package] = {}
    stack = list(reversed(dependencies.items()))
    while stack:
        name, node = stack.pop()
        version = _canonical_version(node)
        flat[f"{name}-{version}"] = Package(
            resolved=version if isinstance(version, Url) else node.resolved,
            integrity=node.integrity,
        )
        if node.dependencies:
            stack.extend(reversed(node.dependencies.items()))
    return flat


def rewrite_shorthand(specifier: Url) -> Url:
    """Turn ``github:user/repo#ref`` style specifiers into real git remotes.

    Specifiers with any other scheme are returned unchanged.
    """
    host = next((h for scheme, h in SHORTHAND_HOSTS if specifier.scheme == scheme), None)
    if host is None:
        return specifier

    path = specifier.path
    if not path.strip("/"):
        raise UrlRewriteError(
            "Git shorthand specifier has no repository path.",
            hint="Expected `<provider>:<user>/<project>[#<ref>]`.",
            context={"operation": "normalize", "specifier": str(specifier)},
        )
    if not path.endswith(".git"):
        path = f"{path}.git"
    if not path.startswith("/"):
        path = f"/{path}"

    base = Url.parse(PLACEHOLDER_REMOTE)
    userinfo, _, _ = base.netloc.rpartition("@")
    return Url.build(
        scheme=base.scheme,
        netloc=f"{userinfo}@{host}" if userinfo else host,
        path=path,
        fragment=specifier.fragment,
    )


def _canonical_version(node: LegacyPackage) -> UrlOrString:
    version = node.version
    if not isinstance(version, Url):
        return version
    if version.scheme == ALIAS_SCHEME:
        # `npm:<name>@<version>` aliases are fetched through their resolved
        # tarball; without one they stay opaque and are never fetched.
        if isinstance(node.resolved, Url):
            return node.resolved
        return Opaque(version.text)
    return rewrite_shorthand(version)
