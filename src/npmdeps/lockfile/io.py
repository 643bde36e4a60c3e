"""Lockfile reader and parser."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from npmdeps.errors import LockfileError
from npmdeps.lockfile.model import (
    FLAT_VERSIONS,
    LEGACY_VERSION,
    LegacyPackage,
    Package,
    PackageLock,
    UrlOrString,
    parse_url_or_string,
)


def parse_lockfile(raw: str | bytes) -> PackageLock:
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise LockfileError("Invalid lockfile JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise LockfileError("Invalid lockfile payload type.")

    version = payload.get("lockfileVersion")
    if not isinstance(version, int) or isinstance(version, bool):
        raise LockfileError(
            "Invalid lockfile `lockfileVersion` value.",
            hint="Regenerate the lockfile with a current npm release.",
        )

    # Only the section this schema generation reads is parsed; npm keeps the
    # legacy `dependencies` tree in v2 files for older clients.
    dependencies_raw = payload.get("dependencies") if version == LEGACY_VERSION else None
    packages_raw = payload.get("packages") if version in FLAT_VERSIONS else None
    return PackageLock(
        version=version,
        dependencies=None if dependencies_raw is None else _parse_legacy_tree(dependencies_raw),
        packages=None if packages_raw is None else _parse_packages(packages_raw),
    )


def read_lockfile(path: str | Path) -> tuple[bytes, PackageLock]:
    """Return the raw lockfile bytes alongside the parsed document."""
    lock_path = Path(path)
    try:
        raw = lock_path.read_bytes()
    except FileNotFoundError as exc:
        raise LockfileError(
            "Lockfile does not exist.",
            hint="Run `npm install --package-lock-only` to produce one.",
            context={"path": str(lock_path)},
        ) from exc
    except OSError as exc:
        raise LockfileError(
            "Lockfile could not be read.",
            hint=str(exc),
            context={"path": str(lock_path)},
        ) from exc
    return raw, parse_lockfile(raw)


def _parse_packages(value: Any) -> dict[str, Package]:
    if not isinstance(value, dict):
        raise LockfileError("Invalid lockfile `packages` value.")
    parsed: dict[str, Package] = {}
    for key, item in value.items():
        if not isinstance(item, dict):
            raise LockfileError("Invalid package entry in lockfile.", context={"package": key})
        parsed[key] = Package(
            resolved=_optional_specifier(item, "resolved", key),
            integrity=_optional_str(item, "integrity", key),
        )
    return parsed


def _parse_legacy_tree(value: Any) -> dict[str, LegacyPackage]:
    # Children dicts are filled in after their parent node exists so that
    # arbitrarily deep trees are parsed without recursion.
    root: dict[str, LegacyPackage] = {}
    pending: list[tuple[dict[str, LegacyPackage], Any, str]] = [(root, value, "dependencies")]
    while pending:
        target, raw_children, where = pending.pop()
        if not isinstance(raw_children, dict):
            raise LockfileError("Invalid lockfile `dependencies` value.", context={"path": where})
        for name, item in raw_children.items():
            location = f"{where}.{name}"
            if not isinstance(item, dict):
                raise LockfileError("Invalid dependency entry in lockfile.", context={"path": location})
            version = item.get("version")
            if not isinstance(version, str):
                raise LockfileError(
                    "Dependency entry is missing a `version` string.",
                    context={"path": location},
                )
            nested = item.get("dependencies")
            children: dict[str, LegacyPackage] | None = None if nested is None else {}
            target[name] = LegacyPackage(
                version=parse_url_or_string(version),
                resolved=_optional_specifier(item, "resolved", location),
                integrity=_optional_str(item, "integrity", location),
                dependencies=children,
            )
            if children is not None:
                pending.append((children, nested, f"{location}.dependencies"))
    return root


def _optional_specifier(payload: dict[str, Any], key: str, where: str) -> UrlOrString | None:
    value = _optional_str(payload, key, where)
    return None if value is None else parse_url_or_string(value)


def _optional_str(payload: dict[str, Any], key: str, where: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise LockfileError(f"Invalid lockfile `{key}` value.", context={"path": where})
    return value
