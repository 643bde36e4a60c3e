"""Run report model and export helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import cbor2


@dataclass(frozen=True, slots=True)
class FetchedPackage:
    package: str
    url: str
    integrity: str
    size: int


@dataclass(frozen=True, slots=True)
class FetchReport:
    packages: tuple[FetchedPackage, ...] = ()
    skipped: tuple[str, ...] = ()
    lockfile_version: int | None = None
    schema_version: int = 1

    def fetched(self, package: str) -> FetchedPackage | None:
        return next((item for item in self.packages if item.package == package), None)

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def write(self, path: str | Path) -> Path:
        """Write the report, choosing CBOR for ``.cbor`` paths and JSON otherwise."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if output_path.suffix == ".cbor":
            self.to_cbor(output_path)
        else:
            self.to_json(output_path)
        return output_path

    def _payload(self) -> dict[str, object]:
        # Packages complete in arbitrary order; sort so reports are stable.
        packages = sorted(self.packages, key=lambda item: item.package)
        return {
            "schema_version": self.schema_version,
            "lockfile_version": self.lockfile_version,
            "packages": [
                {
                    "package": item.package,
                    "url": item.url,
                    "integrity": item.integrity,
                    "size": item.size,
                }
                for item in packages
            ],
            "skipped": sorted(self.skipped),
        }
