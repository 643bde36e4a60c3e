"""Adapter for ``nix hash path`` over a populated output directory.

The prefetched cache is consumed as a fixed-output derivation, so callers
that did not choose an output directory need its NAR hash to pin it.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from npmdeps.errors import HashToolError

NIX_HASH_ARGS = ("--experimental-features", "nix-command", "hash", "path")


def hash_path(path: str | Path) -> str:
    if shutil.which("nix") is None:
        raise HashToolError(
            "Hashing the output directory requires `nix` in PATH.",
            hint="Install Nix or pass an explicit output directory.",
            context={"operation": "hash_path", "path": str(path)},
        )
    result = subprocess.run(
        ["nix", *NIX_HASH_ARGS, str(path)],
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise HashToolError(
            "`nix hash path` failed.",
            hint="Check the nix output for details.",
            context={
                "operation": "hash_path",
                "path": str(path),
                "returncode": str(result.returncode),
                "stderr": result.stderr[-2000:] if result.stderr else "",
            },
        )
    return result.stdout.strip()
