"""Command-line entrypoint.

Usage:
    npmdeps <path/to/package-lock.json> [output-dir]
"""

from __future__ import annotations

import argparse
import sys
import tempfile
from pathlib import Path

from npmdeps.errors import NpmDepsError
from npmdeps.nixhash import hash_path
from npmdeps.observability import StructuredLogger
from npmdeps.policy import Policy
from npmdeps.prefetch import prefetch_lockfile

DESCRIPTION = "Prefetches npm dependencies for usage by fetchNpmDeps."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="npmdeps", description=DESCRIPTION)
    parser.add_argument("lockfile", nargs="?", help="Path to package-lock.json")
    parser.add_argument(
        "output_dir",
        nargs="?",
        help="Directory to populate; a temporary one is hashed and printed when omitted",
    )
    parser.add_argument("--jobs", type=int, default=None, help="Concurrent downloads")
    parser.add_argument(
        "--require-integrity",
        action="store_true",
        help="Fail on packages that declare no integrity digest",
    )
    parser.add_argument(
        "--mutable-refs",
        choices=("warn", "error", "allow"),
        default="warn",
        help="How to treat hosted git dependencies pinned to a branch or tag",
    )
    parser.add_argument("--report", type=Path, default=None, help="Write a JSON or .cbor run report")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.lockfile is None:
        parser.print_usage()
        print()
        print(DESCRIPTION)
        return 1

    logger = StructuredLogger(stream=sys.stderr)
    try:
        policy = Policy(
            max_workers=args.jobs,
            require_integrity=args.require_integrity,
            mutable_ref_policy=args.mutable_refs,
        )
        if args.output_dir is not None:
            report = prefetch_lockfile(args.lockfile, args.output_dir, policy=policy, logger=logger)
        else:
            with tempfile.TemporaryDirectory(prefix="npmdeps-") as out_dir:
                report = prefetch_lockfile(args.lockfile, out_dir, policy=policy, logger=logger)
                print(hash_path(out_dir))
        if args.report is not None:
            report.write(args.report)
    except NpmDepsError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
