"""Concurrent prefetch of lockfile tarballs into an npm cache directory.

Planning (filtering, hosted-git rewriting, digest selection and policy
checks) runs up front on the calling thread, so lockfile problems surface
before any network access. Downloads then run on a thread pool; the first
failure cancels every download that has not started yet and is re-raised
with the offending package attached to its context.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from npmdeps.cache import ContentCache
from npmdeps.errors import CacheIoError, NpmDepsError
from npmdeps.fetch import FetchTarget, download, hosted_tarball
from npmdeps.integrity import select_digest
from npmdeps.lockfile import Package, Url, normalize, read_lockfile
from npmdeps.observability import StructuredLogger
from npmdeps.policy import Policy, enforce_mutable_ref, ensure_integrity_declared
from npmdeps.report import FetchedPackage, FetchReport

CACHE_DIR_NAME = "_cacache"
LOCKFILE_NAME = "package-lock.json"

Fetcher = Callable[[str], bytes]


@dataclass(frozen=True, slots=True)
class PlannedFetch:
    package: str
    target: FetchTarget
    integrity: str | None


class Prefetcher:
    def __init__(
        self,
        cache: ContentCache,
        *,
        policy: Policy | None = None,
        fetcher: Fetcher = download,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.cache = cache
        self.policy = policy or Policy()
        self.fetcher = fetcher
        self.logger = logger or StructuredLogger()

    def plan(self, packages: Mapping[str, Package]) -> tuple[list[PlannedFetch], list[str]]:
        """Split ``packages`` into downloads and keys that are never fetched."""
        planned: list[PlannedFetch] = []
        skipped: list[str] = []
        for key, package in packages.items():
            if not key:
                continue
            if not isinstance(package.resolved, Url):
                skipped.append(key)
                continue
            try:
                planned.append(self._plan_one(key, package.resolved, package.integrity))
            except NpmDepsError as exc:
                exc.with_context(package=key)
                raise
        return planned, skipped

    def run(
        self,
        packages: Mapping[str, Package],
        *,
        lockfile_version: int | None = None,
    ) -> FetchReport:
        planned, skipped = self.plan(packages)
        fetched: list[FetchedPackage] = []
        if planned:
            with ThreadPoolExecutor(max_workers=self.policy.max_workers) as executor:
                futures: dict[Future[FetchedPackage], PlannedFetch] = {
                    executor.submit(self._fetch_one, item): item for item in planned
                }
                done, pending = wait(futures, return_when=FIRST_EXCEPTION)
                for future in pending:
                    future.cancel()
                for future, item in futures.items():
                    error = future.exception() if future in done else None
                    if error is None:
                        continue
                    self.logger.log(
                        operation="prefetch",
                        package=item.package,
                        message=f"failed to prefetch {item.package}",
                        level="error",
                    )
                    raise error
                fetched = [future.result() for future in futures]

        return FetchReport(
            packages=tuple(fetched),
            skipped=tuple(skipped),
            lockfile_version=lockfile_version,
        )

    def _plan_one(self, key: str, resolved: Url, integrity: str | None) -> PlannedFetch:
        url = resolved
        hosted = hosted_tarball(resolved)
        if hosted is not None:
            enforce_mutable_ref(policy=self.policy, package=key, ref=hosted.ref)
            url = hosted.url
        ensure_integrity_declared(policy=self.policy, package=key, integrity=integrity)
        return PlannedFetch(
            package=key,
            target=FetchTarget.for_url(str(url)),
            integrity=None if integrity is None else select_digest(integrity),
        )

    def _fetch_one(self, item: PlannedFetch) -> FetchedPackage:
        self.logger.log(
            operation="fetch",
            package=item.package,
            message=item.package,
            extra={"url": item.target.url},
        )
        try:
            data = self.fetcher(item.target.url)
            integrity = self.cache.put(item.target.cache_key, item.target.url, data, item.integrity)
        except NpmDepsError as exc:
            exc.with_context(package=item.package)
            raise
        return FetchedPackage(
            package=item.package,
            url=item.target.url,
            integrity=integrity,
            size=len(data),
        )


def prefetch_lockfile(
    lockfile: str | Path,
    out_dir: str | Path,
    *,
    policy: Policy | None = None,
    fetcher: Fetcher = download,
    logger: StructuredLogger | None = None,
) -> FetchReport:
    """Populate ``out_dir/_cacache`` for ``lockfile`` and copy the lockfile beside it.

    The lockfile bytes are copied verbatim, never re-serialized.
    """
    logger = logger or StructuredLogger()
    raw, lock = read_lockfile(lockfile)
    logger.log(
        operation="read_lockfile",
        message=f"lockfile version: {lock.version}",
        extra={"path": str(lockfile)},
    )
    packages = normalize(lock)

    out_path = Path(out_dir)
    prefetcher = Prefetcher(
        ContentCache(out_path / CACHE_DIR_NAME),
        policy=policy,
        fetcher=fetcher,
        logger=logger,
    )
    report = prefetcher.run(packages, lockfile_version=lock.version)

    lock_copy = out_path / LOCKFILE_NAME
    try:
        out_path.mkdir(parents=True, exist_ok=True)
        lock_copy.write_bytes(raw)
    except OSError as exc:
        raise CacheIoError(
            "Could not copy the lockfile into the output directory.",
            hint=str(exc),
            context={"operation": "prefetch", "path": str(lock_copy)},
        ) from exc
    return report
