"""HTTP/file download used by the prefetcher."""

from __future__ import annotations

from urllib.error import URLError
from urllib.request import urlopen

from npmdeps.errors import FetchError
from npmdeps.lockfile.model import Url


def download(url: Url | str) -> bytes:
    """Fetch ``url`` and return the full response body.

    No retries are attempted; any transport failure is fatal.
    """
    target = str(url)
    try:
        with urlopen(target) as response:  # noqa: S310 - callers verify integrity
            return response.read()
    except (URLError, OSError, ValueError) as exc:
        raise FetchError(
            "Failed to download package tarball.",
            hint="Check network access and that the lockfile URL is still served.",
            context={"operation": "download", "url": target, "error": str(exc)},
        ) from exc
