"""Content-addressed cache APIs."""

from .keys import content_path, index_path
from .store import CacheEntry, ContentCache

__all__ = ["CacheEntry", "ContentCache", "content_path", "index_path"]
