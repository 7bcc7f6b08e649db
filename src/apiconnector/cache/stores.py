"""Disk-based persistent stores for the fallback and object caches.

Both stores wrap a :class:`diskcache.Cache` living in a subdirectory of the
cache root:

* :class:`FallbackCache` (``fallback/``) maps cache keys to raw response
  bodies. Only strings are stored; anything else reads as a miss.
* :class:`TaggedCache` (``objects/``) maps cache keys to arbitrary
  picklable values, each with a set of tags. All entries carrying a tag can
  be removed at once with :meth:`TaggedCache.invalidate_tag`.

Store failures (SQLite errors, filesystem errors, lock timeouts) are raised
as :class:`~apiconnector.exceptions.CacheError`. Whether that is fatal is
decided by the caller.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import diskcache

from apiconnector.exceptions import CacheError

_STORE_ERRORS = (sqlite3.Error, OSError, diskcache.Timeout)

_MISSING = object()

_TAG_INDEX = "__tag__"


@contextmanager
def _store_errors(operation: str, directory: Path) -> Iterator[None]:
    """Re-raise backend failures during *operation* as :class:`CacheError`."""
    try:
        yield
    except _STORE_ERRORS as exc:
        raise CacheError(f"Cache {operation} failed in {directory}: {exc}") from exc


class _DiskStore:
    """Shared lifecycle for the :mod:`diskcache` backed stores."""

    subdirectory = ""

    def __init__(self, cache_dir: str | Path, ttl_seconds: Optional[int] = None) -> None:
        self._directory = Path(cache_dir) / self.subdirectory
        self._ttl = ttl_seconds
        with _store_errors("open", self._directory):
            self._cache = diskcache.Cache(str(self._directory))

    @property
    def directory(self) -> Path:
        return self._directory

    def remove(self, key: str) -> None:
        """Delete *key*. Deleting a missing key is a no-op."""
        with _store_errors("remove", self._directory):
            self._cache.delete(key)

    def clear(self) -> None:
        """Remove all entries."""
        with _store_errors("clear", self._directory):
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``size``, ``directory`` and ``ttl_seconds``."""
        return {
            "size": self._count(),
            "directory": str(self._directory),
            "ttl_seconds": self._ttl,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`. Safe to call twice."""
        self._cache.close()

    def _count(self) -> int:
        return len(self._cache)


class FallbackCache(_DiskStore):
    """Persistent store of raw response bodies keyed by cache key.

    Args:
        cache_dir: Cache root. Entries live in its ``fallback/`` subdirectory.
        ttl_seconds: Optional expiry. ``None`` keeps entries until removed.

    Example::

        cache = FallbackCache(tmp_path)
        cache.set(key, '{"temp": 21}')
        assert cache.get(key) == '{"temp": 21}'
    """

    subdirectory = "fallback"

    def get(self, key: str) -> Optional[str]:
        """Return the stored body, or ``None`` on a miss."""
        with _store_errors("read", self._directory):
            value = self._cache.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, text: str) -> None:
        """Store *text* under *key*, replacing any previous body."""
        with _store_errors("write", self._directory):
            self._cache.set(key, text, expire=self._ttl)


class TaggedCache(_DiskStore):
    """Persistent store of arbitrary values with tags.

    Each entry is kept as ``{"value": ..., "tags": [...]}``. For every tag a
    separate index entry lists the keys set with that tag; the index and
    the entry are written in one :meth:`diskcache.Cache.transact` block.

    Args:
        cache_dir: Cache root. Entries live in its ``objects/`` subdirectory.
        ttl_seconds: Optional expiry for entries. Tag indexes never expire.
    """

    subdirectory = "objects"

    def get(self, key: str) -> Any:
        """Return the stored value, or ``None`` on a miss."""
        with _store_errors("read", self._directory):
            entry = self._cache.get(key, default=_MISSING)
        if entry is _MISSING or not isinstance(entry, dict):
            return None
        return entry.get("value")

    def get_tags(self, key: str) -> list[str]:
        """Return the tags *key* was stored with (empty on a miss)."""
        with _store_errors("read", self._directory):
            entry = self._cache.get(key, default=_MISSING)
        if entry is _MISSING or not isinstance(entry, dict):
            return []
        return list(entry.get("tags", []))

    def set(self, key: str, value: Any, tags: Iterable[str] = ()) -> None:
        """Store *value* under *key* and register it with each of *tags*."""
        tag_list = sorted(set(tags))
        with _store_errors("write", self._directory):
            with self._cache.transact():
                self._cache.set(key, {"value": value, "tags": tag_list}, expire=self._ttl)
                for tag in tag_list:
                    index_key = (_TAG_INDEX, tag)
                    keys = self._cache.get(index_key, default=[])
                    if key not in keys:
                        self._cache.set(index_key, [*keys, key])

    def invalidate_tag(self, tag: str) -> list[str]:
        """Remove every entry currently carrying *tag*.

        Returns:
            The keys that were removed.
        """
        removed: list[str] = []
        index_key = (_TAG_INDEX, tag)
        with _store_errors("invalidate", self._directory):
            with self._cache.transact():
                for key in self._cache.get(index_key, default=[]):
                    entry = self._cache.get(key, default=_MISSING)
                    # The index can outlive an entry that was re-set without the tag.
                    if isinstance(entry, dict) and tag in entry.get("tags", []):
                        self._cache.delete(key)
                        removed.append(key)
                self._cache.delete(index_key)
        return removed

    def _count(self) -> int:
        return sum(1 for key in self._cache.iterkeys() if not isinstance(key, tuple))
