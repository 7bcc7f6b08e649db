"""Two-tier object cache for values derived from API responses.

:class:`ObjectCache` puts an in-process ``dict`` in front of a persistent
:class:`~apiconnector.cache.stores.TaggedCache`:

* Reads check the in-process tier first. On a miss the persistent tier is
  read and its answer (including "not found") is remembered in-process, so
  repeated lookups of an absent key do not hit the disk again.
* Writes go to both tiers. A failed durable write raises
  :class:`~apiconnector.exceptions.CacheError` and leaves no in-process
  entry behind for that key.
* Removals go to both tiers and never fail on a missing key.

The in-process tier lives as long as the owning connector and is guarded
by a lock so one connector can be shared between threads.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable

from apiconnector.cache.stores import TaggedCache
from apiconnector.exceptions import CacheError

logger = logging.getLogger(__name__)

_NOT_FOUND = object()


class ObjectCache:
    """Write-through cache of arbitrary values with tagged invalidation.

    Args:
        store: The persistent tier.

    Example::

        cache = ObjectCache(TaggedCache(tmp_path))
        cache.set_item(key, {"id": 7}, tags=["city-berlin"])
        cache.get_item(key)   # {"id": 7}, served in-process from now on
    """

    def __init__(self, store: TaggedCache) -> None:
        self._store = store
        self._local: dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def store(self) -> TaggedCache:
        """The persistent tier."""
        return self._store

    def get_item(self, key: str) -> Any:
        """Return the value cached under *key*, or ``None``.

        A persistent read failure is logged and reported as ``None``
        without remembering the miss, so a later call retries the store.
        """
        with self._lock:
            if key in self._local:
                item = self._local[key]
                return None if item is _NOT_FOUND else item

            try:
                item = self._store.get(key)
            except CacheError as exc:
                logger.error(
                    "Could not read object cache", extra={"cache_key": key, "error": str(exc)}
                )
                return None

            self._local[key] = _NOT_FOUND if item is None else item
            logger.debug("Object cache loaded %s from store (hit=%s)", key, item is not None)
            return item

    def set_item(self, key: str, value: Any, tags: Iterable[str] = ()) -> None:
        """Store *value* under *key* in both tiers.

        Raises:
            CacheError: If the persistent tier could not be written.
        """
        with self._lock:
            try:
                self._store.set(key, value, tags)
            except CacheError:
                self._local.pop(key, None)
                raise
            self._local[key] = _NOT_FOUND if value is None else value

    def unset_item(self, key: str) -> None:
        """Remove *key* from both tiers. Missing keys are ignored."""
        with self._lock:
            self._local.pop(key, None)
            self._store.remove(key)

    def flush_by_tag(self, tag: str) -> int:
        """Remove every entry tagged with *tag* from both tiers.

        Returns:
            The number of persistent entries removed.
        """
        with self._lock:
            removed = self._store.invalidate_tag(tag)
            for key in removed:
                self._local.pop(key, None)
        logger.debug("Flushed %d object cache entries tagged %s", len(removed), tag)
        return len(removed)

    def clear_local(self) -> None:
        """Forget the in-process tier; the next reads go to the store."""
        with self._lock:
            self._local.clear()

    def __contains__(self, key: object) -> bool:
        """Whether *key* is held in the in-process tier (hit or remembered miss)."""
        with self._lock:
            return key in self._local
