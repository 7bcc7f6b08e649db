"""Caching for apiconnector.

Three pieces live here:

* :func:`~apiconnector.cache.keys.make_cache_key` -- SHA-256 keys scoped to
  a connector type, shared by both caches.
* :class:`~apiconnector.cache.stores.FallbackCache` and
  :class:`~apiconnector.cache.stores.TaggedCache` -- persistent stores on
  :mod:`diskcache`, one for raw response bodies, one for arbitrary values
  with tags.
* :class:`~apiconnector.cache.object_cache.ObjectCache` -- the write-through
  in-process tier in front of a :class:`TaggedCache`.

The caches are consumed by :class:`~apiconnector.connector.ApiConnector`.
"""

from apiconnector.cache.keys import make_cache_key
from apiconnector.cache.object_cache import ObjectCache
from apiconnector.cache.stores import FallbackCache, TaggedCache

__all__ = ["FallbackCache", "ObjectCache", "TaggedCache", "make_cache_key"]
