"""Action-based API connector with fallback and object caches.

:class:`ApiConnector` is the base class for concrete connectors. A
subclass usually only adds domain methods on top of :meth:`fetch_data`,
:meth:`post_json_data` and the object cache accessors::

    class WeatherConnector(ApiConnector):
        def forecast(self, city: str) -> dict | None:
            key = self.cache_key(f"forecast:{city}")
            cached = self.get_item(key)
            if cached is not None:
                return cached
            data = self.fetch_json("forecast", {"city": city})
            if data is not None:
                self.set_item(key, data, tags=["forecast"])
            return data

Fetch flow
----------

1. The request URI is built from the settings and the call parameters.
2. With ``use_fallback_cache`` enabled, a body stored for that URI is
   returned straight away and no request is made, however old it is.
3. Otherwise a single GET is sent. A response body (of any status) is
   returned and, with the fallback cache enabled, stored for next time.
4. Without a response ``None`` is returned. Nothing is raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import httpx

from apiconnector.cache import FallbackCache, ObjectCache, TaggedCache, make_cache_key
from apiconnector.client import ApiClient
from apiconnector.config import get_cache_dir
from apiconnector.exceptions import CacheError
from apiconnector.models import ApiSettings, CacheConfig
from apiconnector.request import build_request_uri

logger = logging.getLogger(__name__)


class ApiConnector:
    """Fetches and posts API actions with a fallback response cache.

    Args:
        settings: Validated connector settings.
        fallback_cache: Persistent store of response bodies.
        object_cache: Two-tier cache for values derived by subclasses.
        client: HTTP adapter. Defaults to an :class:`ApiClient` built from
            *settings*.

    Use :meth:`open` to build a connector with its stores under a cache
    directory. Connectors are context managers; leaving the ``with`` block
    closes both stores.
    """

    cache_namespace: Optional[str] = None
    """Cache key namespace. ``None`` means the connector's qualified class name."""

    client_options: Mapping[str, Any] = {}
    """Extra :class:`httpx.Client` keyword arguments, e.g. ``{"verify": False}``.

    Settings-derived values (connect timeout, Basic auth) take precedence.
    """

    def __init__(
        self,
        settings: ApiSettings,
        fallback_cache: FallbackCache,
        object_cache: ObjectCache,
        client: Optional[ApiClient] = None,
    ) -> None:
        self._settings = settings
        self._fallback_cache = fallback_cache
        self._object_cache = object_cache
        self._client = client or ApiClient(settings, options=self.client_options)

    @classmethod
    def open(
        cls,
        settings: ApiSettings,
        cache_config: Optional[CacheConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> ApiConnector:
        """Create a connector with :mod:`diskcache` stores.

        Args:
            settings: Validated connector settings.
            cache_config: Cache location and expiry. The directory defaults
                to :func:`~apiconnector.config.get_cache_dir`.
            transport: Optional :mod:`httpx` transport for the client.

        Raises:
            CacheError: If a cache directory cannot be opened.
        """
        config = cache_config or CacheConfig()
        cache_dir = Path(config.directory) if config.directory else get_cache_dir()
        fallback = FallbackCache(cache_dir, ttl_seconds=config.fallback_ttl_seconds)
        objects = ObjectCache(TaggedCache(cache_dir, ttl_seconds=config.object_ttl_seconds))
        client = ApiClient(settings, transport=transport, options=cls.client_options)
        return cls(settings, fallback, objects, client)

    def __enter__(self) -> ApiConnector:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close both persistent stores."""
        self._fallback_cache.close()
        self._object_cache.store.close()

    @property
    def settings(self) -> ApiSettings:
        return self._settings

    @property
    def client(self) -> ApiClient:
        return self._client

    @property
    def fallback_cache(self) -> FallbackCache:
        return self._fallback_cache

    @property
    def object_cache(self) -> ObjectCache:
        return self._object_cache

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def build_request_uri(
        self,
        action_name: str,
        additional_parameters: Optional[Mapping[str, Any]] = None,
    ) -> httpx.URL:
        """Return the request URI for *action_name*.

        Raises:
            UnknownActionError: If the action is not configured.
        """
        return build_request_uri(self._settings, action_name, additional_parameters)

    def fetch_data(
        self,
        action_name: str,
        additional_parameters: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        """Retrieve the response body for *action_name*.

        Returns:
            The body from the fallback cache or the API, or ``None`` if the
            API could not be reached and nothing was cached.

        Raises:
            UnknownActionError: If the action is not configured.
        """
        request_uri = self.build_request_uri(action_name, additional_parameters)
        use_cache = self._settings.use_fallback_cache
        cache_key = self.cache_key(str(request_uri))

        if use_cache:
            cached = self._read_fallback(cache_key, action_name)
            if cached is not None:
                logger.info(
                    'Using fallback cache for action "%s"',
                    action_name,
                    extra={"action": action_name, "cache_key": cache_key},
                )
                return cached

        response = self._client.get(request_uri)
        if response is None:
            return None

        response_text = response.text
        if use_cache:
            try:
                self._fallback_cache.set(cache_key, response_text)
            except CacheError as exc:
                logger.error(
                    "Could not set fallback cache: %s",
                    exc,
                    extra={"action": action_name, "cache_key": cache_key, "error": str(exc)},
                )
            else:
                logger.info(
                    'Updated fallback cache for action "%s"',
                    action_name,
                    extra={"action": action_name, "cache_key": cache_key},
                )
        return response_text

    def fetch_json(
        self,
        action_name: str,
        additional_parameters: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Like :meth:`fetch_data`, but decode the body as JSON.

        Returns ``None`` when there is no body or it is not valid JSON.
        """
        text = self.fetch_data(action_name, additional_parameters)
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error(
                'Response for action "%s" is not valid JSON: %s',
                action_name,
                exc,
                extra={"action": action_name, "error": str(exc)},
            )
            return None

    def post_json_data(
        self,
        action_name: str,
        additional_parameters: Optional[Mapping[str, Any]] = None,
        data: Any = None,
    ) -> bool:
        """JSON-encode *data* and POST it to *action_name*.

        ``None`` is sent as an empty JSON object. Nothing is cached.

        Returns:
            ``True`` if the API answered 200 or 204.

        Raises:
            UnknownActionError: If the action is not configured.
        """
        request_uri = self.build_request_uri(action_name, additional_parameters)
        return self._client.post_json(request_uri, {} if data is None else data)

    def _read_fallback(self, cache_key: str, action_name: str) -> Optional[str]:
        try:
            return self._fallback_cache.get(cache_key)
        except CacheError as exc:
            logger.error(
                "Could not read fallback cache: %s",
                exc,
                extra={"action": action_name, "cache_key": cache_key, "error": str(exc)},
            )
            return None

    # ------------------------------------------------------------------ #
    # Object cache
    # ------------------------------------------------------------------ #

    def cache_key(self, identifier: str) -> str:
        """Return a cache key for *identifier* scoped to this connector type."""
        namespace = self.cache_namespace
        if namespace is None:
            cls = type(self)
            namespace = f"{cls.__module__}.{cls.__qualname__}"
        return make_cache_key(namespace, identifier)

    def get_item(self, cache_key: str) -> Any:
        """Return the object cached under *cache_key*, or ``None``."""
        return self._object_cache.get_item(cache_key)

    def set_item(self, cache_key: str, value: Any, tags: Iterable[str] = ()) -> None:
        """Cache *value* under *cache_key* in memory and on disk.

        Raises:
            CacheError: If the persistent store could not be written.
        """
        self._object_cache.set_item(cache_key, value, tags)

    def unset_item(self, cache_key: str) -> None:
        """Drop *cache_key* from the object cache."""
        self._object_cache.unset_item(cache_key)

    def flush_by_tag(self, tag: str) -> int:
        """Drop all objects cached with *tag*; returns how many were removed."""
        return self._object_cache.flush_by_tag(tag)
