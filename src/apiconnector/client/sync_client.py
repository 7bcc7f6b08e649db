"""Synchronous HTTP client adapter with timeout and Basic auth.

This module provides :class:`ApiClient`, the blocking HTTP layer used by
:class:`~apiconnector.connector.ApiConnector`. It wraps
:class:`httpx.Client` and layers on:

- **Connect timeout** -- taken from the connector settings; reads are not
  bounded.
- **Basic auth** -- when the settings carry both a user name and a
  password, every request gets a static ``Authorization: Basic ...``
  header.
- **Client options** -- extra keyword arguments for :class:`httpx.Client`
  (``verify``, ``proxy``, ``cert``, ...) supplied by the connector. The
  configured timeout, Basic auth header and redirect policy are applied
  after them and win on conflict.
- **Fail-open errors** -- a single attempt is made. Transport errors are
  logged and reported as ``None`` (GET) or ``False`` (POST); nothing is
  raised to the caller.

A fresh :class:`httpx.Client` is built for each request and closed when
the request completes.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Mapping, Optional

import httpx

from apiconnector.models import ApiSettings

logger = logging.getLogger(__name__)

POST_SUCCESS_CODES = frozenset({200, 204})
"""Status codes that count as an accepted POST."""


class ApiClient:
    """Blocking HTTP client configured from :class:`ApiSettings`.

    Args:
        settings: Connector settings providing ``timeout`` and the optional
            ``username``/``password`` pair.
        transport: Optional :class:`httpx.BaseTransport` passed to every
            client that is built, e.g. :class:`httpx.MockTransport` in tests.
        options: Extra :class:`httpx.Client` keyword arguments.

    Example::

        client = ApiClient(settings)
        ok = client.post_json(uri, {"name": "Berlin"})
    """

    def __init__(
        self,
        settings: ApiSettings,
        transport: Optional[httpx.BaseTransport] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._options = dict(options or {})

    @property
    def settings(self) -> ApiSettings:
        return self._settings

    @property
    def options(self) -> dict[str, Any]:
        """A copy of the extra :class:`httpx.Client` keyword arguments."""
        return dict(self._options)

    def default_headers(self) -> dict[str, str]:
        """Headers attached to every request, i.e. Basic auth when configured."""
        if not self._settings.has_credentials:
            return {}
        raw = f"{self._settings.username}:{self._settings.password}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {encoded}"}

    def build_client(self, headers: Optional[dict[str, str]] = None) -> httpx.Client:
        """Return a new :class:`httpx.Client` with timeout and auth applied.

        Args:
            headers: Extra headers for every request of this client. They
                are merged over the client option headers and the default
                headers.
        """
        options = dict(self._options)
        merged_headers = dict(options.pop("headers", None) or {})
        merged_headers.update(self.default_headers())
        merged_headers.update(headers or {})
        option_transport = options.pop("transport", None)
        options.update(
            headers=merged_headers,
            timeout=httpx.Timeout(None, connect=float(self._settings.timeout)),
            follow_redirects=True,
            transport=self._transport or option_transport,
        )
        return httpx.Client(**options)

    def get(self, url: httpx.URL | str) -> Optional[httpx.Response]:
        """Send a GET request.

        Returns:
            The response, whatever its status code, or ``None`` when the
            request failed at the transport level. Non-2xx responses are
            logged as errors.
        """
        try:
            with self.build_client() as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            logger.error(
                "Get request to API failed with exception: %s",
                exc,
                extra={"url": str(url), "error": str(exc)},
            )
            return None

        if not response.is_success:
            logger.error(
                "Get request to API failed with code %d",
                response.status_code,
                extra={"url": str(url), "status_code": response.status_code},
            )
        return response

    def post_json(self, url: httpx.URL | str, data: Any) -> bool:
        """JSON-encode *data* and POST it.

        Returns:
            ``True`` when the API answered 200 or 204, otherwise ``False``.
            Payloads that cannot be JSON-encoded, redirect loops and
            transport errors are logged and count as failures.
        """
        try:
            content = json.dumps(data)
        except (TypeError, ValueError) as exc:
            logger.error(
                "Post request to API failed, payload is not JSON serializable: %s",
                exc,
                extra={"url": str(url), "error": str(exc)},
            )
            return False

        try:
            with self.build_client({"Content-Type": "application/json"}) as client:
                response = client.post(url, content=content)
        except httpx.TooManyRedirects as exc:
            logger.error(
                "Post request to API failed with an infinite redirection",
                extra={"url": str(url), "error": str(exc)},
            )
            return False
        except httpx.HTTPError as exc:
            logger.error(
                "Post request to API failed with exception: %s",
                exc,
                extra={"url": str(url), "error": str(exc)},
            )
            return False

        if response.status_code not in POST_SUCCESS_CODES:
            logger.error(
                "Post request to API failed with code %d",
                response.status_code,
                extra={"url": str(url), "status_code": response.status_code},
            )
            return False
        return True
