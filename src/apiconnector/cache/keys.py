"""Cache key derivation.

Keys are SHA-256 hex digests of ``<namespace>__<identifier>``. The
namespace identifies the connector type, so two connectors asking for the
same URL or the same object identifier never share an entry. Digests are
stable across processes, which the persistent caches rely on.
"""

from __future__ import annotations

import hashlib


def make_cache_key(namespace: str, identifier: str) -> str:
    """Return the cache key for *identifier* within *namespace*.

    Args:
        namespace: Connector type name, e.g. ``"acme.connectors.WeatherConnector"``.
        identifier: A request URI or any caller-chosen identifier.

    Returns:
        A 64-character lowercase hex string.
    """
    raw = f"{namespace}__{identifier}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
