"""apiconnector -- action-based HTTP API connectors with fallback caching.

This package provides :class:`~apiconnector.connector.ApiConnector`, a base
class for talking to a remote HTTP API one named *action* at a time. Each
action maps to a path suffix below a configured base URL. Responses can be
kept in a persistent *fallback cache* that is served instead of a live
request whenever fallback caching is enabled, and subclasses get a two-tier
*object cache* for memoizing derived data.

Typical usage::

    from apiconnector import ApiConnector, load_api_settings

    settings = load_api_settings("settings.yaml", section="Acme.Weather")
    with ApiConnector.open(settings) as connector:
        body = connector.fetch_data("forecast", {"city": "Berlin"})

Modules:
    connector: The fetch/post orchestrator and object cache accessors.
    request: Request URI construction from settings and parameters.
    client: The ``httpx`` adapter with timeout and Basic auth.
    cache: Cache keys, persistent stores, and the object cache.
    models: Pydantic models for settings and cache configuration.
    config: Settings file loading and directory resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI entry point.
"""

from apiconnector.config import load_api_settings
from apiconnector.connector import ApiConnector
from apiconnector.models import ApiSettings, CacheConfig

__version__ = "0.1.0"

__all__ = ["ApiConnector", "ApiSettings", "CacheConfig", "load_api_settings", "__version__"]
