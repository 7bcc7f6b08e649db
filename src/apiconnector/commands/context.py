"""Helpers shared by the CLI commands.

The root callback in :mod:`apiconnector.app` stores the global options in
``ctx.obj``; the functions here turn them into settings, cache
configuration and connectors.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from apiconnector.config import load_api_settings
from apiconnector.connector import ApiConnector
from apiconnector.exceptions import ApiConnectorError, InvalidUsageError
from apiconnector.models import ApiSettings, CacheConfig
from apiconnector.output import error


def _options(ctx: typer.Context) -> dict[str, Any]:
    ctx.ensure_object(dict)
    return ctx.obj


def settings_from_context(ctx: typer.Context) -> ApiSettings:
    """Load the settings named by ``--settings`` and ``--section``."""
    opts = _options(ctx)
    return load_api_settings(opts.get("settings"), section=opts.get("section"))


def cache_config_from_context(ctx: typer.Context) -> CacheConfig:
    return CacheConfig(directory=_options(ctx).get("cache_dir"))


def open_connector(ctx: typer.Context) -> ApiConnector:
    """Build an :class:`ApiConnector` from the global CLI options."""
    opts = _options(ctx)
    return ApiConnector.open(
        settings_from_context(ctx),
        cache_config_from_context(ctx),
        transport=opts.get("transport"),
    )


def parse_params(pairs: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a dict; later keys win.

    Raises:
        InvalidUsageError: If a pair has no ``=`` or an empty key.
    """
    params: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid parameter '{pair}', expected key=value")
        params[key] = value
    return params


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print an :class:`ApiConnectorError` and exit with its code."""
    try:
        yield
    except ApiConnectorError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
