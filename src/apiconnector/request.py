"""Request URI construction.

:func:`build_request_uri` turns an action name plus call-specific query
parameters into the absolute :class:`httpx.URL` a connector requests.
The action's path suffix is appended to the base URL's path by plain
string concatenation, so ``apiUrl: https://host/v2/`` with
``actions: {forecast: forecast.php}`` yields ``https://host/v2/forecast.php``
while ``https://host/v2`` would yield ``https://host/v2forecast.php``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

import httpx

from apiconnector.exceptions import ConfigError, UnknownActionError
from apiconnector.models import ApiSettings


def merge_parameters(
    defaults: Mapping[str, Any],
    additional: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Merge default and call-specific query parameters.

    Call-specific values override defaults with the same name. Keys keep
    the order of *defaults* followed by new keys from *additional*.
    Parameters whose value is ``None`` are dropped.
    """
    merged = {**defaults, **(additional or {})}
    return {key: value for key, value in merged.items() if value is not None}


def flatten_parameters(params: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten nested mappings into bracketed query keys.

    ``{"filter": {"city": "Berlin"}}`` becomes ``{"filter[city]": "Berlin"}``.
    Lists of scalars are kept and encode as repeated keys; mappings inside
    lists are flattened with their index (``items[0][id]``). Nested
    ``None`` values are dropped.
    """
    flat: dict[str, Any] = {}
    for key, value in params.items():
        _flatten_into(flat, str(key), value)
    return flat


def _flatten_into(flat: dict[str, Any], key: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            _flatten_into(flat, f"{key}[{sub_key}]", sub_value)
    elif isinstance(value, (list, tuple)) and any(isinstance(v, Mapping) for v in value):
        for index, item in enumerate(value):
            _flatten_into(flat, f"{key}[{index}]", item)
    else:
        flat[key] = value


def build_request_uri(
    settings: ApiSettings,
    action_name: str,
    additional_parameters: Optional[Mapping[str, Any]] = None,
) -> httpx.URL:
    """Build the request URI for *action_name*.

    Args:
        settings: Connector settings providing ``api_url``, ``actions`` and
            default ``parameters``.
        action_name: Key into ``settings.actions``.
        additional_parameters: Query parameters for this call only.

    Returns:
        The absolute request URL. Any query string on ``api_url`` is
        replaced by the merged parameters.

    Raises:
        UnknownActionError: If *action_name* is not configured.
        ConfigError: If the resulting URL is not valid.
    """
    try:
        suffix = settings.actions[action_name]
    except KeyError:
        raise UnknownActionError(action_name, list(settings.actions)) from None

    # httpx reports an empty path as "/", which would double the slash of
    # suffixes like "/users"; take the path as written instead.
    path = urlsplit(settings.api_url).path + suffix
    if not path.startswith("/"):
        path = "/" + path

    params = flatten_parameters(merge_parameters(settings.parameters, additional_parameters))
    try:
        base = httpx.URL(settings.api_url)
        return base.copy_with(path=path, params=params or None)
    except httpx.InvalidURL as exc:
        raise ConfigError(f"Cannot build URL for action '{action_name}': {exc}") from exc
