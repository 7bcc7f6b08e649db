"""Request commands -- ``fetch``, ``post`` and ``uri``.

These commands run one action through :class:`~apiconnector.connector.ApiConnector`
using the settings selected by the global ``--settings``/``--section``
options. Query parameters are given as repeated ``-P key=value`` options
and override the configured defaults.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from apiconnector.commands.context import (
    exit_on_error,
    open_connector,
    parse_params,
    settings_from_context,
)
from apiconnector.exceptions import InvalidUsageError, NoDataError, RequestFailedError
from apiconnector.output import format_response, print_data, success
from apiconnector.request import build_request_uri

_PARAM_HELP = "Query parameter as key=value (repeatable)."


def fetch_command(
    ctx: typer.Context,
    action: str = typer.Argument(help="Action name from the settings."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
    raw: bool = typer.Option(False, "--raw", help="Print the body unformatted."),
) -> None:
    """Fetch an action and print the response body.

    With ``useFallbackCache`` enabled a cached body is printed without
    contacting the API.

    Example::

        apiconnector --settings settings.yaml fetch forecast -P city=Berlin
    """
    with exit_on_error():
        params = parse_params(param)
        with open_connector(ctx) as connector:
            body = connector.fetch_data(action, params)
        if body is None:
            raise NoDataError(f"No data for action '{action}'")
        if raw:
            print_data(body)
        else:
            format_response(body)


def post_command(
    ctx: typer.Context,
    action: str = typer.Argument(help="Action name from the settings."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON request body."),
    data_file: Optional[Path] = typer.Option(
        None, "--data-file", help="File containing the JSON request body."
    ),
) -> None:
    """POST a JSON body to an action.

    Exits with code 5 when the API does not answer 200 or 204.

    Example::

        apiconnector post subscribe -d '{"email": "ada@example.com"}'
    """
    with exit_on_error():
        params = parse_params(param)
        payload = _load_payload(data, data_file)
        with open_connector(ctx) as connector:
            ok = connector.post_json_data(action, params, payload)
        if not ok:
            raise RequestFailedError(f"POST to action '{action}' failed")
        success(f"Posted to action '{action}'")


def uri_command(
    ctx: typer.Context,
    action: str = typer.Argument(help="Action name from the settings."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
) -> None:
    """Print the request URI an action resolves to, without sending it."""
    with exit_on_error():
        settings = settings_from_context(ctx)
        print_data(str(build_request_uri(settings, action, parse_params(param))))


def _load_payload(data: Optional[str], data_file: Optional[Path]) -> Any:
    """Return the decoded JSON body from ``--data`` or ``--data-file``."""
    if data is not None and data_file is not None:
        raise InvalidUsageError("Use either --data or --data-file, not both")
    if data_file is not None:
        try:
            data = data_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read {data_file}: {exc}") from exc
    if data is None:
        return {}
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"Request body is not valid JSON: {exc}") from exc
