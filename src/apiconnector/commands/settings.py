"""Settings commands -- show the validated connector settings."""

from __future__ import annotations

import typer

from apiconnector.commands.context import exit_on_error, settings_from_context
from apiconnector.output import format_response

settings_app = typer.Typer(no_args_is_help=True)


@settings_app.command("show")
def settings_show(ctx: typer.Context) -> None:
    """Print the settings after validation, with the password masked.

    Example::

        apiconnector --json --settings settings.yaml --section Acme.Weather settings show
    """
    with exit_on_error():
        settings = settings_from_context(ctx)
        format_response(settings.redacted_dump())
