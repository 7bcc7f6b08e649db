"""Typer application and CLI entry point for apiconnector.

The CLI is a thin operator surface over :class:`~apiconnector.connector.ApiConnector`:
fetch or post a configured action, print the URI an action resolves to,
inspect the settings, and manage the persistent caches.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. :class:`~apiconnector.exceptions.ApiConnectorError`
instances that escape a command exit with the error's ``exit_code``.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from apiconnector import __version__
from apiconnector.commands.cache import cache_app
from apiconnector.commands.request import fetch_command, post_command, uri_command
from apiconnector.commands.settings import settings_app
from apiconnector.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="apiconnector",
    help="Call configured API actions with fallback caching.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("fetch")(fetch_command)
app.command("post")(post_command)
app.command("uri")(uri_command)
app.add_typer(cache_app, name="cache", help="Inspect and clear the persistent caches.")
app.add_typer(settings_app, name="settings", help="Inspect connector settings.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apiconnector {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    settings: Optional[str] = typer.Option(
        None, "--settings", "-s", help="Settings file (JSON or YAML)."
    ),
    section: Optional[str] = typer.Option(
        None, "--section", help="Dot path of the connector section, e.g. Acme.Weather."
    ),
    cache_dir: Optional[str] = typer.Option(None, "--cache-dir", help="Cache root directory."),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Root callback: set up output and logging, store shared options in ``ctx.obj``."""
    from apiconnector.log import configure_logging
    from apiconnector.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet))
    configure_logging(verbose=verbose, quiet=quiet, no_color=no_color)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["section"] = section
    ctx.obj["cache_dir"] = cache_dir
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``apiconnector`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from apiconnector.exceptions import ApiConnectorError
        from apiconnector.output import error

        if isinstance(exc, ApiConnectorError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)


if __name__ == "__main__":
    main()
