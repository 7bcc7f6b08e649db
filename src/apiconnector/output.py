"""Terminal output for the ``apiconnector`` CLI.

Response bodies, settings and cache statistics go to **stdout** so they can
be piped; confirmations and errors go to **stderr**. Three renderings are
supported:

* ``json`` -- bodies that hold JSON are re-indented, tables become a list
  of records.
* ``plain`` -- bodies unchanged, mappings and tables as tab-separated lines.
* ``rich`` -- syntax-highlighted JSON and Rich tables.

``auto`` picks ``rich`` on a colour terminal and ``plain`` otherwise.
``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` switch colour off.

The :class:`OutputManager` for a run is installed by
:func:`~apiconnector.app.main_callback` via :func:`set_output`; commands use
the module-level functions.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders command results on stdout and diagnostics on stderr.

    Args:
        format: Requested rendering; ``AUTO`` is resolved on construction.
        no_color: Disable colour and markup.
        quiet: Suppress success messages. Errors are always shown.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        if format == OutputFormat.AUTO:
            interactive = sys.stdout.isatty() if hasattr(sys.stdout, "isatty") else False
            format = OutputFormat.RICH if interactive and not self._no_color else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    def format_response(self, data: Any) -> None:
        """Write a response body or a settings mapping to stdout.

        A string that parses as JSON is treated as that JSON value in the
        ``json`` and ``rich`` renderings.
        """
        if self._format == OutputFormat.PLAIN:
            if isinstance(data, dict):
                for key, value in data.items():
                    self.print_data(f"{key}\t{value}")
            elif isinstance(data, str):
                self.print_data(data)
            else:
                self.print_data(json.dumps(data, ensure_ascii=False, default=str))
            return

        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError:
                if self._format == OutputFormat.RICH:
                    self._stdout.print(data, markup=False)
                else:
                    self.print_data(data)
                return

        rendered = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(rendered, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(rendered)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write *rows* under *headers* to stdout in the active rendering."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(title=title, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def success(self, message: str) -> None:
        """Confirmation on stderr, hidden by ``--quiet``."""
        if self._quiet:
            return
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")


def _color_disabled_by_env() -> bool:
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed :class:`OutputManager` (used between tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)
