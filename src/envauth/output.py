"""Output formatting with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (tables, JSON). This is what downstream
  tools pipe and parse.
* **stderr** -- all diagnostics (status, warnings, errors).
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

:class:`OutputManager` holds the preferences and Rich consoles; it is
created once in :func:`~envauth.app.main_callback` and installed via
:func:`set_output`. Module-level helpers (:func:`info`, :func:`error`, ...)
delegate to the installed manager.

Secrets must go through :func:`mask_secret` before they reach any output.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and
    colour is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        * **Rich mode** -- styled :class:`~rich.table.Table`.
        * **JSON mode** -- array of objects keyed by header names.
        * **Plain mode** -- tab-separated values, one row per line.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*(escape(cell) for cell in row))
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, escape(message))

    def success(self, message: str) -> None:
        """Green success message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Yellow warning. NOT suppressed by ``--quiet``."""
        self._emit(f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Bold-red error. Never suppressed."""
        self._emit(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}")

    def debug(self, message: str) -> None:
        """Dimmed debug message. Only shown with ``--verbose``."""
        if self._verbose:
            self._emit(f"debug: {message}", f"[dim]debug: {escape(message)}[/dim]")

    def _emit(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Mask all but the last *visible* characters of a secret.

    Short values are masked entirely so their length is not the only thing
    hidden::

        mask_secret("ghp_abcdef123456")  # "************3456"
        mask_secret("abc")               # "****"
    """
    if not value:
        return ""
    if len(value) <= visible * 2:
        return "*" * 4
    return "*" * (len(value) - visible) + value[-visible:]


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global output manager."""
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global output manager so the next access creates a fresh one."""
    global _output
    _output = None


class OutputLogHandler(logging.Handler):
    """Route ``envauth`` log records to the installed :class:`OutputManager`.

    Warnings and errors become :func:`warning` messages; everything below
    becomes :func:`debug` and is only shown with ``--verbose``. The
    manager is looked up on every record, so replacing it never leaves the
    handler writing to a stale stream.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.WARNING:
                get_output().warning(message)
            else:
                get_output().debug(message)
        except Exception:
            self.handleError(record)


def configure_logging(verbose: bool = False) -> None:
    """Attach :class:`OutputLogHandler` to the ``envauth`` logger (once).

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logger = logging.getLogger("envauth")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, OutputLogHandler) for h in logger.handlers):
        logger.addHandler(OutputLogHandler())


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title=title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
