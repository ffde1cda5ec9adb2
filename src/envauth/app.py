"""Typer application and CLI entry point for envauth.

envauth normally runs inside a host package manager as the ``env-auth``
plugin. The CLI runs the same plugin on demand and offers read-only views
of the manifest, the ``.env`` file and the headers a download would get.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`envauth.config`: Configuration resolution.
    :mod:`envauth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from envauth import __version__
from envauth.commands.apply import apply_command
from envauth.commands.inspect import headers_command, hosts_command, vars_command
from envauth.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="envauth",
    help="Apply package-repository credentials from environment variables.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("apply")(apply_command)
app.command("hosts")(hosts_command)
app.command("vars")(vars_command)
app.command("headers")(headers_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"envauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~envauth.output.OutputManager` and routes
    ``envauth`` log records to it.
    """
    from envauth.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from envauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``envauth`` console script.

    :class:`~envauth.exceptions.EnvAuthError` instances exit with the
    error's ``exit_code``; any other exception produces a crash log and a
    generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from envauth.exceptions import EnvAuthError
        from envauth.output import error

        if isinstance(exc, EnvAuthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
