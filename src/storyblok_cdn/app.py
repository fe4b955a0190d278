"""Typer application and CLI entry point for storyblok-cdn.

This module wires together the top-level Typer application and registers the
built-in commands (``story``, ``stories``, ``cache-version``, ``config``).
Global options given before the command (token, cache invalidation mode,
output format) are stored on the Typer context and read by the commands.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`storyblok_cdn.config`: Client configuration resolution.
    :mod:`storyblok_cdn.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from storyblok_cdn import __version__
from storyblok_cdn.commands.config import config_app
from storyblok_cdn.commands.fetch import cache_version_command, stories_command, story_command
from storyblok_cdn.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="storyblok-cdn",
    help="Fetch stories from the Storyblok content delivery API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("story")(story_command)
app.command("stories")(stories_command)
app.command("cache-version")(cache_version_command)
app.add_typer(config_app, name="config", help="Settings management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"storyblok-cdn {__version__}")
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
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="Delivery API access token."
    ),
    auto_cache_invalidation: Optional[bool] = typer.Option(
        None,
        "--auto-cv/--no-auto-cv",
        help="Refresh the cache version before every request.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the delivery API host."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every command.

    Initialises the global :class:`~storyblok_cdn.output.OutputManager` from
    CLI flags, routes library logging into it, and stores the connection
    options in ``ctx.obj`` for the commands.
    """
    from storyblok_cdn.output import OutputFormat, OutputManager, install_log_handler, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    install_log_handler(verbose=verbose)

    ctx.ensure_object(dict)
    ctx.obj["token"] = token
    ctx.obj["auto_cache_invalidation"] = auto_cache_invalidation
    ctx.obj["base_url"] = base_url
    ctx.obj["timeout"] = timeout
    ctx.obj["output_file"] = output_file
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from storyblok_cdn.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``storyblok-cdn`` console script.

    Unhandled :class:`~storyblok_cdn.exceptions.StoryblokError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
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
        from storyblok_cdn.exceptions import StoryblokError
        from storyblok_cdn.output import error

        if isinstance(exc, StoryblokError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
