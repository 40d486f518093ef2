"""Shared CLI plumbing: consoles, logging setup, error reporting."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from indexsense import __version__
from indexsense.exceptions import IndexSenseError

# soft_wrap keeps long paths and statements on one line
console = Console(soft_wrap=True)
error_console = Console(stderr=True, soft_wrap=True)

logger = logging.getLogger("indexsense")


def configure_logging(verbose: bool) -> None:
    """Send package logs to stderr: warnings by default, everything with -V."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )
    logger.setLevel(level)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"IndexSense version {__version__}")
        raise typer.Exit()


def report_error(error: IndexSenseError) -> None:
    """Print a fatal error without a traceback; details go to the debug log."""
    logger.debug("Fatal error: %s", error.to_dict())
    error_console.print(f"[red]Error:[/red] {escape(error.message)}")


def usage_error(usage: str) -> typer.Exit:
    """Print usage to stderr and build the exit to raise."""
    error_console.print(escape(usage), highlight=False)
    return typer.Exit(code=1)


VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-V", help="Log every query to stderr."),
]

VersionOption = Annotated[
    Optional[bool],
    typer.Option(
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
]

# Extra positionals are collected and rejected by the commands themselves
# so that argument-count errors exit with status 1.
LENIENT_ARGS = {"allow_extra_args": True, "ignore_unknown_options": True}
