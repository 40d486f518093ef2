"""
Index advisor CLI.

Inspects every table of the configured database and writes CREATE INDEX
statements for likely lookup columns to create_indexes_<db>.sql. With the
``execute`` mode word the file is also applied, statement by statement.

Usage:
    indexsense-indexes /srv/shop/.env
    indexsense-indexes shop execute
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.markup import escape

from indexsense.advisor import plan_indexes
from indexsense.cli.common import (
    LENIENT_ARGS,
    VerboseOption,
    VersionOption,
    configure_logging,
    console,
    report_error,
    usage_error,
)
from indexsense.config import get_settings, load_connection_params
from indexsense.db import DatabaseAdapter, connect
from indexsense.exceptions import ArgumentError, IndexSenseError
from indexsense.runner import (
    execute_statements,
    output_path_for,
    read_statements,
    write_statements,
)

EXECUTE_MODE = "execute"

USAGE = """Usage:
  indexsense-indexes <env_file_or_identifier> [execute]
  - If [execute] is specified, it will run the statements."""

app = typer.Typer(
    name="indexsense-indexes",
    help="Generate (and optionally run) CREATE INDEX statements for a MySQL or PostgreSQL database.",
    add_completion=False,
)


def _apply_file(db: DatabaseAdapter, path: Path) -> None:
    """Replay the generated file, reporting each statement."""
    console.print("\n[bold]\\[EXECUTE MODE][/bold] Executing the generated statements...\n")

    outcomes = execute_statements(db, read_statements(path))
    for outcome in outcomes:
        if outcome.ok:
            console.print(f"[green]\\[OK][/green] {escape(outcome.statement)}", highlight=False)
        else:
            console.print(f"[red]\\[ERROR][/red] {escape(outcome.statement)}", highlight=False)
            console.print(f"{escape(outcome.error or '')}\nContinuing...", highlight=False)

    failed = sum(1 for o in outcomes if not o.ok)
    console.print(
        f"\n[dim]{len(outcomes) - failed} succeeded, {failed} failed[/dim]"
    )


@app.command(context_settings=LENIENT_ARGS)
def main(
    ctx: typer.Context,
    target: Annotated[
        Optional[str],
        typer.Argument(
            help="Path to a .env file, or an application identifier looked up under the sites root",
            show_default=False,
        ),
    ] = None,
    mode: Annotated[
        Optional[str],
        typer.Argument(help="Pass 'execute' to run the generated statements", show_default=False),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory for the generated .sql file (default: INDEXSENSE_OUTPUT_DIR or the temp dir)",
            file_okay=False,
        ),
    ] = None,
    verbose: VerboseOption = False,
    version: VersionOption = None,
) -> None:
    """
    Propose single-column indexes for *_id, is_*, title and name columns.

    Examples:

        $ indexsense-indexes /var/www/html/shop/.env
        $ indexsense-indexes shop execute
    """
    configure_logging(verbose)

    try:
        if target is None or ctx.args or mode not in (None, EXECUTE_MODE):
            raise ArgumentError("Expected <env_file_or_identifier> [execute]")

        params = load_connection_params(target)
        out_dir = output_dir or get_settings().output_dir
        path = output_path_for(params.database, out_dir)

        with connect(params) as db:
            plan = plan_indexes(db)
            count = write_statements(plan.statements, path)

            if plan.skipped:
                console.print(
                    f"[yellow]Skipped {len(plan.skipped)} table(s) whose schema could not be read.[/yellow]"
                )

            if plan.is_empty:
                console.print("No new indexes needed.")
                return

            console.print(
                f"Created {count} 'CREATE INDEX' statements in:\n  {escape(str(path))}",
                highlight=False,
            )

            if mode == EXECUTE_MODE:
                _apply_file(db, path)
            else:
                console.print("Use command:", highlight=False)
                console.print(f"cat {escape(str(path))}", highlight=False)
                console.print("to see the content of the index creation SQL file", highlight=False)

        console.print("\nDone.")

    except ArgumentError:
        raise usage_error(USAGE)
    except IndexSenseError as e:
        report_error(e)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
