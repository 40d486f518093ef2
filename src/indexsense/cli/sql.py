"""
Ad-hoc SQL runner CLI.

Connects with the .env credentials, runs one statement and prints the result
as tab-separated text.

Usage:
    indexsense-sql /srv/shop/.env "SELECT id, email FROM users LIMIT 5"
    indexsense-sql shop "UPDATE users SET is_active = 1 WHERE id = 7"
"""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from indexsense.cli.common import (
    LENIENT_ARGS,
    VerboseOption,
    VersionOption,
    configure_logging,
    report_error,
    usage_error,
)
from indexsense.config import load_connection_params
from indexsense.db import connect
from indexsense.exceptions import ArgumentError, IndexSenseError
from indexsense.runner import format_tsv, run_query

USAGE = """Usage:
  indexsense-sql <env_file_or_identifier> "SQL_STATEMENT\""""

app = typer.Typer(
    name="indexsense-sql",
    help="Run one SQL statement against the database configured in a .env file.",
    add_completion=False,
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
    sql: Annotated[
        Optional[str],
        typer.Argument(help="The SQL statement to run", show_default=False),
    ] = None,
    verbose: VerboseOption = False,
    version: VersionOption = None,
) -> None:
    """
    Run a statement and print rows as TSV, or the affected row count.

    Examples:

        $ indexsense-sql shop "SELECT COUNT(*) FROM orders"
    """
    configure_logging(verbose)

    try:
        if target is None or sql is None or ctx.args:
            raise ArgumentError("Expected <env_file_or_identifier> <SQL_STATEMENT>")

        params = load_connection_params(target)
        with connect(params) as db:
            result = run_query(db, sql)

    except ArgumentError:
        raise usage_error(USAGE)
    except IndexSenseError as e:
        report_error(e)
        raise typer.Exit(code=1)

    # Raw output: rich would expand the tabs
    for line in format_tsv(result):
        typer.echo(line)


if __name__ == "__main__":
    app()
