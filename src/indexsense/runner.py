"""
Statement runner.

Persists generated CREATE INDEX statements to a .sql file, replays that file
against a live connection, and runs single ad-hoc statements for the SQL
tool.

Execution is best-effort: each statement runs on its own (autocommit), a
failure is recorded and the batch carries on. Nothing is rolled back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from indexsense.exceptions import OutputWriteError, StatementExecutionError

if TYPE_CHECKING:
    from indexsense.advisor import IndexStatement
    from indexsense.db.base import DatabaseAdapter, QueryResult

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def sanitize_name(name: str) -> str:
    """Replace each run of characters outside [A-Za-z0-9_-] with '_'."""
    return _UNSAFE_CHARS.sub("_", name)


def output_path_for(database: str, output_dir: Path) -> Path:
    """Location of the generated SQL file for a database."""
    return output_dir / f"create_indexes_{sanitize_name(database)}.sql"


def write_statements(statements: Iterable["IndexStatement"], path: Path) -> int:
    """
    Write one statement per line, replacing any previous file.

    With no statements nothing is written and a stale file at ``path`` is
    removed.

    Returns:
        Number of statements written.

    Raises:
        OutputWriteError: The file could not be opened or written.
    """
    lines = [stmt.ddl_text for stmt in statements]
    try:
        if not lines:
            path.unlink(missing_ok=True)
            return 0
        with path.open("w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
    except OSError as e:
        raise OutputWriteError(
            f"Unable to open file for writing: {path} ({e.strerror or e})",
            path=path,
        ) from e

    logger.debug("Wrote %d statement(s) to %s", len(lines), path)
    return len(lines)


def read_statements(path: Path) -> list[str]:
    """
    Read statements back, trimming whitespace and trailing ';'.

    Raises:
        OutputWriteError: The file could not be read back.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        reason = getattr(e, "strerror", None) or e
        raise OutputWriteError(
            f"Unable to read back generated file: {path} ({reason})",
            path=path,
        ) from e

    statements: list[str] = []
    for line in text.splitlines():
        stmt = line.strip("; \t\r\n")
        if stmt:
            statements.append(stmt)
    return statements


@dataclass(frozen=True)
class StatementOutcome:
    """Result of one statement in a batch."""
    statement: str
    ok: bool
    error: str | None = None


def execute_statements(db: "DatabaseAdapter", statements: Iterable[str]) -> list[StatementOutcome]:
    """Execute each statement independently, recording success or failure."""
    outcomes: list[StatementOutcome] = []
    for stmt in statements:
        try:
            db.execute(stmt)
        except StatementExecutionError as e:
            logger.debug("Statement failed: %s (%s)", stmt, e.message)
            outcomes.append(StatementOutcome(statement=stmt, ok=False, error=e.message))
        else:
            outcomes.append(StatementOutcome(statement=stmt, ok=True))
    return outcomes


def run_query(db: "DatabaseAdapter", sql: str) -> "QueryResult":
    """
    Run a single ad-hoc statement.

    Raises:
        StatementExecutionError: The backend rejected the statement.
    """
    return db.execute(sql)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def format_tsv(result: "QueryResult") -> list[str]:
    """
    Render a result as output lines.

    Result sets become a header line followed by tab-separated rows (NULL as
    an empty field); other statements become ``OK, affected rows: N``.
    """
    if not result.returns_rows:
        return [f"OK, affected rows: {result.rows_affected}"]
    lines = ["\t".join(result.columns)]
    lines.extend("\t".join(_cell(v) for v in row) for row in result.rows)
    return lines
