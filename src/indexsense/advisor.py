"""
Rule-based index advisor.

Walks every table of a database and proposes a single-column index for
columns that look like lookup keys and are not indexed yet.

Technical approach:
1. Skip columns already covered by any existing index (case-insensitive)
2. Match the column name against three naming patterns:
   - foreign-key style: ends with ``_id``
   - flag style: starts with ``is_``
   - common label: exactly ``title`` or ``name``
3. Require the normalized type to be in INDEXABLE_TYPES
4. Build an identifier-length-safe index name and backend-quoted DDL

Known limitation: the hashed fallback name is not checked against other
tables' generated names or existing index names.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from indexsense.config import DBConnection
from indexsense.exceptions import SchemaQueryError

if TYPE_CHECKING:
    from indexsense.db.base import ColumnInfo, DatabaseAdapter

logger = logging.getLogger(__name__)

INDEXABLE_TYPES: frozenset[str] = frozenset({
    "VARCHAR",
    "CHAR",
    "ENUM",
    "BOOL",
    "BOOLEAN",
    "TINYINT",
    "SMALLINT",
    "MEDIUMINT",
    "INT",
    "INTEGER",
    "BIGINT",
    "DATE",
    "YEAR",
})

LABEL_COLUMNS: frozenset[str] = frozenset({"title", "name"})


def matches_naming_pattern(column_name: str) -> bool:
    """Whether a column name looks like a lookup key."""
    lowered = column_name.lower()
    return (
        lowered.endswith("_id")
        or lowered.startswith("is_")
        or lowered in LABEL_COLUMNS
    )


def should_index(column_name: str, normalized_type: str, already_indexed: bool) -> bool:
    """
    Decide whether a column deserves a new index.

    Pure function of the column's name, its normalized type and whether an
    index already covers it.
    """
    if already_indexed:
        return False
    return normalized_type in INDEXABLE_TYPES and matches_naming_pattern(column_name)


def index_name_for(kind: DBConnection, table: str, column: str) -> str:
    """
    Name for a single-column index.

    ``{table}_{column}_idx`` when it fits the backend's identifier limit,
    otherwise the md5 of ``{table}_{column}`` plus ``_idx`` (36 characters).
    """
    name = f"{table}_{column}_idx"
    if len(name.encode("utf-8")) > kind.max_identifier_length:
        digest = hashlib.md5(f"{table}_{column}".encode("utf-8")).hexdigest()
        name = f"{digest}_idx"
    return name


def create_index_sql(kind: DBConnection, index_name: str, table: str, column: str) -> str:
    """Render a CREATE INDEX statement with backend identifier quoting."""
    return (
        f"CREATE INDEX {kind.quote(index_name)} "
        f"ON {kind.quote(table)} ({kind.quote(column)});"
    )


@dataclass(frozen=True)
class IndexStatement:
    """
    A generated CREATE INDEX statement.

    Attributes:
        index_name: Name of the new index
        table_name: Target table
        column_name: Indexed column
        ddl_text: Ready-to-run statement, terminated by ';'
    """
    index_name: str
    table_name: str
    column_name: str
    ddl_text: str

    @classmethod
    def build(cls, kind: DBConnection, table: str, column: str) -> "IndexStatement":
        name = index_name_for(kind, table, column)
        return cls(
            index_name=name,
            table_name=table,
            column_name=column,
            ddl_text=create_index_sql(kind, name, table, column),
        )


@dataclass(frozen=True)
class SkippedTable:
    """A table left out because its schema could not be read."""
    table: str
    reason: str


@dataclass
class IndexPlan:
    """Result of a full advisor pass over one database."""
    statements: list[IndexStatement] = field(default_factory=list)
    tables_inspected: int = 0
    skipped: list[SkippedTable] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.statements


def plan_table(
    kind: DBConnection,
    table: str,
    columns: Iterable["ColumnInfo"],
    indexed: frozenset[str],
) -> list[IndexStatement]:
    """Statements for one table, in column discovery order."""
    return [
        IndexStatement.build(kind, table, col.name)
        for col in columns
        if should_index(col.name, col.normalized_type, col.name.lower() in indexed)
    ]


def plan_indexes(db: "DatabaseAdapter") -> IndexPlan:
    """
    Run the advisor over every table of ``db``.

    Raises:
        SchemaQueryError: The table list itself could not be read.
    """
    plan = IndexPlan()

    for table in db.list_tables():
        try:
            indexed = db.list_indexed_columns(table)
            columns = db.list_columns(table)
        except SchemaQueryError as e:
            logger.warning("Skipping table %s: %s", table, e.message)
            plan.skipped.append(SkippedTable(table=table, reason=e.message))
            continue

        plan.tables_inspected += 1
        statements = plan_table(db.kind, table, columns, indexed)
        logger.debug(
            "Table %s: %d column(s), %d indexed, %d new index(es)",
            table, len(columns), len(indexed), len(statements),
        )
        plan.statements.extend(statements)

    return plan
