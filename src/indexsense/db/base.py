"""
Database adapter protocol and shared value types.

The index advisor and the statement runner only ever see a DatabaseAdapter;
backend specifics live in the MySQL and PostgreSQL implementations.

Capability set:
- list_tables(): base tables in discovery order
- list_columns(table): ColumnInfo per column in discovery order
- list_indexed_columns(table): lowercase names covered by any index
- execute(sql): QueryResult (rows affected, or columns + rows)
- close()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from indexsense.config import DBConnection


@dataclass(frozen=True)
class ColumnInfo:
    """A table column with its normalized type."""

    name: str
    normalized_type: str


@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of a single executed statement.

    Statements that produce no result set (DDL, INSERT/UPDATE/DELETE) have
    empty ``columns`` and report ``rows_affected``.
    """

    columns: tuple[str, ...] = ()
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    rows_affected: int = 0

    @property
    def returns_rows(self) -> bool:
        """Whether the statement produced a result set."""
        return bool(self.columns)


class DatabaseAdapter(Protocol):
    """
    Protocol for database backends.

    Implementations wrap driver errors: listing failures raise
    SchemaQueryError, statement failures raise StatementExecutionError.
    """

    @property
    def kind(self) -> DBConnection:
        """Backend kind."""
        ...

    @property
    def database(self) -> str:
        """Name of the connected database."""
        ...

    def list_tables(self) -> list[str]:
        """List base tables in the order the backend returns them."""
        ...

    def list_columns(self, table: str) -> list[ColumnInfo]:
        """List a table's columns with normalized types."""
        ...

    def list_indexed_columns(self, table: str) -> frozenset[str]:
        """Lowercase names of columns that appear in any index on ``table``."""
        ...

    def execute(self, sql: str) -> QueryResult:
        """Execute one statement."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...

    def __enter__(self) -> "DatabaseAdapter":
        ...

    def __exit__(self, *exc_info: Any) -> None:
        ...


def as_text(value: Any) -> str:
    """Decode catalog values that some server versions return as bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return "" if value is None else str(value)
