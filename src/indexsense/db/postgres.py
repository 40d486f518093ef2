"""PostgreSQL adapter built on psycopg 3."""

from __future__ import annotations

import logging
from typing import Any

import psycopg

from indexsense.column_types import normalize_type
from indexsense.config import ConnectionParams, DBConnection
from indexsense.db.base import ColumnInfo, QueryResult
from indexsense.exceptions import (
    DatabaseConnectionError,
    SchemaQueryError,
    StatementExecutionError,
)

logger = logging.getLogger(__name__)

TABLES_QUERY = """
    SELECT tablename
    FROM pg_tables
    WHERE schemaname = %s
"""

COLUMNS_QUERY = """
    SELECT column_name, data_type
    FROM information_schema.columns
    WHERE table_schema = %s
      AND table_name = %s
    ORDER BY ordinal_position
"""

INDEXED_COLUMNS_QUERY = """
    SELECT a.attname AS column_name
    FROM pg_index ix
    JOIN pg_class t ON t.oid = ix.indrelid
    JOIN pg_class i ON i.oid = ix.indexrelid
    JOIN pg_namespace n ON n.oid = t.relnamespace
    JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey)
    WHERE t.relkind = 'r'
      AND n.nspname = %s
      AND t.relname = %s
"""


class PsycopgAdapter:
    """
    DatabaseAdapter implementation for PostgreSQL.

    The connection runs in autocommit mode, so one failed statement does not
    leave the session in an aborted transaction for the next one.
    """

    kind = DBConnection.PGSQL

    def __init__(self, conn: "psycopg.Connection[Any]", database: str, schema: str = "public") -> None:
        self._conn = conn
        self._database = database
        self._schema = schema

    @classmethod
    def connect(cls, params: ConnectionParams, timeout_seconds: int = 10) -> "PsycopgAdapter":
        """Open a connection; raises DatabaseConnectionError on failure."""
        try:
            conn = psycopg.connect(
                host=params.host,
                port=params.port,
                dbname=params.database,
                user=params.username,
                password=params.password,
                connect_timeout=timeout_seconds,
                autocommit=True,
            )
        except psycopg.Error as e:
            raise DatabaseConnectionError(f"Could not connect to PostgreSQL: {e}") from e

        logger.debug("Connected to PostgreSQL %s:%d/%s", params.host, params.port, params.database)
        return cls(conn, params.database)

    @property
    def database(self) -> str:
        return self._database

    def _fetch(self, sql: str, args: tuple[Any, ...]) -> list[tuple[Any, ...]]:
        logger.debug("PostgreSQL query: %s %s", " ".join(sql.split()), args)
        with self._conn.cursor() as cur:
            cur.execute(sql, args)
            return cur.fetchall()

    def list_tables(self) -> list[str]:
        try:
            rows = self._fetch(TABLES_QUERY, (self._schema,))
        except psycopg.Error as e:
            raise SchemaQueryError(f"Could not retrieve tables - {e}") from e
        return [row[0] for row in rows]

    def list_columns(self, table: str) -> list[ColumnInfo]:
        try:
            rows = self._fetch(COLUMNS_QUERY, (self._schema, table))
        except psycopg.Error as e:
            raise SchemaQueryError(
                f"Could not get columns for {table} - {e}", table=table
            ) from e

        return [
            ColumnInfo(
                name=name,
                normalized_type=normalize_type(self.kind, data_type),
            )
            for name, data_type in rows
        ]

    def list_indexed_columns(self, table: str) -> frozenset[str]:
        try:
            rows = self._fetch(INDEXED_COLUMNS_QUERY, (self._schema, table))
        except psycopg.Error as e:
            raise SchemaQueryError(
                f"Could not get indexes for {table} - {e}", table=table
            ) from e
        return frozenset(row[0].lower() for row in rows)

    def execute(self, sql: str) -> QueryResult:
        logger.debug("PostgreSQL execute: %s", sql)
        try:
            with self._conn.cursor() as cur:
                cur.execute(sql)
                if cur.description is None:
                    return QueryResult(rows_affected=max(cur.rowcount, 0))
                columns = tuple(col.name for col in cur.description)
                return QueryResult(columns=columns, rows=cur.fetchall())
        except psycopg.Error as e:
            message = str(e).strip()
            raise StatementExecutionError(f"PGSQL error: {message}", statement=sql) from e

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "PsycopgAdapter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
