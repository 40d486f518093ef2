"""MySQL / MariaDB adapter built on PyMySQL."""

from __future__ import annotations

import logging
from typing import Any

import pymysql
import pymysql.cursors

from indexsense.column_types import normalize_type
from indexsense.config import ConnectionParams, DBConnection
from indexsense.db.base import ColumnInfo, QueryResult, as_text
from indexsense.exceptions import (
    DatabaseConnectionError,
    SchemaQueryError,
    StatementExecutionError,
)

logger = logging.getLogger(__name__)


def _reason(error: pymysql.MySQLError) -> str:
    """Server message without the (errno, msg) tuple formatting."""
    if len(error.args) >= 2:
        return str(error.args[1])
    return str(error)


class PyMySQLAdapter:
    """DatabaseAdapter implementation for MySQL."""

    kind = DBConnection.MYSQL

    def __init__(self, conn: "pymysql.connections.Connection", database: str) -> None:
        self._conn = conn
        self._database = database

    @classmethod
    def connect(cls, params: ConnectionParams, timeout_seconds: int = 10) -> "PyMySQLAdapter":
        """Open a connection; raises DatabaseConnectionError on failure."""
        try:
            conn = pymysql.connect(
                host=params.host,
                port=params.port,
                user=params.username,
                password=params.password,
                database=params.database,
                charset="utf8mb4",
                autocommit=True,
                connect_timeout=timeout_seconds,
            )
        except pymysql.MySQLError as e:
            raise DatabaseConnectionError(f"Could not connect to MySQL: {_reason(e)}") from e

        logger.debug("Connected to MySQL %s:%d/%s", params.host, params.port, params.database)
        return cls(conn, params.database)

    @property
    def database(self) -> str:
        return self._database

    def _fetch(self, sql: str, cursor_class: Any = None) -> list[Any]:
        logger.debug("MySQL query: %s", sql)
        with self._conn.cursor(cursor_class) as cur:
            cur.execute(sql)
            return list(cur.fetchall())

    def list_tables(self) -> list[str]:
        try:
            rows = self._fetch("SHOW FULL TABLES")
        except pymysql.MySQLError as e:
            raise SchemaQueryError(f"Could not retrieve tables - {_reason(e)}") from e
        return [as_text(row[0]) for row in rows if as_text(row[1]) == "BASE TABLE"]

    def list_columns(self, table: str) -> list[ColumnInfo]:
        try:
            rows = self._fetch(f"SHOW COLUMNS FROM {self.kind.quote(table)}")
        except pymysql.MySQLError as e:
            raise SchemaQueryError(
                f"Could not get columns for {table} - {_reason(e)}", table=table
            ) from e

        # Field, Type, Null, Key, Default, Extra
        return [
            ColumnInfo(
                name=as_text(row[0]),
                normalized_type=normalize_type(self.kind, as_text(row[1])),
            )
            for row in rows
        ]

    def list_indexed_columns(self, table: str) -> frozenset[str]:
        try:
            rows = self._fetch(
                f"SHOW INDEX FROM {self.kind.quote(table)}",
                pymysql.cursors.DictCursor,
            )
        except pymysql.MySQLError as e:
            raise SchemaQueryError(
                f"Could not get indexes for {table} - {_reason(e)}", table=table
            ) from e

        # Column_name is NULL for functional key parts
        return frozenset(
            as_text(row["Column_name"]).lower()
            for row in rows
            if row.get("Column_name") is not None
        )

    def execute(self, sql: str) -> QueryResult:
        logger.debug("MySQL execute: %s", sql)
        try:
            with self._conn.cursor() as cur:
                affected = cur.execute(sql)
                if cur.description is None:
                    return QueryResult(rows_affected=affected)
                columns = tuple(as_text(d[0]) for d in cur.description)
                return QueryResult(columns=columns, rows=list(cur.fetchall()))
        except pymysql.MySQLError as e:
            raise StatementExecutionError(f"MySQL error: {_reason(e)}", statement=sql) from e

    def close(self) -> None:
        try:
            self._conn.close()
        except pymysql.MySQLError as e:
            logger.debug("Ignoring error on close: %s", e)

    def __enter__(self) -> "PyMySQLAdapter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
