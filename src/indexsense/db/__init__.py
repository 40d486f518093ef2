"""
Database access for IndexSense.

Provides one uniform adapter over MySQL (PyMySQL) and PostgreSQL (psycopg):
- list_tables(), list_columns(table), list_indexed_columns(table)
- execute(sql) for DDL and ad-hoc statements

Usage:
    from indexsense.db import connect

    with connect(params) as db:
        for table in db.list_tables():
            ...
"""

from __future__ import annotations

from indexsense.config import ConnectionParams, DBConnection, get_settings
from indexsense.db.base import ColumnInfo, DatabaseAdapter, QueryResult
from indexsense.db.mysql import PyMySQLAdapter
from indexsense.db.postgres import PsycopgAdapter


def connect(params: ConnectionParams, timeout_seconds: int | None = None) -> DatabaseAdapter:
    """
    Open an adapter for the backend named in ``params.connection``.

    Raises:
        DatabaseConnectionError: The backend refused or could not be reached.
    """
    if timeout_seconds is None:
        timeout_seconds = get_settings().connect_timeout
    if params.connection is DBConnection.MYSQL:
        return PyMySQLAdapter.connect(params, timeout_seconds)
    return PsycopgAdapter.connect(params, timeout_seconds)


__all__ = [
    "ColumnInfo",
    "DatabaseAdapter",
    "PsycopgAdapter",
    "PyMySQLAdapter",
    "QueryResult",
    "connect",
]
