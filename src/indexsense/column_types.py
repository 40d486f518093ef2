"""Normalization of backend column type names."""

from __future__ import annotations

from indexsense.config import DBConnection

PG_TYPE_MAP: dict[str, str] = {
    "character varying": "VARCHAR",
    "varchar": "VARCHAR",
    "character": "CHAR",
    "char": "CHAR",
    "text": "TEXT",
    "smallint": "SMALLINT",
    "integer": "INTEGER",
    "bigint": "BIGINT",
    "boolean": "BOOLEAN",
    "bool": "BOOLEAN",
    "date": "DATE",
    "timestamp without time zone": "TIMESTAMP",
    "timestamp with time zone": "TIMESTAMP",
    "enum": "ENUM",
}


def normalize_type(kind: DBConnection, raw_type: str) -> str:
    """
    Map a backend type string to the canonical uppercase vocabulary.

    MySQL reports parameterized types (``varchar(255)``, ``enum('a','b')``,
    ``int(10) unsigned``); everything from the first parenthesis on is
    dropped. PostgreSQL's information_schema ``data_type`` is looked up in
    PG_TYPE_MAP and passed through uppercased when unknown.
    """
    lowered = raw_type.strip().lower()
    if kind is DBConnection.MYSQL:
        return lowered.split("(", 1)[0].strip().upper()
    return PG_TYPE_MAP.get(lowered, lowered.upper())
