"""
Package-level exception hierarchy for IndexSense.

All exceptions inherit from IndexSenseError, enabling:
- Catching all IndexSense errors with a single except clause at the CLI boundary
- Context fields for diagnostics (config_key, table, statement, path)
- Structured serialization via to_dict(), logged by the CLI at debug level

Hierarchy:
    IndexSenseError
    ├── ArgumentError            – Wrong command-line argument count or mode
    ├── ConfigError              – Problems with the .env file
    │   ├── ConfigNotFoundError  – File missing / identifier not resolvable
    │   └── ConfigInvalidError   – Missing key, bad DB_CONNECTION or DB_PORT
    ├── DatabaseConnectionError  – Could not connect to the backend
    ├── SchemaQueryError         – Table / column / index listing failed
    ├── OutputWriteError         – Generated SQL file could not be written or re-read
    └── StatementExecutionError  – A single statement failed at execute time
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class IndexSenseError(Exception):
    """
    Base exception for all IndexSense errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for logging / JSON output."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


class ArgumentError(IndexSenseError):
    """Wrong number of command-line arguments or an unknown mode word."""
    pass


# ── Configuration Errors ─────────────────────────────────────────────────


class ConfigError(IndexSenseError):
    """
    Error reading or validating the connection configuration.

    Attributes:
        config_key: The .env key that caused the error (if known).
        path: The file being read (if known).
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        path: Path | None = None,
    ) -> None:
        self.config_key = config_key
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["config_key"] = self.config_key
        result["path"] = str(self.path) if self.path else None
        return result


class ConfigNotFoundError(ConfigError):
    """The .env file does not exist or no candidate location matched."""
    pass


class ConfigInvalidError(ConfigError):
    """A required key is missing or empty, or a value is not acceptable."""
    pass


# ── Database Errors ──────────────────────────────────────────────────────


class DatabaseConnectionError(IndexSenseError):
    """Could not open a connection to the database backend."""
    pass


class SchemaQueryError(IndexSenseError):
    """
    Listing tables, columns or indexes failed.

    Fatal when listing tables; recoverable (table skipped) for the
    per-table column and index queries.

    Attributes:
        table: The table being inspected, None for the table listing.
    """

    def __init__(self, message: str, table: str | None = None) -> None:
        self.table = table
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["table"] = self.table
        return result


class StatementExecutionError(IndexSenseError):
    """
    A statement was rejected by the backend.

    Attributes:
        statement: The SQL text that failed.
    """

    def __init__(self, message: str, statement: str | None = None) -> None:
        self.statement = statement
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["statement"] = self.statement
        return result


# ── Output Errors ────────────────────────────────────────────────────────


class OutputWriteError(IndexSenseError):
    """
    The generated SQL file could not be written or read back.

    Attributes:
        path: Destination path.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["path"] = str(self.path) if self.path else None
        return result
