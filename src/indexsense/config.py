"""
Configuration for IndexSense.

Two sources:
- The application's .env file (KEY=VALUE lines) holding the DB_* connection
  parameters. Parsed with parse_env_file() and validated into an immutable
  ConnectionParams.
- INDEXSENSE_* environment variables for tool-level settings (where to look
  for .env files, where to write generated SQL), following 12-factor config.

Usage:
    from indexsense.config import load_connection_params

    params = load_connection_params("/srv/app/.env")
    params = load_connection_params("shop")   # probes <sites_root>/shop/.env
"""

from __future__ import annotations

import logging
import os
import tempfile
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from indexsense.exceptions import ConfigInvalidError, ConfigNotFoundError

logger = logging.getLogger(__name__)

REQUIRED_KEYS: tuple[str, ...] = (
    "DB_CONNECTION",
    "DB_HOST",
    "DB_PORT",
    "DB_DATABASE",
    "DB_USERNAME",
    "DB_PASSWORD",
)

# .env key -> ConnectionParams field
_FIELD_FOR_KEY = {
    "DB_CONNECTION": "connection",
    "DB_HOST": "host",
    "DB_PORT": "port",
    "DB_DATABASE": "database",
    "DB_USERNAME": "username",
    "DB_PASSWORD": "password",
}


class DBConnection(str, Enum):
    """Supported database backends, named as in DB_CONNECTION."""

    MYSQL = "mysql"
    PGSQL = "pgsql"

    @property
    def max_identifier_length(self) -> int:
        """Longest identifier (in bytes) the backend accepts."""
        return 64 if self is DBConnection.MYSQL else 63

    @property
    def quote_char(self) -> str:
        """Identifier quote character."""
        return "`" if self is DBConnection.MYSQL else '"'

    def quote(self, identifier: str) -> str:
        """Quote an identifier, doubling any embedded quote character."""
        q = self.quote_char
        return f"{q}{identifier.replace(q, q + q)}{q}"


class ConnectionParams(BaseModel):
    """Validated connection parameters for one database."""

    model_config = ConfigDict(frozen=True)

    connection: DBConnection
    host: str
    port: int
    database: str
    username: str
    password: str = Field(repr=False)

    @field_validator("connection", mode="before")
    @classmethod
    def _lower_connection(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, str],
        path: Path | None = None,
    ) -> "ConnectionParams":
        """
        Build parameters from a parsed .env mapping.

        Raises:
            ConfigInvalidError: A required key is missing or empty,
                DB_CONNECTION is not mysql/pgsql, or DB_PORT is not an integer.
        """
        for key in REQUIRED_KEYS:
            if not mapping.get(key):
                raise ConfigInvalidError(
                    f"Missing or empty '{key}' in .env file.",
                    config_key=key,
                    path=path,
                )

        try:
            return cls(**{field: mapping[key] for key, field in _FIELD_FOR_KEY.items()})
        except ValidationError as e:
            failed = e.errors()[0]["loc"][0] if e.errors() else None
            if failed == "connection":
                raise ConfigInvalidError(
                    "DB_CONNECTION must be either 'mysql' or 'pgsql'.",
                    config_key="DB_CONNECTION",
                    path=path,
                ) from e
            if failed == "port":
                raise ConfigInvalidError(
                    f"DB_PORT must be an integer, got '{mapping['DB_PORT']}'.",
                    config_key="DB_PORT",
                    path=path,
                ) from e
            raise ConfigInvalidError(f"Invalid connection settings: {e}", path=path) from e


def _strip_quotes(value: str) -> str:
    """Remove one layer of matching single or double quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_file(path: str | Path) -> dict[str, str]:
    """
    Read a .env-style file into a dict.

    Comment lines (first non-blank character '#') and lines without '='
    are ignored. Lines are split on the first '='. Later keys override
    earlier ones.

    Raises:
        ConfigNotFoundError: The file does not exist.
        ConfigInvalidError: The file cannot be read or is not valid UTF-8.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found - {path}", path=path)

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigInvalidError(
            f"Could not read {path}: not valid UTF-8 (byte {e.start})", path=path
        ) from e
    except OSError as e:
        raise ConfigInvalidError(
            f"Could not read {path}: {e.strerror or e}", path=path
        ) from e

    params: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        params[key.strip()] = _strip_quotes(value.strip())

    logger.debug("Parsed %d keys from %s", len(params), path)
    return params


# ── Tool settings ────────────────────────────────────────────────────────


class Settings(BaseModel):
    """
    IndexSense tool settings, loaded from INDEXSENSE_* environment variables.
    """

    model_config = ConfigDict(frozen=True)

    sites_root: Path = Field(
        default=Path("/var/www/html"),
        description="Directory probed for <identifier>/.env files",
    )
    output_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory receiving create_indexes_<db>.sql",
    )
    connect_timeout: int = Field(
        default=10,
        description="Driver connect timeout in seconds",
    )


def _parse_env_int(value: str | None, default: int) -> int:
    """Parse integer from environment variable."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Could not parse integer setting %r, using %d", value, default)
        return default


def load_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    - INDEXSENSE_SITES_ROOT
    - INDEXSENSE_OUTPUT_DIR
    - INDEXSENSE_CONNECT_TIMEOUT
    """
    kwargs: dict[str, Any] = {
        "connect_timeout": _parse_env_int(
            os.environ.get("INDEXSENSE_CONNECT_TIMEOUT"), 10
        ),
    }
    sites_root = os.environ.get("INDEXSENSE_SITES_ROOT")
    if sites_root:
        kwargs["sites_root"] = Path(sites_root)
    output_dir = os.environ.get("INDEXSENSE_OUTPUT_DIR")
    if output_dir:
        kwargs["output_dir"] = Path(output_dir)
    return Settings(**kwargs)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the process-wide settings instance.

    Result is cached for the lifetime of the process.
    """
    return load_settings_from_env()


def reset_settings() -> None:
    """Reset the cached settings (mainly for testing)."""
    get_settings.cache_clear()


# ── Resolution ───────────────────────────────────────────────────────────


def candidate_env_files(identifier: str, sites_root: Path) -> list[Path]:
    """Conventional .env locations for an application identifier."""
    return [
        sites_root / identifier / ".env",
        sites_root / f"{identifier}.backend" / ".env",
    ]


def resolve_env_file(target: str, settings: Settings | None = None) -> Path:
    """
    Turn a CLI argument into a .env path.

    An existing file is used directly; anything else is treated as an
    application identifier and looked up under the sites root.

    Raises:
        ConfigNotFoundError: Neither form resolves to a file.
    """
    direct = Path(target)
    if direct.is_file():
        return direct.resolve()

    settings = settings or get_settings()
    for candidate in candidate_env_files(target, settings.sites_root):
        if candidate.is_file():
            logger.debug("Resolved '%s' to %s", target, candidate)
            return candidate

    raise ConfigNotFoundError(f"No .env or backend .env file found for '{target}'.")


def load_connection_params(target: str, settings: Settings | None = None) -> ConnectionParams:
    """Resolve, parse and validate the .env file for a CLI target."""
    path = resolve_env_file(target, settings)
    return ConnectionParams.from_mapping(parse_env_file(path), path=path)
