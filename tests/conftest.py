"""
Shared fixtures.

Database access is replaced by fakes.FakeAdapter; settings are pointed at a
per-test temp directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from indexsense.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Point tool settings at a temp directory and drop the settings cache."""
    monkeypatch.setenv("INDEXSENSE_SITES_ROOT", str(tmp_path / "sites"))
    monkeypatch.setenv("INDEXSENSE_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.delenv("INDEXSENSE_CONNECT_TIMEOUT", raising=False)
    (tmp_path / "out").mkdir()
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def write_env(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a .env file and returning its path."""

    def _write(content: str | None = None, name: str = ".env", **overrides: str) -> Path:
        if content is None:
            values = {
                "DB_CONNECTION": "mysql",
                "DB_HOST": "127.0.0.1",
                "DB_PORT": "3306",
                "DB_DATABASE": "shop",
                "DB_USERNAME": "app",
                "DB_PASSWORD": "secret",
            }
            values.update(overrides)
            content = "\n".join(f"{k}={v}" for k, v in values.items()) + "\n"
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def users_table() -> dict[str, list[tuple[str, str]]]:
    """The canonical MySQL users table."""
    return {
        "users": [
            ("id", "int(11)"),
            ("user_id", "int(11)"),
            ("is_active", "tinyint(1)"),
            ("title", "varchar(100)"),
            ("bio", "text"),
        ],
    }
