"""Tests for the statement runner and TSV rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from indexsense.advisor import IndexStatement
from indexsense.config import DBConnection
from indexsense.db.base import QueryResult
from indexsense.exceptions import OutputWriteError, StatementExecutionError
from indexsense.runner import (
    execute_statements,
    format_tsv,
    output_path_for,
    read_statements,
    run_query,
    sanitize_name,
    write_statements,
)

from fakes import FakeAdapter


def _statements(*columns: str) -> list[IndexStatement]:
    return [IndexStatement.build(DBConnection.MYSQL, "users", c) for c in columns]


class TestOutputPath:
    """Tests for output file naming."""

    @pytest.mark.parametrize(
        "database, expected",
        [
            ("shop", "shop"),
            ("shop-prod_2", "shop-prod_2"),
            ("my db", "my_db"),
            ("../etc/passwd", "_etc_passwd"),
            ("café.db", "caf_db"),
        ],
    )
    def test_sanitize(self, database: str, expected: str) -> None:
        assert sanitize_name(database) == expected

    def test_output_path(self, tmp_path: Path) -> None:
        assert output_path_for("my db", tmp_path) == tmp_path / "create_indexes_my_db.sql"


class TestWriteAndRead:
    """Tests for persisting statements."""

    def test_one_statement_per_line(self, tmp_path: Path) -> None:
        path = tmp_path / "out.sql"

        count = write_statements(_statements("user_id", "title"), path)

        assert count == 2
        assert path.read_text(encoding="utf-8") == (
            "CREATE INDEX `users_user_id_idx` ON `users` (`user_id`);\n"
            "CREATE INDEX `users_title_idx` ON `users` (`title`);\n"
        )

    def test_overwrites_previous_run(self, tmp_path: Path) -> None:
        path = tmp_path / "out.sql"
        path.write_text("stale\nlines\nhere\n", encoding="utf-8")

        write_statements(_statements("is_active"), path)

        assert path.read_text(encoding="utf-8").splitlines() == [
            "CREATE INDEX `users_is_active_idx` ON `users` (`is_active`);"
        ]

    def test_nothing_to_write_removes_stale_file(self, tmp_path: Path) -> None:
        path = tmp_path / "out.sql"
        path.write_text("stale\n", encoding="utf-8")

        assert write_statements([], path) == 0
        assert not path.exists()

    def test_nothing_to_write_creates_nothing(self, tmp_path: Path) -> None:
        path = tmp_path / "out.sql"
        assert write_statements([], path) == 0
        assert not path.exists()

    def test_unwritable_destination(self, tmp_path: Path) -> None:
        path = tmp_path / "missing_dir" / "out.sql"
        with pytest.raises(OutputWriteError) as exc_info:
            write_statements(_statements("user_id"), path)
        assert exc_info.value.path == path

    def test_read_strips_semicolons_and_blanks(self, tmp_path: Path) -> None:
        path = tmp_path / "out.sql"
        path.write_text("CREATE INDEX a ON t (c);  \n\n  ;\nCREATE INDEX b ON t (d);;\n", encoding="utf-8")

        assert read_statements(path) == [
            "CREATE INDEX a ON t (c)",
            "CREATE INDEX b ON t (d)",
        ]


    def test_read_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "gone.sql"
        with pytest.raises(OutputWriteError) as exc_info:
            read_statements(path)
        assert exc_info.value.path == path
        assert "Unable to read back" in exc_info.value.message

    def test_read_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "out.sql"
        path.write_bytes(b"CREATE INDEX \xff ON t (c);\n")
        with pytest.raises(OutputWriteError):
            read_statements(path)


class TestExecuteStatements:
    """Tests for best-effort batch execution."""

    def test_failure_does_not_stop_batch(self) -> None:
        db = FakeAdapter(failing_statements={"dup_idx": "MySQL error: Duplicate key name 'dup_idx'"})

        outcomes = execute_statements(db, ["CREATE INDEX dup_idx ON t (a)", "CREATE INDEX ok_idx ON t (b)"])

        assert db.executed == ["CREATE INDEX dup_idx ON t (a)", "CREATE INDEX ok_idx ON t (b)"]
        assert [o.ok for o in outcomes] == [False, True]
        assert "Duplicate key name" in (outcomes[0].error or "")
        assert outcomes[1].error is None

    def test_empty_batch(self) -> None:
        assert execute_statements(FakeAdapter(), []) == []


class TestRunQuery:
    """Tests for the ad-hoc query path."""

    def test_returns_result(self) -> None:
        expected = QueryResult(columns=("n",), rows=[(3,)])
        db = FakeAdapter(results={"SELECT 3 AS n": expected})
        assert run_query(db, "SELECT 3 AS n") is expected

    def test_error_propagates(self) -> None:
        db = FakeAdapter(failing_statements={"nope": "PGSQL error: relation \"nope\" does not exist"})
        with pytest.raises(StatementExecutionError):
            run_query(db, "SELECT * FROM nope")


class TestFormatTsv:
    """Tests for result rendering."""

    def test_affected_rows(self) -> None:
        assert format_tsv(QueryResult(rows_affected=7)) == ["OK, affected rows: 7"]

    def test_rows_with_header(self) -> None:
        result = QueryResult(
            columns=("id", "email", "deleted_at"),
            rows=[(1, "a@example.com", None), (2, b"b@example.com", "2024-01-01")],
        )
        assert format_tsv(result) == [
            "id\temail\tdeleted_at",
            "1\ta@example.com\t",
            "2\tb@example.com\t2024-01-01",
        ]

    def test_empty_result_set_still_has_header(self) -> None:
        result = QueryResult(columns=("id",), rows=[])
        assert format_tsv(result) == ["id"]
