# ABOUTME: End-to-end tests for the novelshelf CLI.
# ABOUTME: Tests novel, migrate, and find commands via Click's CliRunner with a real database.

from pathlib import Path

from click.testing import CliRunner

from novelshelf.cli import cli


def _invoke(runner: CliRunner, db_path: Path, *args: str):
    return runner.invoke(cli, [*args, "--db", str(db_path)])


class TestCliMigrate:
    """E2E tests for `novelshelf migrate`."""

    def test_fresh_database_reports_revisions(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = _invoke(runner, tmp_path / "lib.db", "migrate")
        assert result.exit_code == 0
        assert "Applied 3 revision(s)" in result.output
        assert "Schema version 3 of 3" in result.output

    def test_second_run_is_noop(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"
        _invoke(runner, db_path, "migrate")
        result = _invoke(runner, db_path, "migrate")
        assert result.exit_code == 0
        assert "already up to date" in result.output

    def test_unopenable_database_fails_cleanly(self, tmp_path: Path) -> None:
        """A path that cannot be a database gives a Click error, not a traceback."""
        runner = CliRunner()
        result = _invoke(runner, tmp_path, "migrate")
        assert result.exit_code == 1
        assert "Cannot open library" in result.output


class TestCliNovels:
    """E2E tests for `novelshelf add`, `info`, and `rm`."""

    def test_add_and_info(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"

        result = _invoke(
            runner,
            db_path,
            "add",
            "Omniscient Reader",
            "--author",
            "Sing Shong",
            "--status",
            "ongoing",
        )
        assert result.exit_code == 0
        assert "as novel 1" in result.output

        result = _invoke(runner, db_path, "info", "1")
        assert result.exit_code == 0
        assert "Omniscient Reader" in result.output
        assert "Sing Shong" in result.output
        assert "ongoing" in result.output

    def test_add_blank_title_fails(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = _invoke(runner, tmp_path / "lib.db", "add", "   ")
        assert result.exit_code == 1
        assert "must not be empty" in result.output

    def test_info_missing_novel(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = _invoke(runner, tmp_path / "lib.db", "info", "42")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_rm_with_yes(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"
        _invoke(runner, db_path, "add", "Doomed")

        result = _invoke(runner, db_path, "rm", "1", "--yes")
        assert result.exit_code == 0
        assert "Deleted" in result.output

        result = _invoke(runner, db_path, "info", "1")
        assert result.exit_code == 1

    def test_rm_declined_keeps_novel(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"
        _invoke(runner, db_path, "add", "Survivor")

        result = runner.invoke(cli, ["rm", "1", "--db", str(db_path)], input="n\n")
        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert _invoke(runner, db_path, "info", "1").exit_code == 0


class TestCliFind:
    """E2E tests for `novelshelf find`."""

    def test_find_lists_matches(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"
        _invoke(runner, db_path, "add", "Solo Leveling", "--author", "Chugong")
        _invoke(runner, db_path, "add", "Mushoku Tensei", "--author", "Rifujin")

        result = _invoke(runner, db_path, "find", "-q", "solo")
        assert result.exit_code == 0
        assert "Solo Leveling" in result.output
        assert "Mushoku" not in result.output
        assert "1 novel(s)" in result.output

    def test_find_empty(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = _invoke(runner, tmp_path / "lib.db", "find")
        assert result.exit_code == 0
        assert "No novels found" in result.output

    def test_ls_is_an_alias(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"
        _invoke(runner, db_path, "add", "Omniscient Reader")

        result = _invoke(runner, db_path, "ls")
        assert result.exit_code == 0
        assert "Omniscient Reader" in result.output

    def test_find_by_genre_name(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"
        _invoke(runner, db_path, "add", "Elf Story")
        _invoke(runner, db_path, "add", "Mech Story")
        _invoke(runner, db_path, "genre", "add", "1", "Fantasy")
        _invoke(runner, db_path, "genre", "add", "2", "Mecha")

        result = _invoke(runner, db_path, "find", "--genre", "fantasy")
        assert result.exit_code == 0
        assert "Elf Story" in result.output
        assert "Mech Story" not in result.output

    def test_find_unknown_tag_fails(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = _invoke(runner, tmp_path / "lib.db", "find", "--tag", "nope")
        assert result.exit_code == 1
        assert "Tag 'nope' not found" in result.output

    def test_find_sort_and_limit(self, tmp_path: Path) -> None:
        runner = CliRunner()
        db_path = tmp_path / "lib.db"
        for title in ("Charlie", "alpha", "Bravo"):
            _invoke(runner, db_path, "add", title)

        result = _invoke(
            runner, db_path, "find", "--sort", "title", "--order", "asc", "--limit", "2"
        )
        assert result.exit_code == 0
        assert "alpha" in result.output
        assert "Bravo" in result.output
        assert "Charlie" not in result.output
