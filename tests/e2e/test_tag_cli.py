# ABOUTME: End-to-end tests for the `novelshelf tag`, `genre`, `folder`, and `facets` commands.
# ABOUTME: Tests full tagging and filing workflows via Click's CliRunner with a real database.

from pathlib import Path

from click.testing import CliRunner

from novelshelf.cli import cli


class TestTagCliE2E:
    """E2E tests for the tag CLI workflow."""

    def test_full_tag_lifecycle(self, tmp_path: Path) -> None:
        """Full lifecycle: add, tag add, tag ls, info shows tags, find --tag, tag rm."""
        db_path = tmp_path / "e2e.db"
        runner = CliRunner()

        result = runner.invoke(cli, ["add", "Overgeared", "--db", str(db_path)])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["tag", "add", "1", "classic", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "classic" in result.output

        result = runner.invoke(cli, ["tag", "add", "1", "adventure", "--db", str(db_path)])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["tag", "ls", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "classic" in result.output
        assert "adventure" in result.output

        result = runner.invoke(cli, ["info", "1", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "classic" in result.output
        assert "adventure" in result.output

        result = runner.invoke(cli, ["find", "--tag", "classic", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Overgeared" in result.output

        result = runner.invoke(cli, ["tag", "rm", "1", "adventure", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Removed" in result.output

        result = runner.invoke(cli, ["info", "1", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "adventure" not in result.output
        assert "classic" in result.output

    def test_tag_missing_novel(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["tag", "add", "9", "x", "--db", str(tmp_path / "t.db")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_tag_rm_unknown_tag(self, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        runner = CliRunner()
        runner.invoke(cli, ["add", "Overgeared", "--db", str(db_path)])
        result = runner.invoke(cli, ["tag", "rm", "1", "ghost", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_tag_ls_empty(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["tag", "ls", "--db", str(tmp_path / "t.db")])
        assert result.exit_code == 0
        assert "No tags" in result.output


class TestFolderCliE2E:
    """E2E tests for folders and the facets listing."""

    def test_folder_workflow(self, tmp_path: Path) -> None:
        db_path = tmp_path / "f.db"
        runner = CliRunner()
        runner.invoke(cli, ["add", "Filed Novel", "--db", str(db_path)])
        runner.invoke(cli, ["add", "Loose Novel", "--db", str(db_path)])

        result = runner.invoke(
            cli, ["folder", "create", "Favorites", "--color", "#ffaa00", "--db", str(db_path)]
        )
        assert result.exit_code == 0
        assert "Created folder" in result.output

        result = runner.invoke(cli, ["folder", "add", "1", "1", "--db", str(db_path)])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["folder", "ls", "--db", str(db_path)])
        assert "Favorites" in result.output
        assert "#ffaa00" in result.output

        result = runner.invoke(cli, ["find", "--folder", "1", "--db", str(db_path)])
        assert "Filed Novel" in result.output
        assert "Loose Novel" not in result.output

        result = runner.invoke(cli, ["find", "--exclude-folder", "1", "--db", str(db_path)])
        assert "Loose Novel" in result.output
        assert "Filed Novel" not in result.output

        result = runner.invoke(cli, ["folder", "rm", "1", "1", "--db", str(db_path)])
        assert result.exit_code == 0
        result = runner.invoke(cli, ["folder", "rm", "1", "1", "--db", str(db_path)])
        assert result.exit_code == 1

    def test_duplicate_folder_fails(self, tmp_path: Path) -> None:
        db_path = tmp_path / "f.db"
        runner = CliRunner()
        runner.invoke(cli, ["folder", "create", "Later", "--db", str(db_path)])
        result = runner.invoke(cli, ["folder", "create", "Later", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_folder_add_missing_ids(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["folder", "add", "5", "6", "--db", str(tmp_path / "f.db")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_facets_lists_everything(self, tmp_path: Path) -> None:
        db_path = tmp_path / "f.db"
        runner = CliRunner()
        runner.invoke(cli, ["add", "Novel", "--db", str(db_path)])
        runner.invoke(cli, ["tag", "add", "1", "regression", "--db", str(db_path)])
        runner.invoke(cli, ["folder", "create", "Later", "--db", str(db_path)])

        result = runner.invoke(cli, ["facets", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Wuxia" in result.output
        assert "regression" in result.output
        assert "Later" in result.output

    def test_genre_add_missing_novel(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli, ["genre", "add", "3", "Fantasy", "--db", str(tmp_path / "g.db")]
        )
        assert result.exit_code == 1
        assert "not found" in result.output
