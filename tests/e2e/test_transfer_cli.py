# ABOUTME: End-to-end tests for the `novelshelf export` and `novelshelf import` commands.
# ABOUTME: Exports one library to a ZIP and imports it into another via Click's CliRunner.

import zipfile
from pathlib import Path

from click.testing import CliRunner

from novelshelf.cli import cli


class TestTransferCliE2E:
    """E2E tests for library export and import."""

    def test_export_then_import(self, tmp_path: Path) -> None:
        source = tmp_path / "source.db"
        target = tmp_path / "target.db"
        archive = tmp_path / "backup.zip"
        runner = CliRunner()

        runner.invoke(cli, ["add", "Exported Novel", "--author", "Someone", "--db", str(source)])
        runner.invoke(cli, ["tag", "add", "1", "backup", "--db", str(source)])

        result = runner.invoke(cli, ["export", str(archive), "--db", str(source)])
        assert result.exit_code == 0
        assert "Exported 1 novel(s)" in result.output
        assert archive.exists()

        result = runner.invoke(cli, ["import", str(archive), "--db", str(target)])
        assert result.exit_code == 0
        assert "Imported 1 novel(s)" in result.output

        result = runner.invoke(cli, ["info", "1", "--db", str(target)])
        assert "Exported Novel" in result.output
        assert "backup" in result.output

    def test_import_bad_archive(self, tmp_path: Path) -> None:
        archive = tmp_path / "bad.zip"
        with zipfile.ZipFile(archive, "w") as bundle:
            bundle.writestr("data.json", '{"version": 99, "novels": []}')

        runner = CliRunner()
        result = runner.invoke(cli, ["import", str(archive), "--db", str(tmp_path / "t.db")])
        assert result.exit_code == 1
        assert "Import failed" in result.output

    def test_import_missing_file(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli, ["import", str(tmp_path / "nope.zip"), "--db", str(tmp_path / "t.db")]
        )
        assert result.exit_code != 0
