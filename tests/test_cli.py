"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from fsconnector.cli import _iter_file_chunks, _setup_logging, app

runner = CliRunner()

JULY_2021 = 1625506960301
OCTOBER_2021 = 1635506960301


@pytest.fixture
def source(tmp_path: Path) -> Path:
    directory = tmp_path / "src"
    directory.mkdir()
    (directory / "a.txt").write_text("hello")
    return directory


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("fsconnector.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("fsconnector.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestIterFileChunks:
    """Tests for _iter_file_chunks helper."""

    def test_reads_whole_file(self, tmp_path: Path) -> None:
        path = tmp_path / "data.bin"
        path.write_bytes(b"x" * 10)

        assert b"".join(_iter_file_chunks(path)) == b"x" * 10

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.bin"
        path.touch()

        assert list(_iter_file_chunks(path)) == []


class TestListCommand:
    """Tests for the list command."""

    def test_list_documents(self, source: Path) -> None:
        """Shows one row per document."""
        result = runner.invoke(app, ["list", str(source)])
        assert result.exit_code == 0
        assert "a.txt" in result.stdout
        assert "text/plain" in result.stdout

    def test_list_empty_directory(self, tmp_path: Path) -> None:
        """Shows a message when nothing is found."""
        empty_dir = tmp_path / "empty"
        empty_dir.mkdir()

        result = runner.invoke(app, ["list", str(empty_dir)])
        assert result.exit_code == 0
        assert "No documents found" in result.stdout

    def test_list_date_filter(self, source: Path) -> None:
        """Files modified outside the window are hidden."""
        result = runner.invoke(
            app, ["list", str(source), "--start", str(JULY_2021), "--end", str(OCTOBER_2021)]
        )
        assert result.exit_code == 0
        assert "No documents found" in result.stdout

    def test_list_missing_source(self, tmp_path: Path) -> None:
        """Exits with an error when the source cannot be read."""
        result = runner.invoke(app, ["list", str(tmp_path / "missing"), "-v"])
        assert result.exit_code == 1
        assert "Cannot read" in result.stdout


class TestMetadataCommand:
    """Tests for the metadata command."""

    def test_metadata(self, source: Path) -> None:
        result = runner.invoke(app, ["metadata", str(source / "a.txt")])
        assert result.exit_code == 0
        assert "fileName" in result.stdout
        assert "fileSize" in result.stdout
        assert "5" in result.stdout

    def test_metadata_missing_file(self, tmp_path: Path) -> None:
        """A missing document is reported as a bad parameter."""
        result = runner.invoke(app, ["metadata", str(tmp_path / "missing.txt")])
        assert result.exit_code == 2


class TestFetchCommand:
    """Tests for the fetch command."""

    def test_fetch_copies_content(self, source: Path, tmp_path: Path) -> None:
        out = tmp_path / "copy.txt"

        result = runner.invoke(app, ["fetch", str(source / "a.txt"), "--out", str(out)])
        assert result.exit_code == 0
        assert out.read_bytes() == b"hello"
        assert "Copied 5 bytes" in result.stdout

    def test_fetch_missing_document(self, tmp_path: Path) -> None:
        """A missing document produces an empty copy."""
        out = tmp_path / "copy.txt"

        result = runner.invoke(app, ["fetch", str(tmp_path / "missing.txt"), "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_bytes() == b""

    def test_fetch_unwritable_destination(self, source: Path, tmp_path: Path) -> None:
        """Exits with an error line instead of a traceback."""
        out = tmp_path / "missing-dir" / "copy.txt"

        result = runner.invoke(app, ["fetch", str(source / "a.txt"), "--out", str(out)])
        assert result.exit_code == 1
        assert "Could not fetch" in result.stdout


class TestDeleteCommand:
    """Tests for the delete command."""

    def test_delete_file(self, source: Path) -> None:
        target = source / "a.txt"

        result = runner.invoke(app, ["delete", str(target), "--all-versions"])
        assert result.exit_code == 0
        assert "Deleted" in result.stdout
        assert not target.exists()

    def test_delete_missing(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["delete", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1
        assert "Could not delete" in result.stdout

    def test_delete_non_empty_directory(self, source: Path) -> None:
        result = runner.invoke(app, ["delete", str(source)])
        assert result.exit_code == 1
        assert source.exists()


class TestWriteCommand:
    """Tests for the write command."""

    def test_write_with_xml_sidecar(self, source: Path, tmp_path: Path) -> None:
        output = tmp_path / "out"

        result = runner.invoke(
            app,
            ["write", str(source / "a.txt"), "--output", str(output), "--parent-path", "docs/2024"],
        )
        assert result.exit_code == 0
        assert "Wrote" in result.stdout
        written = output / "docs" / "2024" / "a.txt"
        assert written.read_bytes() == b"hello"
        sidecar = output / "docs" / "2024" / "a.txt.metadata.properties.xml"
        assert '<entry key="fileName">a.txt</entry>' in sidecar.read_text(encoding="utf-8")

    def test_write_with_properties_sidecar(self, source: Path, tmp_path: Path) -> None:
        output = tmp_path / "out"

        result = runner.invoke(
            app,
            [
                "write",
                str(source / "a.txt"),
                "-o",
                str(output),
                "--parent-path",
                "docs",
                "--properties",
            ],
        )
        assert result.exit_code == 0
        sidecar = output / "docs" / "a.txt.metadata.properties.properties"
        assert "fileSize=5" in sidecar.read_text(encoding="utf-8").splitlines()

    def test_write_missing_source(self, tmp_path: Path) -> None:
        """Typer rejects a source that does not exist."""
        result = runner.invoke(
            app, ["write", str(tmp_path / "missing.txt"), "--output", str(tmp_path / "out")]
        )
        assert result.exit_code == 2

    def test_write_unwritable_output(self, source: Path, tmp_path: Path) -> None:
        """Exits with an error line instead of a traceback."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        result = runner.invoke(
            app, ["write", str(source / "a.txt"), "--output", str(blocker), "--parent-path", "docs"]
        )
        assert result.exit_code == 1
        assert "Could not write" in result.stdout


class TestServeCommand:
    """Tests for the serve command."""

    def test_serve_starts_server(self, tmp_path: Path) -> None:
        """Starts uvicorn server with correct parameters."""
        with patch("uvicorn.run") as mock_uvicorn_run:
            result = runner.invoke(
                app,
                [
                    "serve",
                    "--host",
                    "0.0.0.0",
                    "--port",
                    "9000",
                    "--file-path",
                    str(tmp_path),
                    "--cache",
                ],
            )
            assert result.exit_code == 0
            mock_uvicorn_run.assert_called_once()
            call_kwargs = mock_uvicorn_run.call_args[1]
            assert call_kwargs["host"] == "0.0.0.0"
            assert call_kwargs["port"] == 9000

        served = mock_uvicorn_run.call_args[0][0]
        assert served.state.config.use_cache is True
        assert served.state.config.file_path == tmp_path
