from __future__ import annotations

from pathlib import Path

import typer
from typer.testing import CliRunner

from epub_reader_cli.cli import read

runner = CliRunner()


def _app() -> typer.Typer:
    app = typer.Typer()
    app.command()(read)
    return app


def _options(tmp_path: Path) -> list[str]:
    return ["--state-file", str(tmp_path / "position.json"), "--log-file", str(tmp_path / "reader.log")]


def test_no_path_and_no_saved_position_prints_usage(tmp_path: Path) -> None:
    result = runner.invoke(_app(), _options(tmp_path))

    assert result.exit_code == 1
    assert "usage" in result.output


def test_unreadable_book_exits_with_error(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.epub"
    bogus.write_bytes(b"plain bytes")

    result = runner.invoke(_app(), [str(bogus), *_options(tmp_path)])

    assert result.exit_code == 1
    assert "error reading epub" in result.output
    assert not (tmp_path / "position.json").exists()
