from __future__ import annotations

import typer

from epub_reader_cli.cli import read


def run() -> None:
    typer.run(read)
