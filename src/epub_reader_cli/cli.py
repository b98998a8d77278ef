from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from epub_reader_cli.application.services.reading_session import ReadingSession
from epub_reader_cli.domain.errors import EpubReaderError, NoDocumentError
from epub_reader_cli.domain.models import ReaderSettings
from epub_reader_cli.infrastructure.logging.logger_factory import configure_logging, create_logger
from epub_reader_cli.infrastructure.persistence.json_position_store import DEFAULT_STATE_PATH, JsonPositionStore
from epub_reader_cli.infrastructure.terminal.curses_view import CursesView

console = Console(stderr=True)
logger = create_logger(__name__)

DEFAULT_LOG_PATH = DEFAULT_STATE_PATH.with_name("reader.log")


def read(
    path: Annotated[Optional[Path], typer.Argument(file_okay=True, dir_okay=False, help="EPUB file to open; defaults to the last one read")] = None,
    padding: Annotated[int, typer.Option("--padding", min=0, max=20, help="Blank columns on each side of the text")] = 3,
    state_file: Annotated[Path, typer.Option("--state-file", envvar="EPUB_READER_STATE_FILE", dir_okay=False, help="Where the reading position is kept")] = DEFAULT_STATE_PATH,
    log_level: Annotated[str, typer.Option("--log-level", help="Logging level: DEBUG, INFO or WARNING")] = "WARNING",
    log_file: Annotated[Path, typer.Option("--log-file", dir_okay=False, help="Log destination while the reader owns the terminal")] = DEFAULT_LOG_PATH,
) -> None:
    """Read an EPUB in the terminal."""

    configure_logging(log_level, log_file)

    settings = ReaderSettings(padding=padding, state_path=state_file)
    session = ReadingSession(
        position_store=JsonPositionStore(path=settings.state_path),
        view_factory=CursesView,
        settings=settings,
    )

    try:
        final = session.run(path)
    except NoDocumentError:
        console.print("usage: epub-reader PATH")
        raise typer.Exit(code=1)
    except EpubReaderError as exc:
        logger.error("Cannot read document | path=%s error=%s", path, exc)
        console.print(f"[red]error reading epub:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    logger.info("Reader finished | document=%s chapter=%s", final.document_path, final.chapter_index)
