from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, ContextManager, Optional

from epub_reader_cli.application.services.chapter_loader import ChapterLoader
from epub_reader_cli.application.services.reader_engine import ReaderEngine
from epub_reader_cli.domain.errors import NoDocumentError
from epub_reader_cli.domain.models import ReaderSettings, ReadingPosition
from epub_reader_cli.domain.ports import PositionStorePort, TerminalViewPort
from epub_reader_cli.infrastructure.epub.container_store import ZipContainerStore
from epub_reader_cli.infrastructure.epub.navigation_resolver import NavigationResolver
from epub_reader_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)


def canonical_path(path: Path) -> str:
    return str(path.expanduser().resolve())


def resolve_start_position(
    saved: Optional[ReadingPosition],
    requested: Optional[Path],
) -> Optional[ReadingPosition]:
    """Pick where to start reading.

    The saved position wins only when no document was requested or when it
    belongs to the requested document; otherwise the requested document opens
    at its beginning. Returns None when there is nothing to open.
    """
    if requested is None:
        return saved

    requested_path = canonical_path(requested)
    if saved is not None and saved.document_path == requested_path:
        return saved
    return ReadingPosition(document_path=requested_path)


@dataclass(frozen=True)
class ReadingSession:
    position_store: PositionStorePort
    view_factory: Callable[[], ContextManager[TerminalViewPort]]
    settings: ReaderSettings

    def run(self, requested: Optional[Path]) -> ReadingPosition:
        """Read a document interactively and persist where the reader stopped.

        Archive and structure errors raised while resolving the document escape
        before the terminal is taken over.
        """
        start = resolve_start_position(self.position_store.load(), requested)
        if start is None:
            raise NoDocumentError("No document given and no saved reading position")

        logger.info(
            "Opening document | path=%s chapter=%s position=%s",
            start.document_path,
            start.chapter_index,
            start.scroll_position,
        )

        with ZipContainerStore.open(Path(start.document_path)) as archive:
            chapters = NavigationResolver(store=archive).resolve()

            with self.view_factory() as view:
                cols, rows = view.size()
                engine = ReaderEngine(
                    chapters=chapters,
                    loader=ChapterLoader(store=archive),
                    cols=cols,
                    rows=rows,
                    padding=self.settings.padding,
                )
                engine.open(start.chapter_index, start.scroll_position)

                while True:
                    view.render(engine)
                    if engine.handle(view.next_event()):
                        break

        final = engine.position(start.document_path)
        self.position_store.save(final)
        logger.info(
            "Session closed | chapter=%s position=%s",
            final.chapter_index,
            final.scroll_position,
        )
        return final
