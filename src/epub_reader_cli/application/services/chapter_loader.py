from __future__ import annotations

from dataclasses import dataclass

from epub_reader_cli.application.services.line_wrapper import wrap_line
from epub_reader_cli.domain.models import ChapterRef
from epub_reader_cli.domain.ports import ChapterLoaderPort, ContainerStorePort
from epub_reader_cli.infrastructure.epub.markup_flow import flow_chapter
from epub_reader_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)


@dataclass(frozen=True)
class ChapterLoader(ChapterLoaderPort):
    """Read, flow and wrap one chapter into display lines."""

    store: ContainerStorePort

    def load(self, chapter: ChapterRef, width: int) -> list[str]:
        text = self.store.read_entry(chapter.content_path)
        logical = flow_chapter(text, chapter.content_path)

        wrapped: list[str] = []
        for line in logical:
            wrapped.extend(wrap_line(line.text(), width))

        logger.debug(
            "Chapter flowed | path=%s logical_lines=%s wrapped_lines=%s width=%s",
            chapter.content_path,
            len(logical),
            len(wrapped),
            width,
        )
        return wrapped
