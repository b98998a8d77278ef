from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

from epub_reader_cli.domain.models import ChapterRef, InputEvent, ReadingPosition

if TYPE_CHECKING:
    from epub_reader_cli.application.services.reader_engine import ReaderEngine


class ContainerStorePort(Protocol):
    def read_entry(self, name: str) -> str:
        raise NotImplementedError


class ChapterLoaderPort(Protocol):
    def load(self, chapter: ChapterRef, width: int) -> list[str]:
        raise NotImplementedError


class PositionStorePort(Protocol):
    def load(self) -> Optional[ReadingPosition]:
        raise NotImplementedError

    def save(self, position: ReadingPosition) -> None:
        raise NotImplementedError


class TerminalViewPort(Protocol):
    def size(self) -> tuple[int, int]:
        """Return ``(cols, rows)`` of the text viewport."""
        raise NotImplementedError

    def render(self, engine: ReaderEngine) -> None:
        raise NotImplementedError

    def next_event(self) -> InputEvent:
        raise NotImplementedError
