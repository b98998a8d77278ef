from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Union

# Style markers travel inside the text as ANSI SGR sequences. The wrapper
# counts them as ordinary characters; the view turns them into attributes.
EMPHASIS_ON = "\x1b[1m"
EMPHASIS_OFF = "\x1b[0m"
BULLET_PREFIX = "- "


@dataclass(frozen=True)
class ReaderSettings:
    padding: int
    state_path: Path


@dataclass(frozen=True)
class ChapterRef:
    """One entry of the reading order.

    `content_path` is the archive entry name of the chapter document, already
    resolved against the package directory.
    """

    title: str
    content_path: str


@dataclass(frozen=True)
class ManifestEntry:
    id: str
    href: str
    media_type: Optional[str] = None
    properties: Optional[str] = None


TocDialect = Literal["nav", "ncx"]


@dataclass
class LogicalLine:
    fragments: list[str] = field(default_factory=list)

    def text(self) -> str:
        return "".join(self.fragments)


Mode = Literal["read", "navigate", "search", "help"]
Direction = Literal["forward", "backward"]


@dataclass
class ReaderState:
    mode: Mode = "read"
    chapter_index: int = 0
    scroll_position: int = 0
    nav_cursor: int = 0
    nav_top: int = 0
    search_buffer: str = ""
    message: Optional[str] = None


@dataclass(frozen=True)
class ReadingPosition:
    document_path: str
    chapter_index: int = 0
    scroll_position: int = 0


@dataclass(frozen=True)
class KeyPress:
    """A key event. `key` is the typed character or a lowercase key name
    such as ``"esc"``, ``"enter"``, ``"pagedown"`` or ``"f1"``."""

    key: str


@dataclass(frozen=True)
class Resize:
    cols: int
    rows: int


InputEvent = Union[KeyPress, Resize]
