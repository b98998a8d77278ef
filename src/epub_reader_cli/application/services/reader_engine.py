from __future__ import annotations

from epub_reader_cli.domain.errors import ArchiveError, MalformedChapterError
from epub_reader_cli.domain.models import (
    EMPHASIS_OFF,
    EMPHASIS_ON,
    ChapterRef,
    Direction,
    InputEvent,
    KeyPress,
    ReaderState,
    ReadingPosition,
    Resize,
)
from epub_reader_cli.domain.ports import ChapterLoaderPort
from epub_reader_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)

# Read mode
QUIT = frozenset({"esc", "q"})
HELP = frozenset({"f1", "?"})
NAVIGATE = frozenset({"tab"})
SEARCH = frozenset({"/"})
SEARCH_NEXT = frozenset({"n"})
SEARCH_PREV = frozenset({"N"})
LINE_DOWN = frozenset({"down", "j"})
LINE_UP = frozenset({"up", "k"})
HALF_PAGE_DOWN = frozenset({"d"})
HALF_PAGE_UP = frozenset({"u"})
PAGE_DOWN = frozenset({"pagedown", "right", " ", "f", "l"})
PAGE_UP = frozenset({"pageup", "left", "b", "h"})
CHAPTER_START = frozenset({"home", "g"})
CHAPTER_END = frozenset({"end", "G"})

# Navigate mode
NAV_CANCEL = frozenset({"esc", "h", "q"})
NAV_CONFIRM = frozenset({"enter", "tab", "l"})
NAV_DOWN = frozenset({"down", "j"})
NAV_UP = frozenset({"up", "k"})
NAV_FIRST = frozenset({"home", "g"})
NAV_LAST = frozenset({"end", "G"})

# Search mode
SEARCH_CANCEL = frozenset({"esc"})
SEARCH_CONFIRM = frozenset({"enter"})
SEARCH_ERASE = frozenset({"backspace"})


class ReaderEngine:
    """Reading state plus the key-driven state machine over wrapped chapter lines.

    The engine owns the current chapter's wrapped lines and replaces them
    wholesale whenever the chapter or the wrap width changes. `rows` is the
    number of text rows in the viewport; `cols` is the full terminal width,
    from which `padding` is taken on both sides.
    """

    def __init__(
        self,
        chapters: list[ChapterRef],
        loader: ChapterLoaderPort,
        cols: int,
        rows: int,
        padding: int = 3,
    ) -> None:
        if not chapters:
            raise ValueError("A document needs at least one chapter")
        self.chapters = chapters
        self.loader = loader
        self.cols = cols
        self.rows = max(1, rows)
        self.padding = padding
        self.state = ReaderState()
        self.lines: list[str] = []

    @property
    def width(self) -> int:
        return max(1, self.cols - 2 * self.padding)

    # ------------------------------------------------------------------
    # Session boundary
    # ------------------------------------------------------------------

    def open(self, chapter_index: int = 0, scroll_position: int = 0) -> None:
        """Load the starting chapter. Load errors propagate to the caller."""
        if not 0 <= chapter_index < len(self.chapters):
            logger.warning(
                "Saved chapter out of range, starting from the beginning | index=%s chapters=%s",
                chapter_index,
                len(self.chapters),
            )
            chapter_index, scroll_position = 0, 0

        self._load(chapter_index)
        self.state.scroll_position = self._clamp_position(scroll_position)

    def position(self, document_path: str) -> ReadingPosition:
        return ReadingPosition(
            document_path=document_path,
            chapter_index=self.state.chapter_index,
            scroll_position=self.state.scroll_position,
        )

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    def handle(self, event: InputEvent) -> bool:
        """Apply one input event. Returns True when the reader should quit."""
        if isinstance(event, Resize):
            self.resize(event.cols, event.rows)
            return False

        self.state.message = None
        mode = self.state.mode
        quit_requested = False

        if mode == "read":
            quit_requested = self._handle_read(event)
        elif mode == "help":
            self.state.mode = "read"
        elif mode == "navigate":
            self._handle_navigate(event)
        elif mode == "search":
            self._handle_search(event)

        if self.state.mode != mode:
            logger.debug("Mode changed | from=%s to=%s key=%r", mode, self.state.mode, event.key)
        return quit_requested

    def _handle_read(self, event: KeyPress) -> bool:
        key = event.key
        if key in QUIT:
            return True
        if key in HELP:
            self.state.mode = "help"
        elif key in NAVIGATE:
            self.start_navigation()
        elif key in SEARCH:
            self.state.search_buffer = ""
            self.state.mode = "search"
        elif key in SEARCH_NEXT:
            self.search("forward")
        elif key in SEARCH_PREV:
            self.search("backward")
        elif key in CHAPTER_END:
            self.state.scroll_position = self._last_page_offset()
        elif key in CHAPTER_START:
            self.state.scroll_position = 0
        elif key in HALF_PAGE_DOWN:
            self.scroll_down(self.rows // 2)
        elif key in HALF_PAGE_UP:
            self.scroll_up(self.rows // 2)
        elif key in LINE_UP:
            self.scroll_up(1)
        elif key in PAGE_UP:
            self.scroll_up(self.rows)
        elif key in LINE_DOWN:
            self.scroll_down(1)
        elif key in PAGE_DOWN:
            self.scroll_down(self.rows)
        return False

    def _handle_navigate(self, event: KeyPress) -> None:
        key = event.key
        state = self.state
        last = len(self.chapters) - 1

        if key in NAV_CANCEL:
            state.mode = "read"
        elif key in NAV_CONFIRM:
            state.mode = "read"
            if self._try_load(state.nav_cursor):
                state.scroll_position = 0
        elif key in NAV_DOWN:
            if state.nav_cursor < last:
                state.nav_cursor += 1
                if state.nav_cursor == state.nav_top + self.rows:
                    state.nav_top += 1
        elif key in NAV_UP:
            if state.nav_cursor > 0:
                if state.nav_cursor == state.nav_top:
                    state.nav_top -= 1
                state.nav_cursor -= 1
        elif key in NAV_FIRST:
            state.nav_cursor = 0
            state.nav_top = 0
        elif key in NAV_LAST:
            state.nav_cursor = last
            state.nav_top = max(len(self.chapters) - self.rows, 0)

    def _handle_search(self, event: KeyPress) -> None:
        key = event.key
        state = self.state
        if key in SEARCH_CANCEL:
            state.search_buffer = ""
            state.mode = "read"
        elif key in SEARCH_CONFIRM:
            state.mode = "read"
            self.search("forward")
        elif key in SEARCH_ERASE:
            state.search_buffer = state.search_buffer[:-1]
        elif len(key) == 1:
            state.search_buffer += key

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start_navigation(self) -> None:
        state = self.state
        state.nav_cursor = state.chapter_index
        state.nav_top = max(state.nav_cursor - (self.rows - 1), 0)
        state.mode = "navigate"

    def scroll_down(self, n: int) -> None:
        state = self.state
        if self.rows < len(self.lines) - state.scroll_position:
            state.scroll_position += n
        elif state.chapter_index < len(self.chapters) - 1:
            if self._try_load(state.chapter_index + 1):
                state.scroll_position = 0

    def scroll_up(self, n: int) -> None:
        state = self.state
        if state.scroll_position > 0:
            state.scroll_position = max(state.scroll_position - n, 0)
        elif state.chapter_index > 0:
            if self._try_load(state.chapter_index - 1):
                state.scroll_position = self._last_page_offset()

    def search(self, direction: Direction) -> None:
        """Move to the nearest line containing the search buffer, within the current chapter."""
        query = self.state.search_buffer
        pos = self.state.scroll_position

        if direction == "forward":
            for i in range(pos + 1, len(self.lines)):
                if query in self.lines[i]:
                    self.state.scroll_position = i
                    return
        else:
            for i in range(min(pos, len(self.lines)) - 1, -1, -1):
                if query in self.lines[i]:
                    self.state.scroll_position = i
                    return

        logger.debug("Search found nothing | query=%r direction=%s from=%s", query, direction, pos)

    def resize(self, cols: int, rows: int) -> None:
        width_changed = cols != self.cols
        self.cols = cols
        self.rows = max(1, rows)

        # Keep the navigation cursor on screen when the list viewport shrinks.
        state = self.state
        state.nav_top = max(min(state.nav_top, state.nav_cursor), state.nav_cursor - (self.rows - 1), 0)

        if not self._try_load(self.state.chapter_index):
            return
        # Old offsets mean nothing once line boundaries move.
        if width_changed:
            self.state.scroll_position = 0
        else:
            self.state.scroll_position = self._clamp_position(self.state.scroll_position)

    # ------------------------------------------------------------------
    # View helpers
    # ------------------------------------------------------------------

    def visible_lines(self) -> list[str]:
        pos = self.state.scroll_position
        return self.lines[pos:pos + self.rows]

    def visible_chapters(self) -> list[tuple[str, bool]]:
        """Return ``(title, is_cursor)`` for each row of the navigation list."""
        top = self.state.nav_top
        return [
            (chapter.title, top + offset == self.state.nav_cursor)
            for offset, chapter in enumerate(self.chapters[top:top + self.rows])
        ]

    def emphasis_at_top(self) -> bool:
        """Whether an emphasis span opened above the viewport is still open at its top line."""
        for line in reversed(self.lines[: self.state.scroll_position]):
            on, off = line.rfind(EMPHASIS_ON), line.rfind(EMPHASIS_OFF)
            if on != -1 or off != -1:
                return on > off
        return False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self, index: int) -> None:
        self.lines = self.loader.load(self.chapters[index], self.width)
        self.state.chapter_index = index
        logger.info(
            "Chapter loaded | index=%s title=%r lines=%s width=%s",
            index,
            self.chapters[index].title,
            len(self.lines),
            self.width,
        )

    def _try_load(self, index: int) -> bool:
        """Load a chapter during the session; on failure keep the current one and report it."""
        try:
            self._load(index)
        except (ArchiveError, MalformedChapterError) as exc:
            logger.warning(
                "Chapter load failed | index=%s path=%s error=%s",
                index,
                self.chapters[index].content_path,
                exc,
            )
            self.state.message = f"Cannot open chapter {self.chapters[index].title!r}: {exc}"
            return False
        return True

    def _last_page_offset(self) -> int:
        count = len(self.lines)
        offset = (count // self.rows) * self.rows
        # An exact multiple would point one past the last line.
        if offset >= count:
            offset = max(offset - self.rows, 0)
        return offset

    def _clamp_position(self, position: int) -> int:
        return min(max(position, 0), max(len(self.lines) - 1, 0))
