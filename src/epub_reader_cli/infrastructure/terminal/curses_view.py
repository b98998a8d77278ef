from __future__ import annotations

import curses
import re
from types import TracebackType
from typing import Optional, Union

from epub_reader_cli.application.services.reader_engine import ReaderEngine
from epub_reader_cli.domain.models import EMPHASIS_OFF, EMPHASIS_ON, InputEvent, KeyPress, Resize
from epub_reader_cli.domain.ports import TerminalViewPort
from epub_reader_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)

HELP_TEXT = """
                   Esc q  Quit
                    F1 ?  Help
                       /  Search
                     Tab  Table of Contents

PageDown Right Space f l  Page Down
         PageUp Left b h  Page Up
                       d  Half Page Down
                       u  Half Page Up
                  Down j  Line Down
                    Up k  Line Up
                  Home g  Chapter Start
                   End G  Chapter End
                       n  Search Forward
                       N  Search Backward
"""

_NAMED_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_PPAGE: "pageup",
    curses.KEY_NPAGE: "pagedown",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_F1: "f1",
}

_CONTROL_CHARS = {
    "\x1b": "esc",
    "\n": "enter",
    "\r": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\b": "backspace",
}

_MARKER_RE = re.compile(f"({re.escape(EMPHASIS_ON)}|{re.escape(EMPHASIS_OFF)})")


def translate_key(ch: Union[str, int]) -> Optional[str]:
    """Map a ``get_wch`` result to an engine key name, or None for keys the reader ignores."""
    if isinstance(ch, int):
        return _NAMED_KEYS.get(ch)
    if ch in _CONTROL_CHARS:
        return _CONTROL_CHARS[ch]
    if ch.isprintable():
        return ch
    return None


class CursesView(TerminalViewPort):
    """Full-screen curses presenter: text rows on top, one status row at the bottom."""

    def __init__(self) -> None:
        self._screen: Optional[curses.window] = None

    def __enter__(self) -> "CursesView":
        screen = curses.initscr()
        curses.noecho()
        curses.cbreak()
        screen.keypad(True)
        if hasattr(curses, "set_escdelay"):
            curses.set_escdelay(25)
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal cannot hide the cursor")
        self._screen = screen
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        screen = self._require_screen()
        screen.keypad(False)
        curses.nocbreak()
        curses.echo()
        try:
            curses.curs_set(1)
        except curses.error:
            logger.debug("Terminal cannot restore the cursor")
        curses.endwin()
        self._screen = None

    def size(self) -> tuple[int, int]:
        rows, cols = self._require_screen().getmaxyx()
        return cols, max(1, rows - 1)

    def next_event(self) -> InputEvent:
        screen = self._require_screen()
        while True:
            ch = screen.get_wch()
            if ch == curses.KEY_RESIZE:
                curses.update_lines_cols()
                cols, rows = self.size()
                logger.debug("Terminal resized | cols=%s rows=%s", cols, rows)
                return Resize(cols=cols, rows=rows)
            key = translate_key(ch)
            if key is not None:
                return KeyPress(key)

    def render(self, engine: ReaderEngine) -> None:
        screen = self._require_screen()
        screen.erase()
        mode = engine.state.mode

        if mode == "help":
            for y, line in enumerate(HELP_TEXT.splitlines()):
                self._put(y, 0, line)
        elif mode == "navigate":
            for y, (title, is_cursor) in enumerate(engine.visible_chapters()):
                self._put(y, 0, title, curses.A_REVERSE if is_cursor else curses.A_NORMAL)
        else:
            self._render_text(engine)

        status_row = engine.rows
        if mode == "search":
            self._put(status_row, 0, "/" + engine.state.search_buffer)
        elif engine.state.message:
            self._put(status_row, 0, engine.state.message, curses.A_BOLD)

        screen.refresh()

    def _render_text(self, engine: ReaderEngine) -> None:
        bold = engine.emphasis_at_top()
        for y, line in enumerate(engine.visible_lines()):
            x = engine.padding
            for part in _MARKER_RE.split(line):
                if part == EMPHASIS_ON:
                    bold = True
                elif part == EMPHASIS_OFF:
                    bold = False
                elif part:
                    self._put(y, x, part, curses.A_BOLD if bold else curses.A_NORMAL)
                    x += len(part)

    def _put(self, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
        screen = self._require_screen()
        rows, cols = screen.getmaxyx()
        # The bottom-right cell cannot be written without curses raising.
        room = cols - 1 - x
        if y >= rows or room <= 0:
            return
        screen.addnstr(y, x, text, room, attr)

    def _require_screen(self) -> curses.window:
        if self._screen is None:
            raise RuntimeError("CursesView used outside its context")
        return self._screen
