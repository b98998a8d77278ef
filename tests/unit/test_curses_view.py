from __future__ import annotations

import curses

import pytest

from epub_reader_cli.infrastructure.terminal.curses_view import HELP_TEXT, translate_key


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("q", "q"),
        ("G", "G"),
        (" ", " "),
        ("/", "/"),
        ("\x1b", "esc"),
        ("\n", "enter"),
        ("\t", "tab"),
        ("\x7f", "backspace"),
        (curses.KEY_UP, "up"),
        (curses.KEY_NPAGE, "pagedown"),
        (curses.KEY_HOME, "home"),
        (curses.KEY_F1, "f1"),
    ],
)
def test_translate_key(raw: object, expected: str) -> None:
    assert translate_key(raw) == expected  # type: ignore[arg-type]


def test_unhandled_keys_are_dropped() -> None:
    assert translate_key("\x01") is None
    assert translate_key(curses.KEY_F12) is None


def test_help_lists_every_mode_key() -> None:
    for label in ("Quit", "Help", "Search", "Table of Contents", "Chapter End", "Search Backward"):
        assert label in HELP_TEXT
