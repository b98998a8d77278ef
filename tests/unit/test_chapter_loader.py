from __future__ import annotations

from pathlib import Path
from typing import Callable

from epub_reader_cli.application.services.chapter_loader import ChapterLoader
from epub_reader_cli.domain.models import EMPHASIS_OFF, EMPHASIS_ON
from epub_reader_cli.infrastructure.epub.container_store import ZipContainerStore
from epub_reader_cli.infrastructure.epub.navigation_resolver import NavigationResolver


def test_chapter_is_flowed_and_wrapped(make_epub: Callable[..., Path]) -> None:
    book = make_epub(
        {"c1.xhtml": "<h1>Opening</h1><p>the quick brown fox</p><ul><li>jumps</li></ul>"},
        toc={"c1.xhtml": "Opening"},
    )

    with ZipContainerStore.open(book) as store:
        chapters = NavigationResolver(store=store).resolve()
        lines = ChapterLoader(store=store).load(chapters[0], width=10)

    assert lines == [
        "",
        EMPHASIS_ON + "Opening",
        EMPHASIS_OFF,
        "the quick",
        "brown fox",
        "",
        "- jumps",
        "",
    ]
