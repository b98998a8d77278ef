from __future__ import annotations

import pytest

from epub_reader_cli.domain.errors import MalformedChapterError
from epub_reader_cli.domain.models import EMPHASIS_OFF, EMPHASIS_ON
from epub_reader_cli.infrastructure.epub.markup_flow import flow_chapter
from tests.unit.epub_fixtures import chapter_xhtml


def _flow(body: str) -> list[list[str]]:
    return [line.fragments for line in flow_chapter(chapter_xhtml(body))]


def test_paragraph_is_surrounded_by_blank_lines() -> None:
    assert _flow("<p>Hello</p>") == [[], ["Hello"], []]


def test_heading_is_bracketed_by_emphasis_markers() -> None:
    assert _flow("<h2>Title</h2>") == [[], [EMPHASIS_ON, "Title"], [EMPHASIS_OFF]]


def test_heading_text_shares_the_marker_line() -> None:
    # The heading's text lands on the line opened with the begin marker.
    lines = flow_chapter(chapter_xhtml("<h1>Title</h1>"))
    assert [line.text() for line in lines] == ["", EMPHASIS_ON + "Title", EMPHASIS_OFF]


def test_list_items_get_bullets() -> None:
    assert _flow("<ul><li>one</li><li>two</li></ul>") == [[], ["- ", "one"], [], ["- ", "two"], []]


def test_line_break_opens_a_new_line() -> None:
    assert _flow("first<br/>second") == [["first"], ["second"]]


def test_inline_elements_keep_text_on_the_current_line() -> None:
    lines = flow_chapter(chapter_xhtml("<p>Some <em>emphasised</em> and <a href='#'>linked</a> text.</p>"))
    assert lines[1].text() == "Some emphasised and linked text."


def test_whitespace_only_text_is_dropped() -> None:
    assert _flow("\n  <p>A</p>\n  \n<p>B</p>\n") == [[], ["A"], [], ["B"], []]


def test_whitespace_runs_inside_text_are_collapsed() -> None:
    assert _flow("<p>line one\n     continues</p>") == [[], ["line one continues"], []]


def test_head_is_not_rendered() -> None:
    texts = [line.text() for line in flow_chapter(chapter_xhtml("<p>Body</p>", title="Secret title"))]
    assert "Secret title" not in "".join(texts)


def test_comments_are_skipped_but_their_tail_kept() -> None:
    assert _flow("<p>before<!-- note -->after</p>") == [[], ["before", "after"], []]


def test_nested_blocks_follow_document_order() -> None:
    lines = flow_chapter(chapter_xhtml("<blockquote><p>quoted</p></blockquote><p>after</p>"))
    assert [line.text() for line in lines] == ["", "", "quoted", "", "", "after", ""]


def test_unparseable_chapter() -> None:
    with pytest.raises(MalformedChapterError):
        flow_chapter("")


def test_unclosed_elements_are_rejected() -> None:
    text = "<html xmlns='http://www.w3.org/1999/xhtml'><body><p>one<p>two</body>"

    with pytest.raises(MalformedChapterError):
        flow_chapter(text, path="OEBPS/broken.xhtml")
