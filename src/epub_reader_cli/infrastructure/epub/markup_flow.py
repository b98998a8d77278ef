from __future__ import annotations

import re
from typing import Literal, Optional

from lxml import etree

from epub_reader_cli.domain.errors import MalformedChapterError
from epub_reader_cli.domain.models import BULLET_PREFIX, EMPHASIS_OFF, EMPHASIS_ON, LogicalLine
from epub_reader_cli.infrastructure.epub.xml_tools import iter_named, local_name, parse_xml


NodeKind = Literal["heading", "block", "list_item", "line_break", "skip", "other"]

_KINDS: dict[str, NodeKind] = {
    **{f"h{level}": "heading" for level in range(1, 7)},
    "p": "block",
    "blockquote": "block",
    "li": "list_item",
    "br": "line_break",
}

_ws_re = re.compile(r"\s+")


def _node_kind(elem: etree._Element) -> NodeKind:
    # Comments and processing instructions carry no text of their own.
    if not isinstance(elem.tag, str):
        return "skip"
    return _KINDS.get(local_name(elem).lower(), "other")


def flow_chapter(text: str, path: str = "chapter") -> list[LogicalLine]:
    """Parse a chapter document and flatten its body into logical lines."""
    root = parse_xml(text, MalformedChapterError, path)
    body: Optional[etree._Element] = next(iter_named(root, "body"), None)

    lines = [LogicalLine()]
    flow_element(body if body is not None else root, lines)
    return lines


def flow_element(elem: etree._Element, lines: list[LogicalLine]) -> None:
    """Append *elem*'s content to *lines*, opening new lines at block boundaries.

    *lines* must hold at least one line; text always goes to the last one.
    The element's own tail is left to the caller.
    """
    kind = _node_kind(elem)

    if kind == "skip":
        return
    if kind == "line_break":
        lines.append(LogicalLine())
        return

    if kind == "heading":
        lines.append(LogicalLine([EMPHASIS_ON]))
        _flow_children(elem, lines)
        lines.append(LogicalLine([EMPHASIS_OFF]))
    elif kind == "block":
        lines.append(LogicalLine())
        _flow_children(elem, lines)
        lines.append(LogicalLine())
    elif kind == "list_item":
        lines.append(LogicalLine([BULLET_PREFIX]))
        _flow_children(elem, lines)
        lines.append(LogicalLine())
    else:
        _flow_children(elem, lines)


def _flow_children(elem: etree._Element, lines: list[LogicalLine]) -> None:
    # lxml keeps text before the first child in elem.text and text after each
    # child in child.tail; visiting them in this order preserves document order.
    _append_text(elem.text, lines)
    for child in elem:
        flow_element(child, lines)
        _append_text(child.tail, lines)


def _append_text(text: Optional[str], lines: list[LogicalLine]) -> None:
    if not text or not text.strip():
        return
    lines[-1].fragments.append(_ws_re.sub(" ", text))
