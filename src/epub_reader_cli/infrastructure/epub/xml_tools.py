from __future__ import annotations

from typing import Iterator, Optional

from lxml import etree


def parse_xml(text: str, error_type: type[Exception], what: str) -> etree._Element:
    """Parse *text* strictly and return its root element.

    lxml refuses ``str`` input that carries an encoding declaration, so the
    text is re-encoded first. Documents that are not well-formed XML are
    reported as *error_type*.
    """
    parser = etree.XMLParser(recover=False, resolve_entities=False)
    try:
        root = etree.fromstring(text.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as exc:
        raise error_type(f"Cannot parse {what}: {exc}") from exc
    if root is None:
        raise error_type(f"Cannot parse {what}: empty document")
    return root


def local_name(elem: etree._Element) -> str:
    if not isinstance(elem.tag, str):
        return ""
    return etree.QName(elem).localname


def find_child(elem: etree._Element, name: str) -> Optional[etree._Element]:
    for child in elem:
        if local_name(child) == name:
            return child
    return None


def iter_named(elem: etree._Element, name: str) -> Iterator[etree._Element]:
    """Yield *elem*'s descendants (and itself) whose local name is *name*, in document order."""
    for node in elem.iter():
        if local_name(node) == name:
            yield node
