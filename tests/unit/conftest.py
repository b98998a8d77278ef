"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest

from tests.unit.epub_fixtures import CONTAINER_XML, chapter_xhtml, nav_xhtml, package_opf, write_epub


@pytest.fixture
def make_epub(tmp_path: Path) -> Callable[..., Path]:
    """Build an EPUB 3 book under OEBPS/ from ``{href: body_markup}`` chapters."""

    def _make(
        chapters: dict[str, str],
        toc: Optional[dict[str, str]] = None,
        name: str = "book.epub",
    ) -> Path:
        files = {
            "META-INF/container.xml": CONTAINER_XML.format(opf_path="OEBPS/content.opf"),
            "OEBPS/content.opf": package_opf(list(chapters)),
            "OEBPS/nav.xhtml": nav_xhtml(toc or {}),
        }
        for href, body in chapters.items():
            files[f"OEBPS/{href}"] = chapter_xhtml(body)
        return write_epub(tmp_path / name, files)

    return _make
