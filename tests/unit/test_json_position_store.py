from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from epub_reader_cli.domain.models import ReadingPosition
from epub_reader_cli.infrastructure.persistence.json_position_store import JsonPositionStore


def test_round_trip(tmp_path: Path) -> None:
    store = JsonPositionStore(path=tmp_path / "state" / "position.json")
    position = ReadingPosition(document_path="/books/Café.epub", chapter_index=4, scroll_position=120)

    store.save(position)

    assert store.load() == position
    payload = json.loads(store.path.read_text(encoding="utf-8"))
    assert payload == {"document_path": "/books/Café.epub", "chapter_index": 4, "scroll_position": 120}


def test_missing_file_means_no_position(tmp_path: Path) -> None:
    assert JsonPositionStore(path=tmp_path / "absent.json").load() is None


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        '{"document_path": "/a.epub"}',
        '{"document_path": "/a.epub", "chapter_index": "x", "scroll_position": 0}',
    ],
)
def test_unreadable_file_is_ignored_with_warning(
    tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "position.json"
    path.write_text(content, encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        assert JsonPositionStore(path=path).load() is None
    assert "unreadable position file" in caplog.text.lower()
