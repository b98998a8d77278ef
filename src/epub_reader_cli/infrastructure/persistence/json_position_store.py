from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from epub_reader_cli.domain.models import ReadingPosition
from epub_reader_cli.domain.ports import PositionStorePort
from epub_reader_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)

DEFAULT_STATE_PATH = Path("~/.local/share/epub-reader/position.json").expanduser()


@dataclass(frozen=True)
class JsonPositionStore(PositionStorePort):
    """Keep the last reading position in a small JSON file."""

    path: Path = DEFAULT_STATE_PATH

    def load(self) -> Optional[ReadingPosition]:
        if not self.path.is_file():
            logger.debug("No saved position | path=%s", self.path)
            return None

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            position = ReadingPosition(
                document_path=str(payload["document_path"]),
                chapter_index=int(payload["chapter_index"]),
                scroll_position=int(payload["scroll_position"]),
            )
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable position file | path=%s error=%s", self.path, exc)
            return None

        logger.debug("Saved position loaded | path=%s document=%s", self.path, position.document_path)
        return position

    def save(self, position: ReadingPosition) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(position), ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug("Position written | path=%s", self.path)
