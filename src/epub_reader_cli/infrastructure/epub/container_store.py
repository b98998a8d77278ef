from __future__ import annotations

import zipfile
from pathlib import Path
from types import TracebackType
from typing import Optional

from epub_reader_cli.domain.errors import (
    ArchiveNotFoundError,
    EntryDecodeError,
    EntryMissingError,
    NotAnArchiveError,
)
from epub_reader_cli.domain.ports import ContainerStorePort
from epub_reader_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)


class ZipContainerStore(ContainerStorePort):
    """Read-only view of an EPUB's zip container.

    The archive handle stays open for the whole reading session; entries are
    decompressed on every call, nothing is cached.
    """

    def __init__(self, zf: zipfile.ZipFile, path: Path) -> None:
        self._zf = zf
        self.path = path

    @classmethod
    def open(cls, path: Path) -> "ZipContainerStore":
        if not path.is_file():
            raise ArchiveNotFoundError(f"No such file: {path}")
        try:
            zf = zipfile.ZipFile(path, "r")
        except zipfile.BadZipFile as exc:
            raise NotAnArchiveError(f"Not a zip archive: {path}") from exc
        except OSError as exc:
            raise ArchiveNotFoundError(str(exc)) from exc

        logger.info("Archive opened | path=%s entries=%s", path, len(zf.namelist()))
        return cls(zf, path)

    def read_entry(self, name: str) -> str:
        try:
            raw = self._zf.read(name)
        except KeyError as exc:
            raise EntryMissingError(f"Entry not found in archive: {name}") from exc
        except (zipfile.BadZipFile, OSError) as exc:
            raise NotAnArchiveError(f"Cannot read entry {name}: {exc}") from exc

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EntryDecodeError(f"Entry is not valid UTF-8: {name}") from exc

        logger.debug("Entry read | name=%s bytes=%s", name, len(raw))
        # A BOM would otherwise end up in front of the XML declaration.
        return text.lstrip("\ufeff")

    def close(self) -> None:
        self._zf.close()

    def __enter__(self) -> "ZipContainerStore":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()
