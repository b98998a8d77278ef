from __future__ import annotations


class EpubReaderError(Exception):
    """Base error for this application."""


class ArchiveError(EpubReaderError):
    """The EPUB container cannot be opened or read."""


class ArchiveNotFoundError(ArchiveError):
    """The EPUB file does not exist."""


class NotAnArchiveError(ArchiveError):
    """The file exists but is not a zip container."""


class EntryMissingError(ArchiveError):
    """A named entry is absent from the container."""


class EntryDecodeError(ArchiveError):
    """A named entry is not valid UTF-8 text."""


class StructureError(EpubReaderError):
    """The EPUB's XML documents violate a structural expectation."""


class MalformedContainerError(StructureError):
    """META-INF/container.xml has no usable rootfile pointer."""


class MalformedPackageError(StructureError):
    """The package document lacks its manifest or spine, or a required attribute."""


class MalformedTocError(StructureError):
    """The table of contents is missing or one of its entries is incomplete."""


class MalformedChapterError(StructureError):
    """A chapter document cannot be parsed."""


class DanglingSpineRefError(StructureError):
    """The spine references an id that is not in the manifest."""


class NoDocumentError(EpubReaderError):
    """No document was requested and no saved position exists."""
