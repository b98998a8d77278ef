from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

from lxml import etree

from epub_reader_cli.domain.errors import (
    DanglingSpineRefError,
    MalformedContainerError,
    MalformedPackageError,
    MalformedTocError,
)
from epub_reader_cli.domain.models import ChapterRef, ManifestEntry, TocDialect
from epub_reader_cli.domain.ports import ContainerStorePort
from epub_reader_cli.infrastructure.epub.xml_tools import find_child, iter_named, local_name, parse_xml
from epub_reader_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
NCX_ID = "ncx"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"

_ws_re = re.compile(r"\s+")


def resolve_href(base_dir: str, href: str) -> str:
    """Turn a document-relative href into an archive entry name.

    The fragment is dropped and percent-escapes are decoded, so
    ``"text/ch%201.xhtml#s2"`` under ``"OEBPS"`` becomes ``"OEBPS/text/ch 1.xhtml"``.
    """
    path = unquote(href.split("#", 1)[0])
    return posixpath.normpath(posixpath.join(base_dir, path)) if path else ""


@dataclass(frozen=True)
class NavigationResolver:
    """Resolve an EPUB's container, package and table of contents into a chapter list."""

    store: ContainerStorePort

    def resolve(self) -> list[ChapterRef]:
        package_path = self._package_path()
        root_dir = posixpath.dirname(package_path)
        package = parse_xml(self.store.read_entry(package_path), MalformedPackageError, package_path)

        entries = _manifest_entries(package)
        remaining = {entry.id: entry for entry in entries}
        spine_paths = [resolve_href(root_dir, entry.href) for entry in _drain_spine(package, remaining)]

        version = package.get("version") or ""
        dialect, toc_entry = _select_toc(version, entries, remaining)
        toc_path = resolve_href(root_dir, toc_entry.href)
        toc_root = parse_xml(self.store.read_entry(toc_path), MalformedTocError, toc_path)

        if dialect == "nav":
            toc = _nav_document_titles(toc_root, posixpath.dirname(toc_path))
        else:
            toc = _navigation_tree_titles(toc_root, posixpath.dirname(toc_path))

        chapters: list[ChapterRef] = []
        for index, path in enumerate(spine_paths):
            title = toc.pop(path, None)
            chapters.append(ChapterRef(title=title if title is not None else str(index), content_path=path))

        logger.info(
            "Package resolved | package=%s version=%s toc=%s chapters=%s unmatched_toc=%s",
            package_path,
            version or "?",
            dialect,
            len(chapters),
            len(toc),
        )
        return chapters

    def _package_path(self) -> str:
        container = parse_xml(self.store.read_entry(CONTAINER_PATH), MalformedContainerError, CONTAINER_PATH)
        for rootfile in iter_named(container, "rootfile"):
            full_path = rootfile.get("full-path")
            if full_path:
                return full_path
        raise MalformedContainerError(f"{CONTAINER_PATH} declares no rootfile full-path")


def _manifest_entries(package: etree._Element) -> list[ManifestEntry]:
    manifest = find_child(package, "manifest")
    if manifest is None:
        raise MalformedPackageError("Package document has no manifest")

    entries: list[ManifestEntry] = []
    for item in manifest:
        if not local_name(item):
            continue
        item_id, href = item.get("id"), item.get("href")
        if item_id is None or href is None:
            raise MalformedPackageError(f"Manifest item without id or href at line {item.sourceline}")
        entries.append(
            ManifestEntry(
                id=item_id,
                href=href,
                media_type=item.get("media-type"),
                properties=item.get("properties"),
            )
        )
    return entries


def _drain_spine(package: etree._Element, remaining: dict[str, ManifestEntry]) -> list[ManifestEntry]:
    """Return the spine's manifest entries in reading order, removing each from *remaining*."""
    spine = find_child(package, "spine")
    if spine is None:
        raise MalformedPackageError("Package document has no spine")

    ordered: list[ManifestEntry] = []
    for itemref in spine:
        if not local_name(itemref):
            continue
        idref = itemref.get("idref")
        if idref is None:
            raise MalformedPackageError(f"Spine itemref without idref at line {itemref.sourceline}")
        entry = remaining.pop(idref, None)
        if entry is None:
            raise DanglingSpineRefError(f"Spine references unknown manifest id: {idref}")
        ordered.append(entry)

    if not ordered:
        raise MalformedPackageError("Package spine is empty")
    return ordered


def _select_toc(
    version: str,
    entries: list[ManifestEntry],
    remaining: dict[str, ManifestEntry],
) -> tuple[TocDialect, ManifestEntry]:
    if version.startswith("3"):
        for entry in entries:
            if entry.properties and "nav" in entry.properties.split():
                return "nav", entry

    ncx = _legacy_toc_entry(remaining)
    if ncx is not None:
        return "ncx", ncx
    raise MalformedTocError(f"No table of contents in package (version {version or 'unknown'})")


def _legacy_toc_entry(remaining: dict[str, ManifestEntry]) -> Optional[ManifestEntry]:
    if NCX_ID in remaining:
        return remaining[NCX_ID]
    for entry in remaining.values():
        if entry.media_type == NCX_MEDIA_TYPE:
            return entry
    return None


def _nav_document_titles(root: etree._Element, base_dir: str) -> dict[str, str]:
    """Map link targets to link text for an EPUB 3 navigation document."""
    navs = list(iter_named(root, "nav"))
    if not navs:
        raise MalformedTocError("Navigation document has no nav element")

    # Prefer the toc nav over landmarks/page-list when several are present.
    nav = next(
        (n for n in navs if "toc" in (n.get("{http://www.idpf.org/2007/ops}type") or "").split()),
        navs[0],
    )

    toc: dict[str, str] = {}
    for link in iter_named(nav, "a"):
        href = link.get("href")
        if href is None:
            continue
        toc.setdefault(resolve_href(base_dir, href), _clean_title("".join(link.itertext())))
    return toc


def _navigation_tree_titles(root: etree._Element, base_dir: str) -> dict[str, str]:
    """Map navPoint content targets to their labels for an EPUB 2 NCX document."""
    nav_map = next(iter_named(root, "navMap"), None)
    if nav_map is None:
        raise MalformedTocError("NCX document has no navMap")

    toc: dict[str, str] = {}
    for point in iter_named(nav_map, "navPoint"):
        content = next(iter_named(point, "content"), None)
        label = next(iter_named(point, "text"), None)
        src = content.get("src") if content is not None else None
        if src is None or label is None:
            raise MalformedTocError(f"navPoint without label or content at line {point.sourceline}")
        toc.setdefault(resolve_href(base_dir, src), _clean_title(label.text or ""))
    return toc


def _clean_title(text: str) -> str:
    return _ws_re.sub(" ", text).strip()
