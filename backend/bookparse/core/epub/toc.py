"""Table of contents resolution.

Four tiers are tried in order and the first non-empty result wins:

1. EPUB3 navigation document (``nav.xhtml``)
2. EPUB2 navigation map (``toc.ncx``), the only tier producing nesting
3. Heuristic scan of HTML documents that look like a contents page
4. One generic entry per spine item

A tier that raises is logged and treated as empty, so a malformed navigation
file degrades to the next tier instead of failing the parse.
"""

import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from posixpath import dirname as posix_dirname
from posixpath import join as posix_join
from posixpath import normpath as posix_normpath
from posixpath import relpath as posix_relpath
from typing import Optional

from lxml import etree
from lxml import html as lxml_html

from bookparse.core.parsers.config import DEFAULT_CONFIG, ParseConfig
from bookparse.models.book import TocItem
from bookparse.models.package import ManifestItem, PackageDocument

from .archive import EpubArchive

logger = logging.getLogger(__name__)

NCX_MEDIA_TYPE = "application/x-dtbncx+xml"

# Anything that smells like a contents page
TOC_DOCUMENT_KEYWORDS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in ("目录", "contents", "toc", "章", "chapter", "第.*章", "第.*节")
]

# Link text that plausibly names a chapter
CHAPTER_TITLE_PATTERN = re.compile(r"章|Chapter|第|\d")

_XML_ENCODING_RE = re.compile(rb'^\s*<\?xml[^>]*encoding=["\']([A-Za-z0-9._-]+)["\']')


def _new_id() -> str:
    return str(uuid.uuid4())


def parse_html(content: bytes) -> etree._Element:
    """Parse an (X)HTML document, decoding as UTF-8 unless the XML declaration says otherwise.

    libxml2's HTML parser falls back to Latin-1 when a document carries
    neither an XML declaration nor a meta charset, while XHTML defaults to UTF-8.
    """
    match = _XML_ENCODING_RE.match(content)
    encoding = match.group(1).decode("ascii") if match else "utf-8"
    return lxml_html.fromstring(content, parser=lxml_html.HTMLParser(encoding=encoding))


def rebase_href(href: str, document_path: str, package_dir: str) -> str:
    """Make an href found in ``document_path`` relative to the package dir.

    Navigation documents link relative to their own location; chapter
    extraction resolves hrefs against the package directory. The two agree
    when the navigation file sits in the package directory, which is the
    common case, and the href is returned normalized but otherwise unchanged.
    """
    href = (href or "").strip()
    if not href or re.match(r"^[a-z][a-z0-9+.-]*:", href, re.IGNORECASE):
        return href

    path, sep, fragment = href.partition("#")
    if path:
        archive_path = posix_normpath(posix_join(posix_dirname(document_path), path))
    else:
        archive_path = document_path

    if not package_dir:
        relative = archive_path
    elif archive_path.startswith(package_dir + "/"):
        relative = archive_path[len(package_dir) + 1:]
    else:
        relative = posix_relpath(archive_path, package_dir)

    return f"{relative}{sep}{fragment}"


@dataclass(frozen=True)
class TocContext:
    archive: EpubArchive
    package: PackageDocument
    config: ParseConfig = DEFAULT_CONFIG

    def locate(self, href: str) -> Optional[str]:
        """Find a manifest href in the archive, raw first, then package-relative."""
        return self.archive.first_existing([href, self.package.resolve_href(href)])


class TocStrategy(ABC):
    """One tier of the TOC resolution chain."""

    name: str = "base"

    @abstractmethod
    def attempt(self, context: TocContext) -> list[TocItem]:
        """Return TOC entries, or an empty list when this tier does not apply."""


class NavDocumentStrategy(TocStrategy):
    """EPUB3 navigation document: flat list of ``li > a`` entries."""

    name = "nav_document"

    def find_nav_item(self, package: PackageDocument) -> Optional[ManifestItem]:
        for item in package.manifest:
            if item.has_property("nav") or "nav.xhtml" in item.href.lower():
                return item
        return None

    def attempt(self, context: TocContext) -> list[TocItem]:
        item = self.find_nav_item(context.package)
        if item is None:
            logger.debug("No navigation document in manifest")
            return []

        nav_path = context.locate(item.href)
        if nav_path is None:
            logger.info("Navigation document %s not found in archive", item.href)
            return []

        tree = parse_html(context.archive.read_bytes(nav_path))
        return self.parse_nav(tree, nav_path, context.package.package_dir)

    def _toc_root(self, tree: etree._Element) -> etree._Element:
        # Prefer <nav epub:type="toc"> so landmarks and page lists stay out
        for nav in tree.iter("nav"):
            for key, value in nav.attrib.items():
                if key.endswith("type") and "toc" in value.split():
                    return nav
        return tree

    def parse_nav(self, tree: etree._Element, nav_path: str, package_dir: str) -> list[TocItem]:
        items = []
        for li in self._toc_root(tree).iter("li"):
            anchors = [child for child in li if child.tag == "a"]
            if len(anchors) != 1:
                continue
            anchor = anchors[0]
            href = anchor.get("href", "").strip()
            title = anchor.text_content().strip()
            if not href or not title:
                continue
            items.append(TocItem(
                id=_new_id(),
                title=title,
                level=1,
                href=rebase_href(href, nav_path, package_dir),
                parent_id=None,
            ))

        logger.info("Parsed %d entries from navigation document %s", len(items), nav_path)
        return items


class NcxStrategy(TocStrategy):
    """EPUB2 navigation map with nested ``navPoint`` elements."""

    name = "ncx"

    def find_ncx_path(self, context: TocContext) -> Optional[str]:
        for item in context.package.manifest:
            if item.media_type == NCX_MEDIA_TYPE:
                logger.debug("NCX declared in manifest: %s", item.href)
                return context.locate(item.href)

        package_dir = context.package.package_dir
        common_paths = [
            "toc.ncx",
            f"{package_dir}/toc.ncx" if package_dir else "toc.ncx",
            "OEBPS/toc.ncx",
            "content/toc.ncx",
        ]
        return context.archive.first_existing(common_paths)

    def attempt(self, context: TocContext) -> list[TocItem]:
        ncx_path = self.find_ncx_path(context)
        if ncx_path is None:
            logger.debug("No NCX file found")
            return []

        parser = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)
        tree = etree.fromstring(context.archive.read_bytes(ncx_path), parser)
        if tree is None:
            return []

        nav_map = tree.find(".//{*}navMap")
        if nav_map is None:
            logger.info("NCX file %s has no navMap", ncx_path)
            return []

        items: list[TocItem] = []
        self._walk(nav_map, 1, None, items, ncx_path, context.package.package_dir)
        logger.info("Parsed %d entries from NCX %s", len(items), ncx_path)
        return items

    def _walk(
        self,
        parent: etree._Element,
        level: int,
        parent_id: Optional[str],
        items: list[TocItem],
        ncx_path: str,
        package_dir: str,
    ) -> None:
        """Append navPoints depth-first; children follow their parent."""
        for nav_point in parent.iterfind("{*}navPoint"):
            label = nav_point.find("{*}navLabel/{*}text")
            title = (label.text or "").strip() if label is not None else ""

            content = nav_point.find("{*}content")
            src = content.get("src", "") if content is not None else ""

            item = TocItem(
                id=_new_id(),
                title=title,
                level=level,
                href=rebase_href(src, ncx_path, package_dir),
                parent_id=parent_id,
            )
            items.append(item)
            self._walk(nav_point, level + 1, item.id, items, ncx_path, package_dir)


class HtmlScanStrategy(TocStrategy):
    """Scan HTML documents for chapter-looking links inside ``div`` blocks."""

    name = "html_scan"

    def is_candidate(self, item: ManifestItem) -> bool:
        href = item.href.lower()
        return (
            "html" in item.media_type
            or "toc" in href
            or "contents" in href
            or "index" in href
        )

    def attempt(self, context: TocContext) -> list[TocItem]:
        for item in context.package.manifest:
            if not self.is_candidate(item):
                continue
            path = context.locate(item.href)
            if path is None:
                continue

            try:
                items = self.parse_document(
                    context.archive.read_bytes(path), path, context.package.package_dir
                )
            except Exception as e:
                logger.debug("Skipping %s in HTML scan: %s", path, e)
                continue

            if items:
                logger.info("Extracted %d entries from %s", len(items), item.href)
                return items
        return []

    def parse_document(self, content: bytes, path: str, package_dir: str) -> list[TocItem]:
        text = content.decode("utf-8", errors="replace")
        if not any(keyword.search(text) for keyword in TOC_DOCUMENT_KEYWORDS):
            return []

        tree = parse_html(content)
        items = []
        # Each anchor once, in document order, however deeply divs nest
        for anchor in tree.xpath("//div//a[@href]"):
            href = anchor.get("href", "").strip()
            title = anchor.text_content().strip()
            if not href or not title or not CHAPTER_TITLE_PATTERN.search(title):
                continue
            items.append(TocItem(
                id=_new_id(),
                title=title,
                level=1,
                href=rebase_href(href, path, package_dir),
                parent_id=None,
            ))
        return items


class SpineStrategy(TocStrategy):
    """Generic "Chapter N" entries in spine order."""

    name = "spine"

    def attempt(self, context: TocContext) -> list[TocItem]:
        if not context.package.spine:
            logger.warning("Package document has no spine")
            return []

        items = [
            TocItem(
                id=_new_id(),
                title=context.config.spine_title_template.format(number=position + 1),
                level=1,
                href=item.href,
                parent_id=None,
            )
            for position, item in context.package.spine_items()
        ]
        logger.info("Synthesized %d entries from spine", len(items))
        return items


DEFAULT_TOC_STRATEGIES: tuple[type[TocStrategy], ...] = (
    NavDocumentStrategy,
    NcxStrategy,
    HtmlScanStrategy,
    SpineStrategy,
)


class TocResolver:
    """Run the TOC tiers in order until one yields entries."""

    def __init__(
        self,
        config: ParseConfig = DEFAULT_CONFIG,
        strategies: Optional[list[TocStrategy]] = None,
    ):
        self.config = config
        self.strategies = (
            strategies
            if strategies is not None
            else [strategy_class() for strategy_class in DEFAULT_TOC_STRATEGIES]
        )

    def resolve(self, archive: EpubArchive, package: PackageDocument) -> list[TocItem]:
        context = TocContext(archive=archive, package=package, config=self.config)

        for strategy in self.strategies:
            logger.debug("TOC strategy: %s", strategy.name)
            try:
                items = strategy.attempt(context)
            except Exception as e:
                logger.warning("TOC strategy %s failed: %s", strategy.name, e)
                continue
            if items:
                logger.info("TOC resolved by %s: %d entries", strategy.name, len(items))
                return items

        logger.warning("No table of contents could be resolved")
        return []
