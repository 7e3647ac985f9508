"""Chapter Splitter - extract plain-text chapters for a TOC level.

Usage:
    with ChapterSplitter("book.epub") as splitter:
        chapters = splitter.split_chapters(result.table_of_contents, SplitOptions(level=1))
    stats = get_chapter_stats(chapters)
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from posixpath import normpath as posix_normpath
from typing import Optional, Sequence
from urllib.parse import unquote

from bookparse.core.epub.archive import EpubArchive
from bookparse.core.epub.errors import ExtractionFailedError, MissingTableOfContentsError
from bookparse.core.epub.package import package_dir_of, read_container
from bookparse.models.book import ChapterContent, ChapterRef, ChapterStats, TocItem
from bookparse.utils.text import clean_text, count_words, html_to_text, truncate_text

from .part_ranges import DEFAULT_PART_RANGES, PartRange, find_part_range, is_part_title

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitOptions:
    """Options for one split request."""

    level: int = 1  # TOC level to extract
    max_chapter_length: Optional[int] = None  # characters, None for no limit

    def __post_init__(self):
        if self.level < 1:
            raise ValueError(f"level must be >= 1, got {self.level}")
        if self.max_chapter_length is not None and self.max_chapter_length <= 0:
            raise ValueError("max_chapter_length must be positive")


class ChapterSplitter:
    """Extract chapter text from an EPUB for the entries of a TOC level.

    The splitter owns an open archive and must be closed after use.
    """

    def __init__(
        self,
        epub_path: Path | str,
        part_ranges: Sequence[PartRange] = DEFAULT_PART_RANGES,
    ):
        self.archive = EpubArchive(epub_path)
        try:
            self.package_dir = package_dir_of(read_container(self.archive))
        except Exception:
            self.archive.close()
            raise
        self.part_ranges = part_ranges

    def split_chapters(
        self, table_of_contents: list[TocItem], options: SplitOptions
    ) -> list[ChapterContent]:
        """Extract one chapter per TOC entry at ``options.level``.

        Entries that fail to extract are logged and skipped; ``index`` is
        assigned over the returned list.

        Raises:
            MissingTableOfContentsError: If ``table_of_contents`` is empty
        """
        if not table_of_contents:
            raise MissingTableOfContentsError()

        targets = [item for item in table_of_contents if item.level == options.level]
        logger.info("Splitting %d entries at level %d", len(targets), options.level)

        chapters: list[ChapterContent] = []
        for toc_item in targets:
            try:
                chapter = self.extract_chapter(toc_item, options)
            except Exception as e:
                logger.warning("Failed to extract chapter %r: %s", toc_item.title, e)
                continue
            if chapter is not None:
                chapters.append(chapter)

        for index, chapter in enumerate(chapters):
            chapter.index = index

        return chapters

    def extract_chapter(self, toc_item: TocItem, options: SplitOptions) -> Optional[ChapterContent]:
        if not toc_item.href:
            logger.debug("Skipping %r: no href", toc_item.title)
            return None

        logger.debug("Extracting %r (level %d)", toc_item.title, toc_item.level)
        if is_part_title(toc_item.title):
            text = self._extract_part_text(toc_item)
        else:
            text = self._read_document_text(toc_item.href)

        text = clean_text(text)
        if options.max_chapter_length and len(text) > options.max_chapter_length:
            text = truncate_text(text, options.max_chapter_length)

        return ChapterContent(
            index=0,
            title=toc_item.title,
            content=text,
            word_count=count_words(text),
            level=toc_item.level,
        )

    def _locate(self, href: str) -> str:
        """Find the archive entry for a package-relative href.

        Raises:
            ExtractionFailedError: If no candidate path exists
        """
        path = href.split("#", 1)[0].lstrip("/")
        if not path:
            raise ExtractionFailedError(f"empty document path in {href!r}")

        candidates = []
        for variant in (path, unquote(path)):
            if self.package_dir:
                candidates.append(posix_normpath(f"{self.package_dir}/{variant}"))
            candidates.append(posix_normpath(variant))

        found = self.archive.first_existing(dict.fromkeys(candidates))
        if found is None:
            raise ExtractionFailedError(f"file not found: {path}")
        return found

    def _read_document_text(self, href: str) -> str:
        path = self._locate(href)
        logger.debug("Reading %s for href %s", path, href)
        return html_to_text(self.archive.read_text(path))

    def _extract_part_text(self, part_item: TocItem) -> str:
        """Read a part's own document plus the files its range lists.

        With a range, the part's own document is optional; the part is only
        dropped when none of its files can be read.
        """
        part_range = find_part_range(part_item.title, self.part_ranges)
        if part_range is None:
            return self._read_document_text(part_item.href)

        sections = []
        try:
            sections.append(self._read_document_text(part_item.href))
        except ExtractionFailedError as e:
            logger.warning("Part %r: %s", part_item.title, e)

        logger.info("Merging %d files into part %r", len(part_range.files), part_item.title)
        for file_path in part_range.files:
            try:
                text = self._read_document_text(file_path)
            except ExtractionFailedError as e:
                logger.warning("Part %r: %s", part_item.title, e)
                continue
            if text.strip():
                sections.append(text)

        if not sections:
            raise ExtractionFailedError(f"no readable files for part {part_item.title!r}")
        return "\n\n".join(sections)

    def close(self):
        """Close the archive."""
        self.archive.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def get_chapter_stats(chapters: list[ChapterContent]) -> ChapterStats:
    """Aggregate word counts over a chapter list.

    Ties for longest/shortest go to the chapter seen first.
    """
    if not chapters:
        return ChapterStats()

    refs = [
        ChapterRef(index=position, title=chapter.title, word_count=chapter.word_count)
        for position, chapter in enumerate(chapters)
    ]

    longest = refs[0]
    shortest = refs[0]
    for ref in refs[1:]:
        if ref.word_count > longest.word_count:
            longest = ref
        if ref.word_count < shortest.word_count:
            shortest = ref

    total_words = sum(ref.word_count for ref in refs)
    return ChapterStats(
        total_chapters=len(chapters),
        total_words=total_words,
        # Round half up
        average_words=math.floor(total_words / len(chapters) + 0.5),
        longest_chapter=longest,
        shortest_chapter=shortest,
    )
