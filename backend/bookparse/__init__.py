"""bookparse - EPUB structure resolution and chapter extraction.

Three operations make up the public surface:

- ``EPUBParser(config).validate(path)`` / ``.parse(path)``
- ``ChapterSplitter(path).split_chapters(toc, SplitOptions(level=...))``
- ``get_chapter_stats(chapters)``
"""

from bookparse.core.analysis import ChapterSplitter, SplitOptions, get_chapter_stats
from bookparse.core.epub import EPUBParser, EpubError
from bookparse.core.parsers import CJK_CONFIG, DEFAULT_CONFIG, ParseConfig
from bookparse.core.parsers.factory import ParserFactory
from bookparse.models import (
    BookInfo,
    ChapterContent,
    ChapterStats,
    CoverInfo,
    ParseResult,
    TocItem,
)

__version__ = "0.1.0"

__all__ = [
    "EPUBParser",
    "ChapterSplitter",
    "SplitOptions",
    "get_chapter_stats",
    "ParserFactory",
    "ParseConfig",
    "DEFAULT_CONFIG",
    "CJK_CONFIG",
    "EpubError",
    "BookInfo",
    "CoverInfo",
    "TocItem",
    "ChapterContent",
    "ChapterStats",
    "ParseResult",
]
