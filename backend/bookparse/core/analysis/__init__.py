"""Chapter extraction and statistics."""

from .chapter_splitter import ChapterSplitter, SplitOptions, get_chapter_stats
from .part_ranges import DEFAULT_PART_RANGES, PartRange, is_part_title

__all__ = [
    "ChapterSplitter",
    "SplitOptions",
    "get_chapter_stats",
    "PartRange",
    "DEFAULT_PART_RANGES",
    "is_part_title",
]
