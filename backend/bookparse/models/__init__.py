"""Data models."""

from .book import (
    BookInfo,
    ChapterContent,
    ChapterRef,
    ChapterStats,
    CoverInfo,
    ParseResult,
    TocItem,
)
from .package import ManifestItem, MetadataEntry, PackageDocument

__all__ = [
    # Result models
    "BookInfo",
    "CoverInfo",
    "TocItem",
    "ChapterContent",
    "ChapterRef",
    "ChapterStats",
    "ParseResult",
    # Package document
    "MetadataEntry",
    "ManifestItem",
    "PackageDocument",
]
