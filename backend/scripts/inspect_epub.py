#!/usr/bin/env python3
"""
Inspect an EPUB: validate, parse and split it into chapters.

This script:
1. Runs the pre-flight validation
2. Parses book info, cover and table of contents
3. Splits the chapters at the requested TOC level and prints statistics

Usage:
    python backend/scripts/inspect_epub.py book.epub

    # Second-level entries, truncated, with Chinese fallback literals:
    python backend/scripts/inspect_epub.py book.epub --level 2 --max-length 500 --cjk

    # Full JSON output (cover data URI included):
    python backend/scripts/inspect_epub.py book.epub --json
"""

import argparse
import json
import logging
import sys

from bookparse import (
    CJK_CONFIG,
    DEFAULT_CONFIG,
    ChapterSplitter,
    EpubError,
    ParseConfig,
    SplitOptions,
    get_chapter_stats,
)
from bookparse.config import settings
from bookparse.core.parsers.factory import ParserFactory

logger = logging.getLogger("inspect_epub")


def print_summary(result, chapters, stats):
    info = result.book_info
    print("=" * 60)
    print(f"{info.title} - {info.author}")
    print("=" * 60)
    if info.translator:
        print(f"Translator: {info.translator}")
    print(f"Publisher:  {info.publisher}")
    print(f"Language:   {info.language}")
    if info.isbn:
        print(f"Identifier: {info.isbn}")

    if result.cover_info is not None:
        size = len(result.cover_info.cover_image)
        print(f"\nCover: {result.cover_info.alt_text} ({size} chars)")

    print(f"\nTable of contents ({len(result.table_of_contents)} entries):")
    for item in result.table_of_contents:
        print(f"  {'  ' * (item.level - 1)}{item.title} -> {item.href}")

    print(f"\nChapters ({stats.total_chapters}):")
    for chapter in chapters:
        print(f"  [{chapter.index}] {chapter.title}: {chapter.word_count} words")

    print(f"\nTotal words:   {stats.total_words}")
    print(f"Average words: {stats.average_words}")
    print(f"Longest:       {stats.longest_chapter.title} ({stats.longest_chapter.word_count})")
    print(f"Shortest:      {stats.shortest_chapter.title} ({stats.shortest_chapter.word_count})")


def main():
    parser = argparse.ArgumentParser(
        description="Validate, parse and split an EPUB file"
    )
    parser.add_argument("epub", help="Path to the EPUB file")
    parser.add_argument(
        "--level",
        type=int,
        default=1,
        help="TOC level to split chapters at (default: 1)"
    )
    parser.add_argument(
        "--max-length",
        type=int,
        default=None,
        help="Truncate chapter text to this many characters"
    )
    parser.add_argument(
        "--cjk",
        action="store_true",
        help="Use Chinese fallback literals for missing metadata"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ParseConfig.from_settings(settings, base=CJK_CONFIG if args.cjk else DEFAULT_CONFIG)

    try:
        epub_parser = ParserFactory.create(args.epub, config)
    except EpubError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not epub_parser.validate(args.epub):
        print(f"Error: {args.epub} is not a valid EPUB file", file=sys.stderr)
        return 1

    result = epub_parser.parse(args.epub)
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    try:
        with ChapterSplitter(args.epub) as splitter:
            chapters = splitter.split_chapters(
                result.table_of_contents,
                SplitOptions(level=args.level, max_chapter_length=args.max_length),
            )
    except EpubError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    stats = get_chapter_stats(chapters)

    if args.json:
        print(json.dumps(
            {
                "result": result.model_dump(),
                "chapters": [chapter.model_dump() for chapter in chapters],
                "stats": stats.model_dump(),
            },
            ensure_ascii=False,
            indent=2,
        ))
    else:
        print_summary(result, chapters, stats)

    return 0


if __name__ == "__main__":
    sys.exit(main())
