"""Part aggregation table.

Some archives put a whole "part" (第一部分, Part I, ...) under a single TOC
entry whose own file is only a short preface, while the actual chapters live
in separate files that have no TOC entry of their own. For those archives the
splitter appends the listed files to the part's text.

This is a narrow, table-driven special case keyed to known file names, not a
general EPUB feature. Pass an empty table to ``ChapterSplitter`` to disable it.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

PART_TITLE_PATTERNS = [
    re.compile(r"第[一二三四五六七八九十\d]+部分"),
    re.compile(r"Part\s+[IVX\d]+", re.IGNORECASE),
]


@dataclass(frozen=True)
class PartRange:
    """Files to append after the part's own document, in reading order."""

    marker: str
    files: tuple[str, ...]


def _part_files(start: int, end: int) -> tuple[str, ...]:
    return tuple(f"text/part{number:04d}.html" for number in range(start, end + 1))


# Chapters 2-17 of the known five-part layout; chapter 1 of each part is
# already inside the part's own file.
DEFAULT_PART_RANGES: tuple[PartRange, ...] = (
    PartRange("第一部分", _part_files(6, 8)),
    PartRange("第二部分", _part_files(9, 12)),
    PartRange("第三部分", _part_files(13, 15)),
    PartRange("第四部分", _part_files(16, 19)),
    PartRange("第五部分", _part_files(20, 21)),
)


def is_part_title(title: str) -> bool:
    """Check whether a TOC title names a part rather than a chapter."""
    return any(pattern.search(title) for pattern in PART_TITLE_PATTERNS) or "部分" in title


def find_part_range(title: str, part_ranges: Sequence[PartRange]) -> Optional[PartRange]:
    for part_range in part_ranges:
        if part_range.marker in title:
            return part_range
    return None
