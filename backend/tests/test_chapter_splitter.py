from __future__ import annotations

import math

import pytest

from bookparse import ChapterSplitter, EPUBParser, SplitOptions, TocItem, get_chapter_stats
from bookparse.core.analysis.part_ranges import PartRange, is_part_title
from bookparse.core.epub.errors import MissingContainerDescriptorError, MissingTableOfContentsError
from bookparse.models.book import ChapterContent

from conftest import opf, xhtml


def _toc(*entries) -> list[TocItem]:
    return [
        TocItem(id=f"t{i}", title=title, level=level, href=href)
        for i, (title, href, level) in enumerate(entries)
    ]


def test_empty_toc_fails_fast(sample_epub):
    with ChapterSplitter(sample_epub) as splitter:
        with pytest.raises(MissingTableOfContentsError):
            splitter.split_chapters([], SplitOptions(level=1))


def test_level_without_entries_returns_empty_list(sample_epub):
    toc = EPUBParser().parse(sample_epub).table_of_contents

    with ChapterSplitter(sample_epub) as splitter:
        assert splitter.split_chapters(toc, SplitOptions(level=4)) == []


def test_split_sample_book(sample_epub):
    toc = EPUBParser().parse(sample_epub).table_of_contents

    with ChapterSplitter(sample_epub) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions(level=1))

    assert [(c.index, c.title) for c in chapters] == [(0, "Opening"), (1, "Middle"), (2, "Ending")]
    assert chapters[0].content == "Opening\n\nThe quick brown fox.\n\nIt jumps."
    assert [c.word_count for c in chapters] == [7, 6, 2]
    assert all(c.level == 1 for c in chapters)


def test_split_then_stats_round_trip(sample_epub):
    toc = EPUBParser().parse(sample_epub).table_of_contents
    with ChapterSplitter(sample_epub) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions(level=1))

    stats = get_chapter_stats(chapters)

    assert stats.total_chapters == 3
    assert stats.total_words == sum(c.word_count for c in chapters) == 15
    assert stats.average_words == math.floor(stats.total_words / stats.total_chapters + 0.5) == 5
    assert stats.longest_chapter.title == "Opening"
    assert stats.shortest_chapter.title == "Ending"


def test_missing_file_is_skipped_and_indices_reassigned(sample_epub):
    toc = _toc(
        ("Gone", "text/missing.xhtml", 1),
        ("Middle", "text/ch2.xhtml#frag", 1),
        ("No link", "", 1),
        ("Ending", "text/ch3.xhtml", 1),
    )

    with ChapterSplitter(sample_epub) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions(level=1))

    assert [(c.index, c.title) for c in chapters] == [(0, "Middle"), (1, "Ending")]


def test_filters_by_level(sample_epub):
    toc = _toc(
        ("Opening", "text/ch1.xhtml", 1),
        ("Sub", "text/ch2.xhtml", 2),
        ("Ending", "text/ch3.xhtml", 1),
    )

    with ChapterSplitter(sample_epub) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions(level=2))

    assert [(c.index, c.title, c.level) for c in chapters] == [(0, "Sub", 2)]


def test_truncation_appends_ellipsis(sample_epub):
    toc = _toc(("Opening", "text/ch1.xhtml", 1))

    with ChapterSplitter(sample_epub) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions(level=1, max_chapter_length=10))

    assert chapters[0].content == "Opening\n\nT..."


def test_percent_encoded_href(build_epub):
    path = build_epub({
        "OEBPS/content.opf": opf(),
        "OEBPS/text/chapter one.xhtml": xhtml("<p>Encoded name</p>"),
    })
    toc = _toc(("One", "text/chapter%20one.xhtml", 1))

    with ChapterSplitter(path) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions())

    assert chapters[0].content == "Encoded name"


def _part_epub(build_epub):
    files = {
        "OEBPS/content.opf": opf(),
        "OEBPS/text/part0005.html": xhtml("<p>Preface</p>"),
        "OEBPS/text/part0006.html": xhtml("<p>First</p>"),
        "OEBPS/text/part0007.html": xhtml("<p>   </p>"),
        "OEBPS/text/part0008.html": xhtml("<p>Third</p>"),
    }
    return build_epub(files)


def test_part_aggregation(build_epub):
    path = _part_epub(build_epub)
    toc = _toc(("第一部分 开端", "text/part0005.html", 1))

    with ChapterSplitter(path) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions())

    assert chapters[0].content == "Preface\n\nFirst\n\nThird"


def test_part_aggregation_skips_missing_range_files(build_epub):
    path = _part_epub(build_epub)
    ranges = (PartRange("Part I", ("text/part0006.html", "text/part0099.html")),)
    toc = _toc(("Part I: Beginnings", "text/part0005.html", 1))

    with ChapterSplitter(path, part_ranges=ranges) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions())

    assert chapters[0].content == "Preface\n\nFirst"


def test_part_aggregation_disabled_with_empty_table(build_epub):
    path = _part_epub(build_epub)
    toc = _toc(("第一部分 开端", "text/part0005.html", 1))

    with ChapterSplitter(path, part_ranges=()) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions())

    assert chapters[0].content == "Preface"


@pytest.mark.parametrize(
    "title, expected",
    [
        ("第一部分", True),
        ("第3部分 结局", True),
        ("Part IV", True),
        ("part 2", True),
        ("附录部分", True),
        ("第一章", False),
        ("Partial Results", False),
    ],
)
def test_is_part_title(title, expected):
    assert is_part_title(title) is expected


def test_splitter_requires_container(build_epub):
    path = build_epub({}, opf_path=None)

    with pytest.raises(MissingContainerDescriptorError):
        ChapterSplitter(path)


def test_split_options_validation():
    with pytest.raises(ValueError):
        SplitOptions(level=0)
    with pytest.raises(ValueError):
        SplitOptions(max_chapter_length=0)


def test_stats_empty():
    stats = get_chapter_stats([])

    assert stats.total_chapters == 0
    assert stats.total_words == 0
    assert stats.average_words == 0


def test_stats_ties_go_to_first_chapter():
    chapters = [
        ChapterContent(index=0, title="A", content="", word_count=5),
        ChapterContent(index=1, title="B", content="", word_count=5),
        ChapterContent(index=2, title="C", content="", word_count=2),
        ChapterContent(index=3, title="D", content="", word_count=2),
    ]

    stats = get_chapter_stats(chapters)

    assert stats.longest_chapter.title == "A"
    assert stats.shortest_chapter.title == "C"
    assert stats.shortest_chapter.index == 2
    # 14 / 4 = 3.5 rounds half up
    assert stats.average_words == 4


def test_part_without_own_document_keeps_range_files(build_epub):
    path = build_epub({
        "OEBPS/content.opf": opf(),
        "OEBPS/text/part0006.html": xhtml("<p>First</p>"),
        "OEBPS/text/part0008.html": xhtml("<p>Third</p>"),
    })
    toc = _toc(("第一部分 开端", "text/part0005.html", 1))

    with ChapterSplitter(path) as splitter:
        chapters = splitter.split_chapters(toc, SplitOptions())

    assert [c.content for c in chapters] == ["First\n\nThird"]


def test_part_with_no_readable_files_is_skipped(build_epub):
    path = build_epub({"OEBPS/content.opf": opf()})
    toc = _toc(("第一部分 开端", "text/part0005.html", 1))

    with ChapterSplitter(path) as splitter:
        assert splitter.split_chapters(toc, SplitOptions()) == []
