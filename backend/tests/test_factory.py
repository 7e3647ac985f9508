from __future__ import annotations

import pytest

from bookparse import CJK_CONFIG, EPUBParser, ParserFactory
from bookparse.core.epub.errors import UnsupportedFormatError
from bookparse.core.parsers.base import BaseParser


class PlainTextParser(BaseParser):
    def validate(self, file_path):
        return True

    def parse(self, file_path):
        return self.create_error("plain text has no structure")

    def get_supported_formats(self):
        return [".txt"]


@pytest.fixture(autouse=True)
def isolated_registry(monkeypatch):
    monkeypatch.setattr(ParserFactory, "_registrations", dict(ParserFactory._registrations))


def test_create_epub_parser_case_insensitive():
    parser = ParserFactory.create("Book.EPUB", CJK_CONFIG)

    assert isinstance(parser, EPUBParser)
    assert parser.config is CJK_CONFIG


def test_unsupported_format():
    with pytest.raises(UnsupportedFormatError):
        ParserFactory.create("book.pdf")
    assert ParserFactory.is_supported("book.epub")
    assert not ParserFactory.is_supported("book.pdf")
    assert not ParserFactory.is_supported("README")


def test_register_custom_parser():
    ParserFactory.register(
        "text",
        PlainTextParser,
        matcher=lambda path: str(path).endswith(".txt"),
    )

    parser = ParserFactory.create("notes.txt")

    assert isinstance(parser, PlainTextParser)
    assert parser.parse("notes.txt").success is False
    assert ParserFactory.supported_formats() == [".epub", ".txt"]


def test_priority_decides_between_matches():
    class OtherEpubParser(PlainTextParser):
        def get_supported_formats(self):
            return [".epub"]

    ParserFactory.register("low", OtherEpubParser, matcher=lambda path: True, priority=1)
    assert isinstance(ParserFactory.create("book.epub"), EPUBParser)

    ParserFactory.register("high", OtherEpubParser, matcher=lambda path: True, priority=200)
    assert isinstance(ParserFactory.create("book.epub"), OtherEpubParser)
