from __future__ import annotations

from bookparse import CJK_CONFIG, EPUBParser
from bookparse.core.epub.metadata import extract_book_info, find_translator
from bookparse.core.epub.package import parse_package_document
from bookparse.core.parsers.config import ParseConfig

from conftest import opf, xhtml

MANIFEST = '<item id="ch1" href="ch1.xhtml" media-type="application/xhtml+xml"/>'
SPINE = '<itemref idref="ch1"/>'


def _package(metadata: str):
    return parse_package_document(opf(metadata, MANIFEST, SPINE).encode("utf-8"), "OEBPS/content.opf")


def test_parse_reads_chinese_title_and_author(build_epub):
    metadata = """
    <dc:title>示例书</dc:title>
    <dc:creator>张三</dc:creator>
"""
    path = build_epub({
        "OEBPS/content.opf": opf(metadata, MANIFEST, SPINE),
        "OEBPS/ch1.xhtml": xhtml("<p>正文</p>"),
    })

    result = EPUBParser().parse(path)

    assert result.success
    assert result.book_info.title == "示例书"
    assert result.book_info.author == "张三"
    assert result.book_info.translator == ""


def test_first_occurrence_wins():
    package = _package("""
    <dc:title>Main Title</dc:title>
    <dc:title>Subtitle</dc:title>
    <dc:creator>First Author</dc:creator>
    <dc:creator>Second Author</dc:creator>
    <dc:identifier>urn:isbn:123</dc:identifier>
    <dc:identifier>urn:uuid:abc</dc:identifier>
""")

    info = extract_book_info(package)

    assert info.title == "Main Title"
    assert info.author == "First Author"
    assert info.isbn == "urn:isbn:123"


def test_translator_from_plain_and_namespaced_role():
    namespaced = _package("""
    <dc:contributor opf:role="edt">Editor</dc:contributor>
    <dc:contributor opf:role="trl">Translator One</dc:contributor>
    <dc:contributor opf:role="trl">Translator Two</dc:contributor>
""")
    plain = _package('<dc:contributor role="translator">Plain Role</dc:contributor>')

    assert find_translator(namespaced) == "Translator One"
    assert find_translator(plain) == "Plain Role"


def test_translator_from_refines_meta():
    package = _package("""
    <dc:contributor id="contrib1">Refined Translator</dc:contributor>
    <meta refines="#contrib1" property="role" scheme="marc:relators">trl</meta>
""")

    assert find_translator(package) == "Refined Translator"


def test_no_translator_role():
    package = _package('<dc:contributor opf:role="ill">Illustrator</dc:contributor>')

    assert find_translator(package) == ""


def test_missing_fields_fall_back_to_unknown_literals():
    package = _package("")

    info = extract_book_info(package)
    assert info.title == "Unknown Title"
    assert info.author == "Unknown Author"
    assert info.publisher == "Unknown Publisher"
    assert info.language == "en"
    assert info.isbn == ""
    assert info.publication_date == ""

    cjk_info = extract_book_info(package, CJK_CONFIG)
    assert cjk_info.title == "未知标题"
    assert cjk_info.author == "未知作者"
    assert cjk_info.publisher == "未知出版社"
    assert cjk_info.language == "zh"


def test_metadata_extraction_disabled():
    package = _package("<dc:title>Ignored</dc:title>")

    info = extract_book_info(package, ParseConfig(extract_metadata=False))

    assert info.title == "Unknown Title"
    assert info.translator == ""
