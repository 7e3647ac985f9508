"""EPUB Parser - resolve metadata, cover and table of contents.

The parser runs the structural steps in order (archive, container, package
document) and then the three feature extractors independently. A structural
failure yields a failed ``ParseResult``; a feature failure only degrades that
feature.

Usage:
    parser = EPUBParser()
    if parser.validate("book.epub"):
        result = parser.parse("book.epub")

    # Chinese fallback literals
    parser = EPUBParser(config=CJK_CONFIG)
"""

import logging
from pathlib import Path
from typing import Optional

from bookparse.core.parsers.base import BaseParser
from bookparse.core.parsers.config import ParseConfig
from bookparse.models.book import ParseResult

from .archive import EpubArchive
from .cover import CoverResolver
from .errors import EpubError, FileTooLargeError, InvalidArchiveError, UnsupportedFormatError
from .metadata import extract_book_info
from .package import check_mimetype, load_package, read_container
from .toc import TocResolver

logger = logging.getLogger(__name__)


class EPUBParser(BaseParser):
    """Parse EPUB files into ``ParseResult`` objects."""

    def __init__(self, config: Optional[ParseConfig] = None):
        super().__init__(config)
        self.cover_resolver = CoverResolver(self.config)
        self.toc_resolver = TocResolver(self.config)

    def get_supported_formats(self) -> list[str]:
        return [".epub"]

    def check_file(self, file_path: Path | str) -> None:
        """Run every pre-flight check, raising the first failure.

        Raises:
            EpubError: The specific reason the file cannot be parsed
        """
        path = Path(file_path)

        if not path.is_file():
            raise InvalidArchiveError(f"File does not exist: {path}")

        extension = path.suffix.lower()
        if extension not in self.get_supported_formats():
            raise UnsupportedFormatError(f"Unsupported file format: {extension or '(none)'}")

        size = path.stat().st_size
        if size == 0:
            raise InvalidArchiveError(f"File is empty: {path}")
        if size > self.config.max_file_size_bytes:
            raise FileTooLargeError(size, self.config.max_file_size_bytes)

        with EpubArchive(path) as archive:
            check_mimetype(archive)
            read_container(archive)

    def validate(self, file_path: Path | str) -> bool:
        """Pre-flight check; logs the reason and returns False on failure."""
        try:
            self.check_file(file_path)
        except EpubError as e:
            logger.warning("EPUB validation failed for %s: %s", file_path, e)
            return False
        except Exception as e:
            logger.error("EPUB validation error for %s: %s", file_path, e)
            return False

        logger.info("EPUB validated: %s", file_path)
        return True

    def parse(self, file_path: Path | str) -> ParseResult:
        logger.info("Parsing EPUB: %s", file_path)

        try:
            self.check_file(file_path)
        except EpubError as e:
            logger.warning("EPUB validation failed for %s: %s", file_path, e)
            return self.create_error(f"Invalid EPUB file: {e}")
        except Exception as e:
            logger.error("EPUB validation error for %s: %s", file_path, e)
            return self.create_error(f"Invalid EPUB file: {e}")

        try:
            with EpubArchive(file_path) as archive:
                package = load_package(archive)

                book_info = extract_book_info(package, self.config)
                logger.info("Book info: %s - %s", book_info.title, book_info.author)

                cover_info = None
                if self.config.extract_cover:
                    cover_info = self.cover_resolver.resolve(archive, package)
                else:
                    logger.info("Cover extraction disabled")

                table_of_contents = []
                if self.config.extract_toc:
                    table_of_contents = self.toc_resolver.resolve(archive, package)
                else:
                    logger.info("TOC extraction disabled")
        except EpubError as e:
            logger.error("EPUB parse failed for %s: %s", file_path, e)
            return self.create_error(f"Parse failed: {e}")
        except Exception as e:
            logger.exception("Unexpected error parsing %s", file_path)
            return self.create_error(f"Parse failed: {e}")

        logger.info("Parsed %s: %d TOC entries", file_path, len(table_of_contents))
        return self.create_success(book_info, cover_info, table_of_contents)
