"""Base parser contract."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from bookparse.core.parsers.config import DEFAULT_CONFIG, ParseConfig
from bookparse.models.book import BookInfo, CoverInfo, ParseResult, TocItem


class BaseParser(ABC):
    """Abstract base class for book parsers.

    Parsers are responsible for:
    1. A cheap pre-flight ``validate()`` that never raises
    2. A ``parse()`` that always returns a ``ParseResult``, never raises
    3. Declaring the file extensions they handle
    """

    def __init__(self, config: Optional[ParseConfig] = None):
        self.config = config or DEFAULT_CONFIG

    @abstractmethod
    def validate(self, file_path: Path | str) -> bool:
        """Check whether the file can be parsed."""
        pass

    @abstractmethod
    def parse(self, file_path: Path | str) -> ParseResult:
        """Parse the file into book info, cover and table of contents."""
        pass

    @abstractmethod
    def get_supported_formats(self) -> list[str]:
        """Return lowercase file extensions including the dot."""
        pass

    def create_error(self, message: str) -> ParseResult:
        """Build a failed result with empty default structures."""
        return ParseResult(
            success=False,
            book_info=BookInfo(),
            table_of_contents=[],
            error=message,
        )

    def create_success(
        self,
        book_info: BookInfo,
        cover_info: Optional[CoverInfo],
        table_of_contents: list[TocItem],
    ) -> ParseResult:
        return ParseResult(
            success=True,
            book_info=book_info,
            cover_info=cover_info,
            table_of_contents=table_of_contents,
        )
