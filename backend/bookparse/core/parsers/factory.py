"""Parser Factory."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Type

from bookparse.core.epub.errors import UnsupportedFormatError
from bookparse.core.epub.parser import EPUBParser
from bookparse.core.parsers.base import BaseParser
from bookparse.core.parsers.config import ParseConfig


def _extension(file_path: Path | str) -> str:
    return Path(file_path).suffix.lower()


@dataclass(frozen=True)
class ParserRegistration:
    name: str
    priority: int
    matcher: Callable[[Path | str], bool]
    parser_class: Type[BaseParser]


class ParserFactory:
    """Factory for creating parser instances by file type."""

    _registrations: dict[str, ParserRegistration] = {
        "epub": ParserRegistration(
            name="epub",
            priority=100,
            matcher=lambda file_path: _extension(file_path) == ".epub",
            parser_class=EPUBParser,
        ),
    }

    @classmethod
    def register(
        cls,
        name: str,
        parser_class: Type[BaseParser],
        matcher: Callable[[Path | str], bool],
        priority: int = 0,
    ):
        """Register a new parser (replaces one with the same name)."""
        cls._registrations[name] = ParserRegistration(name, priority, matcher, parser_class)

    @classmethod
    def create(cls, file_path: Path | str, config: Optional[ParseConfig] = None) -> BaseParser:
        """Create the highest-priority parser matching the file."""
        ordered = sorted(cls._registrations.values(), key=lambda r: r.priority, reverse=True)
        for registration in ordered:
            if registration.matcher(file_path):
                return registration.parser_class(config)
        raise UnsupportedFormatError(f"Unsupported file format: {_extension(file_path) or '(none)'}")

    @classmethod
    def is_supported(cls, file_path: Path | str) -> bool:
        try:
            cls.create(file_path)
        except UnsupportedFormatError:
            return False
        return True

    @classmethod
    def supported_formats(cls) -> list[str]:
        """List extensions handled by any registered parser."""
        formats: set[str] = set()
        for registration in cls._registrations.values():
            formats.update(registration.parser_class().get_supported_formats())
        return sorted(formats)
