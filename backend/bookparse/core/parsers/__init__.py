"""Parser contract, configuration and factory.

Import ``ParserFactory`` from ``bookparse.core.parsers.factory``; it depends
on the EPUB modules, which in turn depend on this package.
"""

from .base import BaseParser
from .config import CJK_CONFIG, DEFAULT_CONFIG, ParseConfig

__all__ = ["BaseParser", "ParseConfig", "DEFAULT_CONFIG", "CJK_CONFIG"]
