"""EPUB processing package."""

from .archive import EpubArchive
from .cover import CoverResolver
from .errors import (
    EpubError,
    ExtractionFailedError,
    FileTooLargeError,
    InvalidArchiveError,
    MalformedContainerDescriptorError,
    MalformedPackageDocumentError,
    MissingContainerDescriptorError,
    MissingMimetypeError,
    MissingTableOfContentsError,
    UnsupportedFormatError,
)
from .metadata import extract_book_info
from .package import DC_NS, OPF_NS, load_package
from .parser import EPUBParser
from .toc import TocResolver

__all__ = [
    "EPUBParser",
    "EpubArchive",
    "CoverResolver",
    "TocResolver",
    "extract_book_info",
    "load_package",
    "OPF_NS",
    "DC_NS",
    # Errors
    "EpubError",
    "InvalidArchiveError",
    "FileTooLargeError",
    "UnsupportedFormatError",
    "MissingMimetypeError",
    "MissingContainerDescriptorError",
    "MalformedContainerDescriptorError",
    "MalformedPackageDocumentError",
    "MissingTableOfContentsError",
    "ExtractionFailedError",
]
