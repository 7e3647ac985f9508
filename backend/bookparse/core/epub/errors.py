"""Error taxonomy for EPUB resolution.

Structural errors (archive, container, package document) abort ``parse()``
and are turned into a failed ``ParseResult``. Feature-local errors
(``ExtractionFailedError``) are raised inside the cover and chapter paths and
absorbed there.
"""

MIB = 1024 * 1024


def format_size(num_bytes: int) -> str:
    """Whole megabytes from 1 MiB up, bytes below."""
    if num_bytes >= MIB:
        return f"{num_bytes // MIB}MB"
    return f"{num_bytes} bytes"


class EpubError(Exception):
    """Base class for all EPUB resolution errors."""


class InvalidArchiveError(EpubError):
    """The file is missing, empty, or not a readable zip container."""


class FileTooLargeError(EpubError):
    """The file exceeds the configured maximum size."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"File too large ({format_size(size)}, limit {format_size(limit)})")


class UnsupportedFormatError(EpubError):
    """No parser is registered for the file extension."""


class MissingMimetypeError(EpubError):
    """The ``mimetype`` entry is absent or does not declare EPUB."""


class MissingContainerDescriptorError(EpubError):
    """``META-INF/container.xml`` is absent."""


class MalformedContainerDescriptorError(EpubError):
    """``container.xml`` is not XML or has no rootfile ``full-path``."""


class MalformedPackageDocumentError(EpubError):
    """The package document (OPF) is missing or cannot be parsed."""


class MissingTableOfContentsError(EpubError):
    """Chapter splitting was requested with an empty table of contents."""

    def __init__(self, message: str = "Table of contents is empty; parse the book first"):
        super().__init__(message)


class ExtractionFailedError(EpubError):
    """A single cover or chapter extraction failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Extraction failed: {reason}")
