"""Read-only access to the entries of an EPUB zip container."""

import logging
from pathlib import Path
from typing import Iterable, Optional
from zipfile import BadZipFile, ZipFile

from .errors import InvalidArchiveError

logger = logging.getLogger(__name__)


class EpubArchive:
    """An opened EPUB archive addressed by exact, case-sensitive entry paths.

    The archive holds an open file handle and must be closed by the caller,
    either explicitly with ``close()`` or by using it as a context manager::

        with EpubArchive("book.epub") as archive:
            opf = archive.read_text("OEBPS/content.opf")

    One instance must not be shared between concurrent parse calls.
    """

    def __init__(self, epub_path: Path | str):
        self.epub_path = Path(epub_path)
        try:
            self.zip_file = ZipFile(self.epub_path)
        except (BadZipFile, OSError) as e:
            raise InvalidArchiveError(f"Not a valid zip archive: {self.epub_path.name} ({e})") from e

        # Directory entries end with "/" and are not readable files
        self._files = {
            info.filename for info in self.zip_file.infolist() if not info.is_dir()
        }
        logger.debug("Opened %s with %d entries", self.epub_path.name, len(self._files))

    def names(self) -> list[str]:
        """Return all file entry paths in archive order."""
        return [
            info.filename for info in self.zip_file.infolist() if not info.is_dir()
        ]

    def exists(self, path: str) -> bool:
        """Check whether ``path`` names a file entry (exact match)."""
        return path in self._files

    def first_existing(self, candidates: Iterable[str]) -> Optional[str]:
        """Return the first candidate path that exists in the archive."""
        for candidate in candidates:
            if candidate and self.exists(candidate):
                return candidate
        return None

    def read_bytes(self, path: str) -> bytes:
        """Read an entry's raw bytes.

        Raises:
            KeyError: If the entry does not exist
        """
        if not self.exists(path):
            raise KeyError(f"File not found in archive: {path}")
        return self.zip_file.read(path)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read an entry as text, replacing undecodable bytes."""
        return self.read_bytes(path).decode(encoding, errors="replace")

    def close(self):
        """Close the underlying zip file."""
        self.zip_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
