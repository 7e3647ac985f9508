"""Book parsing result models.

These are the output contract consumed by the surrounding system (routing,
storage and analysis layers). They are produced once per parse or split and
treated as values afterwards.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BookInfo(BaseModel):
    """Book-level metadata with a fixed schema.

    Every field is always present; missing metadata falls back to the
    configured "unknown" literals rather than being omitted.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", description="Book title")
    author: str = Field(default="", description="First creator")
    translator: str = Field(default="", description="First contributor with a translator role")
    publisher: str = Field(default="")
    isbn: str = Field(default="", description="First dc:identifier")
    publication_date: str = Field(default="")
    language: str = Field(default="")


class CoverInfo(BaseModel):
    """Cover image with a human-readable status."""

    model_config = ConfigDict(frozen=True)

    cover_image: str = Field(default="", description="data:image/jpeg;base64,... or empty")
    alt_text: str = Field(..., description="Status: success or the reason no image is available")
    resolved_path: Optional[str] = Field(
        default=None, description="Archive entry the image was read from"
    )


class TocItem(BaseModel):
    """One table-of-contents entry.

    TOC entries are emitted as a flat list in depth-first order; ``parent_id``
    is a lookup key into that list, not an object reference.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    level: int = Field(default=1, ge=1)
    href: str = Field(default="", description="Package-relative path with optional #fragment")
    parent_id: Optional[str] = None


class ChapterContent(BaseModel):
    """Plain-text content of one chapter at a given TOC level."""

    index: int = Field(default=0, description="Position in the emitted chapter list")
    title: str
    content: str
    word_count: int = 0
    level: int = 1


class ChapterRef(BaseModel):
    """Reference to a chapter inside ``ChapterStats``."""

    index: int = 0
    title: str = ""
    word_count: int = 0


class ChapterStats(BaseModel):
    """Aggregate word statistics over a chapter list."""

    total_chapters: int = 0
    total_words: int = 0
    average_words: int = 0
    longest_chapter: ChapterRef = Field(default_factory=ChapterRef)
    shortest_chapter: ChapterRef = Field(default_factory=ChapterRef)


class ParseResult(BaseModel):
    """Uniform result of ``parse()``.

    A failed parse carries ``success=False``, an ``error`` message and empty
    default structures.
    """

    success: bool
    book_info: BookInfo = Field(default_factory=BookInfo)
    cover_info: Optional[CoverInfo] = None
    table_of_contents: List[TocItem] = Field(default_factory=list)
    error: Optional[str] = None
