"""Parse configuration.

Configuration is an explicit value passed to the parser and resolvers; there
is no module-level mutable state. Use one of the presets or build your own.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bookparse.config import Settings


@dataclass(frozen=True)
class ParseConfig:
    """Configuration options for EPUB parsing.

    Adjust these values to customize parsing behavior for different books.
    """

    # Feature switches
    extract_cover: bool = True
    extract_toc: bool = True
    extract_metadata: bool = True

    # Cover post-processing: longest side in pixels, JPEG quality 0-100
    max_cover_size: int = 300
    image_quality: int = 80

    # Files larger than this are rejected before opening
    max_file_size_bytes: int = 100 * 1024 * 1024

    # Fallback literals for missing metadata
    unknown_title: str = "Unknown Title"
    unknown_author: str = "Unknown Author"
    unknown_publisher: str = "Unknown Publisher"
    default_language: str = "en"

    # Title for TOC entries synthesized from the spine, 1-based {number}
    spine_title_template: str = "Chapter {number}"

    def __post_init__(self):
        if not 0 <= self.image_quality <= 100:
            raise ValueError(f"image_quality must be between 0 and 100, got {self.image_quality}")
        if self.max_cover_size <= 0:
            raise ValueError(f"max_cover_size must be positive, got {self.max_cover_size}")
        if self.max_file_size_bytes <= 0:
            raise ValueError("max_file_size_bytes must be positive")

    @classmethod
    def from_settings(cls, settings: "Settings", base: "ParseConfig | None" = None) -> "ParseConfig":
        """Build a config from application settings on top of ``base``."""
        return replace(
            base or DEFAULT_CONFIG,
            extract_cover=settings.extract_cover,
            extract_toc=settings.extract_toc,
            extract_metadata=settings.extract_metadata,
            max_cover_size=settings.max_cover_size,
            image_quality=settings.image_quality,
            max_file_size_bytes=settings.max_upload_size_mb * 1024 * 1024,
        )


# =============================================================================
# Predefined Configuration Presets
# =============================================================================

# Default configuration - English fallback literals
DEFAULT_CONFIG = ParseConfig()

# CJK configuration - Chinese fallback literals for Chinese-language books
CJK_CONFIG = ParseConfig(
    unknown_title="未知标题",
    unknown_author="未知作者",
    unknown_publisher="未知出版社",
    default_language="zh",
    spine_title_template="第{number}章",
)
