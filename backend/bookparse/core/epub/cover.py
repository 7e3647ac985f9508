"""Cover image resolution.

The cover is located by an ordered chain of strategies over the manifest,
the metadata block and conventional file names. The first strategy that
yields a candidate wins; the candidate's href is then looked up under several
path conventions because producers disagree on whether manifest hrefs are
relative to the package document or to the archive root.
"""

import base64
import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from PIL import Image, UnidentifiedImageError

from bookparse.core.parsers.config import DEFAULT_CONFIG, ParseConfig
from bookparse.models.book import CoverInfo
from bookparse.models.package import PackageDocument

from .archive import EpubArchive
from .errors import ExtractionFailedError

logger = logging.getLogger(__name__)

# Status strings reported in CoverInfo.alt_text
ALT_TEXT_SUCCESS = "Book cover"
ALT_TEXT_NOT_FOUND = "No cover image found"
ALT_TEXT_FILE_MISSING = "Cover image file missing"
ALT_TEXT_EMPTY = "Cover image data empty"
ALT_TEXT_FAILED = "Cover extraction failed"

CONVENTIONAL_COVER_NAMES = ["cover.jpg", "cover.jpeg", "cover.png", "cover.gif", "cover.webp"]
CONVENTIONAL_DIRS = ["OEBPS", "content", "images", "img"]


@dataclass(frozen=True)
class CoverContext:
    archive: EpubArchive
    package: PackageDocument


@dataclass(frozen=True)
class CoverCandidate:
    """A cover href (package-relative as declared) and where it came from."""

    href: str
    item_id: Optional[str]
    strategy: str


CoverStrategy = Callable[[CoverContext], Optional[CoverCandidate]]


# =============================================================================
# Strategies
# =============================================================================

def from_metadata_cover_key(context: CoverContext) -> Optional[CoverCandidate]:
    """A ``<cover>`` element in the metadata block naming a manifest id."""
    entry = context.package.first_metadata("cover")
    if entry is None:
        return None
    cover_id = entry.get("content") or entry.text
    item = context.package.item_by_id(cover_id) if cover_id else None
    if item is None:
        return None
    return CoverCandidate(item.href, item.id, "metadata_cover_key")


def from_cover_image_property(context: CoverContext) -> Optional[CoverCandidate]:
    """EPUB3 ``properties="cover-image"`` (or an item literally named so)."""
    for item in context.package.manifest:
        if item.properties == "cover-image" or item.id == "cover-image":
            return CoverCandidate(item.href, item.id, "cover_image_property")
    return None


def from_meta_name_cover(context: CoverContext) -> Optional[CoverCandidate]:
    """EPUB2 ``<meta name="cover" content="<id>"/>``."""
    for meta in context.package.metadata.get("meta", []):
        if meta.get("name") != "cover" or not meta.get("content"):
            continue
        item = context.package.item_by_id(meta.get("content"))
        if item is not None:
            return CoverCandidate(item.href, item.id, "meta_name_cover")
    return None


def from_image_named_cover(context: CoverContext) -> Optional[CoverCandidate]:
    """Any image whose id or href mentions "cover"."""
    for item in context.package.image_items():
        if "cover" in item.id.lower() or "cover" in item.href.lower():
            return CoverCandidate(item.href, item.id, "image_named_cover")
    return None


def from_conventional_filename(context: CoverContext) -> Optional[CoverCandidate]:
    """``cover.jpg`` and friends next to the package document."""
    for name in CONVENTIONAL_COVER_NAMES:
        full_path = context.package.resolve_href(name)
        logger.debug("Checking conventional cover file: %s", full_path)
        if context.archive.exists(full_path):
            return CoverCandidate(name, None, "conventional_filename")
    return None


def from_first_image(context: CoverContext) -> Optional[CoverCandidate]:
    """Last resort: the first image in the manifest."""
    images = context.package.image_items()
    if images:
        return CoverCandidate(images[0].href, images[0].id, "first_image")
    return None


COVER_STRATEGIES: list[tuple[str, CoverStrategy]] = [
    ("metadata_cover_key", from_metadata_cover_key),
    ("cover_image_property", from_cover_image_property),
    ("meta_name_cover", from_meta_name_cover),
    ("image_named_cover", from_image_named_cover),
    ("conventional_filename", from_conventional_filename),
    ("first_image", from_first_image),
]


# =============================================================================
# Path search and image processing
# =============================================================================

def cover_path_candidates(href: str, package_dir: str) -> list[str]:
    """Archive paths to try for a cover href, in priority order."""
    paths = [href]

    if package_dir and package_dir != ".":
        paths.append(f"{package_dir}/{href}")

    if href.startswith("./"):
        paths.append(href[2:])
    else:
        paths.append(f"./{href}")

    file_name = href.split("/")[-1]
    for directory in CONVENTIONAL_DIRS:
        paths.append(f"{directory}/{href}")
        if file_name and file_name != href:
            paths.append(f"{directory}/{file_name}")

    # Deduplicate, keeping the first occurrence
    return list(dict.fromkeys(paths))


def encode_cover(data: bytes, max_size: int, quality: int) -> str:
    """Shrink an image to fit ``max_size`` and return a JPEG data URI.

    Raises:
        ExtractionFailedError: If the bytes cannot be decoded as an image
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

            if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
                rgba = img.convert("RGBA")
                rendered = Image.new("RGB", rgba.size, (255, 255, 255))
                rendered.paste(rgba, mask=rgba.split()[-1])
            else:
                rendered = img.convert("RGB")

            buffer = io.BytesIO()
            rendered.save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ExtractionFailedError(f"cannot decode cover image: {e}") from e

    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


class CoverResolver:
    """Locate, read and re-encode the cover image.

    ``resolve()`` never raises: every failure becomes an empty image with a
    status in ``alt_text``.
    """

    def __init__(
        self,
        config: ParseConfig = DEFAULT_CONFIG,
        strategies: Optional[list[tuple[str, CoverStrategy]]] = None,
    ):
        self.config = config
        self.strategies = strategies if strategies is not None else COVER_STRATEGIES

    def find_candidate(self, context: CoverContext) -> Optional[CoverCandidate]:
        for name, strategy in self.strategies:
            logger.debug("Cover strategy: %s", name)
            candidate = strategy(context)
            if candidate is not None:
                logger.info("Cover candidate %s found by %s", candidate.href, name)
                return candidate
        return None

    def resolve(self, archive: EpubArchive, package: PackageDocument) -> CoverInfo:
        try:
            return self._resolve(CoverContext(archive=archive, package=package))
        except Exception as e:
            logger.warning("Cover extraction failed: %s", e)
            return CoverInfo(cover_image="", alt_text=ALT_TEXT_FAILED)

    def _resolve(self, context: CoverContext) -> CoverInfo:
        candidate = self.find_candidate(context)
        if candidate is None:
            logger.warning("No cover image found")
            return CoverInfo(cover_image="", alt_text=ALT_TEXT_NOT_FOUND)

        paths = cover_path_candidates(candidate.href, context.package.package_dir)
        actual_path = context.archive.first_existing(paths)
        if actual_path is None:
            logger.warning("Cover file not found, tried: %s", ", ".join(paths))
            return CoverInfo(cover_image="", alt_text=ALT_TEXT_FILE_MISSING)

        data = context.archive.read_bytes(actual_path)
        if not data:
            logger.warning("Cover image %s is empty", actual_path)
            return CoverInfo(cover_image="", alt_text=ALT_TEXT_EMPTY, resolved_path=actual_path)

        try:
            cover_image = encode_cover(data, self.config.max_cover_size, self.config.image_quality)
        except ExtractionFailedError as e:
            logger.warning("%s (%s)", e, actual_path)
            return CoverInfo(cover_image="", alt_text=ALT_TEXT_FAILED, resolved_path=actual_path)

        logger.info("Cover image processed from %s", actual_path)
        return CoverInfo(
            cover_image=cover_image,
            alt_text=ALT_TEXT_SUCCESS,
            resolved_path=actual_path,
        )
