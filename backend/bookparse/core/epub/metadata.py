"""Book metadata extraction from the OPF metadata block."""

import logging
from typing import Optional

from bookparse.core.parsers.config import DEFAULT_CONFIG, ParseConfig
from bookparse.models.book import BookInfo
from bookparse.models.package import MetadataEntry, PackageDocument

logger = logging.getLogger(__name__)

TRANSLATOR_ROLES = {"trl", "translator"}


def _first_text(package: PackageDocument, key: str) -> str:
    entry = package.first_metadata(key)
    return entry.text if entry else ""


def _role_of(entry: MetadataEntry) -> str:
    return (entry.get("role") or entry.get("opf:role")).strip().lower()


def _refined_roles(package: PackageDocument) -> dict[str, set[str]]:
    """Collect EPUB3 ``<meta refines="#id" property="role">`` values by id."""
    roles: dict[str, set[str]] = {}
    for meta in package.metadata.get("meta", []):
        if meta.get("property") != "role":
            continue
        target = meta.get("refines").lstrip("#")
        if target and meta.text:
            roles.setdefault(target, set()).add(meta.text.strip().lower())
    return roles


def find_translator(package: PackageDocument) -> str:
    """Return the first contributor whose role marks a translator."""
    contributors = package.metadata.get("dc:contributor", [])
    if not contributors:
        return ""

    refined = _refined_roles(package)
    for contributor in contributors:
        roles: set[str] = {_role_of(contributor)}
        contributor_id: Optional[str] = contributor.get("id") or None
        if contributor_id:
            roles |= refined.get(contributor_id, set())
        if roles & TRANSLATOR_ROLES:
            return contributor.text
    return ""


def extract_book_info(
    package: PackageDocument, config: ParseConfig = DEFAULT_CONFIG
) -> BookInfo:
    """Derive ``BookInfo`` from package metadata.

    Missing fields fall back to the config's "unknown" literals; this
    function does not raise.
    """
    if not config.extract_metadata:
        return BookInfo(
            title=config.unknown_title,
            author=config.unknown_author,
            publisher=config.unknown_publisher,
            language=config.default_language,
        )

    return BookInfo(
        title=_first_text(package, "dc:title") or config.unknown_title,
        author=_first_text(package, "dc:creator") or config.unknown_author,
        translator=find_translator(package),
        publisher=_first_text(package, "dc:publisher") or config.unknown_publisher,
        isbn=_first_text(package, "dc:identifier"),
        publication_date=_first_text(package, "dc:date"),
        language=_first_text(package, "dc:language") or config.default_language,
    )
