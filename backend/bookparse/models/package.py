"""Parsed package document (OPF) structures."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class MetadataEntry:
    """One element of the OPF ``<metadata>`` block."""

    text: str
    attrs: dict[str, str] = field(default_factory=dict)

    def get(self, name: str, default: str = "") -> str:
        return self.attrs.get(name, default)


@dataclass(frozen=True)
class ManifestItem:
    """An OPF manifest ``<item>``.

    ``href`` is relative to the package document's directory.
    """

    id: str
    href: str
    media_type: str = ""
    properties: str = ""

    @property
    def is_image(self) -> bool:
        return self.media_type.startswith("image/")

    def has_property(self, name: str) -> bool:
        return name in self.properties.split()


@dataclass
class PackageDocument:
    """The package document: metadata, manifest and spine."""

    opf_path: str
    package_dir: str  # "" when the OPF sits at the archive root
    # Qualified name -> entries in document order (dc:title, meta, cover, ...)
    metadata: dict[str, list[MetadataEntry]] = field(default_factory=dict)
    manifest: list[ManifestItem] = field(default_factory=list)
    spine: list[str] = field(default_factory=list)  # idrefs in reading order

    def first_metadata(self, key: str) -> Optional[MetadataEntry]:
        entries = self.metadata.get(key)
        return entries[0] if entries else None

    def item_by_id(self, item_id: str) -> Optional[ManifestItem]:
        for item in self.manifest:
            if item.id == item_id:
                return item
        return None

    def image_items(self) -> list[ManifestItem]:
        return [item for item in self.manifest if item.is_image]

    def spine_items(self) -> list[tuple[int, ManifestItem]]:
        """Resolve spine idrefs to manifest items.

        Returns (spine position, item) pairs; idrefs with no manifest entry
        are skipped.
        """
        resolved = []
        for position, idref in enumerate(self.spine):
            item = self.item_by_id(idref)
            if item is not None:
                resolved.append((position, item))
        return resolved

    def resolve_href(self, href: str) -> str:
        """Join a manifest-relative href with the package directory."""
        if self.package_dir:
            return f"{self.package_dir}/{href}"
        return href
