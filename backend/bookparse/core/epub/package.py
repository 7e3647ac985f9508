"""Container and package document resolution.

Reads ``META-INF/container.xml`` to find the package document (OPF) and
parses it into a ``PackageDocument``.
"""

import logging
from posixpath import dirname as posix_dirname

from lxml import etree

from bookparse.models.package import ManifestItem, MetadataEntry, PackageDocument

from .archive import EpubArchive
from .errors import (
    MalformedContainerDescriptorError,
    MalformedPackageDocumentError,
    MissingContainerDescriptorError,
    MissingMimetypeError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Standard XML Namespaces (EPUB specification - do not modify)
# =============================================================================

CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"
OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"

EPUB_MIMETYPE = "application/epub+zip"
MIMETYPE_PATH = "mimetype"
CONTAINER_PATH = "META-INF/container.xml"

# Legacy OPF 2.0 wrappers around the actual metadata elements
_METADATA_WRAPPERS = {"dc-metadata", "x-metadata"}


def _xml_parser() -> etree.XMLParser:
    # No network access and no entity expansion for untrusted archives
    return etree.XMLParser(recover=True, resolve_entities=False, no_network=True)


def check_mimetype(archive: EpubArchive) -> None:
    """Ensure the archive declares itself as EPUB."""
    if not archive.exists(MIMETYPE_PATH):
        raise MissingMimetypeError("Missing mimetype entry")

    mimetype = archive.read_text(MIMETYPE_PATH).strip()
    if mimetype != EPUB_MIMETYPE:
        raise MissingMimetypeError(f"Invalid mimetype: {mimetype!r}")


def read_container(archive: EpubArchive) -> str:
    """Return the package document path declared by ``container.xml``."""
    if not archive.exists(CONTAINER_PATH):
        raise MissingContainerDescriptorError(f"Missing {CONTAINER_PATH}")

    try:
        tree = etree.fromstring(archive.read_bytes(CONTAINER_PATH), _xml_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedContainerDescriptorError(f"{CONTAINER_PATH} is not valid XML: {e}") from e

    if tree is None:
        raise MalformedContainerDescriptorError(f"{CONTAINER_PATH} is empty")

    rootfile = tree.find(".//{*}rootfile")
    opf_path = rootfile.get("full-path", "").strip() if rootfile is not None else ""
    if not opf_path:
        raise MalformedContainerDescriptorError(
            f"{CONTAINER_PATH} has no rootfile full-path attribute"
        )
    return opf_path


def package_dir_of(opf_path: str) -> str:
    """Directory of the package document ("" at the archive root)."""
    directory = posix_dirname(opf_path)
    return "" if directory == "." else directory


def _qualified_tag(element: etree._Element) -> str:
    qname = etree.QName(element)
    if qname.namespace == DC_NS:
        return f"dc:{qname.localname}"
    return qname.localname


def _qualified_attrs(element: etree._Element) -> dict[str, str]:
    attrs = {}
    for key, value in element.attrib.items():
        qname = etree.QName(key)
        if qname.namespace == OPF_NS:
            attrs[f"opf:{qname.localname}"] = value
        else:
            attrs[qname.localname] = value
    return attrs


def _parse_metadata(metadata_elem: etree._Element) -> dict[str, list[MetadataEntry]]:
    metadata: dict[str, list[MetadataEntry]] = {}
    for element in metadata_elem.iter():
        if element is metadata_elem or not isinstance(element.tag, str):
            continue  # skip the container itself, comments and PIs
        tag = _qualified_tag(element)
        if tag in _METADATA_WRAPPERS:
            continue
        text = "".join(element.itertext()).strip()
        metadata.setdefault(tag, []).append(
            MetadataEntry(text=text, attrs=_qualified_attrs(element))
        )
    return metadata


def parse_package_document(content: bytes, opf_path: str) -> PackageDocument:
    """Parse OPF bytes into a ``PackageDocument``."""
    try:
        tree = etree.fromstring(content, _xml_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedPackageDocumentError(f"{opf_path} is not valid XML: {e}") from e
    if tree is None:
        raise MalformedPackageDocumentError(f"{opf_path} is empty")

    package = PackageDocument(opf_path=opf_path, package_dir=package_dir_of(opf_path))

    metadata_elem = tree.find(".//{*}metadata")
    if metadata_elem is not None:
        package.metadata = _parse_metadata(metadata_elem)

    for item in tree.iterfind(".//{*}manifest/{*}item"):
        item_id = item.get("id")
        href = item.get("href")
        if not item_id or not href:
            continue
        package.manifest.append(ManifestItem(
            id=item_id,
            href=href,
            media_type=item.get("media-type", ""),
            properties=item.get("properties", ""),
        ))

    for itemref in tree.iterfind(".//{*}spine/{*}itemref"):
        idref = itemref.get("idref")
        if idref:
            package.spine.append(idref)

    return package


def load_package(archive: EpubArchive) -> PackageDocument:
    """Resolve the container and parse the package document it points to."""
    opf_path = read_container(archive)
    logger.info("Found package document: %s", opf_path)

    if not archive.exists(opf_path):
        raise MalformedPackageDocumentError(f"Package document not found: {opf_path}")

    package = parse_package_document(archive.read_bytes(opf_path), opf_path)
    logger.info(
        "Package dir %r: %d manifest items, %d spine entries",
        package.package_dir,
        len(package.manifest),
        len(package.spine),
    )
    return package
