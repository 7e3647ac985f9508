from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<package version="3.0" unique-identifier="BookId" xmlns="http://www.idpf.org/2007/opf">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
{metadata}
  </metadata>
  <manifest>
{manifest}
  </manifest>
  <spine>
{spine}
  </spine>
</package>
"""


def opf(metadata: str = "", manifest: str = "", spine: str = "") -> str:
    return OPF_TEMPLATE.format(metadata=metadata, manifest=manifest, spine=spine)


def xhtml(body: str) -> str:
    return f"""<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head></head>
  <body>
{body}
  </body>
</html>
"""


def write_epub(
    path: Path,
    files: dict[str, str | bytes],
    opf_path: str | None = "OEBPS/content.opf",
    mimetype: str | None = "application/epub+zip",
) -> Path:
    """Write an EPUB; ``None`` for mimetype or opf_path leaves that entry out."""
    with zipfile.ZipFile(path, "w") as zf:
        if mimetype is not None:
            zf.writestr("mimetype", mimetype, compress_type=zipfile.ZIP_STORED)
        if opf_path is not None:
            zf.writestr("META-INF/container.xml", CONTAINER_XML.format(opf_path=opf_path))
        for name, content in files.items():
            zf.writestr(name, content)
    return path


def image_bytes(size=(600, 900), mode="RGB", color=(200, 30, 30), fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def build_epub(tmp_path: Path) -> Callable[..., Path]:
    counter = {"n": 0}

    def _build(files: dict[str, str | bytes], name: str | None = None, **kwargs) -> Path:
        counter["n"] += 1
        target = tmp_path / (name or f"book{counter['n']}.epub")
        return write_epub(target, files, **kwargs)

    return _build


SAMPLE_METADATA = """
    <dc:title>Sample Book</dc:title>
    <dc:creator>Jane Doe</dc:creator>
    <dc:contributor opf:role="edt">Ed Itor</dc:contributor>
    <dc:contributor opf:role="trl">John Smith</dc:contributor>
    <dc:publisher>Example Press</dc:publisher>
    <dc:identifier id="BookId">urn:isbn:9780000000001</dc:identifier>
    <dc:date>2020-01-01</dc:date>
    <dc:language>en</dc:language>
    <meta name="cover" content="cover-img"/>
"""

SAMPLE_MANIFEST = """
    <item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav"/>
    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>
    <item id="cover-img" href="images/cover.png" media-type="image/png"/>
    <item id="ch1" href="text/ch1.xhtml" media-type="application/xhtml+xml"/>
    <item id="ch2" href="text/ch2.xhtml" media-type="application/xhtml+xml"/>
    <item id="ch3" href="text/ch3.xhtml" media-type="application/xhtml+xml"/>
"""

SAMPLE_SPINE = """
    <itemref idref="ch1"/>
    <itemref idref="ch2"/>
    <itemref idref="ch3"/>
"""

SAMPLE_NAV = xhtml("""
    <nav epub:type="toc" xmlns:epub="http://www.idpf.org/2007/ops">
      <ol>
        <li><a href="text/ch1.xhtml">Opening</a></li>
        <li><a href="text/ch2.xhtml">Middle</a></li>
        <li><a href="text/ch3.xhtml">Ending</a></li>
      </ol>
    </nav>
""")

SAMPLE_NCX = """<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <navMap>
    <navPoint id="n1" playOrder="1">
      <navLabel><text>NCX One</text></navLabel>
      <content src="text/ch1.xhtml"/>
    </navPoint>
  </navMap>
</ncx>
"""

SAMPLE_CHAPTERS = {
    "OEBPS/text/ch1.xhtml": xhtml("<h1>Opening</h1><p>The quick brown fox.</p><p>It jumps.</p>"),
    "OEBPS/text/ch2.xhtml": xhtml("<h1>Middle</h1><p>一二三四五</p>"),
    "OEBPS/text/ch3.xhtml": xhtml("<h1>Ending</h1><p>Done.</p>"),
}


@pytest.fixture
def sample_epub(build_epub) -> Path:
    """A well-formed EPUB3 with nav, NCX, a cover image and three chapters."""
    files: dict[str, str | bytes] = {
        "OEBPS/content.opf": opf(SAMPLE_METADATA, SAMPLE_MANIFEST, SAMPLE_SPINE),
        "OEBPS/nav.xhtml": SAMPLE_NAV,
        "OEBPS/toc.ncx": SAMPLE_NCX,
        "OEBPS/images/cover.png": image_bytes(),
    }
    files.update(SAMPLE_CHAPTERS)
    return build_epub(files, name="sample.epub")
