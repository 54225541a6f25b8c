"""Shared fixtures: minimal DOCX packages built in-test."""

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

CONTENT_TYPES_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Default Extension="png" ContentType="image/png"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
  <Override PartName="/docProps/core.xml" ContentType="application/vnd.openxmlformats-package.core-properties+xml"/>
  <Override PartName="/docProps/app.xml" ContentType="application/vnd.openxmlformats-officedocument.extended-properties+xml"/>
</Types>"""

ROOT_RELS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
  <Relationship Id="rId2" Type="http://schemas.openxmlformats.org/package/2006/relationships/metadata/core-properties" Target="docProps/core.xml"/>
  <Relationship Id="rId3" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/extended-properties" Target="docProps/app.xml"/>
</Relationships>"""

APP_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Properties xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties" xmlns:vt="http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes">
  <Template>Normal.dotm</Template>
  <TotalTime>3</TotalTime>
  <Pages>1</Pages>
  <Application>Microsoft Office Word</Application>
  <AppVersion>16.0000</AppVersion>
</Properties>"""

CORE_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:dcterms="http://purl.org/dc/terms/" xmlns:dcmitype="http://purl.org/dc/dcmitype/" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <dc:title>Quarterly Report</dc:title>
  <dc:creator>Jane Doe</dc:creator>
  <cp:revision>2</cp:revision>
  <dcterms:created xsi:type="dcterms:W3CDTF">2020-01-01T10:00:00Z</dcterms:created>
  <dcterms:modified xsi:type="dcterms:W3CDTF">2020-01-02T10:00:00Z</dcterms:modified>
</cp:coreProperties>"""

FONT_TABLE_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:fonts xmlns:w="{WORD_NS}">
  <w:font w:name="Calibri">
    <w:panose1 w:val="020F0502020204030204"/>
    <w:charset w:val="00"/>
    <w:family w:val="swiss"/>
    <w:pitch w:val="variable"/>
  </w:font>
  <w:font w:name="Times New Roman">
    <w:altName w:val="Times"/>
    <w:charset w:val="00"/>
    <w:family w:val="roman"/>
    <w:pitch w:val="variable"/>
  </w:font>
</w:fonts>"""


def document_xml(body: str) -> str:
    """Wrap body markup into a word/document.xml part."""
    return f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="{WORD_NS}">
  <w:body>
    {body}
  </w:body>
</w:document>"""


# "Hello world" with "Hello" split over two runs by a spell-check mark
SPLIT_HELLO_BODY = """<w:p>
      <w:pPr><w:jc w:val="left"/></w:pPr>
      <w:r><w:rPr><w:b/></w:rPr><w:t>Hel</w:t></w:r>
      <w:proofErr w:type="spellStart"/>
      <w:r><w:rPr><w:i/></w:rPr><w:t xml:space="preserve">lo world</w:t></w:r>
    </w:p>"""


def build_docx(
    path: Path,
    body: str = SPLIT_HELLO_BODY,
    parts: dict[str, str | bytes] | None = None,
    omit: tuple[str, ...] = (),
) -> Path:
    """Write a minimal DOCX package.

    Args:
        path: Where to write the package
        body: Markup placed inside <w:body> of word/document.xml
        parts: Additional or replacement parts (name -> content)
        omit: Part names to leave out
    """
    contents: dict[str, str | bytes] = {
        "[Content_Types].xml": CONTENT_TYPES_XML,
        "_rels/.rels": ROOT_RELS_XML,
        "docProps/app.xml": APP_XML,
        "docProps/core.xml": CORE_XML,
        "word/document.xml": document_xml(body),
        "word/fontTable.xml": FONT_TABLE_XML,
    }
    contents.update(parts or {})

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in contents.items():
            if name not in omit:
                zf.writestr(name, content)

    return path


def read_entries(path: Path) -> dict[str, bytes]:
    """Map of entry name to bytes of a ZIP file."""
    with zipfile.ZipFile(path) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


@pytest.fixture
def make_docx(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a DOCX into the test's temporary directory."""

    def factory(name: str = "test.docx", **kwargs) -> Path:
        return build_docx(tmp_path / name, **kwargs)

    return factory


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    """Directory receiving scratch extractions, so tests can check cleanup."""
    root = tmp_path / "scratch"
    root.mkdir()
    return root
