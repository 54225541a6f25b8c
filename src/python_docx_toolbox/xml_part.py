"""
Loading and saving single XML parts of an extracted package.

Parts are parsed with lxml and written back with the same XML declaration
they were read with, so that untouched markup survives a rewrite verbatim.
"""

import logging
import re
from pathlib import Path, PurePosixPath

from lxml import etree

from .constants import TEXT_PART_PREFIXES
from .errors import InputError, PackageIOError, XmlParseError

logger = logging.getLogger(__name__)

# Characters XML 1.0 does not allow in text content
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def check_xml_text(value: str, label: str) -> None:
    """Reject text that cannot be stored in an XML document.

    Args:
        value: Text about to be written into a part
        label: What the text is, for the error message (e.g. "Replacement")

    Raises:
        InputError: If ``value`` holds a character XML 1.0 does not allow
    """
    match = _XML_ILLEGAL.search(value)
    if match:
        raise InputError(
            f"{label} contains character U+{ord(match.group(0)):04X}, which is not allowed in XML"
        )


def is_text_part(part_name: str) -> bool:
    """Check whether a package part carries document text.

    Text parts are the main document, headers, footers, footnotes, endnotes
    and comments below ``word/``. Every other part is skipped by the text
    mutators and left byte-identical.

    Args:
        part_name: Relative name within the package (e.g., "word/header1.xml")

    Returns:
        True if the part holds runs of visible text
    """
    path = PurePosixPath(part_name)
    if path.suffix != ".xml" or len(path.parts) < 2 or path.parts[-2] != "word":
        return False
    return path.stem.startswith(TEXT_PART_PREFIXES)


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(remove_blank_text=False, resolve_entities=False)


def _leading_declaration(data: bytes) -> bytes:
    """Return the raw XML declaration (and the whitespace after it), if any."""
    if not data.startswith(b"<?xml"):
        return b""

    end = data.find(b"?>")
    if end == -1:
        return b""

    end += 2
    while end < len(data) and data[end : end + 1] in (b"\r", b"\n", b" ", b"\t"):
        end += 1
    return data[:end]


class XmlPart:
    """An XML part loaded from disk.

    Attributes:
        path: Filesystem path of the part
        part_name: Relative name within the package, used in error messages
        tree: Parsed element tree
    """

    def __init__(self, path: Path, part_name: str, tree: etree._ElementTree, declaration: bytes):
        self.path = path
        self.part_name = part_name
        self.tree = tree
        self._declaration = declaration

    @classmethod
    def load(cls, path: str | Path, part_name: str | None = None) -> "XmlPart":
        """Parse an XML part.

        Args:
            path: Filesystem path of the part
            part_name: Name to report in errors (defaults to the file name)

        Raises:
            XmlParseError: If the part is not well-formed XML
            PackageIOError: If the file cannot be read
        """
        path = Path(path)
        part_name = part_name or path.name

        try:
            data = path.read_bytes()
        except OSError as e:
            raise PackageIOError(f"Failed to read {part_name}: {e}", path=str(path)) from e

        return cls.from_bytes(data, part_name, path)

    @classmethod
    def from_bytes(cls, data: bytes, part_name: str, path: Path | None = None) -> "XmlPart":
        """Parse an XML part held in memory."""
        try:
            root = etree.fromstring(data, _make_parser())
        except etree.XMLSyntaxError as e:
            raise XmlParseError(part_name, str(e)) from e

        return cls(
            path=path or Path(part_name),
            part_name=part_name,
            tree=root.getroottree(),
            declaration=_leading_declaration(data),
        )

    @property
    def root(self) -> etree._Element:
        """Root element of the part."""
        return self.tree.getroot()

    def to_bytes(self) -> bytes:
        """Serialize the part, keeping its original XML declaration."""
        body = etree.tostring(
            self.tree,
            encoding=self.tree.docinfo.encoding or "UTF-8",
            xml_declaration=False,
        )
        return self._declaration + body

    def save(self) -> None:
        """Write the part back to its path."""
        try:
            self.path.write_bytes(self.to_bytes())
        except OSError as e:
            raise PackageIOError(f"Failed to write {self.part_name}: {e}", path=str(self.path)) from e

        logger.debug("Saved %s", self.part_name)
