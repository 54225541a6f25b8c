"""
Flattening document parts to plain text.
"""

from pathlib import Path

from .text_search import LogicalTextStream
from .xml_part import XmlPart


def get_text_from_xml_file(
    path: str | Path,
    newline_at_segments: bool = False,
    part_name: str | None = None,
) -> str:
    """Return the visible text of a document part.

    Args:
        path: Filesystem path of the part
        newline_at_segments: End every paragraph with a line break instead
            of concatenating paragraphs directly
        part_name: Name used in error messages

    Raises:
        XmlParseError: If the part is not well-formed
    """
    stream = LogicalTextStream.from_root(XmlPart.load(path, part_name).root)

    if not newline_at_segments:
        return stream.text

    return "".join(segment + "\n" for segment in stream.segments())
