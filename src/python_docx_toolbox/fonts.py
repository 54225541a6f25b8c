"""
Reading font declarations from word/fontTable.xml parts.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from .constants import w
from .xml_part import XmlPart

logger = logging.getLogger(__name__)


@dataclass
class FontMetric:
    """A font declared in a font table.

    Attributes:
        name: Font name (w:name)
        alt_name: Alternate name, if declared
        charset: Character set code (hex string)
        family: Font family class (e.g. "swiss", "roman")
        pitch: "fixed" or "variable"
        panose: PANOSE-1 classification (hex string)
    """

    name: str
    alt_name: str | None = None
    charset: str | None = None
    family: str | None = None
    pitch: str | None = None
    panose: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class FontTable:
    """Fonts of one font table part, in declaration order."""

    part_name: str
    fonts: list[FontMetric] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"part_name": self.part_name, "fonts": [font.to_dict() for font in self.fonts]}


def _child_value(font: Any, tag: str) -> str | None:
    child = font.find(w(tag))
    if child is None:
        return None
    return child.get(w("val"))


class FontTableCollector:
    """Collects font metrics one font table at a time.

    Fonts are scoped to their part: call ``clear()`` after emitting a part's
    fonts and before collecting the next.
    """

    def __init__(self) -> None:
        self._fonts: list[FontMetric] = []

    @property
    def fonts(self) -> list[FontMetric]:
        return list(self._fonts)

    def collect_fonts_metrics(self, xml: bytes, part_name: str = "word/fontTable.xml") -> list[FontMetric]:
        """Parse a font table and buffer its fonts.

        Raises:
            XmlParseError: If the part is not well-formed
        """
        root = XmlPart.from_bytes(xml, part_name).root

        for font in root.iter(w("font")):
            name = font.get(w("name"))
            if not name:
                logger.warning("Skipping font without name in %s", part_name)
                continue

            self._fonts.append(
                FontMetric(
                    name=name,
                    alt_name=_child_value(font, "altName"),
                    charset=_child_value(font, "charset"),
                    family=_child_value(font, "family"),
                    pitch=_child_value(font, "pitch"),
                    panose=_child_value(font, "panose1"),
                )
            )

        return self.fonts

    def clear(self) -> None:
        self._fonts.clear()
