"""
Finding mail-merge fields in document parts.

Merge fields come in two shapes:

- simple fields, ``<w:fldSimple w:instr=" MERGEFIELD Name ">``
- complex fields, a ``<w:fldChar w:fldCharType="begin"/>`` ...
  ``<w:instrText>`` ... ``<w:fldChar w:fldCharType="end"/>`` sequence whose
  instruction text may be split across several runs
"""

import logging
import re
import shlex
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .constants import w
from .xml_part import XmlPart

logger = logging.getLogger(__name__)

_MERGEFIELD = re.compile(r"^\s*MERGEFIELD\s+(.*)$", re.IGNORECASE | re.DOTALL)


@dataclass
class MergeField:
    """A merge field occurrence.

    Attributes:
        name: Field name (e.g. "FirstName")
        instruction: Full field instruction (e.g. "MERGEFIELD FirstName \\* MERGEFORMAT")
    """

    name: str
    instruction: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_merge_field(instruction: str) -> MergeField | None:
    """Parse a field instruction, returning None unless it is a MERGEFIELD."""
    match = _MERGEFIELD.match(instruction)
    if not match:
        return None

    arguments = match.group(1).strip()
    if not arguments:
        return None

    try:
        name = shlex.split(arguments, posix=True)[0]
    except ValueError:
        # Unbalanced quotes, fall back to the first token
        name = arguments.split()[0].strip('"')

    return MergeField(name=name, instruction=" ".join(instruction.split()))


def _field_instructions(root: Any) -> list[str]:
    """Field instructions of a part in document order."""
    instructions: list[str] = []
    # Open complex fields; nested fields each collect their own instruction
    stack: list[list[str]] = []

    for element in root.iter():
        if element.tag == w("fldSimple"):
            instructions.append(element.get(w("instr"), ""))
        elif element.tag == w("fldChar"):
            kind = element.get(w("fldCharType"))
            if kind == "begin":
                stack.append([])
            elif kind == "end" and stack:
                instructions.append("".join(stack.pop()))
        elif element.tag == w("instrText") and stack:
            stack[-1].append(element.text or "")

    return instructions


def collect_merge_fields(path: str | Path, part_name: str | None = None) -> list[MergeField]:
    """Collect the merge fields of a document part.

    Fields are deduplicated by name, keeping the first occurrence.

    Raises:
        XmlParseError: If the part is not well-formed
    """
    part = XmlPart.load(path, part_name)
    fields: dict[str, MergeField] = {}

    for instruction in _field_instructions(part.root):
        field = parse_merge_field(instruction)
        if field is not None and field.name not in fields:
            fields[field.name] = field

    logger.debug("Found %d merge field(s) in %s", len(fields), part.part_name)
    return list(fields.values())
