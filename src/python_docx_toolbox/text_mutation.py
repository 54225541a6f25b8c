"""
Search-and-replace, remove-between and randomization over document parts.

All three operations work on a ``LogicalTextStream`` so that text fragmented
across several runs is matched as the reader sees it. Only ``<w:t>``
contents change; paragraphs, run properties and every other element stay
as they were. A part is written back only if something changed.
"""

import logging
from pathlib import Path

from .config import ToolboxConfig
from .errors import InputError, MatchError
from .lorem import LoremGenerator
from .text_search import LogicalTextStream
from .xml_part import XmlPart, check_xml_text

logger = logging.getLogger(__name__)


class TextMutator:
    """Applies text mutations to XML parts on disk.

    Args:
        config: Invocation settings (seeds the lorem generator)
    """

    def __init__(self, config: ToolboxConfig | None = None) -> None:
        self._config = config or ToolboxConfig()
        self._lorem = LoremGenerator(self._config.lorem_seed)

    def replace_in_xml(
        self,
        path: str | Path,
        search: str,
        replacement: str,
        part_name: str | None = None,
    ) -> int:
        """Replace every occurrence of ``search`` in a part.

        Occurrences are found leftmost-first without overlap and may span
        any number of runs. No occurrence is a no-op and leaves the file
        byte-identical.

        Args:
            path: Filesystem path of the part
            search: Text to find (case-sensitive)
            replacement: Text to put in its place
            part_name: Name used in log and error messages

        Returns:
            Number of occurrences replaced

        Raises:
            InputError: If ``search`` is empty or ``replacement`` is not valid XML text
            XmlParseError: If the part is not well-formed
        """
        if not search:
            raise InputError("String to be found must not be empty")
        check_xml_text(replacement, "Replacement")

        part = XmlPart.load(path, part_name)
        stream = LogicalTextStream.from_root(part.root)

        starts = stream.find_all(search)
        if not starts:
            return 0

        for start in reversed(starts):
            stream.splice(start, start + len(search), replacement)

        stream.commit()
        part.save()

        logger.debug("Replaced %d occurrence(s) of %r in %s", len(starts), search, part.part_name)
        return len(starts)

    def remove_between_in_xml(
        self,
        path: str | Path,
        lhs: str,
        rhs: str,
        part_name: str | None = None,
    ) -> bool:
        """Remove the text from ``lhs`` through ``rhs``, delimiters included.

        Only the first ``lhs`` and the first ``rhs`` after it are used; later
        delimiter pairs are left alone.

        Args:
            path: Filesystem path of the part
            lhs: Left-hand delimiter
            rhs: Right-hand delimiter
            part_name: Name used in log and error messages

        Returns:
            True if a span was removed, False if ``lhs`` does not occur

        Raises:
            InputError: If a delimiter is empty
            MatchError: If ``lhs`` occurs but ``rhs`` does not follow it
            XmlParseError: If the part is not well-formed
        """
        if not lhs or not rhs:
            raise InputError("Both delimiters must be given")

        part = XmlPart.load(path, part_name)
        stream = LogicalTextStream.from_root(part.root)

        start = stream.find(lhs)
        if start == -1:
            return False

        rhs_start = stream.find(rhs, start + len(lhs))
        if rhs_start == -1:
            raise MatchError(part.part_name, lhs, rhs)

        stream.splice(start, rhs_start + len(rhs), "")
        stream.commit()
        part.save()

        logger.debug("Removed %d characters from %s", rhs_start + len(rhs) - start, part.part_name)
        return True

    def randomize_in_xml(self, path: str | Path, part_name: str | None = None) -> int:
        """Replace the text of every run with lorem ipsum of the same shape.

        Returns:
            Number of runs whose text changed
        """
        part = XmlPart.load(path, part_name)
        stream = LogicalTextStream.from_root(part.root)

        changed = 0
        for index, run in enumerate(stream.runs):
            filler = self._lorem.shaped_like(run.text)
            if filler != run.text:
                stream.set_run_text(index, filler)
                changed += 1

        if stream.modified:
            stream.commit()
            part.save()

        logger.debug("Randomized %d run(s) in %s", changed, part.part_name)
        return changed
