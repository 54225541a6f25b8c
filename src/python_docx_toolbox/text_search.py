"""
Logical text stream over the fragmented runs of a document part.

This module handles the core problem of editing Word XML: visible text is
split across an arbitrary number of ``<w:t>`` elements (spell-check marks,
revision ids and formatting changes all fragment runs), so a phrase the
reader sees as one string can live in several elements.

Algorithm Note:
    Every ``<w:t>`` element is stored in an arena and addressed by index.
    A sorted table of ``RunSpan(run_index, start, length)`` maps offsets of
    the concatenated text back to runs; resolving an offset is a binary
    search. Rewrites change run texts in place and only mark emptied runs
    as removed; elements are detached in ``commit()`` after all splices,
    so indices stay valid throughout.
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any

from .constants import XML_NAMESPACE, w

logger = logging.getLogger(__name__)

_SPACE_ATTR = f"{{{XML_NAMESPACE}}}space"


@dataclass
class TextRun:
    """A ``<w:t>`` element and its current text.

    Attributes:
        element: The lxml element
        paragraph: The enclosing ``<w:p>`` element (None outside paragraphs)
        text: Current text, updated by splices before commit
        removed: Marked for detachment on commit
    """

    element: Any  # lxml Element
    paragraph: Any  # lxml Element | None
    text: str
    removed: bool = False


@dataclass(frozen=True)
class RunSpan:
    """Offset table row: the run at ``run_index`` covers [start, start + length)."""

    run_index: int
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


def _find_paragraph(element: Any) -> Any:
    parent = element.getparent()
    while parent is not None:
        if parent.tag == w("p"):
            return parent
        parent = parent.getparent()
    return None


class LogicalTextStream:
    """Concatenated text of all runs in one XML part, with an offset map.

    Offsets always refer to the text as it was when the stream was built;
    splices are applied right to left so earlier offsets stay valid.

    Example:
        >>> stream = LogicalTextStream.from_root(part.root)
        >>> for start in reversed(stream.find_all("Hello")):
        ...     stream.splice(start, start + 5, "Bye")
        >>> stream.commit()
    """

    def __init__(self, runs: list[TextRun]) -> None:
        self.runs = runs
        self.spans: list[RunSpan] = []

        offset = 0
        for index, run in enumerate(runs):
            if run.text:
                self.spans.append(RunSpan(index, offset, len(run.text)))
                offset += len(run.text)

        self._starts = [span.start for span in self.spans]
        self.text = "".join(run.text for run in runs)
        self._dirty: set[int] = set()

    @classmethod
    def from_root(cls, root: Any) -> "LogicalTextStream":
        """Collect every text run below ``root`` in document order."""
        runs = [
            TextRun(element=element, paragraph=_find_paragraph(element), text=element.text or "")
            for element in root.iter(w("t"))
        ]
        return cls(runs)

    def __len__(self) -> int:
        return len(self.text)

    def locate(self, offset: int) -> tuple[int, int]:
        """Map a character offset to (run index, offset within the run).

        Raises:
            IndexError: If the offset is outside the stream
        """
        if offset < 0 or offset >= len(self.text):
            raise IndexError(f"Offset {offset} outside text of length {len(self.text)}")

        span = self.spans[bisect_right(self._starts, offset) - 1]
        return span.run_index, offset - span.start

    def spans_between(self, start: int, end: int) -> list[RunSpan]:
        """Table rows overlapping the half-open range [start, end), in order."""
        if start >= end or not self.spans:
            return []
        first = bisect_right(self._starts, start) - 1
        last = bisect_right(self._starts, end - 1) - 1
        return self.spans[first : last + 1]

    def find(self, search: str, start: int = 0) -> int:
        """Offset of the first occurrence of ``search`` at or after ``start``, or -1."""
        return self.text.find(search, start)

    def find_all(self, search: str) -> list[int]:
        """Start offsets of all non-overlapping occurrences, leftmost first.

        Matching is case-sensitive; characters consumed by one match are not
        reused by the next.
        """
        if not search:
            return []

        starts = []
        pos = self.text.find(search)
        while pos != -1:
            starts.append(pos)
            pos = self.text.find(search, pos + len(search))
        return starts

    def splice(self, start: int, end: int, replacement: str) -> None:
        """Replace the stream range [start, end) with ``replacement``.

        The first run the range touches keeps its text before ``start``
        followed by the replacement (and, if the range ends inside it, its
        text after ``end``). Every following run touched loses its matched
        part. A run whose text becomes empty is marked removed; its
        ancestors and siblings are never touched. Runs outside the range are
        not modified.

        Splices must be applied in decreasing ``start`` order.
        """
        spans = self.spans_between(start, end)
        if not spans:
            return

        first = spans[0]
        last = spans[-1]

        for span in spans:
            run = self.runs[span.run_index]
            cut_from = max(start, span.start) - span.start
            cut_to = min(end, span.end) - span.start

            if span is first:
                run.text = run.text[:cut_from] + replacement + run.text[cut_to:]
            elif span is last:
                run.text = run.text[cut_to:]
            else:
                run.text = ""

            run.removed = not run.text
            self._dirty.add(span.run_index)

    def set_run_text(self, run_index: int, text: str) -> None:
        """Overwrite the text of a single run."""
        run = self.runs[run_index]
        if run.text == text:
            return
        run.text = text
        self._dirty.add(run_index)

    @property
    def modified(self) -> bool:
        """Whether any run has been changed since the stream was built."""
        return bool(self._dirty)

    def commit(self) -> int:
        """Write changed texts to their elements and detach emptied runs.

        Returns:
            Number of run elements removed
        """
        removed = 0
        for index in sorted(self._dirty):
            run = self.runs[index]
            if run.removed:
                _remove_preserving_tail(run.element)
                removed += 1
                continue

            run.element.text = run.text
            if run.text != run.text.strip():
                run.element.set(_SPACE_ATTR, "preserve")

        self._dirty.clear()
        logger.debug("Committed run changes, %d runs removed", removed)
        return removed

    def segments(self) -> list[str]:
        """Texts grouped by enclosing paragraph, in document order."""
        segments: list[str] = []
        current = None

        for run in self.runs:
            if run.removed:
                continue
            if segments and run.paragraph is current:
                segments[-1] += run.text
            else:
                segments.append(run.text)
                current = run.paragraph

        return segments


def _remove_preserving_tail(element: Any) -> None:
    """Detach an element, moving its tail text to the preceding node."""
    parent = element.getparent()
    if parent is None:
        return

    tail = element.tail
    if tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail

    parent.remove(element)

