"""Tests for the logical text stream over fragmented runs."""

import pytest
from conftest import WORD_NS, document_xml
from lxml import etree

from python_docx_toolbox.text_search import LogicalTextStream, RunSpan


def make_stream(body: str) -> tuple[LogicalTextStream, etree._Element]:
    root = etree.fromstring(document_xml(body).encode("utf-8"))
    return LogicalTextStream.from_root(root), root


def texts(root: etree._Element) -> list[str]:
    return [t.text or "" for t in root.iter(f"{{{WORD_NS}}}t")]


THREE_RUNS = """<w:p>
      <w:r><w:t>The quick </w:t></w:r>
      <w:r><w:t>br</w:t></w:r>
      <w:r><w:t>own fox</w:t></w:r>
    </w:p>"""


class TestStreamConstruction:
    """Building the stream and its offset table."""

    def test_concatenated_text(self):
        """Test the stream text joins all runs in document order."""
        stream, _ = make_stream(THREE_RUNS)
        assert stream.text == "The quick brown fox"
        assert len(stream) == 19

    def test_offset_table(self):
        """Test the table rows cover the text without gaps."""
        stream, _ = make_stream(THREE_RUNS)
        assert stream.spans == [RunSpan(0, 0, 10), RunSpan(1, 10, 2), RunSpan(2, 12, 7)]

    def test_empty_runs_not_in_table(self):
        """Test runs without text are kept in the arena but not the table."""
        stream, _ = make_stream("<w:p><w:r><w:t/></w:r><w:r><w:t>abc</w:t></w:r></w:p>")
        assert len(stream.runs) == 2
        assert stream.spans == [RunSpan(1, 0, 3)]

    def test_locate(self):
        """Test offsets resolve to (run, offset in run)."""
        stream, _ = make_stream(THREE_RUNS)
        assert stream.locate(0) == (0, 0)
        assert stream.locate(10) == (1, 0)
        assert stream.locate(11) == (1, 1)
        assert stream.locate(18) == (2, 6)

    def test_locate_out_of_range(self):
        """Test offsets past the end raise IndexError."""
        stream, _ = make_stream(THREE_RUNS)
        with pytest.raises(IndexError):
            stream.locate(19)

    def test_spans_between(self):
        """Test the rows overlapping a range."""
        stream, _ = make_stream(THREE_RUNS)
        assert [s.run_index for s in stream.spans_between(4, 15)] == [0, 1, 2]
        assert [s.run_index for s in stream.spans_between(10, 12)] == [1]
        assert stream.spans_between(5, 5) == []


class TestFind:
    """Searching the stream."""

    def test_find_across_runs(self):
        """Test a match spanning runs is found."""
        stream, _ = make_stream(THREE_RUNS)
        assert stream.find_all("quick brown") == [4]

    def test_non_overlapping(self):
        """Test consumed characters are not reused."""
        stream, _ = make_stream("<w:p><w:r><w:t>aa</w:t></w:r><w:r><w:t>aaa</w:t></w:r></w:p>")
        assert stream.find_all("aa") == [0, 2]

    def test_case_sensitive(self):
        """Test matching is case-sensitive."""
        stream, _ = make_stream(THREE_RUNS)
        assert stream.find_all("the") == []

    def test_empty_search(self):
        """Test an empty search finds nothing."""
        stream, _ = make_stream(THREE_RUNS)
        assert stream.find_all("") == []

    def test_find_from_offset(self):
        """Test find() starts at the given offset."""
        stream, _ = make_stream(THREE_RUNS)
        assert stream.find("o", 13) == 17


class TestSplice:
    """Rewriting ranges across runs."""

    def test_within_single_run(self):
        """Test a range inside one run keeps prefix and suffix."""
        stream, root = make_stream(THREE_RUNS)
        stream.splice(4, 9, "slow")
        stream.commit()
        assert texts(root) == ["The slow ", "br", "own fox"]

    def test_across_runs(self):
        """Test the first run takes the replacement and later runs lose their part."""
        stream, root = make_stream(THREE_RUNS)
        stream.splice(4, 15, "red")
        stream.commit()
        assert texts(root) == ["The red", " fox"]
        assert len(root.findall(f".//{{{WORD_NS}}}r")) == 3

    def test_emptied_first_run_removed(self):
        """Test a first run left empty is removed too."""
        stream, root = make_stream(THREE_RUNS)
        stream.splice(0, 12, "")
        stream.commit()
        assert texts(root) == ["own fox"]

    def test_right_to_left_splices(self):
        """Test several splices applied from the right stay consistent."""
        stream, root = make_stream(
            "<w:p><w:r><w:t>a</w:t></w:r><w:r><w:t>ba</w:t></w:r><w:r><w:t>b</w:t></w:r></w:p>"
        )
        starts = stream.find_all("ab")
        assert starts == [0, 2]

        stream.splice(2, 4, "X")
        stream.splice(0, 2, "Y")
        stream.commit()
        assert texts(root) == ["Y", "X"]

    def test_preserve_space_set(self):
        """Test text with edge whitespace gets xml:space="preserve"."""
        stream, root = make_stream(THREE_RUNS)
        stream.splice(0, 3, "A")
        stream.commit()
        first = next(root.iter(f"{{{WORD_NS}}}t"))
        assert first.text == "A quick "
        assert first.get("{http://www.w3.org/XML/1998/namespace}space") == "preserve"

    def test_removal_keeps_tail(self):
        """Test removing a run element keeps its tail text."""
        stream, root = make_stream("<w:p><w:r><w:t>a</w:t>tail<w:tab/></w:r><w:r><w:t>b</w:t></w:r></w:p>")
        stream.splice(0, 1, "")
        stream.commit()
        run = root.find(f".//{{{WORD_NS}}}r")
        assert run.text == "tail"

    def test_modified_flag(self):
        """Test modified reflects pending changes."""
        stream, _ = make_stream(THREE_RUNS)
        assert not stream.modified
        stream.set_run_text(1, "BR")
        assert stream.modified
        stream.commit()
        assert not stream.modified


class TestSegments:
    """Grouping text by paragraph."""

    def test_segments_per_paragraph(self):
        """Test each paragraph yields one segment."""
        stream, _ = make_stream(
            THREE_RUNS + "<w:p><w:r><w:t>jumps</w:t></w:r><w:r><w:t> over</w:t></w:r></w:p>"
        )
        assert stream.segments() == ["The quick brown fox", "jumps over"]
