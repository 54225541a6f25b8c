"""Tests for plain-text and JSON rendering."""

import json

from python_docx_toolbox.export import (
    render_entries_plain,
    render_fields_plain,
    render_fonts_plain,
    render_json,
    render_meta_plain,
)
from python_docx_toolbox.fields import MergeField
from python_docx_toolbox.fonts import FontMetric, FontTable
from python_docx_toolbox.metadata import MetaRecord
from python_docx_toolbox.package import PackageEntry


class TestRenderJson:
    """Tests for render_json()."""

    def test_records_serialized(self):
        """Test records are turned into dictionaries."""
        records = [MetaRecord(core_part="docProps/core.xml", core={"title": "Ä"})]
        data = json.loads(render_json(records))
        assert data == [{"app_part": None, "core_part": "docProps/core.xml", "app": {}, "core": {"title": "Ä"}}]

    def test_entries_without_bytes(self):
        """Test package entries are rendered without their content."""
        entry = PackageEntry(path="word/document.xml", data=b"<x/>", date_time=(2024, 5, 1, 12, 0, 0))
        data = json.loads(render_json([entry]))
        assert data == [
            {
                "path": "word/document.xml",
                "size": 4,
                "compressed_size": 0,
                "date": "2024-05-01T12:00:00",
                "is_dir": False,
            }
        ]

    def test_plain_values(self):
        """Test strings and numbers pass through."""
        assert render_json({"count": 3}) == '{"count": 3}'


class TestRenderPlain:
    """Tests for the plain-text renderers."""

    def test_entries_table(self):
        """Test the entry table lists every file and a total."""
        entries = [PackageEntry(path="a.xml", data=b"12345"), PackageEntry(path="b.xml", data=b"1")]
        lines = render_entries_plain(entries).splitlines()
        assert lines[2].endswith("a.xml")
        assert lines[-1].split() == ["6", "2", "file(s)"]

    def test_meta_blocks(self):
        """Test each record becomes a block with its parts as titles."""
        records = [
            MetaRecord(app_part="docProps/app.xml", core_part="docProps/core.xml", app={"Pages": "1"}, core={"title": "T"}),
            MetaRecord(core_part="annex/docProps/core.xml", core={"title": "U"}),
        ]
        output = render_meta_plain(records)
        blocks = output.split("\n\n")
        assert len(blocks) == 2
        assert blocks[0].splitlines()[0] == "docProps/app.xml:"
        assert "  title  T" in blocks[0]
        assert blocks[1].splitlines()[0] == "annex/docProps/core.xml:"

    def test_fonts_table(self):
        """Test fonts are listed under their part."""
        tables = [FontTable("word/fontTable.xml", [FontMetric(name="Arial", family="swiss")])]
        lines = render_fonts_plain(tables).splitlines()
        assert lines[0] == "word/fontTable.xml:"
        assert lines[2].split() == ["Arial", "-", "-", "swiss", "-"]

    def test_fields(self):
        """Test fields are rendered one instruction per line."""
        fields = [MergeField("A", "MERGEFIELD A"), MergeField("B", "MERGEFIELD B")]
        assert render_fields_plain(fields) == "MERGEFIELD A\nMERGEFIELD B"
