"""
python_docx_toolbox - Unpack, inspect, modify and repack DOCX documents.

This package edits Word documents at the package level: it extracts the ZIP
container, changes text across fragmented runs or metadata attributes, and
repackages the result atomically so a failed operation never leaves a
corrupted document behind.

Example:
    >>> from python_docx_toolbox import DocxArchive
    >>> archive = DocxArchive("contract.docx")
    >>> archive.replace_text("ACME Corp", "Globex Inc", output="contract_edited.docx")
"""

__version__ = "0.1.0"
__all__ = [
    "DocxArchive",
    "zip_directory_to_docx",
    "ToolboxConfig",
    "OperationResult",
    "DocxToolboxError",
    "InputError",
    "StructureError",
    "MalformedArchiveError",
    "XmlParseError",
    "MatchError",
    "PackageIOError",
    "PackageEntry",
    "WorkingExtraction",
    "read_package",
    "extract_package",
    "validate_structure",
    "is_docx",
    "zip_directory",
    "LogicalTextStream",
    "TextRun",
    "RunSpan",
    "TextMutator",
    "LoremGenerator",
    "MetaAttribute",
    "MetaRecord",
    "MetaCollector",
    "FontMetric",
    "FontTable",
    "FontTableCollector",
    "MergeField",
    "collect_merge_fields",
    "get_text_from_xml_file",
    "is_text_part",
]

# Import archive operations
from .archive import DocxArchive, zip_directory_to_docx
from .config import ToolboxConfig
from .errors import (
    DocxToolboxError,
    InputError,
    MalformedArchiveError,
    MatchError,
    PackageIOError,
    StructureError,
    XmlParseError,
)

# Import auxiliary extractors
from .fields import MergeField, collect_merge_fields
from .fonts import FontMetric, FontTable, FontTableCollector
from .lorem import LoremGenerator
from .metadata import MetaAttribute, MetaCollector, MetaRecord

# Import package handling
from .package import (
    PackageEntry,
    WorkingExtraction,
    extract_package,
    is_docx,
    read_package,
    validate_structure,
)
from .plaintext import get_text_from_xml_file
from .repack import zip_directory
from .results import OperationResult

# Import text search and mutation
from .text_mutation import TextMutator
from .text_search import LogicalTextStream, RunSpan, TextRun
from .xml_part import is_text_part
