"""
Centralized constants for OOXML namespaces, package structure and naming.

Import from here to ensure consistency across the extractor, the mutators and
the repackager.
"""

# =============================================================================
# Word Processing Namespaces
# =============================================================================

# Main WordprocessingML namespace (Word 2007+)
WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# XML namespace (xml:space)
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


# =============================================================================
# Metadata Namespaces (docProps/core.xml, docProps/app.xml)
# =============================================================================

CORE_PROPERTIES_NAMESPACE = (
    "http://schemas.openxmlformats.org/package/2006/metadata/core-properties"
)
DC_NAMESPACE = "http://purl.org/dc/elements/1.1/"
DCTERMS_NAMESPACE = "http://purl.org/dc/terms/"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


# =============================================================================
# Package Structure
# =============================================================================

CONTENT_TYPES_PART = "[Content_Types].xml"
DOCUMENT_PART = "word/document.xml"
CORE_PART = "docProps/core.xml"
APP_PART = "docProps/app.xml"

# Files every DOCX package must contain
MANDATORY_FILES = (
    "_rels/.rels",
    APP_PART,
    CORE_PART,
    DOCUMENT_PART,
    CONTENT_TYPES_PART,
)

# Directories every DOCX package must contain
MANDATORY_DIRECTORIES = ("_rels", "docProps", "word")

# Text-bearing parts below word/ (matched by file name prefix)
TEXT_PART_PREFIXES = ("document", "header", "footer", "footnotes", "endnotes", "comments")

IMAGE_EXTENSIONS = frozenset(
    {".bmp", ".emf", ".gif", ".jpeg", ".jpg", ".png", ".svg", ".tif", ".tiff", ".wmf"}
)


# =============================================================================
# Naming of Derived Paths
# =============================================================================

# Appended to the source name for user-visible extraction directories
EXTRACTED_APPENDIX = "-extracted"
MEDIA_APPENDIX = "-media"

# Appended to the destination while the repackager writes it
TEMP_SUFFIX = ".tmp"


# =============================================================================
# Namespace Maps
# =============================================================================

NSMAP_CORE = {
    "cp": CORE_PROPERTIES_NAMESPACE,
    "dc": DC_NAMESPACE,
    "dcterms": DCTERMS_NAMESPACE,
    "xsi": XSI_NAMESPACE,
}


# =============================================================================
# Helper Functions
# =============================================================================


def w(tag: str) -> str:
    """Create a fully qualified Word namespace tag.

    Args:
        tag: Tag name without namespace prefix (e.g., "p", "r", "t")

    Returns:
        Fully qualified tag (e.g., "{http://...wordprocessingml/2006/main}p")

    Example:
        >>> w("p")
        '{http://schemas.openxmlformats.org/wordprocessingml/2006/main}p'
    """
    return f"{{{WORD_NAMESPACE}}}{tag}"


def local_name(tag: str) -> str:
    """Strip the namespace from a qualified tag name."""
    return tag.rsplit("}", 1)[-1]
