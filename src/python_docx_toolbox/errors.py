"""
Custom exception classes for python_docx_toolbox package.

Every error is raised close to its source and names the file or package part
involved, so that a failed operation can be diagnosed from its message alone.
"""


class DocxToolboxError(Exception):
    """Base exception for all python_docx_toolbox errors."""

    pass


class InputError(DocxToolboxError):
    """Raised when a required input is missing or unusable.

    Covers missing files and missing or empty required values. No mutation
    is attempted once this is raised.
    """

    pass


class StructureError(DocxToolboxError):
    """Raised when a package is not a ZIP or fails DOCX structure validation.

    Attributes:
        path: The package or extraction directory that failed
        missing: Mandatory files or directories that were not found
    """

    def __init__(self, message: str, path: str | None = None, missing: list[str] | None = None):
        self.path = path
        self.missing = missing or []
        super().__init__(message)

    def __str__(self) -> str:
        """Format error with the list of missing parts, if any."""
        if not self.missing:
            return super().__str__()

        details = "\n  - " + "\n  - ".join(self.missing)
        return f"{super().__str__()}{details}"


class MalformedArchiveError(StructureError):
    """Raised when an archive entry would be written outside the destination.

    Absolute entry names and names containing ``..`` segments are rejected
    before anything is extracted.
    """

    def __init__(self, entry_name: str, path: str | None = None):
        self.entry_name = entry_name
        super().__init__(
            f"Malformed archive: entry '{entry_name}' escapes the extraction directory",
            path=path,
        )


class XmlParseError(DocxToolboxError):
    """Raised when a package part the operation needs is not well-formed XML.

    Attributes:
        part_name: Relative name of the part within the package
        reason: Parser message
    """

    def __init__(self, part_name: str, reason: str):
        self.part_name = part_name
        self.reason = reason
        super().__init__(f"Malformed XML in {part_name}: {reason}")


class MatchError(DocxToolboxError):
    """Raised when a remove-between delimiter pair cannot be satisfied.

    Attributes:
        part_name: Part in which the left delimiter was found
        lhs: Left-hand delimiter
        rhs: Right-hand delimiter that was not found after it
    """

    def __init__(self, part_name: str, lhs: str, rhs: str):
        self.part_name = part_name
        self.lhs = lhs
        self.rhs = rhs
        super().__init__(
            f"Found '{lhs}' but no following '{rhs}' in {part_name}; nothing was removed"
        )


class PackageIOError(DocxToolboxError):
    """Raised when the filesystem fails while extracting, writing or renaming.

    Attributes:
        path: The path the failing operation touched
    """

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
