"""
Result type for archive operations.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass
class OperationResult:
    """Outcome of a single archive operation.

    Operations never raise to their caller; failures are reported here.

    Attributes:
        success: Whether the operation completed
        operation: Operation name (e.g., "replace_text", "list_meta")
        message: Human-readable message about the result
        output_path: Document or directory written, if any
        data: Structured output of read-only operations (records, text, counts)
        error: Exception that made the operation fail
    """

    success: bool
    operation: str
    message: str
    output_path: Path | None = None
    data: Any = None
    error: Exception | None = None

    def __bool__(self) -> bool:
        return self.success

    def __str__(self) -> str:
        """Get string representation of the result."""
        status = "✓" if self.success else "✗"
        return f"{status} {self.operation}: {self.message}"
