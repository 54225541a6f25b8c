"""
DocxArchive: the operations of the toolbox on a single DOCX file.

Every operation follows the same flow: the document is extracted into a
scratch directory and validated, the operation reads or mutates the parts
inside it, mutating operations repackage the directory atomically, and the
scratch directory is removed whether the operation succeeded or not.
Operations return an ``OperationResult`` and never raise to their caller.
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from .config import ToolboxConfig
from .constants import CORE_PART, MEDIA_APPENDIX
from .errors import DocxToolboxError, InputError, PackageIOError, StructureError
from .fields import MergeField, collect_merge_fields
from .fonts import FontTable, FontTableCollector
from .metadata import MetaAttribute, MetaCollector
from .package import (
    WorkingExtraction,
    extract_package,
    extraction_path,
    indent_xml_files,
    read_package,
    reduce_to_media,
    scratch_appendix,
    validate_structure,
)
from .plaintext import get_text_from_xml_file
from .repack import zip_directory
from .results import OperationResult
from .text_mutation import TextMutator
from .xml_part import check_xml_text, is_text_part

logger = logging.getLogger(__name__)

# Only the main document is scanned for text and merge fields
MAIN_DOCUMENT_SUFFIX = "word/document.xml"


def _run(operation: str, action: Callable[[], OperationResult]) -> OperationResult:
    """Run an operation, turning errors into a failed result."""
    try:
        return action()
    except (DocxToolboxError, OSError) as e:
        logger.error("%s failed: %s", operation, e)
        return OperationResult(success=False, operation=operation, message=str(e), error=e)


class DocxArchive:
    """Operations on one DOCX document.

    Args:
        path: Path of the document (relative paths resolve against the
            configured working directory)
        config: Invocation settings

    Example:
        >>> archive = DocxArchive("contract.docx")
        >>> result = archive.replace_text("ACME Corp", "Globex", output="out.docx")
        >>> if not result:
        ...     print(result.message)
    """

    def __init__(self, path: str | Path, config: ToolboxConfig | None = None) -> None:
        self._config = config or ToolboxConfig()
        self._path = self._config.resolve_path(path)

    @property
    def path(self) -> Path:
        """Resolved path of the document."""
        return self._path

    # ------------------------------------------------------------------
    # Extraction and repackaging
    # ------------------------------------------------------------------

    def _require_document(self) -> None:
        if not self._path.is_file():
            raise InputError(f"File not found: {self._path}")

    def _extract(self, fatal: bool = True, destination: Path | None = None) -> WorkingExtraction:
        """Extract the document and check its structure.

        Args:
            fatal: Abort on an incomplete DOCX structure instead of warning
            destination: Target directory (default: a fresh scratch directory)
        """
        self._require_document()

        if destination is None:
            destination = extraction_path(self._path, scratch_appendix(), self._config.scratch_root)

        extraction = extract_package(self._path, destination)
        try:
            validate_structure(extraction.directory, fatal=fatal, label=str(self._path))
        except StructureError:
            extraction.remove()
            raise

        return extraction

    def _output_path(self, output: str | Path | None) -> Path:
        return self._config.resolve_path(output) if output else self._path

    def _repack(
        self,
        extraction: WorkingExtraction,
        output: str | Path | None,
        update_created: bool = False,
        update_modified: bool = False,
    ) -> Path:
        destination = self._output_path(output)

        if not zip_directory(
            extraction.directory,
            destination,
            update_created,
            update_modified,
            entry_order=[entry.path for entry in extraction.entries],
        ):
            raise PackageIOError(f"DOCX creation failed: {destination}", path=str(destination))

        return destination

    # ------------------------------------------------------------------
    # Read-only operations
    # ------------------------------------------------------------------

    def list_files(self, images_only: bool = False) -> OperationResult:
        """List the entries of the package (optionally only images)."""
        operation = "list_images" if images_only else "list_files"

        def action() -> OperationResult:
            self._require_document()
            entries = read_package(self._path)
            if images_only:
                entries = [entry for entry in entries if entry.is_image]
            return OperationResult(True, operation, f"{len(entries)} entries", data=entries)

        return _run(operation, action)

    def list_images(self) -> OperationResult:
        """List the image entries of the package."""
        return self.list_files(images_only=True)

    def list_meta(self) -> OperationResult:
        """Collect one MetaRecord per app.xml / core.xml occurrence."""

        def action() -> OperationResult:
            with self._extract(fatal=False) as extraction:
                collector = MetaCollector()

                for name in extraction.parts_named(".xml"):
                    if name.endswith("app.xml"):
                        collector.collect_from_app_xml(name, extraction.part_path(name).read_bytes())
                    elif name.endswith("core.xml"):
                        collector.load_core_xml(extraction.part_path(name), name)
                        collector.collect_from_core_xml(name)

                records = collector.output()

            return OperationResult(True, "list_meta", f"{len(records)} metadata record(s)", data=records)

        return _run("list_meta", action)

    def list_fonts(self) -> OperationResult:
        """Collect the fonts of every font table, one FontTable per part."""

        def action() -> OperationResult:
            tables: list[FontTable] = []

            with self._extract(fatal=False) as extraction:
                collector = FontTableCollector()
                for name in extraction.parts_named("fontTable.xml"):
                    fonts = collector.collect_fonts_metrics(extraction.part_path(name).read_bytes(), name)
                    tables.append(FontTable(part_name=name, fonts=fonts))
                    collector.clear()

            return OperationResult(True, "list_fonts", f"{len(tables)} font table(s)", data=tables)

        return _run("list_fonts", action)

    def list_merge_fields(self) -> OperationResult:
        """Collect the merge fields of the main document, unique by name."""

        def action() -> OperationResult:
            fields: dict[str, MergeField] = {}

            with self._extract(fatal=False) as extraction:
                for name in extraction.parts_named(MAIN_DOCUMENT_SUFFIX):
                    for field in collect_merge_fields(extraction.part_path(name), name):
                        fields.setdefault(field.name, field)

            data = list(fields.values())
            return OperationResult(True, "list_merge_fields", f"{len(data)} merge field(s)", data=data)

        return _run("list_merge_fields", action)

    def get_text(self, newline_at_segments: bool = False) -> OperationResult:
        """Return the plain text of the main document."""

        def action() -> OperationResult:
            with self._extract(fatal=False) as extraction:
                text = "".join(
                    get_text_from_xml_file(extraction.part_path(name), newline_at_segments, name)
                    for name in extraction.parts_named(MAIN_DOCUMENT_SUFFIX)
                )

            return OperationResult(True, "get_text", f"{len(text)} characters", data=text)

        return _run("get_text", action)

    # ------------------------------------------------------------------
    # Extraction to a persistent directory
    # ------------------------------------------------------------------

    def unzip(self, indent: bool = False, directory: str | Path | None = None) -> OperationResult:
        """Extract the document into ``<name>-extracted`` (or ``directory``).

        Args:
            indent: Pretty-print all XML parts after extracting
            directory: Target directory (relative to the working directory)
        """

        def action() -> OperationResult:
            destination = (
                self._config.resolve_path(directory)
                if directory
                else extraction_path(self._path, None, self._config.working_directory)
            )
            extraction = self._extract(fatal=False, destination=destination)

            if indent:
                indent_xml_files(extraction.directory)

            return OperationResult(
                True,
                "unzip",
                f"Extracted {len(extraction.entries)} entries to {destination}",
                output_path=destination,
                data=extraction.entries,
            )

        return _run("unzip", action)

    def unzip_media(self) -> OperationResult:
        """Extract only the images of the document into ``<name>-media``."""

        def action() -> OperationResult:
            destination = extraction_path(self._path, MEDIA_APPENDIX, self._config.working_directory)
            extraction = self._extract(fatal=False, destination=destination)

            try:
                images = reduce_to_media(extraction.directory, extraction.parts_named(""))
            except OSError:
                extraction.remove()
                raise

            return OperationResult(
                True,
                "unzip_media",
                f"Extracted {len(images)} image(s) to {destination}",
                output_path=destination,
                data=images,
            )

        return _run("unzip_media", action)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def modify_meta(
        self,
        attribute: MetaAttribute | str,
        value: str,
        output: str | Path | None = None,
    ) -> OperationResult:
        """Set a core.xml attribute and stamp the modification date.

        Args:
            attribute: Attribute to set (e.g. "title", "creator", MetaAttribute.LANGUAGE)
            value: New value
            output: Result path (default: overwrite the document)
        """

        def action() -> OperationResult:
            resolved = attribute if isinstance(attribute, MetaAttribute) else MetaAttribute.from_name(attribute)
            if resolved is None:
                raise InputError(f"Unknown meta attribute: {attribute}")
            if value is None:
                raise InputError(f"Missing value for meta attribute {resolved.key}")
            check_xml_text(value, f"Value of {resolved.key}")

            with self._extract() as extraction:
                collector = MetaCollector()
                collector.load_core_xml(extraction.part_path(CORE_PART), CORE_PART)
                if not collector.upsert_attribute(resolved, value):
                    raise InputError(f"Update/insert of meta attribute {resolved.key} failed")
                collector.save_core_xml()

                destination = self._repack(
                    extraction,
                    output,
                    update_modified=resolved is not MetaAttribute.MODIFIED,
                )

            return OperationResult(
                True, "modify_meta", f"Set {resolved.key} in {destination}", output_path=destination
            )

        return _run("modify_meta", action)

    def _mutate_text_parts(
        self,
        operation: str,
        mutate: Callable[[TextMutator, Path, str], int],
        output: str | Path | None,
    ) -> OperationResult:
        """Apply ``mutate`` to every text part and repackage.

        When nothing changed and the document would be overwritten in place,
        it is left untouched.
        """
        with self._extract() as extraction:
            mutator = TextMutator(self._config)
            changed = 0

            for name in extraction.parts_named(".xml"):
                if not is_text_part(name):
                    continue
                changed += mutate(mutator, extraction.part_path(name), name)

            if changed == 0 and output is None:
                logger.warning("%s: no changes in %s", operation, self._path)
                return OperationResult(True, operation, f"No changes in {self._path}", data=0)

            destination = self._repack(extraction, output)

        return OperationResult(
            True, operation, f"{changed} change(s) saved to {destination}", output_path=destination, data=changed
        )

    def replace_text(
        self, search: str, replacement: str, output: str | Path | None = None
    ) -> OperationResult:
        """Replace every occurrence of ``search`` in all text parts.

        ``data`` holds the number of occurrences replaced. No occurrence is
        not an error.
        """

        def action() -> OperationResult:
            if not search:
                raise InputError("String to be found (and replaced) must be given")
            if replacement is None:
                raise InputError("Replacement must be given")
            check_xml_text(replacement, "Replacement")

            return self._mutate_text_parts(
                "replace_text",
                lambda mutator, path, name: mutator.replace_in_xml(path, search, replacement, name),
                output,
            )

        return _run("replace_text", action)

    def remove_between_text(self, lhs: str, rhs: str, output: str | Path | None = None) -> OperationResult:
        """Remove the first ``lhs`` ... ``rhs`` span (inclusive) in each text part.

        ``data`` holds the number of parts a span was removed from. A part
        containing ``lhs`` without a following ``rhs`` fails the operation.
        """

        def action() -> OperationResult:
            if not lhs:
                raise InputError("String left-hand-side of part to be removed must be given")
            if not rhs:
                raise InputError("String right-hand-side of part to be removed must be given")

            return self._mutate_text_parts(
                "remove_between_text",
                lambda mutator, path, name: int(mutator.remove_between_in_xml(path, lhs, rhs, name)),
                output,
            )

        return _run("remove_between_text", action)

    def randomize_text(self, output: str | Path | None = None) -> OperationResult:
        """Replace all text with lorem ipsum of the same shape."""

        def action() -> OperationResult:
            return self._mutate_text_parts(
                "randomize_text",
                lambda mutator, path, name: mutator.randomize_in_xml(path, name),
                output,
            )

        return _run("randomize_text", action)

    def replace_image(
        self,
        image_name: str,
        replacement: str | Path,
        output: str | Path | None = None,
    ) -> OperationResult:
        """Replace an image inside the document by another image file.

        Args:
            image_name: Name (or trailing path) of the image entry, e.g. "image1.png"
            replacement: Path of the new image file
            output: Result path (default: overwrite the document)
        """

        def action() -> OperationResult:
            if not image_name:
                raise InputError("Filename of image to be replaced must be given")
            replacement_path = self._config.resolve_path(replacement)
            if not replacement_path.is_file():
                raise InputError(f"File not found: {replacement_path}")

            with self._extract() as extraction:
                matches = extraction.parts_named(image_name)
                if not matches:
                    raise InputError(f"Cannot replace {image_name} - no such image within {self._path}")

                shutil.copyfile(replacement_path, extraction.part_path(matches[0]))
                destination = self._repack(extraction, output)

            return OperationResult(
                True, "replace_image", f"Replaced {matches[0]} in {destination}", output_path=destination
            )

        return _run("replace_image", action)


def zip_directory_to_docx(
    directory: str | Path,
    output: str | Path,
    config: ToolboxConfig | None = None,
    update_created: bool = False,
    update_modified: bool = False,
) -> OperationResult:
    """Package a directory (e.g. one made by ``unzip``) into a DOCX file."""
    config = config or ToolboxConfig()

    def action() -> OperationResult:
        source = config.resolve_path(directory)
        destination = config.resolve_path(output)
        validate_structure(source, fatal=False)

        if not zip_directory(source, destination, update_created, update_modified):
            raise PackageIOError(f"DOCX creation failed: {destination}", path=str(destination))

        return OperationResult(True, "zip", f"Created {destination}", output_path=destination)

    return _run("zip", action)
