"""
Reading, extracting and validating DOCX packages.

This module separates ZIP handling from XML manipulation concerns. A package
is read into an ordered list of ``PackageEntry`` objects, projected onto disk
as a disposable ``WorkingExtraction``, and checked against the mandatory
OOXML structure.
"""

import logging
import secrets
import shutil
import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from lxml import etree

from .constants import (
    EXTRACTED_APPENDIX,
    IMAGE_EXTENSIONS,
    MANDATORY_DIRECTORIES,
    MANDATORY_FILES,
)
from .errors import InputError, MalformedArchiveError, PackageIOError, StructureError

logger = logging.getLogger(__name__)


@dataclass
class PackageEntry:
    """A single entry of a ZIP package.

    Attributes:
        path: Relative path within the package (POSIX separators)
        data: Raw (uncompressed) bytes, empty for directories
        is_dir: Whether the entry is a directory entry
        date_time: Modification timestamp stored in the archive
        compressed_size: Size of the entry inside the archive
    """

    path: str
    data: bytes = field(default=b"", repr=False)
    is_dir: bool = False
    date_time: tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)
    compressed_size: int = 0

    @property
    def size(self) -> int:
        """Uncompressed size in bytes."""
        return len(self.data)

    @property
    def is_image(self) -> bool:
        """Whether the entry is an image file."""
        return not self.is_dir and is_image(self.path)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view of the entry (without its bytes)."""
        year, month, day, hour, minute, second = self.date_time
        return {
            "path": self.path,
            "size": self.size,
            "compressed_size": self.compressed_size,
            "date": f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}",
            "is_dir": self.is_dir,
        }


def is_image(path: str | Path) -> bool:
    """Check whether a path names an image by its extension."""
    return PurePosixPath(str(path)).suffix.lower() in IMAGE_EXTENSIONS


def read_package(source: str | Path) -> list[PackageEntry]:
    """Read all entries of a ZIP package in archive order.

    Args:
        source: Path to the .docx (or other ZIP) file

    Returns:
        Entries in the order they are stored in the archive

    Raises:
        InputError: If the file does not exist
        StructureError: If the file is not a valid ZIP archive or holds entries
            that cannot be read (encrypted, unsupported compression)
    """
    source = Path(source)
    if not source.is_file():
        raise InputError(f"File not found: {source}")

    if not zipfile.is_zipfile(source):
        raise StructureError(f"{source} is not a ZIP archive", path=str(source))

    entries: list[PackageEntry] = []
    seen: set[str] = set()

    try:
        with zipfile.ZipFile(source, "r") as zip_ref:
            for info in zip_ref.infolist():
                # A later duplicate would overwrite the earlier one on disk
                if info.filename in seen:
                    logger.warning("Duplicate entry %s in %s, keeping the last", info.filename, source)
                    entries = [e for e in entries if e.path != info.filename]
                seen.add(info.filename)

                is_dir = info.is_dir()
                entries.append(
                    PackageEntry(
                        path=info.filename,
                        data=b"" if is_dir else zip_ref.read(info),
                        is_dir=is_dir,
                        date_time=info.date_time,
                        compressed_size=info.compress_size,
                    )
                )
    except (zipfile.BadZipFile, RuntimeError, NotImplementedError) as e:
        # Encrypted entries and unsupported compression methods are unreadable
        raise StructureError(f"Failed to read {source}: {e}", path=str(source)) from e
    except OSError as e:
        raise PackageIOError(f"Failed to read {source}: {e}", path=str(source)) from e

    logger.debug("Read %d entries from %s", len(entries), source)
    return entries


def _safe_relative_path(entry_name: str, destination: Path) -> PurePosixPath:
    """Validate an entry name and return it as a relative path.

    Raises:
        MalformedArchiveError: If the name is absolute or traverses upwards
    """
    normalized = entry_name.replace("\\", "/")
    relative = PurePosixPath(normalized)

    if (
        normalized.startswith("/")
        or relative.is_absolute()
        or ".." in relative.parts
        or (relative.parts and ":" in relative.parts[0])
    ):
        raise MalformedArchiveError(entry_name, path=str(destination))

    return relative


def extraction_path(source: str | Path, appendix: str | None, root: str | Path) -> Path:
    """Render the directory path a package is extracted to.

    Args:
        source: Path of the package file
        appendix: Suffix appended to the file name (default "-extracted")
        root: Directory in which the extraction directory is created

    Returns:
        ``<root>/<file name><appendix>``
    """
    return Path(root) / f"{Path(source).name}{appendix or EXTRACTED_APPENDIX}"


def scratch_appendix() -> str:
    """Generate a short unique appendix for disposable extractions."""
    return f"-{secrets.token_hex(4)}"


class WorkingExtraction:
    """A package projected onto a filesystem directory.

    The extraction is owned by the operation that created it. Used as a
    context manager it removes its directory on exit, whether the block
    succeeded or failed.

    A directory that already existed before extracting is never deleted as
    a whole; only the files and subdirectories written into it are removed.

    Example:
        >>> with extract_package("report.docx", "/tmp/report.docx-1a2b") as extraction:
        ...     document = extraction.part_path("word/document.xml")
    """

    def __init__(
        self,
        source: Path,
        directory: Path,
        entries: list[PackageEntry],
        owns_directory: bool = True,
    ) -> None:
        self._source = source
        self._directory = directory
        self._entries = entries
        self._owns_directory = owns_directory
        self._written: list[Path] = []
        self._created_dirs: list[Path] = []
        self._removed = False

    @property
    def source(self) -> Path:
        """Path of the package the extraction was made from."""
        return self._source

    @property
    def directory(self) -> Path:
        """Directory holding the extracted parts."""
        return self._directory

    @property
    def entries(self) -> list[PackageEntry]:
        """Entries of the source package in archive order."""
        return self._entries

    def part_path(self, part_name: str) -> Path:
        """Get the filesystem path of a package part."""
        return self._directory / part_name

    def parts_named(self, suffix: str) -> list[str]:
        """Names of file entries ending with ``suffix``, in archive order."""
        return [e.path for e in self._entries if not e.is_dir and e.path.endswith(suffix)]

    def is_docx(self) -> bool:
        """Check the extraction against the mandatory OOXML structure."""
        return is_docx(self._directory)

    @property
    def owns_directory(self) -> bool:
        """Whether the directory was created by this extraction."""
        return self._owns_directory

    def make_dirs(self, directory: Path) -> None:
        """Create ``directory`` and its missing parents, remembering which were new."""
        missing = []
        current = directory
        while current != self._directory and not current.exists():
            missing.append(current)
            current = current.parent

        directory.mkdir(parents=True, exist_ok=True)
        self._created_dirs.extend(reversed(missing))

    def write_part(self, path: Path, data: bytes) -> None:
        """Write a file below the directory, remembering it for removal."""
        path.write_bytes(data)
        self._written.append(path)

    def remove(self) -> None:
        """Delete the extraction (best effort).

        An owned directory is deleted recursively. Otherwise only the files
        and directories this extraction wrote are removed.
        """
        if self._removed:
            return
        self._removed = True

        if not self._directory.exists():
            return

        if not self._owns_directory:
            self._remove_written()
            return

        try:
            shutil.rmtree(self._directory)
            logger.debug("Removed extraction %s", self._directory)
        except OSError as e:
            logger.warning("Could not remove extraction %s: %s", self._directory, e)

    def _remove_written(self) -> None:
        for path in self._written:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove %s: %s", path, e)

        # Deepest first; directories holding other files are kept
        for directory in reversed(self._created_dirs):
            try:
                directory.rmdir()
            except OSError:
                logger.debug("Keeping non-empty directory %s", directory)

        logger.debug("Removed extracted entries from %s", self._directory)

    def __enter__(self) -> "WorkingExtraction":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.remove()


def extract_package(source: str | Path, destination: str | Path) -> WorkingExtraction:
    """Extract every entry of a package into a directory.

    All entry names are checked before anything is written. Every directory
    segment of every entry path is created first, so nested parts extract
    regardless of the order of entries in the archive. If writing fails,
    whatever was written is removed again; a ``destination`` that existed
    beforehand keeps all of its other contents.

    Args:
        source: Path to the package file
        destination: Directory to extract into (created if missing)

    Returns:
        WorkingExtraction owning ``destination``

    Raises:
        InputError: If the source does not exist
        StructureError: If the source is not a ZIP archive
        MalformedArchiveError: If an entry would escape ``destination``
        PackageIOError: If writing to the filesystem fails
    """
    source = Path(source)
    destination = Path(destination)
    entries = read_package(source)

    relative_paths = [_safe_relative_path(entry.path, destination) for entry in entries]

    extraction = WorkingExtraction(source, destination, entries, owns_directory=not destination.exists())
    try:
        destination.mkdir(parents=True, exist_ok=True)

        for entry, relative in zip(entries, relative_paths):
            target = destination.joinpath(*relative.parts)
            extraction.make_dirs(target if entry.is_dir else target.parent)

        for entry, relative in zip(entries, relative_paths):
            if not entry.is_dir:
                extraction.write_part(destination.joinpath(*relative.parts), entry.data)
    except OSError as e:
        extraction.remove()
        raise PackageIOError(f"Failed to extract {source}: {e}", path=str(destination)) from e

    logger.debug("Extracted %s to %s", source, destination)
    return extraction


def missing_parts(directory: str | Path) -> list[str]:
    """List mandatory OOXML files and directories absent from a directory."""
    directory = Path(directory)
    missing = [d + "/" for d in MANDATORY_DIRECTORIES if not (directory / d).is_dir()]
    missing.extend(f for f in MANDATORY_FILES if not (directory / f).is_file())
    return missing


def is_docx(directory: str | Path) -> bool:
    """Check whether an extracted package has all mandatory DOCX parts."""
    return not missing_parts(directory)


def validate_structure(directory: str | Path, fatal: bool = True, label: str | None = None) -> bool:
    """Validate an extracted package against the mandatory DOCX structure.

    Args:
        directory: Extraction directory
        fatal: Raise on failure instead of logging a warning
        label: Name to report (defaults to the directory)

    Returns:
        True if the structure is complete, False if incomplete and not fatal

    Raises:
        StructureError: If incomplete and ``fatal`` is set
    """
    missing = missing_parts(directory)
    if not missing:
        return True

    name = label or str(directory)
    if fatal:
        raise StructureError(f"{name} is not a DOCX document", path=name, missing=missing)

    logger.warning("%s is not a DOCX document, missing: %s", name, ", ".join(missing))
    return False


def indent_xml_files(directory: str | Path) -> int:
    """Pretty-print every XML and relationships file below a directory.

    Files that fail to parse are left untouched and logged.

    Returns:
        Number of files rewritten
    """
    directory = Path(directory)
    xml_files = sorted(directory.rglob("*.xml")) + sorted(directory.rglob("*.rels"))
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False)

    count = 0
    for xml_file in xml_files:
        try:
            tree = etree.parse(str(xml_file), parser)
        except etree.XMLSyntaxError as e:
            logger.warning("Not indenting %s: %s", xml_file.relative_to(directory), e)
            continue

        tree.write(
            str(xml_file),
            encoding=tree.docinfo.encoding or "UTF-8",
            xml_declaration=True,
            standalone=tree.docinfo.standalone,
            pretty_print=True,
        )
        count += 1

    logger.debug("Indented %d XML files in %s", count, directory)
    return count


def reduce_to_media(directory: str | Path, part_names: list[str] | None = None) -> list[str]:
    """Delete everything but image files from an extraction directory.

    Args:
        directory: Extraction directory
        part_names: Extracted parts to consider (default: every file below
            ``directory``); other files in the directory are left alone

    Returns:
        Relative paths of the images that remain
    """
    directory = Path(directory)
    if part_names is None:
        part_names = [p.relative_to(directory).as_posix() for p in directory.rglob("*") if p.is_file()]

    kept = []
    parents: set[Path] = set()
    for name in part_names:
        path = directory / name
        parents.update(p for p in path.parents if directory in p.parents)
        if is_image(name):
            kept.append(name)
        elif path.is_file():
            path.unlink()

    # Deepest first, so emptied parents become removable
    for parent in sorted(parents, key=lambda p: len(p.parts), reverse=True):
        if parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()

    return sorted(kept)
