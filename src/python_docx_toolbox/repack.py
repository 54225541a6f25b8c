"""
Atomic repackaging of an extraction directory into a DOCX file.

The package is written to ``<destination>.tmp`` first and renamed over the
destination only once it is complete. The rename is the only point at which
the destination changes: a failure before it leaves the previous file (or no
file) in place, a crash after the write leaves at most a stray ``.tmp`` file.
"""

import logging
import os
import zipfile
from collections.abc import Sequence
from pathlib import Path

from .constants import CONTENT_TYPES_PART, TEMP_SUFFIX
from .errors import InputError, PackageIOError
from .metadata import MetaAttribute, update_core_date

logger = logging.getLogger(__name__)


def temp_path_for(destination: str | Path) -> Path:
    """Path the repackager writes to before renaming onto ``destination``."""
    destination = Path(destination)
    return destination.with_name(destination.name + TEMP_SUFFIX)


def _entry_order(relative: str) -> tuple[int, str]:
    # [Content_Types].xml first, then package relationships, then the rest
    if relative == CONTENT_TYPES_PART:
        return (0, relative)
    if relative.startswith("_rels/"):
        return (1, relative)
    return (2, relative)


def package_files(
    source_directory: str | Path, entry_order: Sequence[str] | None = None
) -> list[str]:
    """Relative POSIX paths of all files below a directory, in package order.

    Args:
        source_directory: Directory to list
        entry_order: Entry names of the package the directory was extracted
            from; files listed there keep that order, new files follow

    Returns:
        Files listed in ``entry_order`` first, then the remaining files with
        ``[Content_Types].xml`` and ``_rels/`` ahead of the rest
    """
    source_directory = Path(source_directory)
    files = {
        path.relative_to(source_directory).as_posix()
        for path in source_directory.rglob("*")
        if path.is_file()
    }

    known = [name for name in dict.fromkeys(entry_order or ()) if name in files]
    remaining = sorted(files.difference(known), key=_entry_order)
    return known + remaining


def zip_directory(
    source_directory: str | Path,
    destination: str | Path,
    update_created: bool = False,
    update_modified: bool = False,
    entry_order: Sequence[str] | None = None,
) -> bool:
    """Package a directory into a DOCX file, replacing ``destination`` atomically.

    Args:
        source_directory: Directory whose files become the package entries
        destination: Path of the DOCX to create or overwrite
        update_created: Stamp core.xml "created" with the current time first
        update_modified: Stamp core.xml "modified" with the current time first
        entry_order: Entry order of the source package, kept in the result

    Returns:
        True if the destination was written; False if the temporary package
        did not appear after writing

    Raises:
        InputError: If ``source_directory`` is not a directory
        PackageIOError: If writing or renaming fails
    """
    source_directory = Path(source_directory)
    destination = Path(destination)

    if not source_directory.is_dir():
        raise InputError(f"Not a directory: {source_directory}")

    if update_created:
        update_core_date(source_directory, MetaAttribute.CREATED)
    if update_modified:
        update_core_date(source_directory, MetaAttribute.MODIFIED)

    files = package_files(source_directory, entry_order)
    temp_path = temp_path_for(destination)

    try:
        with zipfile.ZipFile(temp_path, "w", zipfile.ZIP_DEFLATED) as zip_ref:
            for relative in files:
                zip_ref.write(source_directory / relative, relative)
    except OSError as e:
        _discard(temp_path)
        raise PackageIOError(f"Failed to write {temp_path}: {e}", path=str(temp_path)) from e

    if not temp_path.is_file():
        logger.error("Package %s was not created", temp_path)
        return False

    try:
        os.replace(temp_path, destination)
    except OSError as e:
        _discard(temp_path)
        raise PackageIOError(
            f"Failed to move {temp_path} to {destination}: {e}", path=str(destination)
        ) from e

    logger.debug("Packaged %d files from %s into %s", len(files), source_directory, destination)
    return True


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)
