"""
Aggregating and modifying document metadata (docProps/app.xml, docProps/core.xml).

A package normally holds one ``app.xml`` and one ``core.xml``; documents
assembled from several others can carry more than one of each. The
``MetaCollector`` is fed parts in package order and emits one ``MetaRecord``
per occurrence instead of blending duplicates together.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from lxml import etree

from .constants import (
    CORE_PART,
    CORE_PROPERTIES_NAMESPACE,
    DC_NAMESPACE,
    DCTERMS_NAMESPACE,
    NSMAP_CORE,
    XSI_NAMESPACE,
    local_name,
)
from .errors import InputError
from .xml_part import XmlPart, check_xml_text

logger = logging.getLogger(__name__)


class MetaAttribute(Enum):
    """Modifiable attributes of docProps/core.xml.

    Each member carries its element name and namespace.
    """

    TITLE = ("title", DC_NAMESPACE)
    SUBJECT = ("subject", DC_NAMESPACE)
    CREATOR = ("creator", DC_NAMESPACE)
    KEYWORDS = ("keywords", CORE_PROPERTIES_NAMESPACE)
    DESCRIPTION = ("description", DC_NAMESPACE)
    LANGUAGE = ("language", DC_NAMESPACE)
    LAST_MODIFIED_BY = ("lastModifiedBy", CORE_PROPERTIES_NAMESPACE)
    LAST_PRINTED = ("lastPrinted", CORE_PROPERTIES_NAMESPACE)
    REVISION = ("revision", CORE_PROPERTIES_NAMESPACE)
    CREATED = ("created", DCTERMS_NAMESPACE)
    MODIFIED = ("modified", DCTERMS_NAMESPACE)

    def __init__(self, key: str, namespace: str) -> None:
        self.key = key
        self.namespace = namespace

    @property
    def tag(self) -> str:
        """Fully qualified element tag."""
        return f"{{{self.namespace}}}{self.key}"

    @property
    def is_w3cdtf(self) -> bool:
        """Whether the element is typed as a W3CDTF timestamp."""
        return self in (MetaAttribute.CREATED, MetaAttribute.MODIFIED)

    @classmethod
    def from_name(cls, name: str) -> "MetaAttribute | None":
        """Look up an attribute by element name or member name (case-insensitive)."""
        normalized = name.strip().lower().replace("-", "_")
        for attribute in cls:
            if normalized in (attribute.key.lower(), attribute.name.lower()):
                return attribute
        return None


def iso8601_now() -> str:
    """Current UTC time as a W3CDTF timestamp (e.g. 2024-05-01T12:00:00Z)."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class MetaRecord:
    """Metadata collected from one app.xml / core.xml occurrence.

    Attribute dictionaries keep the order of the elements in their part.

    Attributes:
        app_part: Package name of the app.xml part (None if not seen)
        core_part: Package name of the core.xml part (None if not seen)
        app: Extended properties (e.g. "Application", "Pages")
        core: Core properties keyed by element name (e.g. "title", "created")
    """

    app_part: str | None = None
    core_part: str | None = None
    app: dict[str, str] = field(default_factory=dict)
    core: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.app_part is None and self.core_part is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "app_part": self.app_part,
            "core_part": self.core_part,
            "app": dict(self.app),
            "core": dict(self.core),
        }


def _leaf_values(root: Any) -> dict[str, str]:
    values = {}
    for element in root:
        # Skip comments and processing instructions
        if not isinstance(element.tag, str):
            continue
        if len(element):
            # Nested structures (e.g. HeadingPairs) are summarized by their text
            values[local_name(element.tag)] = " ".join(
                text.strip() for text in element.itertext() if text.strip()
            )
        else:
            values[local_name(element.tag)] = (element.text or "").strip()
    return values


class MetaCollector:
    """Collects metadata across a package and modifies core.xml.

    Example:
        >>> collector = MetaCollector()
        >>> collector.collect_from_app_xml("docProps/app.xml", app_bytes)
        >>> collector.load_core_xml(extraction.part_path("docProps/core.xml"))
        >>> collector.collect_from_core_xml("docProps/core.xml")
        >>> records = collector.output()
    """

    def __init__(self) -> None:
        self._pending = MetaRecord()
        self._records: list[MetaRecord] = []
        self._core: XmlPart | None = None

    @property
    def records(self) -> list[MetaRecord]:
        """Records emitted so far."""
        return list(self._records)

    def _flush(self) -> None:
        if self._pending.is_empty:
            return
        self._records.append(self._pending)
        logger.debug(
            "Emitted metadata record (app=%s, core=%s)",
            self._pending.app_part,
            self._pending.core_part,
        )
        self._pending = MetaRecord()

    def collect_from_app_xml(self, part_name: str, xml: bytes) -> None:
        """Add the properties of an app.xml part to the pending record.

        A second app.xml flushes the pending record first.

        Raises:
            XmlParseError: If the part is not well-formed
        """
        part = XmlPart.from_bytes(xml, part_name)

        if self._pending.app_part is not None:
            self._flush()

        self._pending.app_part = part_name
        self._pending.app.update(_leaf_values(part.root))

    def load_core_xml(self, path: str | Path, part_name: str | None = None) -> None:
        """Load a core.xml part for collection or modification.

        Raises:
            XmlParseError: If the part is not well-formed
            PackageIOError: If the part cannot be read
        """
        self._core = XmlPart.load(path, part_name or CORE_PART)

    def _require_core(self) -> XmlPart:
        if self._core is None:
            raise InputError("No core.xml loaded")
        return self._core

    def collect_from_core_xml(self, part_name: str) -> None:
        """Add the properties of the loaded core.xml to the pending record.

        A second core.xml flushes the pending record first.
        """
        core = self._require_core()

        if self._pending.core_part is not None:
            self._flush()

        self._pending.core_part = part_name
        self._pending.core.update(_leaf_values(core.root))

    def upsert_attribute(self, attribute: "MetaAttribute | str", value: str) -> bool:
        """Set an attribute of the loaded core.xml, inserting it if absent.

        Args:
            attribute: A MetaAttribute or its name (e.g. "title", "lastModifiedBy")
            value: New value

        Returns:
            False if the attribute is not a recognized metadata attribute

        Raises:
            InputError: If ``value`` is not valid XML text
        """
        if not isinstance(attribute, MetaAttribute):
            resolved = MetaAttribute.from_name(attribute)
            if resolved is None:
                logger.error("Unknown meta attribute: %s", attribute)
                return False
            attribute = resolved

        check_xml_text(value, f"Value of {attribute.key}")
        root = self._require_core().root
        element = root.find(attribute.tag)

        if element is None:
            declared = set((root.nsmap or {}).values())
            nsmap = {
                prefix: namespace
                for prefix, namespace in NSMAP_CORE.items()
                if namespace not in declared
                and (
                    namespace == attribute.namespace
                    or (attribute.is_w3cdtf and namespace in (DCTERMS_NAMESPACE, XSI_NAMESPACE))
                )
            }
            element = etree.SubElement(root, attribute.tag, nsmap=nsmap or None)
            if attribute.is_w3cdtf:
                element.set(f"{{{XSI_NAMESPACE}}}type", "dcterms:W3CDTF")
            logger.debug("Inserted meta attribute %s", attribute.key)

        element.text = value
        return True

    def save_core_xml(self) -> None:
        """Write the loaded core.xml back to disk."""
        self._require_core().save()

    def output(self) -> list[MetaRecord]:
        """Emit the pending record (if any) and return all records."""
        self._flush()
        return self.records


def update_core_date(directory: str | Path, attribute: MetaAttribute, value: str | None = None) -> bool:
    """Stamp a date attribute in the core.xml below an extraction directory.

    Args:
        directory: Extraction directory
        attribute: MetaAttribute.CREATED or MetaAttribute.MODIFIED
        value: Timestamp to write (defaults to now)

    Returns:
        False if the package has no core.xml
    """
    core_path = Path(directory) / CORE_PART
    if not core_path.is_file():
        logger.warning("No %s in %s, not updating %s", CORE_PART, directory, attribute.key)
        return False

    collector = MetaCollector()
    collector.load_core_xml(core_path)
    collector.upsert_attribute(attribute, value or iso8601_now())
    collector.save_core_xml()
    return True
