"""
Plain-text and JSON rendering of the structured records operations return.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from .fields import MergeField
from .fonts import FontTable
from .metadata import MetaRecord
from .package import PackageEntry


def _to_serializable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: _to_serializable(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_to_serializable(item) for item in value]
    return value


def render_json(value: Any, indent: int | None = None) -> str:
    """Render records (or lists of records) as JSON."""
    return json.dumps(_to_serializable(value), indent=indent, ensure_ascii=False)


def render_entries_plain(entries: Sequence[PackageEntry]) -> str:
    """Render package entries as a table of size, date and path."""
    lines = [f"{'Length':>10}  {'Date':<19}  Name", f"{'-' * 10}  {'-' * 19}  {'-' * 4}"]
    total = 0

    for entry in entries:
        info = entry.to_dict()
        lines.append(f"{info['size']:>10}  {info['date'].replace('T', ' '):<19}  {entry.path}")
        total += entry.size

    lines.append(f"{'-' * 10}  {' ' * 19}  {'-' * 4}")
    lines.append(f"{total:>10}  {' ' * 19}  {len(entries)} file(s)")
    return "\n".join(lines)


def _render_mapping(title: str, values: dict[str, str]) -> list[str]:
    if not values:
        return []
    width = max(len(key) for key in values)
    return [title] + [f"  {key:<{width}}  {value}" for key, value in values.items()]


def render_meta_plain(records: Sequence[MetaRecord]) -> str:
    """Render metadata records, one block per record."""
    blocks = []
    for record in records:
        lines = []
        lines.extend(_render_mapping(f"{record.app_part}:", record.app) if record.app_part else [])
        lines.extend(_render_mapping(f"{record.core_part}:", record.core) if record.core_part else [])
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_fonts_plain(tables: Sequence[FontTable]) -> str:
    """Render font tables, one block per part."""
    blocks = []
    for table in tables:
        lines = [f"{table.part_name}:"]
        lines.append(f"  {'Font':<32}  {'AltName':<20}  {'CharSet':<7}  {'Family':<10}  {'Pitch':<8}")
        for font in table.fonts:
            lines.append(
                f"  {font.name:<32}  {font.alt_name or '-':<20}  {font.charset or '-':<7}  "
                f"{font.family or '-':<10}  {font.pitch or '-':<8}"
            )
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_fields_plain(fields: Sequence[MergeField]) -> str:
    """Render merge fields, one instruction per line."""
    return "\n".join(field.instruction for field in fields)
