"""TrueType table structures and small helpers shared by the font code."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field


@dataclass
class TableDirectoryEntry:
    """One entry of a TrueType table directory."""

    checksum: int = 0
    offset: int = 0
    length: int = 0

    def padded_length(self) -> int:
        """Length rounded up to the next multiple of four."""
        return (self.length + 3) & ~3


class KernValue(dict):
    """Kerning values for one left glyph, keyed by the right glyph."""

    def value_by_right(self, right: int) -> int | None:
        """Return the kerning value for ``right``, or None if there is none."""
        return self.get(right)


@dataclass
class KernTable:
    """The parsed ``kern`` table: left glyph -> KernValue."""

    version: int = 0
    n_tables: int = 0
    kerning: dict[int, KernValue] = field(default_factory=dict)


@dataclass
class FontMap:
    """One slot of a single-byte encoding map."""

    uv: int = -1
    name: str = ".notdef"


@dataclass(frozen=True)
class CmapFormat12GroupingTable:
    """A sequential map group of a cmap format 12 subtable."""

    start_char_code: int
    end_char_code: int
    glyph_id: int


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    value = value - 0.5 if value < 0.0 else value + 0.5
    return int(value)


def _unpack(fmt: str, data: bytes, offset: int) -> tuple:
    size = struct.calcsize(fmt)
    if offset < 0 or offset + size > len(data):
        raise ValueError("file out of length")
    return struct.unpack_from(fmt, data, offset)


def parse_cmap_format12(data: bytes, cmap_offset: int) -> list[CmapFormat12GroupingTable]:
    """Read the groups of the (3, 10) format 12 subtable of a cmap table.

    ``cmap_offset`` is the position of the cmap table inside ``data``.
    Returns an empty list when the font has no such subtable.
    """
    (num_tables,) = _unpack(">H", data, cmap_offset + 2)
    position = cmap_offset + 4
    records = []
    for _ in range(num_tables):
        records.append(_unpack(">HHL", data, position))
        position += 8

    sub_offset = next(
        (offset for platform_id, encoding_id, offset in records
         if platform_id == 3 and encoding_id == 10),
        None,
    )
    if sub_offset is None:
        return []

    base = cmap_offset + sub_offset
    fmt, reserved = _unpack(">HH", data, base)
    if fmt != 12:
        raise ValueError("format != 12")
    if reserved != 0:
        raise ValueError("reserved != 0")
    (n_groups,) = _unpack(">L", data, base + 12)

    groups = []
    position = base + 16
    for _ in range(n_groups):
        start, end, glyph_id = _unpack(">LLL", data, position)
        groups.append(CmapFormat12GroupingTable(start, end, glyph_id))
        position += 12
    return groups