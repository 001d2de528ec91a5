"""Parser for the TrueType tables needed to embed and measure a font."""

from __future__ import annotations

import contextlib
import struct
from os import PathLike
from typing import BinaryIO

from .ttf_types import (
    CmapFormat12GroupingTable,
    KernTable,
    KernValue,
    TableDirectoryEntry,
    parse_cmap_format12,
)

SYMBOLIC = 1 << 2
NONSYMBOLIC = 1 << 5

_TRUETYPE_VERSION = b"\x00\x01\x00\x00"
_HEAD_MAGIC = 0x5F0F3CF5


class TTFError(ValueError):
    """The font data is malformed or uses an unsupported feature."""


class TableNotFoundError(TTFError):
    """A required table is missing from the font."""


class _Cursor:
    """Big-endian reader over an in-memory font."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def seek(self, position: int) -> None:
        if position < 0:
            raise TTFError("negative position")
        self.pos = position

    def skip(self, length: int) -> None:
        self.seek(self.pos + length)

    def read(self, length: int) -> bytes:
        if self.pos >= len(self.data):
            raise TTFError("unexpected end of font data")
        chunk = self.data[self.pos:self.pos + length]
        self.pos += len(chunk)
        if len(chunk) != length:
            raise TTFError("file out of length")
        return chunk

    def ushort(self) -> int:
        return struct.unpack(">H", self.read(2))[0]

    def short(self) -> int:
        return struct.unpack(">h", self.read(2))[0]

    def ulong(self) -> int:
        return struct.unpack(">L", self.read(4))[0]


class TTFParser:
    """Reads metrics, character maps and glyph locations from a TrueType font."""

    def __init__(self, use_kerning: bool = False) -> None:
        self.use_kerning = use_kerning
        self._reset()

    def _reset(self) -> None:
        self.tables: dict[str, TableDirectoryEntry] = {}
        # head
        self.units_per_em = 0
        self.x_min = 0
        self.y_min = 0
        self.x_max = 0
        self.y_max = 0
        self.index_to_loc_format = 0
        # hhea
        self.number_of_h_metrics = 0
        self.hhea_ascender = 0
        self.hhea_descender = 0
        # maxp, hmtx, name
        self.num_glyphs = 0
        self.widths: list[int] = []
        self.chars: dict[int, int] = {}
        self.post_script_name = ""
        # OS/2
        self.os2_version = 0
        self.embeddable = False
        self.bold = False
        self.typo_ascender = 0
        self.typo_descender = 0
        self.typo_line_gap = 0
        self.win_ascent = 0
        self.win_descent = 0
        self.cap_height = 0
        self.sx_height = 0
        # post
        self.italic_angle = 0
        self.underline_position = 0
        self.underline_thickness = 0
        self.is_fixed_pitch = False
        # cmap and loca
        self.is_short_index = False
        self.loca_table: list[int] = []
        self.seg_count = 0
        self.start_count: list[int] = []
        self.end_count: list[int] = []
        self.id_range_offset: list[int] = []
        self.id_delta: list[int] = []
        self.glyph_id_array: list[int] = []
        self.symbol = False
        self.grouping_tables: list[CmapFormat12GroupingTable] = []
        self.font_data = b""
        self.kern: KernTable | None = None

    # ------------------------------------------------------------------ entry points

    def parse(self, path: str | PathLike[str]) -> None:
        """Parse the font file at ``path``."""
        with open(path, "rb") as handle:
            self.parse_font_data(handle.read())

    def parse_reader(self, stream: BinaryIO) -> None:
        """Parse a font read whole from a binary stream."""
        self.parse_font_data(stream.read())

    def parse_font_data(self, data: bytes) -> None:
        """Parse font bytes, filling in this parser's attributes."""
        data = bytes(data)
        self._reset()
        cursor = _Cursor(data)

        if cursor.read(4) != _TRUETYPE_VERSION:
            raise TTFError("Unrecognized file (font) format")

        num_tables = cursor.ushort()
        cursor.skip(3 * 2)  # searchRange, entrySelector, rangeShift
        for _ in range(num_tables):
            tag = cursor.read(4).decode("latin-1")
            checksum = cursor.ulong()
            offset = cursor.ulong()
            length = cursor.ulong()
            self.tables[tag] = TableDirectoryEntry(checksum=checksum, offset=offset, length=length)

        self._parse_head(cursor)
        self._parse_hhea(cursor)
        self._parse_maxp(cursor)
        self._parse_hmtx(cursor)
        self._parse_cmap(cursor)
        self._parse_name(cursor)
        self._parse_os2(cursor)
        self._parse_post(cursor)
        self._parse_loca(cursor)
        if self.use_kerning:
            self._parse_kern(cursor)

        self.font_data = data

    # ------------------------------------------------------------------ derived metrics

    def x_height(self) -> int:
        """Height of lower-case letters, estimated when OS/2 does not give it."""
        if self.os2_version >= 2 and self.sx_height != 0:
            return self.sx_height
        return int(0.66 * self.hhea_ascender)

    def ascender(self) -> int:
        if self.typo_ascender == 0:
            return self.hhea_ascender
        return self.win_ascent

    def descender(self) -> int:
        if self.typo_descender == 0:
            return self.hhea_descender
        descender = self.win_descent
        if self.hhea_descender < 0:
            descender = -descender
        return descender

    def flag(self) -> int:
        """Font descriptor flags: symbolic or non-symbolic."""
        return SYMBOLIC if self.symbol else NONSYMBOLIC

    # ------------------------------------------------------------------ tables

    def _seek(self, cursor: _Cursor, tag: str) -> None:
        table = self.tables.get(tag)
        if table is None:
            raise TableNotFoundError(f"table not found: {tag!r}")
        cursor.seek(table.offset)

    def _parse_head(self, cursor: _Cursor) -> None:
        self._seek(cursor, "head")
        cursor.skip(3 * 4)  # version, fontRevision, checkSumAdjustment
        if cursor.ulong() != _HEAD_MAGIC:
            raise TTFError("Incorrect magic number")
        cursor.skip(2)  # flags
        self.units_per_em = cursor.ushort()
        cursor.skip(2 * 8)  # created, modified
        self.x_min = cursor.short()
        self.y_min = cursor.short()
        self.x_max = cursor.short()
        self.y_max = cursor.short()
        cursor.skip(2 * 3)  # macStyle, lowestRecPPEM, fontDirectionHint
        self.index_to_loc_format = cursor.short()

    def _parse_hhea(self, cursor: _Cursor) -> None:
        self._seek(cursor, "hhea")
        cursor.skip(4)  # version
        self.hhea_ascender = cursor.short()
        self.hhea_descender = cursor.short()
        cursor.skip(13 * 2)
        self.number_of_h_metrics = cursor.ushort()

    def _parse_maxp(self, cursor: _Cursor) -> None:
        self._seek(cursor, "maxp")
        cursor.skip(4)  # version
        self.num_glyphs = cursor.ushort()

    def _parse_hmtx(self, cursor: _Cursor) -> None:
        self._seek(cursor, "hmtx")
        widths = []
        for _ in range(self.number_of_h_metrics):
            widths.append(cursor.ushort())
            cursor.skip(2)  # left side bearing
        if self.number_of_h_metrics < self.num_glyphs:
            if not widths:
                raise TTFError("hmtx table has no metrics")
            widths.extend([widths[-1]] * (self.num_glyphs - len(widths)))
        self.widths = widths

    def _parse_cmap(self, cursor: _Cursor) -> None:
        self._seek(cursor, "cmap")
        cmap_offset = self.tables["cmap"].offset
        cursor.skip(2)  # version
        num_tables = cursor.ushort()

        offset31 = 0
        for _ in range(num_tables):
            platform_id = cursor.ushort()
            encoding_id = cursor.ushort()
            offset = cursor.ulong()
            self.symbol = False
            if platform_id == 3 and encoding_id == 1:
                offset31 = offset
        if offset31 == 0:
            raise TTFError("No Unicode encoding found")

        cursor.seek(cmap_offset + offset31)
        if cursor.ushort() != 4:
            raise TTFError("Unexpected subtable format")
        length = cursor.ushort()
        cursor.skip(2)  # language
        seg_count = cursor.ushort() // 2
        self.seg_count = seg_count
        cursor.skip(3 * 2)  # searchRange, entrySelector, rangeShift

        glyph_count = (length - (16 + 8 * seg_count)) // 2
        if glyph_count < 0:
            raise TTFError("file out of length")

        self.end_count = [cursor.ushort() for _ in range(seg_count)]
        cursor.skip(2)  # reservedPad
        self.start_count = [cursor.ushort() for _ in range(seg_count)]
        self.id_delta = [cursor.ushort() for _ in range(seg_count)]
        range_offset_pos = cursor.pos
        self.id_range_offset = [cursor.ushort() for _ in range(seg_count)]
        self.glyph_id_array = [cursor.ushort() for _ in range(glyph_count)]

        chars: dict[int, int] = {}
        segments = zip(self.start_count, self.end_count, self.id_delta, self.id_range_offset)
        for seg, (first, last, delta, range_offset) in enumerate(segments):
            if range_offset > 0:
                cursor.seek(range_offset_pos + 2 * seg + range_offset)
            for code in range(first, last + 1):
                if code == 0xFFFF:
                    break
                if range_offset > 0:
                    glyph = cursor.ushort()
                    if glyph > 0:
                        glyph += delta
                else:
                    glyph = code + delta
                if glyph >= 65536:
                    glyph -= 65536
                if glyph > 0:
                    chars[code] = glyph
        self.chars = chars

        try:
            self.grouping_tables = parse_cmap_format12(cursor.data, cmap_offset)
        except ValueError as exc:
            raise TTFError(str(exc)) from exc

    def _parse_name(self, cursor: _Cursor) -> None:
        self._seek(cursor, "name")
        table_offset = cursor.pos
        self.post_script_name = ""
        cursor.skip(2)  # format
        count = cursor.ushort()
        string_offset = cursor.ushort()
        for _ in range(count):
            cursor.skip(3 * 2)  # platformID, encodingID, languageID
            name_id = cursor.ushort()
            length = cursor.ushort()
            offset = cursor.ushort()
            if name_id == 6:
                cursor.seek(table_offset + string_offset + offset)
                raw = cursor.read(length).replace(b"\x00", b"")
                self.post_script_name = raw.decode("latin-1").replace("0", "")
                break
        if not self.post_script_name:
            raise TTFError("PostScript name not found")

    def _parse_os2(self, cursor: _Cursor) -> None:
        self._seek(cursor, "OS/2")
        version = cursor.ushort()
        self.os2_version = version
        cursor.skip(3 * 2)  # xAvgCharWidth, usWeightClass, usWidthClass
        fs_type = cursor.ushort()
        self.embeddable = fs_type != 2 and (fs_type & 0x200) == 0
        cursor.skip(11 * 2 + 10 + 4 * 4 + 4)
        fs_selection = cursor.ushort()
        self.bold = (fs_selection & 32) != 0
        cursor.skip(2 * 2)  # usFirstCharIndex, usLastCharIndex
        self.typo_ascender = cursor.short()
        self.typo_descender = cursor.short()
        self.typo_line_gap = cursor.short()
        self.win_ascent = cursor.ushort()
        self.win_descent = cursor.ushort()
        if version >= 2:
            cursor.skip(2 * 4)  # ulCodePageRange1, ulCodePageRange2
            self.sx_height = cursor.short()
            self.cap_height = cursor.short()
        else:
            self.cap_height = self.hhea_ascender

    def _parse_post(self, cursor: _Cursor) -> None:
        self._seek(cursor, "post")
        cursor.skip(4)  # version
        self.italic_angle = cursor.short()
        cursor.skip(2)  # fractional part of the angle
        self.underline_position = cursor.short()
        self.underline_thickness = cursor.short()
        self.is_fixed_pitch = cursor.ulong() != 0

    def _parse_loca(self, cursor: _Cursor) -> None:
        self.is_short_index = self.index_to_loc_format == 0
        self._seek(cursor, "loca")
        length = self.tables["loca"].length
        if self.is_short_index:
            self.loca_table = [cursor.ushort() * 2 for _ in range(length // 2)]
        else:
            self.loca_table = [cursor.ulong() for _ in range(length // 4)]

    def _parse_kern(self, cursor: _Cursor) -> None:
        self.kern = None
        try:
            self._seek(cursor, "kern")
        except TableNotFoundError:
            return
        kern = KernTable()
        self.kern = kern
        kern.version = cursor.ushort()
        kern.n_tables = cursor.ushort()
        for _ in range(kern.n_tables):
            cursor.skip(2 + 2)  # version, length
            coverage = cursor.ushort()
            subtable_format = coverage & 0xF0
            kern.kerning = {}
            if subtable_format != 0:
                raise TTFError(f"not support kerning format {subtable_format}")
            # A truncated pair list keeps the pairs read so far.
            with contextlib.suppress(TTFError):
                self._parse_kern_format0(cursor, kern)

    @staticmethod
    def _parse_kern_format0(cursor: _Cursor, kern: KernTable) -> None:
        n_pairs = cursor.ushort()
        cursor.skip(2 + 2 + 2)  # searchRange, entrySelector, rangeShift
        for _ in range(n_pairs):
            left = cursor.ushort()
            right = cursor.ushort()
            value = cursor.short()
            kern.kerning.setdefault(left, KernValue())[right] = value