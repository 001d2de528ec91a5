"""The FontFile2 stream: a TrueType font cut down to the glyphs a document uses."""

from __future__ import annotations

import dataclasses
import struct
import zlib
from typing import BinaryIO

from .glyph_map import CharacterToGlyphIndex
from .pdf_protection import PDFProtection, rc4
from .strhelper import read_short, read_ushort
from .subset_font import SubsetFont
from .ttf_types import TableDirectoryEntry

ENTRY_SELECTORS = [
    0, 0, 1, 1, 2, 2,
    2, 2, 3, 3, 3, 3,
    3, 3, 3, 3, 4, 4,
    4, 4, 4, 4, 4, 4,
    4, 4, 4, 4, 4, 4, 4,
]

_SUBSET_TABLES = ("cvt ", "fpgm", "glyf", "head", "hhea", "hmtx", "loca", "maxp", "prep")

# Composite glyph component flags.
ARG_1_AND_2_ARE_WORDS = 1
HAS_SCALE = 8
MORE_COMPONENTS = 32
X_AND_Y_SCALE = 64
TWO_BY_TWO = 128

_MASK32 = 0xFFFFFFFF


def checksum(data: bytes) -> int:
    """TrueType table checksum of data whose length is a multiple of four."""
    if len(data) % 4:
        raise ValueError("checksum data length must be a multiple of 4")
    columns = [sum(data[i::4]) for i in range(4)]
    return (
        ((columns[0] << 24) & _MASK32)
        + ((columns[1] << 16) & _MASK32)
        + ((columns[2] << 8) & _MASK32)
        + (columns[3] & _MASK32)
    ) & _MASK32


def _put(buffer: bytearray, position: int, data: bytes) -> int:
    end = position + len(data)
    if end > len(buffer):
        buffer.extend(bytes(end - len(buffer)))
    buffer[position:end] = data
    return end


class FontFileDictionary:
    """Writes the embedded, subsetted font program of a SubsetFont."""

    def __init__(self, font: SubsetFont, protection: PDFProtection | None = None) -> None:
        self.font = font
        self.protection = protection

    def write(self, out: BinaryIO, obj_id: int) -> None:
        """Write the compressed font stream object."""
        font_bytes = self.make_font()
        compressed = zlib.compress(font_bytes)
        header = (
            f"<</Length {len(compressed)}\n"
            "/Filter /FlateDecode\n"
            f"/Length1 {len(font_bytes)}\n"
            ">>\n"
            "stream\n"
        )
        out.write(header.encode("latin-1"))
        if self.protection is not None:
            compressed = rc4(self.protection.object_key(obj_id), compressed)
        out.write(compressed)
        out.write(b"\nendstream\n")

    # ------------------------------------------------------------------ glyphs

    def offset(self, glyph: int) -> int:
        """Position of ``glyph``'s data inside the font file."""
        parser = self.font.parser
        glyf = parser.tables.get("glyf", TableDirectoryEntry())
        return glyf.offset + parser.loca_table[glyph]

    def _glyph_data(self, glyph: int) -> bytes:
        start = self.offset(glyph)
        return self.font.parser.font_data[start:self.offset(glyph + 1)]

    def _glyph_size(self, glyph: int) -> int:
        return self.offset(glyph + 1) - self.offset(glyph)

    def add_composite_glyphs(self, glyphs: list[int], glyph: int) -> None:
        """Append to ``glyphs`` the components of ``glyph`` if it is a composite glyph."""
        start = self.offset(glyph)
        if start == self.offset(glyph + 1):
            return
        data = self.font.parser.font_data
        if read_short(data, start) >= 0:
            return
        position = start + 2 + 8
        while True:
            flags = read_ushort(data, position)
            component = read_ushort(data, position + 2)
            position += 4
            if component not in glyphs:
                glyphs.append(component)
            if flags & MORE_COMPONENTS == 0:
                return
            advance = 4 if flags & ARG_1_AND_2_ARE_WORDS else 2
            if flags & HAS_SCALE:
                advance += 2
            elif flags & X_AND_Y_SCALE:
                advance += 4
            if flags & TWO_BY_TWO:
                advance += 8
            position += advance

    def _complete_glyph_closure(self, mapping: CharacterToGlyphIndex) -> list[int]:
        values = mapping.values()
        glyphs = list(values)
        if 0 not in values:
            glyphs.append(0)
        for i in range(len(values)):
            self.add_composite_glyphs(glyphs, glyphs[i])
        return glyphs

    def _make_glyf_and_loca(self) -> tuple[bytes, list[int]]:
        num_glyphs = self.font.parser.num_glyphs
        wanted = sorted(set(self._complete_glyph_closure(self.font.character_to_glyph_index)))
        size = sum(self._glyph_size(glyph) for glyph in wanted)
        glyph_table = bytearray(TableDirectoryEntry(length=size).padded_length())
        loca_table = [0] * (num_glyphs + 1)

        wanted_set = set(wanted)
        position = 0
        for idx in range(num_glyphs):
            loca_table[idx] = position
            if idx in wanted_set:
                data = self._glyph_data(idx)
                glyph_table[position:position + len(data)] = data
                position += len(data)
        loca_table[num_glyphs] = position
        return bytes(glyph_table), loca_table

    # ------------------------------------------------------------------ font program

    def _loca_bytes(self, loca_table: list[int], entry: TableDirectoryEntry) -> bytes:
        short = self.font.parser.is_short_index
        entry.length = len(loca_table) * (2 if short else 4)
        data = bytearray(entry.padded_length())
        if short:
            for i, value in enumerate(loca_table):
                struct.pack_into(">H", data, 2 * i, (value // 2) & 0xFFFF)
        else:
            for i, value in enumerate(loca_table):
                struct.pack_into(">L", data, 4 * i, value & _MASK32)
        return bytes(data)

    def make_font(self) -> bytes:
        """Build the subset TrueType font program."""
        parser = self.font.parser
        tables = {
            tag: dataclasses.replace(parser.tables.get(tag, TableDirectoryEntry()))
            for tag in _SUBSET_TABLES
        }
        table_count = len(tables)
        selector = ENTRY_SELECTORS[table_count]
        glyph_table, loca_table = self._make_glyf_and_loca()

        buffer = bytearray()
        _put(buffer, 0, struct.pack(
            ">LHHHH",
            0x00010000,
            table_count,
            (1 << selector) * 16,
            selector,
            ((table_count - (1 << selector)) * 16) & 0xFFFF,
        ))

        table_position = 12 + 16 * table_count
        for idx, tag in enumerate(sorted(tables)):
            entry = tables[tag]
            offset = table_position
            if tag == "glyf":
                entry.length = len(glyph_table)
                entry.checksum = checksum(glyph_table)
                data = glyph_table[:entry.padded_length()]
            elif tag == "loca":
                data = self._loca_bytes(loca_table, entry)
                entry.checksum = checksum(data)
            else:
                padded = entry.padded_length()
                data = parser.font_data[entry.offset:entry.offset + padded]
                data = data + bytes(padded - len(data))
            table_position = _put(buffer, offset, data)

            _put(buffer, idx * 16 + 12, tag.encode("latin-1")[:4].ljust(4, b" ") + struct.pack(
                ">LLL", entry.checksum & _MASK32, offset & _MASK32, entry.length & _MASK32
            ))
        return bytes(buffer)