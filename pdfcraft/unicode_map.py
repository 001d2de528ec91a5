"""The ToUnicode CMap stream of a subset font."""

from __future__ import annotations

from typing import BinaryIO

from .pdf_protection import PDFProtection, rc4
from .subset_font import SubsetFont

_PREFIX = (
    "/CIDInit /ProcSet findresource begin\n"
    "12 dict begin\n"
    "begincmap\n"
    "/CIDSystemInfo << /Registry (Adobe)/Ordering (UCS)/Supplement 0>> def\n"
    "/CMapName /Adobe-Identity-UCS def /CMapType 2 def\n"
)
_SUFFIX = "endcmap CMapName currentdict /CMap defineresource pop end end"


class UnicodeMap:
    """Maps the glyph indices of a subset font back to Unicode characters."""

    def __init__(self, font: SubsetFont, protection: PDFProtection | None = None) -> None:
        self.font = font
        self.protection = protection

    def _cmap(self) -> bytes:
        mapping = self.font.character_to_glyph_index
        pairs = [(mapping.value(char), char) for char in mapping.keys()]
        indices = [glyph for glyph, _ in pairs]
        low = min(indices, default=65536)
        high = max(indices, default=-1)
        first_char: dict[int, str] = {}
        for glyph, char in pairs:
            first_char.setdefault(glyph, char)

        lines = [
            _PREFIX,
            "1 begincodespacerange\n",
            f"<{low:04X}><{high:04X}>\n",
            "endcodespacerange\n",
            f"{len(pairs)} beginbfrange\n",
        ]
        lines.extend(
            f"<{glyph:04X}><{glyph:04X}><{ord(first_char[glyph]):04X}>\n" for glyph in indices
        )
        lines += ["endbfrange\n", _SUFFIX, "\n"]
        return "".join(lines).encode("latin-1")

    def write(self, out: BinaryIO, obj_id: int) -> None:
        body = self._cmap()
        out.write(f"<<\n/Length {len(body)}\n>>\nstream\n".encode("latin-1"))
        if self.protection is not None:
            body = rc4(self.protection.object_key(obj_id), body)
        out.write(body)
        out.write(b"endstream\n")