"""The FontDescriptor object of an embedded subset font."""

from __future__ import annotations

from typing import BinaryIO

from .strhelper import create_embedded_font_subset_name
from .subset_font import SubsetFont
from .ttf_types import round_half_away


def design_units_to_pdf(val: int, units_per_em: int) -> int:
    """Convert font design units to 1/1000 em."""
    return round_half_away(float(val) * 1000.0 / float(units_per_em))


class SubfontDescriptor:
    """Describes the metrics of a subset font and points to its font file."""

    def __init__(self, font: SubsetFont, index_obj_pdf_dictionary: int = 0) -> None:
        self.font = font
        self.index_obj_pdf_dictionary = index_obj_pdf_dictionary

    def write(self, out: BinaryIO) -> None:
        p = self.font.parser
        upem = p.units_per_em

        def pdf(val: int) -> int:
            return design_units_to_pdf(val, upem)

        content = (
            "<<\n"
            "/Type /FontDescriptor\n"
            f"/Ascent {pdf(p.ascender())}\n"
            f"/CapHeight {pdf(p.cap_height)}\n"
            f"/Descent {pdf(p.descender())}\n"
            f"/Flags {p.flag()}\n"
            f"/FontBBox [{pdf(p.x_min)} {pdf(p.y_min)} {pdf(p.x_max)} {pdf(p.y_max)}]\n"
            f"/FontFile2 {self.index_obj_pdf_dictionary + 1} 0 R\n"
            f"/FontName /{create_embedded_font_subset_name(self.font.family)}\n"
            f"/ItalicAngle {p.italic_angle}\n"
            "/StemV 0\n"
            f"/XHeight {pdf(p.x_height())}\n"
            ">>\n"
        )
        out.write(content.encode("latin-1"))