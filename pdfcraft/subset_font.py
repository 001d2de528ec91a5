"""A TrueType font embedded as a subset: glyph lookup, widths and the Type0 font object."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO, Callable, Optional

from .glyph_map import CharacterToGlyphIndex
from .strhelper import create_embedded_font_subset_name
from .ttf_types import KernValue
from .ttfparser import TTFParser

FuncKernOverride = Callable[[str, str, int, int, int], int]
"""Returns a custom kerning value for (left char, right char, left glyph, right glyph, value)."""

_SUBSTITUTE_CHAR = "\u0020"


class CharNotFoundError(LookupError):
    """The character has not been added to the subset."""


class GlyphNotFoundError(LookupError):
    """The font has no glyph for the character."""


def default_on_glyph_not_found_substitute(char: str) -> str:
    """Replace a single missing character with a space."""
    if len(char) != 1:
        raise ValueError(f"expected a single character, got {char!r}")
    return _SUBSTITUTE_CHAR


@dataclass
class TtfOption:
    """Options applied when a TrueType font is loaded."""

    use_kerning: bool = False
    style: int = 0
    on_glyph_not_found: Optional[Callable[[str], None]] = None
    on_glyph_not_found_substitute: Optional[Callable[[str], str]] = default_on_glyph_not_found_substitute


class SubsetFont:
    """A font whose used characters are collected for embedding."""

    def __init__(self, family: str = "", option: TtfOption | None = None) -> None:
        self.family = family
        self.parser = TTFParser()
        self.character_to_glyph_index = CharacterToGlyphIndex()
        self.count_of_font = 0
        self.index_obj_cid_font = 0
        self.index_obj_unicode_map = 0
        self.func_kern_override: FuncKernOverride | None = None
        self.ttf_font_option = TtfOption()
        self.set_ttf_font_option(option if option is not None else TtfOption())

    # ------------------------------------------------------------------ loading

    def set_ttf_font_option(self, option: TtfOption) -> None:
        """Set the options; call before loading the font data."""
        if option.on_glyph_not_found_substitute is None:
            option.on_glyph_not_found_substitute = default_on_glyph_not_found_substitute
        self.ttf_font_option = option

    def set_ttf_by_path(self, path: str | PathLike[str]) -> None:
        self.parser.use_kerning = self.ttf_font_option.use_kerning
        self.parser.parse(path)

    def set_ttf_by_reader(self, stream: BinaryIO) -> None:
        self.parser.use_kerning = self.ttf_font_option.use_kerning
        self.parser.parse_reader(stream)

    def set_ttf_data(self, data: bytes) -> None:
        self.parser.use_kerning = self.ttf_font_option.use_kerning
        self.parser.parse_font_data(data)

    # ------------------------------------------------------------------ characters

    def add_chars(self, text: str) -> str:
        """Register the characters of ``text``; returns the text with missing glyphs substituted."""
        mapping = self.character_to_glyph_index
        result = []
        for char in text:
            if char in mapping:
                result.append(char)
                continue
            try:
                glyph = self.char_code_to_glyph_index(char)
            except GlyphNotFoundError:
                if self.ttf_font_option.on_glyph_not_found is not None:
                    self.ttf_font_option.on_glyph_not_found(char)
                exists, replacement, replacement_glyph = self._replace_missing(char)
                if not exists:
                    mapping.set(replacement, replacement_glyph)
                result.append(replacement)
                continue
            mapping.set(char, glyph)
            result.append(char)
        return "".join(result)

    def _replace_missing(self, char: str) -> tuple[bool, str, int]:
        substitute = self.ttf_font_option.on_glyph_not_found_substitute
        if substitute is None:
            return False, char, 0
        replacement = substitute(char)
        if replacement in self.character_to_glyph_index:
            return True, replacement, 0
        try:
            return False, replacement, self.char_code_to_glyph_index(replacement)
        except GlyphNotFoundError:
            return False, replacement, 0

    def char_index(self, char: str) -> int:
        """Glyph index of an added character."""
        glyph = self.character_to_glyph_index.value(char)
        if glyph is None:
            raise CharNotFoundError(f"char not found: {char!r}")
        return glyph

    def char_width(self, char: str) -> int:
        """Width in 1/1000 em of an added character."""
        return self.glyph_index_to_pdf_width(self.char_index(char))

    def char_code_to_glyph_index(self, char: str) -> int:
        """Look up the glyph for ``char`` in the font's cmap."""
        if ord(char) <= 0xFFFF:
            return self._glyph_index_format4(ord(char))
        return self._glyph_index_format12(ord(char))

    def _glyph_index_format12(self, value: int) -> int:
        for group in self.parser.grouping_tables:
            if group.start_char_code <= value <= group.end_char_code:
                return value - group.start_char_code + group.glyph_id
        raise GlyphNotFoundError(f"glyph not found: U+{value:04X}")

    def _glyph_index_format4(self, value: int) -> int:
        p = self.parser
        seg_count = p.seg_count
        seg = next((i for i, end in enumerate(p.end_count[:seg_count]) if value <= end), seg_count)
        if seg >= seg_count or value < p.start_count[seg]:
            raise GlyphNotFoundError(f"glyph not found: U+{value:04X}")
        if p.id_range_offset[seg] == 0:
            return (value + p.id_delta[seg]) & 0xFFFF
        idx = p.id_range_offset[seg] // 2 + (value - p.start_count[seg]) - (seg_count - seg)
        if not 0 <= idx < len(p.glyph_id_array):
            raise GlyphNotFoundError(f"glyph not found: U+{value:04X}")
        glyph = p.glyph_id_array[idx]
        if glyph == 0:
            return 0
        return (glyph + p.id_delta[seg]) & 0xFFFF

    def glyph_index_to_pdf_width(self, glyph_index: int) -> int:
        """Advance width of a glyph scaled to 1/1000 em."""
        metrics = self.parser.number_of_h_metrics
        units_per_em = self.parser.units_per_em
        if glyph_index >= metrics:
            glyph_index = metrics - 1
        width = self.parser.widths[glyph_index]
        if units_per_em == 1000:
            return width
        return width * 1000 // units_per_em

    def kern_value_by_left(self, left: int) -> KernValue | None:
        """Kerning values for the left glyph, or None when kerning is off or absent."""
        if not self.ttf_font_option.use_kerning:
            return None
        kern = self.parser.kern
        if kern is None:
            return None
        return kern.kerning.get(left)

    # ------------------------------------------------------------------ metrics

    def _scaled(self, value: int, font_size: float) -> float:
        return (float(value) / float(self.parser.units_per_em)) * font_size

    def underline_thickness_px(self, font_size: float) -> float:
        return self._scaled(self.parser.underline_thickness, font_size)

    def underline_position_px(self, font_size: float) -> float:
        return self._scaled(self.parser.underline_position, font_size)

    def ascender_px(self, font_size: float) -> float:
        return self._scaled(self.parser.ascender(), font_size)

    def descender_px(self, font_size: float) -> float:
        return self._scaled(self.parser.descender(), font_size)

    # ------------------------------------------------------------------ output

    def write(self, out: BinaryIO) -> None:
        """Write the Type0 font dictionary."""
        content = (
            "<<\n"
            f"/BaseFont /{create_embedded_font_subset_name(self.family)}\n"
            f"/DescendantFonts [{self.index_obj_cid_font + 1} 0 R]\n"
            "/Encoding /Identity-H\n"
            "/Subtype /Type0\n"
            f"/ToUnicode {self.index_obj_unicode_map + 1} 0 R\n"
            "/Type /Font\n"
            ">>\n"
        )
        out.write(content.encode("latin-1"))