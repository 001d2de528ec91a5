"""Transparency (alpha and blend mode) settings and paint styles."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum

DEFAULT_ALPHA_VALUE = 1


class BlendModeType(str, Enum):
    """PDF blend mode names."""

    HUE = "/Hue"
    COLOR = "/Color"
    NORMAL = "/Normal"
    DARKEN = "/Darken"
    SCREEN = "/Screen"
    OVERLAY = "/Overlay"
    LIGHTEN = "/Lighten"
    MULTIPLY = "/Multiply"
    EXCLUSION = "/Exclusion"
    COLOR_BURN = "/ColorBurn"
    HARD_LIGHT = "/HardLight"
    SOFT_LIGHT = "/SoftLight"
    DIFFERENCE = "/Difference"
    SATURATION = "/Saturation"
    LUMINOSITY = "/Luminosity"
    COLOR_DODGE = "/ColorDodge"


@dataclass
class Transparency:
    """An alpha value combined with a blend mode."""

    alpha: float
    blend_mode_type: BlendModeType = BlendModeType.NORMAL
    ext_gstate_index: int = 0

    def key(self) -> str:
        """Identifier shared by transparencies that render the same."""
        return f"{self.alpha:.3f}_{self.blend_mode_type.value}"


def define_blend_mode_type(bm_type: str) -> BlendModeType:
    """Map a blend mode name to its enum member; the empty name means normal."""
    if bm_type == "":
        return BlendModeType.NORMAL
    try:
        return BlendModeType(bm_type)
    except ValueError:
        raise ValueError("blend mode is unknown") from None


def new_transparency(alpha: float, blend_mode_type: str) -> Transparency:
    """Build a Transparency, checking that alpha lies in [0, 1]."""
    if alpha < 0.0 or alpha > 1.0:
        raise ValueError(f"alpha value is out of range (0.0 - 1.0): {alpha:.3f}")
    return Transparency(alpha=alpha, blend_mode_type=define_blend_mode_type(blend_mode_type))


class TransparencyMap:
    """Thread-safe cache of transparencies by key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._table: dict[str, Transparency] = {}

    def find(self, transparency: Transparency) -> Transparency | None:
        with self._lock:
            return self._table.get(transparency.key())

    def save(self, transparency: Transparency) -> Transparency:
        with self._lock:
            self._table[transparency.key()] = transparency
        return transparency


class PaintStyle(str, Enum):
    """PDF path painting operators."""

    DRAW = "S"
    FILL = "f"
    DRAW_FILL = "B"


def parse_style(style: str) -> PaintStyle:
    """Map "F", "FD"/"DF" or anything else to fill, fill-and-draw or draw."""
    if style == "F":
        return PaintStyle.FILL
    if style in ("FD", "DF"):
        return PaintStyle.DRAW_FILL
    return PaintStyle.DRAW