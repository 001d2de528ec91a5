"""String width, font naming and big-endian reading helpers."""

from __future__ import annotations

from collections.abc import Mapping


def string_width(text: str, font_size: float, widths: Mapping[int, int]) -> float:
    """Width of ``text`` at ``font_size`` using per-byte widths in 1/1000 em."""
    total = sum(widths.get(byte, 0) for byte in text.encode())
    return float(total) * (float(font_size) / 1000.0)


def create_embedded_font_subset_name(name: str) -> str:
    """Font name usable as a PDF name: spaces and slashes become '+'."""
    return name.replace(" ", "+").replace("/", "+")


def _two_bytes(data: bytes, offset: int) -> bytes:
    if offset < 0 or offset + 2 > len(data):
        raise IndexError(f"cannot read 2 bytes at offset {offset}")
    return bytes(data[offset:offset + 2])


def read_short(data: bytes, offset: int) -> int:
    """Signed big-endian 16-bit integer at ``offset``."""
    return int.from_bytes(_two_bytes(data, offset), "big", signed=True)


def read_ushort(data: bytes, offset: int) -> int:
    """Unsigned big-endian 16-bit integer at ``offset``."""
    return int.from_bytes(_two_bytes(data, offset), "big")


def to_byte(chr: str) -> int:
    """First byte of the UTF-8 encoding of ``chr``."""
    return chr.encode()[0]