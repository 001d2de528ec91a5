"""Ordered mapping from characters to glyph indices."""

from __future__ import annotations

from collections.abc import Iterator


class CharacterToGlyphIndex:
    """Characters and their glyph indices, in the order they were added."""

    def __init__(self) -> None:
        self._positions: dict[str, int] = {}
        self._keys: list[str] = []
        self._values: list[int] = []

    def __contains__(self, char: object) -> bool:
        return char in self._positions

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def set(self, char: str, glyph: int) -> None:
        """Append ``char`` with ``glyph``; lookups then find this latest entry."""
        self._positions[char] = len(self._keys)
        self._keys.append(char)
        self._values.append(glyph)

    def index(self, char: str) -> int | None:
        """Position of ``char`` in insertion order, or None."""
        return self._positions.get(char)

    def value(self, char: str) -> int | None:
        """Glyph index of ``char``, or None."""
        position = self._positions.get(char)
        return None if position is None else self._values[position]

    def keys(self) -> list[str]:
        return list(self._keys)

    def values(self) -> list[int]:
        return list(self._values)