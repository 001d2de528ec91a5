"""A typed key/value store of facts gathered from a TrueType font."""

from __future__ import annotations

from typing import Any, Callable


class KeyNotFoundError(KeyError):
    """The requested key is not in the store."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"no key found: {self.key!r}"


class WrongTypeError(TypeError):
    """The stored value is not of the requested type."""


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class TtfInfo(dict):
    """Dictionary of font facts with type-checked getters."""

    def push(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        self[key] = value

    def _get(self, key: str, check: Callable[[Any], bool]) -> Any:
        try:
            value = self[key]
        except KeyError:
            raise KeyNotFoundError(key) from None
        if not check(value):
            raise WrongTypeError(f"get wrong type for {key!r}")
        return value

    def get_bool(self, key: str) -> bool:
        return self._get(key, lambda v: isinstance(v, bool))

    def get_string(self, key: str) -> str:
        return self._get(key, lambda v: isinstance(v, str))

    def get_int(self, key: str) -> int:
        return self._get(key, _is_int)

    def get_ints(self, key: str) -> list[int]:
        return self._get(key, lambda v: isinstance(v, list) and all(map(_is_int, v)))

    def get_int_map(self, key: str) -> dict[int, int]:
        return self._get(key, lambda v: isinstance(v, dict))