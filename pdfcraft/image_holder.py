"""Image data together with an identifier for de-duplication."""

from __future__ import annotations

import hashlib
from os import PathLike
from typing import BinaryIO


class ImageHolder:
    """Holds the bytes of an image and an id naming it."""

    def __init__(self, image_id: str, data: bytes) -> None:
        self.id = image_id
        self._data = bytes(data)

    def read(self) -> bytes:
        """Return the remaining image bytes; later calls return nothing."""
        data, self._data = self._data, b""
        return data


def _digest(data: bytes) -> str:
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def image_holder_from_bytes(data: bytes) -> ImageHolder:
    """Holder whose id is the MD5 hex digest of ``data``."""
    data = bytes(data)
    return ImageHolder(_digest(data), data)


def image_holder_from_path(path: str | PathLike[str]) -> ImageHolder:
    """Holder whose id is the path itself."""
    with open(path, "rb") as handle:
        data = handle.read()
    return ImageHolder(str(path), data)


def image_holder_from_reader(stream: BinaryIO) -> ImageHolder:
    """Holder of everything read from ``stream``, identified by its MD5 digest."""
    return image_holder_from_bytes(stream.read())