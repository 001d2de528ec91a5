"""An image XObject: the image data, its dictionary and its optional soft mask."""

from __future__ import annotations

import io
from os import PathLike
from typing import BinaryIO, Optional

from PIL import Image, UnidentifiedImageError

from .image_parse import (
    ImageParseError,
    ImgInfo,
    have_smask,
    img_rect_to_wh,
    is_colspace_indexed,
    parse_img,
    write_img_props,
    write_mask_img_props,
)
from .pdf_protection import PDFProtection, rc4
from .pdf_types import Rect
from .smask import SMask


class ImageObj:
    """An image to be written as a PDF image XObject.

    With ``is_mask`` set, the object writes the image's alpha channel as a
    gray image; with ``splitted_mask`` set, the colour image leaves out its
    /Mask and /SMask entries because the mask is written separately.
    """

    def __init__(
        self,
        is_mask: bool = False,
        splitted_mask: bool = False,
        protection: Optional[PDFProtection] = None,
    ) -> None:
        self.is_mask = is_mask
        self.splitted_mask = splitted_mask
        self.protection = protection
        self.info = ImgInfo()
        self._raw: bytes | None = None

    # ------------------------------------------------------------------ input

    def set_image_path(self, path: str | PathLike[str]) -> None:
        """Load the image from the file at ``path``."""
        with open(path, "rb") as handle:
            self.set_image(handle)

    def set_image(self, stream: BinaryIO) -> None:
        """Load the image from everything left in ``stream``."""
        self._raw = bytes(stream.read())

    def _require_raw(self) -> bytes:
        if self._raw is None:
            raise ImageParseError("no image has been set")
        return self._raw

    def rect(self) -> Rect:
        """Size of the image in points, at 128 pixels per inch."""
        raw = self._require_raw()
        try:
            with Image.open(io.BytesIO(raw)) as image:
                width, height = image.size
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
            raise ImageParseError(f"cannot decode image: {exc}") from exc
        w, h = img_rect_to_wh(width, height)
        return Rect(w, h)

    def parse(self) -> None:
        """Parse the loaded image into ``info``."""
        self.info = parse_img(self._require_raw())

    # ------------------------------------------------------------------ queries

    def is_colspace_indexed(self) -> bool:
        return is_colspace_indexed(self.info)

    def have_smask(self) -> bool:
        return have_smask(self.info)

    def create_smask(self) -> SMask:
        """The soft-mask image built from the alpha channel of this image."""
        info = self.info
        mask_info = ImgInfo(
            w=info.w,
            h=info.h,
            colspace="DeviceGray",
            bits_per_component="8",
            filter=info.filter,
            decode_parms=(
                f"/Predictor 15 /Colors 1 /BitsPerComponent 8 /Columns {info.w}"
            ),
        )
        return SMask(info=mask_info, data=info.smask, protection=self.protection)

    # ------------------------------------------------------------------ output

    def write(self, out: BinaryIO, obj_id: int) -> None:
        """Write the image dictionary and its stream."""
        if self.is_mask:
            data = self.info.smask
            write_mask_img_props(out, self.info)
        else:
            data = self.info.data
            write_img_props(out, self.info, self.splitted_mask)

        out.write(f"\t/Length {len(data)}\n>>\n".encode("latin-1"))
        out.write(b"stream\n")
        if self.protection is not None:
            out.write(rc4(self.protection.object_key(obj_id), data))
            out.write(b"\n")
        else:
            out.write(data)
        out.write(b"\nendstream\n")