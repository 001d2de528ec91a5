"""Reading JPEG and PNG images into the form a PDF image XObject needs."""

from __future__ import annotations

import io
import struct
import zlib
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

DEVICE_GRAY = "DeviceGray"

PNG_MAGIC_NUMBER = b"\x89PNG\r\n\x1a\n"
PNG_IHDR = b"IHDR"

_JPEG_COLOR_SPACES = {
    "RGB": "DeviceRGB",
    "YCbCr": "DeviceRGB",
    "L": "DeviceGray",
    "CMYK": "DeviceCMYK",
}


class ImageParseError(ValueError):
    """The image cannot be read or uses an unsupported feature."""


@dataclass
class ImgInfo:
    """What is known about an image once it has been parsed."""

    w: int = 0
    h: int = 0
    format_name: str = ""
    colspace: str = ""
    bits_per_component: str = ""
    filter: str = ""
    decode_parms: str = ""
    trns: bytes = b""
    smask: bytes = b""
    smask_obj_id: int = 0
    pal: bytes = b""
    device_rgb_obj_id: int = 0
    data: bytes = b""


def is_colspace_indexed(info: ImgInfo) -> bool:
    """True when the image uses a palette."""
    return info.colspace == "Indexed"


def have_smask(info: ImgInfo) -> bool:
    """True when the image carries a soft mask (alpha channel)."""
    return len(info.smask) > 0


def _emit(out: BinaryIO, text: str) -> None:
    out.write(text.encode("latin-1"))


def write_base_img_props(out: BinaryIO, info: ImgInfo, color_space: str) -> None:
    """Write the opening of an image dictionary up to its filter."""
    lines = [
        "<<\n",
        "\t/Type /XObject\n",
        "\t/Subtype /Image\n",
        f"\t/Width {info.w}\n",
        f"\t/Height {info.h}\n",
    ]
    if is_colspace_indexed(info):
        size = len(info.pal) // 3 - 1
        lines.append(
            f"\t/ColorSpace [/Indexed /DeviceRGB {size} {info.device_rgb_obj_id + 1} 0 R]\n"
        )
    else:
        lines.append(f"\t/ColorSpace /{color_space}\n")
        if info.colspace == "DeviceCMYK":
            lines.append("\t/Decode [1 0 1 0 1 0 1 0]\n")
    lines.append(f"\t/BitsPerComponent {info.bits_per_component}\n")
    if info.filter.strip():
        lines.append(f"\t/Filter /{info.filter}\n")
    _emit(out, "".join(lines))


def write_img_props(out: BinaryIO, info: ImgInfo, splitted_mask: bool) -> None:
    """Write the properties of an image dictionary, with its mask unless split off."""
    write_base_img_props(out, info, info.colspace)
    if info.decode_parms.strip():
        _emit(out, f"\t/DecodeParms <<{info.decode_parms}>>\n")
    if splitted_mask:
        return
    if info.trns:
        entries = "".join(f"\t\t{value} \t\t{value} " for value in info.trns)
        _emit(out, f"\t/Mask [{entries}\t]\n")
    if have_smask(info):
        _emit(out, f"\t/SMask {info.smask_obj_id + 1} 0 R\n")


def write_mask_img_props(out: BinaryIO, info: ImgInfo) -> None:
    """Write the properties of the gray soft-mask image of ``info``."""
    write_base_img_props(out, info, DEVICE_GRAY)
    _emit(
        out,
        "\t/DecodeParms <<\n"
        "\t\t/Predictor 15\n"
        "\t\t/Colors 1\n"
        "\t\t/BitsPerComponent 8\n"
        f"\t\t/Columns {info.w}\n"
        "\t>>\n",
    )


def compress(data: bytes) -> bytes:
    """Deflate ``data`` in zlib format at the fastest level."""
    return zlib.compress(bytes(data), 1)


class _Reader:
    """Sequential reader that pads short reads and fails only at the end."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def read(self, length: int) -> bytes:
        if self.pos >= len(self.data):
            raise ImageParseError("unexpected end of PNG data")
        chunk = self.data[self.pos:self.pos + length]
        self.pos += len(chunk)
        return chunk.ljust(length, b"\x00")

    def skip(self, length: int) -> None:
        self.pos += length

    def uint(self) -> int:
        return struct.unpack(">I", self.read(4))[0]

    def byte(self) -> int:
        return self.read(1)[0]


def _transparency(color_type: int, t: bytes) -> bytes:
    try:
        if color_type == 0:
            return bytes([t[1]])
        if color_type == 2:
            return bytes([t[1], t[3], t[5]])
    except IndexError:
        raise ImageParseError("invalid tRNS chunk") from None
    pos = t.find(b"\x00")
    return bytes([pos]) if pos >= 0 else b""


def _split_alpha(raw: bytes, width: int, height: int, channels: int) -> tuple[bytes, bytes]:
    row_length = channels * width
    color = bytearray()
    alpha = bytearray()
    for row in range(height):
        pos = (1 + row_length) * row
        line = raw[pos + 1:pos + 1 + row_length]
        if pos >= len(raw) or len(line) != row_length:
            raise ImageParseError("PNG image data is truncated")
        color.append(raw[pos])
        alpha.append(raw[pos])
        pixels = bytearray(line)
        alpha.extend(pixels[channels - 1::channels])
        del pixels[channels - 1::channels]
        color.extend(pixels)
    return bytes(color), bytes(alpha)


def parse_png(data: bytes) -> ImgInfo:
    """Parse PNG bytes; images with alpha get their mask split into ``smask``."""
    reader = _Reader(bytes(data))
    if reader.read(8) != PNG_MAGIC_NUMBER:
        raise ImageParseError("Not a PNG file")
    reader.skip(4)  # header chunk length
    if reader.read(4) != PNG_IHDR:
        raise ImageParseError("Incorrect PNG file")

    width = reader.uint()
    height = reader.uint()
    bpc = reader.byte()
    if bpc > 8:
        raise ImageParseError("16-bit depth not supported")

    color_type = reader.byte()
    if color_type in (0, 4):
        colspace = "DeviceGray"
    elif color_type in (2, 6):
        colspace = "DeviceRGB"
    elif color_type == 3:
        colspace = "Indexed"
    else:
        raise ImageParseError("Unknown color type")

    if reader.byte() != 0:
        raise ImageParseError("Unknown compression method")
    if reader.byte() != 0:
        raise ImageParseError("Unknown filter method")
    if reader.byte() != 0:
        raise ImageParseError("Interlacing not supported")
    reader.skip(4)  # CRC

    pal = b""
    trns = b""
    idat = bytearray()
    while True:
        n = reader.uint()
        tag = reader.read(4)
        if tag == b"PLTE":
            pal = reader.read(n)
            reader.skip(4)
        elif tag == b"tRNS":
            trns = _transparency(color_type, reader.read(n))
            reader.skip(4)
        elif tag == b"IDAT":
            idat.extend(reader.read(n))
            reader.skip(4)
        elif tag == b"IEND":
            break
        else:
            reader.skip(n + 4)
        if n <= 0:
            break

    if colspace == "Indexed" and not pal.strip():
        raise ImageParseError("Missing palette")

    info = ImgInfo(
        w=width,
        h=height,
        format_name="png",
        colspace=colspace,
        bits_per_component=str(bpc),
        filter="FlateDecode",
        trns=trns,
        pal=pal,
    )
    colors = 3 if colspace == "DeviceRGB" else 1
    info.decode_parms = (
        f"/Predictor 15 /Colors  {colors} /BitsPerComponent {info.bits_per_component} "
        f"/Columns {width}"
    )

    if color_type >= 4:
        try:
            raw = zlib.decompress(bytes(idat))
        except zlib.error as exc:
            raise ImageParseError(f"cannot inflate PNG data: {exc}") from exc
        channels = 2 if color_type == 4 else 4
        color, alpha = _split_alpha(raw, width, height, channels)
        info.smask = compress(alpha)
        info.data = compress(color)
    else:
        info.data = bytes(idat)
    return info


def parse_img(data: bytes) -> ImgInfo:
    """Parse JPEG or PNG bytes."""
    data = bytes(data)
    try:
        with Image.open(io.BytesIO(data)) as image:
            format_name = (image.format or "").lower()
            mode = image.mode
            width, height = image.size
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ImageParseError(f"cannot decode image: {exc}") from exc

    if format_name == "jpeg":
        colspace = _JPEG_COLOR_SPACES.get(mode)
        if colspace is None:
            raise ImageParseError("color model not support")
        return ImgInfo(
            w=width,
            h=height,
            format_name="jpeg",
            colspace=colspace,
            bits_per_component="8",
            filter="DCTDecode",
            data=data,
        )
    if format_name == "png":
        return parse_png(data)
    raise ImageParseError("image: unknown format")


def parse_img_path(path: str | PathLike[str]) -> ImgInfo:
    """Parse the image file at ``path``."""
    with open(path, "rb") as handle:
        return parse_img(handle.read())


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def img_rect_to_wh(width: int, height: int) -> tuple[float, float]:
    """Size in points of an image of ``width`` x ``height`` pixels at 128 dpi."""
    w = _trunc_div(-width * 72, -128)
    h = _trunc_div(-height * 72, -128)
    if w == 0:
        w = _trunc_div(h * width, height)
    if h == 0:
        h = _trunc_div(w * height, width)
    return float(w), float(h)