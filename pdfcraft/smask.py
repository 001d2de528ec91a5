"""Soft masks: image alpha channels and luminosity/alpha masks over form groups."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional

from .image_parse import ImgInfo, write_img_props
from .pdf_protection import PDFProtection, rc4


class SMaskSubtype(str, Enum):
    """How a soft mask's values are derived."""

    ALPHA = "/Alpha"
    LUMINOSITY = "/Luminosity"


@dataclass(frozen=True)
class SMaskOptions:
    """What identifies a soft mask over a transparency group."""

    transparency_xobject_group_index: int = 0
    subtype: SMaskSubtype = SMaskSubtype.ALPHA

    def key(self) -> str:
        """Identifier shared by masks built from the same options."""
        subtype = SMaskSubtype(self.subtype).value
        return f"S_{subtype};G_{self.transparency_xobject_group_index}_0_R"


@dataclass
class SMask:
    """A soft mask, either an image stream or a mask dictionary over a group."""

    info: ImgInfo = field(default_factory=ImgInfo)
    data: bytes = b""
    protection: Optional[PDFProtection] = None
    index: int = 0
    transparency_xobject_group_index: int = 0
    s: str = ""

    def write(self, out: BinaryIO, obj_id: int) -> None:
        if self.transparency_xobject_group_index != 0:
            content = (
                "<<\n"
                "\t/Type /Mask\n"
                f"\t/S {self.s}\n"
                f"\t/G {self.transparency_xobject_group_index + 1} 0 R\n"
                ">>\n"
            )
            out.write(content.encode("latin-1"))
            return

        write_img_props(out, self.info, False)
        out.write(f"/Length {len(self.data)}\n>>\n".encode("latin-1"))
        out.write(b"stream\n")
        if self.protection is not None:
            out.write(rc4(self.protection.object_key(obj_id), self.data))
            out.write(b"\n")
        else:
            out.write(self.data)
        out.write(b"\nendstream\n")


class SMaskMap:
    """Thread-safe cache of soft masks by options key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._table: dict[str, SMask] = {}

    def find(self, options: SMaskOptions) -> SMask | None:
        with self._lock:
            return self._table.get(options.key())

    def save(self, key: str, smask: SMask) -> SMask:
        with self._lock:
            self._table[key] = smask
        return smask