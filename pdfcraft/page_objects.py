"""Page, page tree and resource (ProcSet) objects."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from .pdf_protection import PDFProtection, rc4
from .pdf_types import AnchorOption, LinkOption, PageOption, Rect


def _escape_pdf_string(data: bytes) -> bytes:
    return (
        data.replace(b"\\", b"\\\\")
        .replace(b"(", b"\\(")
        .replace(b")", b"\\)")
        .replace(b"\r", b"\\r")
    )


def _rect_of(link: LinkOption) -> str:
    return f"{link.x:.2f} {link.y:.2f} {link.x + link.w:.2f} {link.y - link.h:.2f}"


@dataclass
class PageObj:
    """A page dictionary with its link annotations."""

    contents: str = ""
    resources_relate: str = ""
    page_option: PageOption = field(default_factory=PageOption)
    links: list[LinkOption] = field(default_factory=list)

    def write(
        self,
        out: BinaryIO,
        obj_id: int,
        anchors: Optional[Mapping[str, AnchorOption]] = None,
        protection: Optional[PDFProtection] = None,
    ) -> None:
        """Write the page; internal links resolve through ``anchors``."""
        anchors = anchors or {}
        out.write(b"<<\n")
        out.write(b"  /Type /Page\n")
        out.write(b"  /Parent 2 0 R\n")
        out.write(f"  /Resources {self.resources_relate}\n".encode("latin-1"))

        if self.links:
            out.write(b"  /Annots [")
            for link in self.links:
                if link.url:
                    self._write_external_link(out, link, obj_id, protection)
                else:
                    self._write_internal_link(out, link, anchors)
            out.write(b"]\n")

        out.write(f"  /Contents {self.contents}\n".encode("latin-1"))
        option = self.page_option
        if not option.is_empty():
            size = option.page_size
            out.write(f" /MediaBox [ 0 0 {size.w:0.2f} {size.h:0.2f} ]\n".encode("latin-1"))
        if option.is_trim_box_set():
            box = option.trim_box
            out.write(
                f" /TrimBox [ {box.left:0.2f} {box.top:0.2f} {box.right:0.2f} {box.bottom:0.2f} ]\n"
                .encode("latin-1")
            )
        out.write(b">>\n")

    @staticmethod
    def _write_external_link(
        out: BinaryIO, link: LinkOption, obj_id: int, protection: Optional[PDFProtection]
    ) -> None:
        url = link.url.encode("utf-8")
        if protection is not None:
            url = rc4(protection.object_key(obj_id), url)
        url = _escape_pdf_string(url)
        out.write(
            f"<</Type /Annot /Subtype /Link /Rect [{_rect_of(link)}] /Border [0 0 0] "
            "/A <</S /URI /URI (".encode("latin-1")
        )
        out.write(url)
        out.write(b")>>>>")

    @staticmethod
    def _write_internal_link(
        out: BinaryIO, link: LinkOption, anchors: Mapping[str, AnchorOption]
    ) -> None:
        anchor = anchors.get(link.anchor)
        if anchor is None:
            return
        out.write(
            f"<</Type /Annot /Subtype /Link /Rect [{_rect_of(link)}] /Border [0 0 0] "
            f"/Dest [{anchor.page + 1} 0 R /XYZ 0 {anchor.y:.2f} null]>>".encode("latin-1")
        )


@dataclass
class PagesObj:
    """The root of the page tree."""

    page_count: int = 0
    kids: str = ""

    def write(self, out: BinaryIO, page_size: Rect) -> None:
        """Write the page tree node with the document's default page size."""
        content = (
            "<<\n"
            "  /Type /Pages\n"
            f"  /MediaBox [ 0 0 {page_size.w:0.2f} {page_size.h:0.2f} ]\n"
            f"  /Count {self.page_count}\n"
            f"  /Kids [ {self.kids} ]\n"
            ">>\n"
        )
        out.write(content.encode("latin-1"))


@dataclass
class RelateFont:
    """A font resource: its /F number and the object that holds it."""

    family: str
    count_of_font: int
    index_of_obj: int
    style: int = 0


@dataclass
class RelateXobject:
    """An image resource and the object that holds it."""

    index_of_obj: int


@dataclass
class ExtGS:
    """A graphics state resource."""

    index: int


def contains_family(relates: Iterable[RelateFont], family: str) -> bool:
    """True when a font of ``family`` is among ``relates``."""
    return any(rf.family == family for rf in relates)


def contains_family_and_style(relates: Iterable[RelateFont], family: str, style: int) -> bool:
    """True when a font of ``family`` in ``style`` is among ``relates``."""
    return any(rf.family == family and rf.style == style for rf in relates)


@dataclass
class ProcSetObj:
    """The resource dictionary shared by the pages."""

    relates: list[RelateFont] = field(default_factory=list)
    relate_xobjs: list[RelateXobject] = field(default_factory=list)
    ext_gstates: list[ExtGS] = field(default_factory=list)
    imported_template_ids: dict[str, int] = field(default_factory=dict)

    def write(self, out: BinaryIO) -> None:
        lines = ["<<\n", "\t/ProcSet [/PDF /Text /ImageB /ImageC /ImageI]\n", "\t/Font <<\n"]
        lines += [
            f"\t\t/F{rf.count_of_font + 1} {rf.index_of_obj + 1} 0 R\n" for rf in self.relates
        ]
        lines.append("\t>>\n")

        lines.append("\t/XObject <<\n")
        lines += [
            f"\t\t/I{x.index_of_obj + 1} {x.index_of_obj + 1} 0 R\n" for x in self.relate_xobjs
        ]
        lines += [
            f"\t\t{name} {obj_id} 0 R\n" for name, obj_id in self.imported_template_ids.items()
        ]
        lines.append("\t>>\n")

        lines.append("\t/ExtGState <<\n")
        lines += [f"\t\t/GS{gs.index + 1} {gs.index + 1} 0 R\n" for gs in self.ext_gstates]
        lines.append("\t>>\n")
        lines.append(">>\n")
        out.write("".join(lines).encode("latin-1"))