import io

from pdfcraft.page_objects import (
    ExtGS,
    PageObj,
    PagesObj,
    ProcSetObj,
    RelateFont,
    RelateXobject,
    contains_family,
    contains_family_and_style,
)
from pdfcraft.pdf_protection import PDFProtection, Permissions
from pdfcraft.pdf_types import AnchorOption, LinkOption, Margins, PageOption, Rect


def _written(obj, *args, **kwargs):
    out = io.BytesIO()
    obj.write(out, *args, **kwargs)
    return out.getvalue()


def test_plain_page():
    page = PageObj(contents="5 0 R", resources_relate="4 0 R")
    assert _written(page, 3) == (
        b"<<\n  /Type /Page\n  /Parent 2 0 R\n  /Resources 4 0 R\n"
        b"  /Contents 5 0 R\n>>\n"
    )


def test_page_with_media_and_trim_box():
    option = PageOption(trim_box=Margins(left=1, top=2, right=3, bottom=4), page_size=Rect(100, 200))
    output = _written(PageObj(contents="5 0 R", resources_relate="4 0 R", page_option=option), 3)
    assert b" /MediaBox [ 0 0 100.00 200.00 ]\n" in output
    assert b" /TrimBox [ 1.00 2.00 3.00 4.00 ]\n" in output
    assert output.endswith(b">>\n")


def test_zero_trim_box_not_written():
    option = PageOption(trim_box=Margins(), page_size=Rect(100, 200))
    output = _written(PageObj(page_option=option), 1)
    assert b"/TrimBox" not in output


def test_external_link_escaped():
    link = LinkOption(x=10, y=20, w=30, h=5, url="http://example.com/a(b)")
    output = _written(PageObj(links=[link]), 3)
    assert b"  /Annots [<</Type /Annot /Subtype /Link /Rect [10.00 20.00 40.00 15.00]" in output
    assert b"/URI (http://example.com/a\\(b\\))>>>>]\n" in output


def test_internal_link_resolves_anchor():
    link = LinkOption(x=0, y=0, w=1, h=1, anchor="intro")
    anchors = {"intro": AnchorOption(page=2, y=10)}
    output = _written(PageObj(links=[link]), 3, anchors)
    assert b"/Dest [3 0 R /XYZ 0 10.00 null]>>" in output


def test_missing_anchor_writes_nothing():
    link = LinkOption(x=0, y=0, w=1, h=1, anchor="nowhere")
    output = _written(PageObj(links=[link]), 3, {})
    assert b"  /Annots []\n" in output


def test_protected_link_hides_url():
    protection = PDFProtection()
    protection.set_protection(Permissions.PRINT, b"5555", b"1234")
    link = LinkOption(x=0, y=0, w=1, h=1, url="http://example.com/")
    output = _written(PageObj(links=[link]), 3, protection=protection)
    assert b"example.com" not in output
    assert b"/A <</S /URI /URI (" in output


def test_pages_obj():
    pages = PagesObj(page_count=2, kids="3 0 R 7 0 R")
    assert _written(pages, Rect(595, 842)) == (
        b"<<\n  /Type /Pages\n  /MediaBox [ 0 0 595.00 842.00 ]\n"
        b"  /Count 2\n  /Kids [ 3 0 R 7 0 R ]\n>>\n"
    )


def test_procset_obj():
    procset = ProcSetObj(
        relates=[RelateFont(family="serif", count_of_font=0, index_of_obj=5)],
        relate_xobjs=[RelateXobject(index_of_obj=2)],
        ext_gstates=[ExtGS(index=4)],
        imported_template_ids={"/TPL1": 9},
    )
    assert _written(procset) == (
        b"<<\n\t/ProcSet [/PDF /Text /ImageB /ImageC /ImageI]\n"
        b"\t/Font <<\n\t\t/F1 6 0 R\n\t>>\n"
        b"\t/XObject <<\n\t\t/I3 3 0 R\n\t\t/TPL1 9 0 R\n\t>>\n"
        b"\t/ExtGState <<\n\t\t/GS5 5 0 R\n\t>>\n>>\n"
    )


def test_empty_procset_has_all_sections():
    output = _written(ProcSetObj())
    assert b"\t/Font <<\n\t>>\n" in output
    assert b"\t/XObject <<\n\t>>\n" in output
    assert b"\t/ExtGState <<\n\t>>\n" in output


def test_contains_family():
    relates = [RelateFont("serif", 0, 1, style=2), RelateFont("sans", 1, 2)]
    assert contains_family(relates, "sans")
    assert not contains_family(relates, "mono")
    assert contains_family_and_style(relates, "serif", 2)
    assert not contains_family_and_style(relates, "serif", 0)