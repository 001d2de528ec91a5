import io
import struct

import pytest

from pdfcraft.ttf_types import CmapFormat12GroupingTable
from pdfcraft.ttfparser import NONSYMBOLIC, TableNotFoundError, TTFError, TTFParser

GLYF = bytes(range(32))
LOCA = [0, 0, 12, 24, 32]

DEFAULTS = dict(
    version=b"\x00\x01\x00\x00",
    magic=0x5F0F3CF5,
    units_per_em=2048,
    index_to_loc_format=0,
    hhea_ascender=850,
    hhea_descender=-150,
    widths=(500, 600),
    num_glyphs=4,
    cmap_format=4,
    unicode=True,
    format12=False,
    ps_name="Test-Font".encode("utf-16-be"),
    os2_version=2,
    fs_type=0,
    fs_selection=0,
    typo_ascender=800,
    typo_descender=-200,
    win_ascent=900,
    win_descent=250,
    sx_height=450,
    cap_height=700,
    italic_angle=-12,
    fixed_pitch=1,
    kern_pairs=None,
    kern_coverage=0x0001,
    omit=(),
)


def _cmap(opts):
    segs = [(65, 66, (-64) & 0xFFFF, 0), (0x0E01, 0x0E01, 0, 4), (0xFFFF, 0xFFFF, 1, 0)]
    glyph_array = [3]
    n = len(segs)
    length = 16 + 8 * n + 2 * len(glyph_array)
    fmt4 = struct.pack(">HHHHHHH", opts["cmap_format"], length, 0, 2 * n, 4, 1, 2)
    fmt4 += b"".join(struct.pack(">H", s[1]) for s in segs) + b"\x00\x00"
    fmt4 += b"".join(struct.pack(">H", s[0]) for s in segs)
    fmt4 += b"".join(struct.pack(">H", s[2]) for s in segs)
    fmt4 += b"".join(struct.pack(">H", s[3]) for s in segs)
    fmt4 += b"".join(struct.pack(">H", g) for g in glyph_array)

    subtables = [((3, 1) if opts["unicode"] else (1, 0), fmt4)]
    if opts["format12"]:
        fmt12 = struct.pack(">HHIII", 12, 0, 16 + 12, 0, 1) + struct.pack(">III", 0x1F600, 0x1F601, 2)
        subtables.append(((3, 10), fmt12))

    header_size = 4 + 8 * len(subtables)
    header = struct.pack(">HH", 0, len(subtables))
    body = b""
    for (platform, encoding), data in subtables:
        header += struct.pack(">HHI", platform, encoding, header_size + len(body))
        body += data
    return header + body


def _name(opts):
    entries = [(1, b"Family")]
    if opts["ps_name"] is not None:
        entries.append((6, opts["ps_name"]))
    count = len(entries)
    out = struct.pack(">HHH", 0, count, 6 + 12 * count)
    storage = b""
    for name_id, raw in entries:
        out += struct.pack(">HHHHHH", 3, 1, 0x409, name_id, len(raw), len(storage))
        storage += raw
    return out + storage


def build_font(**overrides):
    opts = dict(DEFAULTS)
    opts.update(overrides)
    tables = {
        "head": struct.pack(
            ">IIIIHHqqhhhhHHhhh", 0x10000, 0x10000, 0, opts["magic"], 0, opts["units_per_em"],
            0, 0, -50, -200, 1000, 900, 0, 8, 2, opts["index_to_loc_format"], 0,
        ),
        "hhea": struct.pack(
            ">Ihh26xH", 0x10000, opts["hhea_ascender"], opts["hhea_descender"], len(opts["widths"])
        ),
        "maxp": struct.pack(">IH", 0x5000, opts["num_glyphs"]),
        "hmtx": b"".join(struct.pack(">Hh", w, 0) for w in opts["widths"]),
        "cmap": _cmap(opts),
        "name": _name(opts),
        "post": struct.pack(">IhHhhI16x", 0x30000, opts["italic_angle"], 0, -100, 50, opts["fixed_pitch"]),
        "glyf": GLYF,
    }
    os2 = struct.pack(
        ">HhHHH52xHHHhhhHH", opts["os2_version"], 500, 400, 5, opts["fs_type"], opts["fs_selection"],
        0x20, 0xFFFF, opts["typo_ascender"], opts["typo_descender"], 0,
        opts["win_ascent"], opts["win_descent"],
    )
    if opts["os2_version"] >= 2:
        os2 += struct.pack(">8xhhHHH", opts["sx_height"], opts["cap_height"], 0, 32, 0)
    tables["OS/2"] = os2
    if opts["index_to_loc_format"] == 0:
        tables["loca"] = b"".join(struct.pack(">H", v // 2) for v in LOCA)
    else:
        tables["loca"] = b"".join(struct.pack(">I", v) for v in LOCA)
    if opts["kern_pairs"] is not None:
        pairs = opts["kern_pairs"]
        kern = struct.pack(">HH", 0, 1)
        kern += struct.pack(">HHH", 0, 14 + 6 * len(pairs), opts["kern_coverage"])
        kern += struct.pack(">HHHH", len(pairs), 0, 0, 0)
        kern += b"".join(struct.pack(">HHh", *p) for p in pairs)
        tables["kern"] = kern
    for tag in opts["omit"]:
        del tables[tag]

    tags = sorted(tables)
    offset = 12 + 16 * len(tags)
    directory = b""
    body = b""
    for tag in tags:
        data = tables[tag]
        directory += tag.encode("latin-1") + struct.pack(">III", 0, offset + len(body), len(data))
        body += data + b"\x00" * (-len(data) % 4)
    return opts["version"] + struct.pack(">HHHH", len(tags), 0, 0, 0) + directory + body


def parsed(**overrides):
    use_kerning = overrides.pop("use_kerning", False)
    parser = TTFParser(use_kerning=use_kerning)
    parser.parse_font_data(build_font(**overrides))
    return parser


def test_head_and_hhea_metrics():
    p = parsed()
    assert p.units_per_em == 2048
    assert (p.x_min, p.y_min, p.x_max, p.y_max) == (-50, -200, 1000, 900)
    assert p.hhea_ascender == 850
    assert p.hhea_descender == -150
    assert p.number_of_h_metrics == 2


def test_widths_are_padded_with_last_metric():
    p = parsed()
    assert p.num_glyphs == 4
    assert p.widths == [500, 600, 600, 600]


def test_font_data_is_kept():
    data = build_font()
    parser = TTFParser()
    parser.parse_font_data(data)
    assert parser.font_data == data
    assert set(parser.tables) >= {"head", "hhea", "maxp", "hmtx", "cmap", "name", "OS/2", "post", "loca"}
    assert parser.tables["glyf"].length == len(GLYF)


def test_cmap_format4_chars():
    p = parsed()
    assert p.chars == {65: 1, 66: 2, 0x0E01: 3}
    assert p.seg_count == 3
    assert p.start_count == [65, 0x0E01, 0xFFFF]
    assert p.end_count == [66, 0x0E01, 0xFFFF]
    assert p.id_range_offset == [0, 4, 0]
    assert p.glyph_id_array == [3]


def test_cmap_format12_groups():
    p = parsed(format12=True)
    assert p.grouping_tables == [CmapFormat12GroupingTable(0x1F600, 0x1F601, 2)]
    assert parsed().grouping_tables == []


def test_post_script_name_drops_zero_bytes():
    assert parsed().post_script_name == "Test-Font"


def test_post_script_name_drops_zero_digits():
    assert parsed(ps_name=b"Font10").post_script_name == "Font1"


def test_missing_post_script_name():
    with pytest.raises(TTFError, match="PostScript name not found"):
        parsed(ps_name=None)


def test_os2_and_post_values():
    p = parsed(fs_selection=32)
    assert p.os2_version == 2
    assert p.bold is True
    assert p.embeddable is True
    assert p.sx_height == 450
    assert p.cap_height == 700
    assert p.italic_angle == -12
    assert p.underline_position == -100
    assert p.underline_thickness == 50
    assert p.is_fixed_pitch is True
    assert parsed(fixed_pitch=0).is_fixed_pitch is False


@pytest.mark.parametrize("fs_type, expected", [(0, True), (2, False), (0x200, False), (8, True)])
def test_embeddable(fs_type, expected):
    assert parsed(fs_type=fs_type).embeddable is expected


def test_loca_short_and_long():
    short = parsed(index_to_loc_format=0)
    assert short.is_short_index is True
    assert short.loca_table == LOCA
    long = parsed(index_to_loc_format=1)
    assert long.is_short_index is False
    assert long.loca_table == LOCA


def test_ascender_uses_win_ascent_when_typo_set():
    assert parsed().ascender() == 900
    assert parsed(typo_ascender=0).ascender() == 850


def test_descender_variants():
    assert parsed().descender() == -250
    assert parsed(hhea_descender=150).descender() == 250
    assert parsed(typo_descender=0).descender() == -150


def test_x_height():
    assert parsed().x_height() == 450
    p = parsed(os2_version=1, hhea_ascender=1000)
    assert p.x_height() == 660
    assert p.cap_height == 1000


def test_flag_is_nonsymbolic():
    p = parsed()
    assert p.symbol is False
    assert p.flag() == NONSYMBOLIC


def test_kerning_parsed_when_enabled():
    p = parsed(use_kerning=True, kern_pairs=[(1, 2, -50), (1, 3, 20), (2, 1, -7)])
    assert p.kern is not None
    assert p.kern.n_tables == 1
    assert p.kern.kerning[1].value_by_right(2) == -50
    assert p.kern.kerning[1].value_by_right(3) == 20
    assert p.kern.kerning[2] == {1: -7}


def test_kerning_ignored_when_disabled():
    assert parsed(kern_pairs=[(1, 2, -50)]).kern is None


def test_kerning_without_kern_table():
    assert parsed(use_kerning=True).kern is None


def test_unsupported_kern_format():
    with pytest.raises(TTFError, match="not support kerning format 16"):
        parsed(use_kerning=True, kern_pairs=[(1, 2, 3)], kern_coverage=0x0011)


def test_bad_version():
    with pytest.raises(TTFError, match="Unrecognized file"):
        parsed(version=b"OTTO")


def test_bad_magic_number():
    with pytest.raises(TTFError, match="Incorrect magic number"):
        parsed(magic=0x12345678)


def test_missing_table():
    with pytest.raises(TableNotFoundError):
        parsed(omit=("name",))


def test_no_unicode_cmap():
    with pytest.raises(TTFError, match="No Unicode encoding found"):
        parsed(unicode=False)


def test_unexpected_cmap_format():
    with pytest.raises(TTFError, match="Unexpected subtable format"):
        parsed(cmap_format=6)


def test_truncated_data():
    data = build_font()
    with pytest.raises(TTFError):
        TTFParser().parse_font_data(data[:40])


def test_parse_from_path_and_reader(tmp_path):
    data = build_font()
    path = tmp_path / "font.ttf"
    path.write_bytes(data)
    from_path = TTFParser()
    from_path.parse(path)
    from_reader = TTFParser()
    from_reader.parse_reader(io.BytesIO(data))
    assert from_path.chars == from_reader.chars
    assert from_path.widths == from_reader.widths
    assert from_reader.font_data == data


def test_reparse_resets_state():
    parser = TTFParser()
    parser.parse_font_data(build_font())
    parser.parse_font_data(build_font())
    assert parser.widths == [500, 600, 600, 600]
    assert len(parser.loca_table) == len(LOCA)