import pytest

from pdfcraft.ttf_info import KeyNotFoundError, TtfInfo, WrongTypeError


@pytest.fixture
def info():
    ttf = TtfInfo()
    ttf.push("FontName", "Sample")
    ttf.push("Bold", True)
    ttf.push("Ascender", 750)
    ttf.push("FontBBox", [-10, -200, 900, 800])
    ttf.push("Widths", {32: 250, 65: 600})
    return ttf


def test_round_trip_values(info):
    assert info.get_string("FontName") == "Sample"
    assert info.get_bool("Bold") is True
    assert info.get_int("Ascender") == 750
    assert info.get_ints("FontBBox") == [-10, -200, 900, 800]
    assert info.get_int_map("Widths") == {32: 250, 65: 600}


def test_push_overwrites(info):
    info.push("Ascender", 800)
    assert info.get_int("Ascender") == 800


def test_missing_key_bool(info):
    with pytest.raises(KeyNotFoundError):
        info.get_bool("CapHeight")


def test_missing_key_string(info):
    with pytest.raises(KeyNotFoundError):
        info.get_string("CapHeight")


def test_missing_key_int(info):
    with pytest.raises(KeyNotFoundError):
        info.get_int("CapHeight")


def test_missing_key_ints(info):
    with pytest.raises(KeyNotFoundError):
        info.get_ints("CapHeight")


def test_missing_key_int_map(info):
    with pytest.raises(KeyNotFoundError):
        info.get_int_map("CapHeight")


def test_wrong_type_bool(info):
    with pytest.raises(WrongTypeError):
        info.get_bool("FontName")


def test_wrong_type_string(info):
    with pytest.raises(WrongTypeError):
        info.get_string("Ascender")


def test_wrong_type_int(info):
    with pytest.raises(WrongTypeError):
        info.get_int("FontName")


def test_wrong_type_ints(info):
    with pytest.raises(WrongTypeError):
        info.get_ints("Widths")


def test_wrong_type_int_map(info):
    with pytest.raises(WrongTypeError):
        info.get_int_map("FontBBox")


def test_bool_is_not_an_int(info):
    with pytest.raises(WrongTypeError):
        info.get_int("Bold")


def test_missing_key_is_a_key_error(info):
    with pytest.raises(KeyError):
        info.get_int("StdVW")