import io

import pytest

from pdfcraft.image_holder import (
    image_holder_from_bytes,
    image_holder_from_path,
    image_holder_from_reader,
)


def test_empty_bytes_id_is_md5_of_nothing():
    assert image_holder_from_bytes(b"").id == "d41d8cd98f00b204e9800998ecf8427e"


def test_bytes_and_reader_share_id():
    data = b"\x89PNG fake image bytes"
    assert image_holder_from_bytes(data).id == image_holder_from_reader(io.BytesIO(data)).id


def test_different_data_different_id():
    assert image_holder_from_bytes(b"one").id != image_holder_from_bytes(b"two").id


def test_read_drains():
    holder = image_holder_from_bytes(b"pixels")
    assert holder.read() == b"pixels"
    assert holder.read() == b""


def test_from_path_uses_path_as_id(tmp_path):
    path = tmp_path / "image.bin"
    path.write_bytes(b"content")
    holder = image_holder_from_path(path)
    assert holder.id == str(path)
    assert holder.read() == b"content"


def test_from_path_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        image_holder_from_path(tmp_path / "absent.png")