import struct

import pytest

from bmpstash.bitmap import BitmapImage, load_bitmap, parse_bitmap


def _filled(width, height):
    image = BitmapImage(width, height)
    image.set_data(bytes(i % 256 for i in range(width * height * 3)), 0)
    return image


def test_header_fields():
    image = _filled(5, 3)
    data = image.to_bytes()
    assert data[:2] == b"BM"
    file_size, = struct.unpack_from("<I", data, 2)
    assert file_size == len(data)
    offset, = struct.unpack_from("<I", data, 10)
    assert offset == 54
    info_size, width, height, planes, bits = struct.unpack_from("<IiiHH", data, 14)
    assert (info_size, width, height, planes, bits) == (40, 5, 3, 1, 24)


@pytest.mark.parametrize("width", [1, 2, 3, 4, 5, 7])
def test_rows_are_padded_to_four_bytes(width):
    data = BitmapImage(width, 2).to_bytes()
    row_area = len(data) - 54
    assert row_area % 4 == 0
    assert row_area // 2 >= width * 3


def test_pixels_stored_bgr_bottom_up():
    image = BitmapImage(1, 2)
    image.set_data(bytes([10, 20, 30, 40, 50, 60]), 0)
    data = image.to_bytes()
    assert data[54:57] == bytes([60, 50, 40])
    assert data[58:61] == bytes([30, 20, 10])


def test_get_pixel_reads_rgb():
    image = BitmapImage(2, 1)
    image.set_data(bytes([1, 2, 3, 4, 5, 6]), 0)
    assert image.get_pixel(0, 0) == (1, 2, 3)
    assert image.get_pixel(1, 0) == (4, 5, 6)


def test_get_pixel_out_of_range():
    image = BitmapImage(2, 2)
    with pytest.raises(IndexError):
        image.get_pixel(2, 0)
    with pytest.raises(IndexError):
        image.get_pixel(0, -1)


def test_set_data_at_offset():
    image = BitmapImage(2, 2)
    image.set_data(b"\xaa\xbb", 4)
    pixels = image.pixel_bytes()
    assert pixels[4:6] == b"\xaa\xbb"
    assert pixels[:4] == bytes(4)
    assert len(pixels) == 2 * 2 * 3


def test_set_data_truncates_and_warns(capsys):
    image = BitmapImage(1, 1)
    image.set_data(b"abcdef", 0)
    assert image.pixel_bytes() == b"abc"
    assert "Data exceeds image capacity" in capsys.readouterr().out


def test_set_data_negative_offset():
    with pytest.raises(ValueError):
        BitmapImage(1, 1).set_data(b"a", -1)


def test_negative_dimensions_rejected():
    with pytest.raises(ValueError):
        BitmapImage(-1, 4)


@pytest.mark.parametrize("width, height", [(1, 1), (3, 2), (7, 5), (64, 64)])
def test_round_trip(width, height):
    image = _filled(width, height)
    parsed = parse_bitmap(image.to_bytes())
    assert (parsed.width, parsed.height) == (width, height)
    assert parsed.pixel_bytes() == image.pixel_bytes()


def test_save_and_load(tmp_path):
    image = _filled(9, 4)
    path = tmp_path / "image.bmp"
    image.save(path)
    assert path.read_bytes() == image.to_bytes()
    assert load_bitmap(path).pixel_bytes() == image.pixel_bytes()


def test_parse_top_down_bitmap():
    image = BitmapImage(1, 2)
    image.set_data(bytes([10, 20, 30, 40, 50, 60]), 0)
    data = bytearray(image.to_bytes())
    struct.pack_into("<i", data, 22, -2)
    parsed = parse_bitmap(data)
    assert parsed.get_pixel(0, 0) == image.get_pixel(0, 1)
    assert parsed.get_pixel(0, 1) == image.get_pixel(0, 0)


def test_parse_rejects_bad_signature():
    data = bytearray(BitmapImage(2, 2).to_bytes())
    data[:2] = b"XX"
    with pytest.raises(ValueError):
        parse_bitmap(data)


def test_parse_rejects_truncated_pixels():
    data = BitmapImage(4, 4).to_bytes()
    with pytest.raises(ValueError):
        parse_bitmap(data[:-1])


def test_parse_rejects_short_header():
    with pytest.raises(ValueError):
        parse_bitmap(b"BM")


def test_parse_rejects_other_bit_depths():
    data = bytearray(BitmapImage(2, 2).to_bytes())
    struct.pack_into("<H", data, 28, 32)
    with pytest.raises(ValueError):
        parse_bitmap(data)