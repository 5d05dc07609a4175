"""Uncompressed 24-bit BMP images holding raw bytes as RGB pixels."""

import struct
from pathlib import Path

from .debug import print_message, print_warning

_FILE_HEADER = struct.Struct("<2sIHHI")
_INFO_HEADER = struct.Struct("<IiiHHIIiiII")
_HEADER_SIZE = _FILE_HEADER.size + _INFO_HEADER.size
_BYTES_PER_PIXEL = 3


def _row_stride(width):
    """Bytes per stored row, padded to a multiple of four."""
    return (width * _BYTES_PER_PIXEL + 3) & ~3


def _swap_red_blue(row):
    """Swap the first and third byte of every pixel in place."""
    row[0::3], row[2::3] = row[2::3], row[0::3]


class BitmapImage:
    """An RGB image whose pixel buffer is stored row by row from the top."""

    def __init__(self, width, height):
        if width < 0 or height < 0:
            raise ValueError(f"invalid bitmap dimensions {width}x{height}")
        print_message(f"Creating bitmap with dimensions {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self._pixels = bytearray(self._width * self._height * _BYTES_PER_PIXEL)

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    def set_data(self, data, offset=0):
        """Copy ``data`` into the pixel buffer at ``offset``, truncating what does not fit."""
        if offset < 0:
            raise ValueError(f"negative offset {offset}")
        data = bytes(data)
        print_message(f"Setting data at offset {offset}, size {len(data)} bytes")
        capacity = len(self._pixels)
        if offset + len(data) > capacity:
            print_warning("Data exceeds image capacity, will be truncated")
        count = max(0, min(len(data), capacity - offset))
        self._pixels[offset:offset + count] = data[:count]

    def get_pixel(self, x, y):
        """Return the ``(red, green, blue)`` value at column ``x``, row ``y``."""
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"pixel ({x}, {y}) outside {self._width}x{self._height} image")
        start = (y * self._width + x) * _BYTES_PER_PIXEL
        return tuple(self._pixels[start:start + _BYTES_PER_PIXEL])

    def pixel_bytes(self):
        """Return the RGB pixel buffer in row-major order from the top row."""
        return bytes(self._pixels)

    def to_bytes(self):
        """Return the complete BMP file contents."""
        row_len = self._width * _BYTES_PER_PIXEL
        stride = _row_stride(self._width)
        padding = bytes(stride - row_len)
        image_size = stride * self._height
        parts = [
            _FILE_HEADER.pack(b"BM", _HEADER_SIZE + image_size, 0, 0, _HEADER_SIZE),
            _INFO_HEADER.pack(
                _INFO_HEADER.size, self._width, self._height, 1, 24, 0, image_size, 0, 0, 0, 0
            ),
        ]
        for y in reversed(range(self._height)):
            row = self._pixels[y * row_len:(y + 1) * row_len]
            _swap_red_blue(row)
            parts.append(row)
            parts.append(padding)
        return b"".join(parts)

    def save(self, filename):
        """Write the image to ``filename`` as a BMP file."""
        print_message(f"Saving bitmap to: {filename}")
        Path(filename).write_bytes(self.to_bytes())
        print_message(f"Successfully saved {filename}")


def parse_bitmap(data):
    """Decode uncompressed 24-bit BMP file contents into a BitmapImage."""
    data = bytes(data)
    if len(data) < _HEADER_SIZE:
        raise ValueError("bitmap data too short for headers")
    signature, _size, _res1, _res2, pixel_offset = _FILE_HEADER.unpack_from(data, 0)
    if signature != b"BM":
        raise ValueError("not a BMP file")
    info_size, width, height, _planes, bits, compression, *_rest = _INFO_HEADER.unpack_from(
        data, _FILE_HEADER.size
    )
    if info_size < _INFO_HEADER.size:
        raise ValueError(f"unsupported BMP info header size {info_size}")
    if bits != 24 or compression != 0:
        raise ValueError(f"unsupported BMP format: {bits} bits, compression {compression}")
    if width < 0:
        raise ValueError(f"invalid BMP width {width}")
    top_down = height < 0
    height = abs(height)
    row_len = width * _BYTES_PER_PIXEL
    stride = _row_stride(width)
    if len(data) < pixel_offset + stride * height:
        raise ValueError("bitmap pixel data is truncated")

    rows = []
    for index in range(height):
        start = pixel_offset + index * stride
        row = bytearray(data[start:start + row_len])
        _swap_red_blue(row)
        rows.append(row)
    if not top_down:
        rows.reverse()

    image = BitmapImage(width, height)
    image.set_data(b"".join(rows), 0)
    return image


def load_bitmap(path):
    """Read and decode the BMP file at ``path``."""
    return parse_bitmap(Path(path).read_bytes())