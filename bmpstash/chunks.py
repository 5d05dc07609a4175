"""Reading chunk headers and payloads back out of BMP images."""

import os
import re
from dataclasses import dataclass

from .bitmap import load_bitmap
from .debug import print_message, print_status, print_warning

EXPECTED_HEADER_LENGTH = 48

_HEADER_LENGTH_BYTES = 3
_NAME_LENGTH_BYTES = 2
_DATA_SIZE_DIGITS = 10
_CHUNK_DIGITS = 4
_LEADING_INT = re.compile(rb"\s*([+-]?\d+)")


class MetadataError(ValueError):
    """Raised when an image does not hold a readable chunk header."""


@dataclass
class ImageMetadata:
    """Fields of the header stored at the start of an image's pixel data."""

    output_filename: str = ""
    expected_data_size: int = 0
    index_info: str = ""
    current_chunk: int = -1
    total_chunks: int = -1


@dataclass
class ChunkInfo:
    """One chunk of a file as recovered from an image."""

    chunk_index: int = -1
    total_chunks: int = -1
    chunk_size: int = 0
    expected_data_size: int = 0
    filename: str = ""
    payload: bytes = b""


def file_size(filename):
    """Return the size of ``filename`` in bytes."""
    return os.path.getsize(filename)


def _parse_leading_int(field, what, filename):
    match = _LEADING_INT.match(field)
    if match is None:
        raise MetadataError(f"Invalid {what} {field!r} in {filename}")
    return int(match.group(1))


def _take(data, offset, count, what, filename):
    if len(data) - offset < count:
        raise MetadataError(f"Not enough data for {what} in {filename}")
    return data[offset:offset + count]


def extract_metadata(data, filename=""):
    """Parse the chunk header at the start of ``data``.

    Returns ``(metadata, offset)`` where ``offset`` is where the payload
    begins. Raises ``MetadataError`` if the header is truncated or malformed.
    """
    data = bytes(data)
    offset = 0

    header_length = int.from_bytes(
        _take(data, offset, _HEADER_LENGTH_BYTES, "header length", filename), "big"
    )
    offset += _HEADER_LENGTH_BYTES
    if header_length != EXPECTED_HEADER_LENGTH:
        print_warning(
            f"Header length is {header_length} bytes, expected "
            f"{EXPECTED_HEADER_LENGTH} bytes in {filename}"
        )

    name_length = int.from_bytes(
        _take(data, offset, _NAME_LENGTH_BYTES, "filename length", filename), "big"
    )
    offset += _NAME_LENGTH_BYTES

    name = _take(data, offset, name_length, "filename", filename)
    offset += name_length

    size_field = _take(data, offset, _DATA_SIZE_DIGITS, "data size", filename)
    expected_size = _parse_leading_int(size_field, "data size", filename)
    if expected_size < 0:
        raise MetadataError(f"Negative data size {expected_size} in {filename}")
    offset += _DATA_SIZE_DIGITS

    current_field = _take(data, offset, _CHUNK_DIGITS, "current chunk", filename)
    current_chunk = _parse_leading_int(current_field, "current chunk", filename)
    print_message(f"Chunk {current_chunk} payload starts at offset {offset}")
    offset += _CHUNK_DIGITS

    total_field = _take(data, offset, _CHUNK_DIGITS, "total chunks", filename)
    total_chunks = _parse_leading_int(total_field, "total chunks", filename)
    offset += _CHUNK_DIGITS

    if header_length > offset:
        remaining = header_length - offset
        _take(data, offset, remaining, "remaining header padding", filename)
        offset += remaining

    metadata = ImageMetadata(
        output_filename=name.decode("utf-8", "surrogateescape"),
        expected_data_size=expected_size,
        current_chunk=current_chunk,
        total_chunks=total_chunks,
    )
    return metadata, offset


def extract_pixel_data(image):
    """Return the image's RGB bytes in row-major order from the top row."""
    return image.pixel_bytes()


def extract_chunk_payload(filename):
    """Load the image ``filename`` and return the chunk it carries.

    Raises ``OSError`` if the file cannot be read and ``ValueError``
    (including ``MetadataError``) if it is not a valid chunk image.
    """
    image = load_bitmap(filename)
    data = extract_pixel_data(image)
    print_message(
        f"Processing image: {filename} ({image.width}x{image.height}) - "
        f"Estimated capacity: {len(data)} bytes"
    )

    metadata, offset = extract_metadata(data, filename)

    chunk_note = ""
    if metadata.current_chunk != -1 and metadata.total_chunks != -1:
        chunk_note = f" (Chunk {metadata.current_chunk} of {metadata.total_chunks})"
    print_message(
        f"Extracted metadata:\n  Output file: {metadata.output_filename}"
        f"\n  Data size: {metadata.expected_data_size} bytes"
        f"\n  Index info: {metadata.index_info}{chunk_note}"
    )

    available = len(data) - offset
    payload_size = metadata.expected_data_size
    if available < payload_size:
        print_warning(
            f"Available data ({available} bytes) is less than expected size "
            f"({payload_size} bytes) in chunk {metadata.current_chunk}"
        )
        payload_size = available

    payload = data[offset:offset + payload_size]
    print_message(f"Extracted {len(payload)} bytes of payload data from {filename}")
    if len(payload) > 10:
        tail = " ".join(f"{byte:02x}" for byte in reversed(payload[-10:]))
        print_message(f"Last 10 bytes: {tail} ")

    return ChunkInfo(
        chunk_index=metadata.current_chunk,
        total_chunks=metadata.total_chunks,
        chunk_size=payload_size,
        expected_data_size=metadata.expected_data_size,
        filename=metadata.output_filename,
        payload=payload,
    )


def write_assembled_file(output_filename, chunks):
    """Write the payloads of ``chunks`` in key order to ``output_filename``.

    ``chunks`` maps chunk numbers to ``ChunkInfo``. A chunk shorter than its
    expected size is padded with zeros; chunks with no payload are skipped.
    Returns the number of bytes written.
    """
    ordered = sorted(chunks.items())
    expected_chunks = ordered[0][1].total_chunks if ordered else 0
    total_expected = sum(chunk.expected_data_size for _, chunk in ordered)
    total_available = sum(len(chunk.payload) for _, chunk in ordered)

    with open(output_filename, "wb") as outfile:
        print_status(
            f"Writing assembled file {output_filename} from {len(ordered)}/"
            f"{expected_chunks} chunks, expected size: {total_expected} bytes, "
            f"available size: {total_available} bytes"
        )
        if len(ordered) != expected_chunks:
            print_warning(
                f"Missing {expected_chunks - len(ordered)} chunks. "
                "Output file may be incomplete."
            )

        written = 0
        for index, chunk in ordered:
            if not chunk.payload:
                continue
            outfile.write(chunk.payload)
            written += len(chunk.payload)
            shortfall = chunk.expected_data_size - len(chunk.payload)
            if shortfall > 0:
                outfile.write(bytes(shortfall))
                written += shortfall
                print_message(f"Added {shortfall} bytes of padding for chunk {index}")

    print_status(f"Successfully wrote {written} bytes to {output_filename}")
    return written


def create_output_path(output_path, filename):
    """Combine ``output_path`` with ``filename`` when ``output_path`` names a directory."""
    if not output_path:
        return filename
    if os.path.isdir(output_path):
        return os.path.join(output_path, filename)
    if output_path.endswith("/") or (output_path.endswith("\\") and os.sep == "\\"):
        return os.path.join(output_path, filename)
    if output_path.endswith("\\"):
        return os.path.join(os.path.dirname(output_path), filename)
    return output_path