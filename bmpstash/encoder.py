"""Splitting a file into chunks and encoding each chunk as a BMP image."""

import math
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from .bitmap import BitmapImage
from .debug import print_error, print_message, print_status, print_warning
from .tasks import TaskQueue

HEADER_LENGTH = 48
BYTES_PER_PIXEL = 3
BMP_HEADER_SIZE = 54
MIN_DIMENSION = 64
MAX_DIMENSION = 65535
MAX_IMAGE_SIZE = 100 * 1024 * 1024
MIN_CHUNK_SIZE = 1024 * 1024
DEFAULT_MAX_CHUNK_SIZE_MB = 9

_DATA_SIZE_DIGITS = 10
_CHUNK_DIGITS = 4


@dataclass
class EncodedImage:
    """A finished image waiting to be written to ``filename``."""

    filename: str
    image: BitmapImage


def _fit_dimensions(pixels, aspect_ratio):
    """Grow a width/height pair of the given aspect ratio until it holds ``pixels``."""
    if aspect_ratio <= 0:
        raise ValueError(f"aspect ratio must be positive, got {aspect_ratio}")
    width = int(math.sqrt(pixels * aspect_ratio))
    height = int(width / aspect_ratio)
    while width * height < pixels:
        width += 1
        height = int(width / aspect_ratio)
    width = min(max(width, MIN_DIMENSION), MAX_DIMENSION)
    height = min(max(height, MIN_DIMENSION), MAX_DIMENSION)
    return width, height


def _image_file_size(width, height, bytes_per_pixel, bmp_header_size):
    row_bytes = width * bytes_per_pixel
    padding = (4 - row_bytes % 4) % 4
    return bmp_header_size + height * (row_bytes + padding)


def calculate_optimal_rect_dimensions(
    total_bytes, bytes_per_pixel, bmp_header_size, max_size_bytes, aspect_ratio=1.0
):
    """Return ``(width, height)`` for an image holding ``total_bytes`` with spare room.

    A margin of 500 pixels is added; the result is then shrunk while the BMP
    file would exceed ``max_size_bytes`` and both sides stay above the minimum.
    """
    total_pixels = -(-total_bytes // bytes_per_pixel) + 500
    width, height = _fit_dimensions(total_pixels, aspect_ratio)

    size = _image_file_size(width, height, bytes_per_pixel, bmp_header_size)
    while size > max_size_bytes and width > MIN_DIMENSION and height > MIN_DIMENSION:
        if width > height:
            width -= 1
        else:
            height -= 1
        size = _image_file_size(width, height, bytes_per_pixel, bmp_header_size)
    return width, height


def optimize_last_image_dimensions(
    total_bytes, bytes_per_pixel, metadata_size, bmp_header_size, aspect_ratio=1.0
):
    """Return the smallest ``(width, height)`` holding the metadata and ``total_bytes``."""
    total_pixels = -(-(metadata_size + total_bytes) // bytes_per_pixel)
    return _fit_dimensions(total_pixels, aspect_ratio)


def read_file_segment(file, start_pos, length):
    """Read up to ``length`` bytes from binary ``file`` starting at ``start_pos``."""
    file.seek(start_pos)
    return file.read(length)


def _zero_padded(value, digits, label):
    text = str(value)
    if value < 0 or len(text) > digits:
        raise ValueError(f"{label} {value} does not fit in {digits} digits")
    return text.zfill(digits)


def build_chunk_header(filename, data_size, chunk_index, total_chunks):
    """Build the metadata header stored before a chunk's data.

    ``chunk_index`` counts from zero; the header records it counting from one.
    The header is padded with zeros to 48 bytes when the filename is short enough.
    """
    name = filename.encode("utf-8", "surrogateescape")
    if len(name) > 0xFFFF:
        raise ValueError(f"filename is too long ({len(name)} bytes)")
    header = bytearray(HEADER_LENGTH.to_bytes(3, "big"))
    header += len(name).to_bytes(2, "big")
    header += name
    header += _zero_padded(data_size, _DATA_SIZE_DIGITS, "data size").encode("ascii")
    header += _zero_padded(chunk_index + 1, _CHUNK_DIGITS, "chunk number").encode("ascii")
    header += _zero_padded(total_chunks, _CHUNK_DIGITS, "chunk count").encode("ascii")
    if len(header) < HEADER_LENGTH:
        header += bytes(HEADER_LENGTH - len(header))
    return bytes(header)


def chunk_output_filename(output_base, chunk_index, total_chunks):
    """Return the image filename for the zero-based ``chunk_index``."""
    if total_chunks > 1:
        return f"{output_base}_{chunk_index + 1}of{total_chunks}.bmp"
    return f"{output_base}.bmp"


def process_chunk(
    chunk_index,
    chunk_size,
    total_chunks,
    original_file_size,
    input_file,
    output_base,
    task_queue,
    max_image_file_size,
):
    """Read one chunk of ``input_file``, encode it as an image and queue it for writing."""
    output_filename = chunk_output_filename(output_base, chunk_index, total_chunks)
    number = chunk_index + 1
    print_message(f"Processing chunk {number} of {total_chunks} to {output_filename}")

    start_pos = chunk_index * chunk_size
    is_last = chunk_index == total_chunks - 1
    length = original_file_size - start_pos if is_last else chunk_size

    try:
        with open(input_file, "rb") as source:
            chunk_data = read_file_segment(source, start_pos, length)

        metadata = build_chunk_header(
            Path(input_file).name, len(chunk_data), chunk_index, total_chunks
        )
        if is_last:
            width, height = optimize_last_image_dimensions(
                len(chunk_data), BYTES_PER_PIXEL, len(metadata), BMP_HEADER_SIZE
            )
        else:
            width, height = calculate_optimal_rect_dimensions(
                len(metadata) + len(chunk_data),
                BYTES_PER_PIXEL,
                BMP_HEADER_SIZE,
                max_image_file_size,
            )
        print_message(f"Chunk {number} image dimensions: {width} x {height} pixels")

        image = BitmapImage(width, height)
        image.set_data(metadata, 0)
        image.set_data(chunk_data, len(metadata))
        task_queue.push(EncodedImage(output_filename, image))

        print_status(
            f"Processed chunk {number} of {total_chunks} ({len(chunk_data)} bytes)"
        )
    except (OSError, ValueError) as exc:
        print_error(f"Error processing chunk {number}: {exc}")
        raise


def save_image(task):
    """Write a queued image to its file."""
    try:
        task.image.save(task.filename)
    except OSError as exc:
        print_error(f"Error saving image {task.filename}: {exc}")
        raise
    print_status(f"Saved image: {task.filename}")


def _plan_chunks(file_size, max_chunk_size_mb):
    max_chunk_size = max(0, int(max_chunk_size_mb)) * 1024 * 1024
    if file_size <= max_chunk_size:
        return file_size, 1
    chunk_size = max_chunk_size
    if chunk_size < MIN_CHUNK_SIZE:
        chunk_size = MIN_CHUNK_SIZE
        print_warning("Specified chunk size too small, using 1MB minimum")
    elif chunk_size > MAX_IMAGE_SIZE // 2:
        chunk_size = MAX_IMAGE_SIZE // 2
        print_warning(
            f"Specified chunk size too large, capping at {MAX_IMAGE_SIZE // 2 // 1024 // 1024}MB"
        )
    return chunk_size, -(-file_size // chunk_size)


def _encode_chunks(input_file, output_base, file_size, chunk_size, total_chunks):
    task_queue = TaskQueue()
    failures = []

    def writer():
        for task in task_queue:
            try:
                save_image(task)
            except OSError as exc:
                failures.append(exc)

    writer_thread = threading.Thread(target=writer, name="image-writer", daemon=True)
    writer_thread.start()
    workers = max(1, (os.cpu_count() or 1) - 1)
    try:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(
                    process_chunk,
                    index,
                    chunk_size,
                    total_chunks,
                    file_size,
                    input_file,
                    output_base,
                    task_queue,
                    MAX_IMAGE_SIZE,
                )
                for index in range(total_chunks)
            ]
            for future in futures:
                future.result()
    finally:
        task_queue.finish()
        writer_thread.join()
    if failures:
        raise failures[0]


def parse_to_image(input_file, output_base, max_chunk_size_mb=DEFAULT_MAX_CHUNK_SIZE_MB):
    """Encode ``input_file`` into one or more BMP images named after ``output_base``.

    Returns the image filenames in chunk order. Raises ``ValueError`` for an
    empty input and ``OSError`` when files cannot be read or written.
    """
    print_message(f"Starting conversion of file to image: {input_file}")
    print_message(f"Output base name: {output_base}")
    try:
        file_size = os.path.getsize(input_file)
        print_status(f"Input file size: {file_size} bytes")
        if file_size == 0:
            raise ValueError("Input file is empty")
        chunk_size, total_chunks = _plan_chunks(file_size, max_chunk_size_mb)
        print_status(
            f"Splitting file into {total_chunks} chunks of approximately "
            f"{chunk_size // 1024} KB each"
        )
        _encode_chunks(input_file, output_base, file_size, chunk_size, total_chunks)
    except (OSError, ValueError) as exc:
        print_error(f"Error during file to image conversion: {exc}")
        raise
    print_status("Conversion completed successfully")
    return [
        chunk_output_filename(output_base, index, total_chunks)
        for index in range(total_chunks)
    ]