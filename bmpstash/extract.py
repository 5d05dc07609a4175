"""Reassembling an encoded file from the BMP images that carry it."""

import functools
import os
import re

from .chunks import create_output_path, extract_chunk_payload, write_assembled_file
from .debug import print_error, print_message, print_status, print_warning
from .discovery import get_files_to_process

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(text):
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"invalid number {text!r}")
    return int(match.group(1))


def collect_chunks(files):
    """Extract the chunk carried by each image in ``files``.

    Returns ``(chunks, filename)``: a dict mapping chunk numbers to
    ``ChunkInfo`` and the output filename recorded in the first readable
    image (None if no image could be read). Unreadable images are reported
    and skipped. A chunk without a positive number is keyed by file order.
    """
    chunks = {}
    output_filename = None
    for path in files:
        try:
            chunk = extract_chunk_payload(path)
        except (OSError, ValueError) as exc:
            print_error(f"Exception processing {path}: {exc}")
            print_error(f"Failed to extract payload from {path}")
            continue

        if output_filename is None:
            output_filename = chunk.filename
            print_status(f"Using output filename from metadata: {output_filename}")
        elif chunk.filename != output_filename:
            print_warning(
                f"Inconsistent output filename in {path} "
                f"('{chunk.filename}' vs '{output_filename}')"
            )

        key = chunk.chunk_index if chunk.chunk_index > 0 else len(chunks) + 1
        chunks[key] = chunk
    return chunks, output_filename


def _ensure_parent(path):
    parent = os.path.dirname(path)
    if parent and not os.path.exists(parent):
        try:
            os.makedirs(parent, exist_ok=True)
            print_status(f"Created output directory: {parent}")
        except OSError as exc:
            print_error(f"Failed to create output directory: {exc}")


def assemble_files(files, output_path=""):
    """Rebuild the encoded file from the images in ``files``.

    The file is written under the name stored in the images, or at
    ``output_path`` (a file path or a directory) when one is given.
    Returns the path written. Raises ``FileNotFoundError`` when ``files``
    is empty and ``ValueError`` when no image holds a readable chunk.
    """
    files = list(files)
    if not files:
        print_error("No files found to process.")
        raise FileNotFoundError("No files found to process.")
    print_status(f"Processing {len(files)} files")

    chunks, filename = collect_chunks(files)
    if not chunks:
        message = "No valid chunks extracted, cannot create output file."
        print_error(message)
        raise ValueError(message)

    if output_path:
        target = create_output_path(output_path, filename)
        print_status(f"Final output path: {target}")
    else:
        target = filename
    _ensure_parent(target)

    try:
        write_assembled_file(target, chunks)
    except OSError as exc:
        print_error(f"Exception writing output file: {exc}")
        print_error(f"Failed to assemble output file: {target}")
        raise
    print_status(f"Successfully assembled output file: {target}")
    return target


def _first_chunk_index(path):
    """Number between the first underscore and the ``of`` after it, or None."""
    name = os.path.basename(path)
    underscore = name.find("_")
    if underscore == -1:
        return None
    of_pos = name.find("of", underscore)
    if of_pos == -1:
        return None
    try:
        return _leading_int(name[underscore + 1:of_pos])
    except ValueError:
        return None


def _compare(a, b):
    index_a = _first_chunk_index(a)
    index_b = _first_chunk_index(b)
    if index_a is not None and index_b is not None:
        return (index_a > index_b) - (index_a < index_b)
    return (a > b) - (a < b)


def find_related_chunks(filename):
    """Return all images of the multi-part set that ``filename`` belongs to.

    ``filename`` must be named ``<base>_XofY.<ext>``; the result lists the
    BMP files in the same directory named ``<base>_...ofY...``, ordered by
    chunk number. Returns an empty list when the name is not of that form.
    """
    directory, name = os.path.split(filename)
    directory = directory or "."
    of_pos = name.find("of")
    if of_pos <= 1:
        return []
    underscore = name.rfind("_", 0, of_pos)
    if underscore == -1:
        return []
    base_name = name[:underscore]
    chunk_part = name[underscore + 1:]
    dot = chunk_part.rfind(".")
    if dot == -1:
        return []
    of_part = chunk_part[:dot]
    of_text = of_part.find("of")
    if of_text <= 0:
        return []
    try:
        chunk_index = _leading_int(of_part[:of_text])
        total_chunks = _leading_int(of_part[of_text + 2:])
    except ValueError:
        return []

    print_status("Detected multi-part file:")
    print_status(f"  Base name: {base_name}")
    print_status(f"  Chunk index: {chunk_index} of {total_chunks}")
    print_status(f"  Directory: {directory}")

    marker = f"of{total_chunks}"
    found = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                entry_name = entry.name
                if (
                    entry_name.startswith(base_name + "_")
                    and marker in entry_name
                    and ".bmp" in entry_name
                ):
                    found.append(entry.path)
                    print_status(f"  Found chunk file: {entry.path}")
    except OSError as exc:
        print_status(f"Error scanning directory: {exc}")
        return []

    if not found:
        print_status("No matching chunk files found.")
    found.sort(key=functools.cmp_to_key(_compare))
    return found


def parse_from_image(filename, output_path=""):
    """Extract the file encoded in the image(s) named by ``filename``.

    ``filename`` may be one image, one chunk of a multi-image set, a glob
    pattern, a directory, or a missing file whose chunk images exist.
    Returns the path of the file written.
    """
    print_message(f"ParseFromImage called with filename: '{filename}'")
    if output_path:
        print_message(f"Output path specified: '{output_path}'")

    if not os.path.exists(filename):
        print_error(f"Input file does not exist: {filename}")
        return assemble_files(get_files_to_process(filename))

    related = find_related_chunks(filename)
    if related:
        return assemble_files(related, output_path)
    return assemble_files(get_files_to_process(filename), output_path)