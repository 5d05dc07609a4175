"""Finding the BMP images that together hold an encoded file."""

import functools
import os
import re
from pathlib import Path

from .debug import print_error, print_message, print_status

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(text):
    """Parse the integer at the start of ``text`` the way ``stoi`` does."""
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"invalid number {text!r}")
    return int(match.group(1))


def _is_bmp(entry):
    return entry.is_file() and Path(entry.name).suffix == ".bmp"


def _scan(directory):
    """Return the directory entries of ``directory`` (the current one if empty)."""
    with os.scandir(directory or ".") as entries:
        return list(entries)


def chunk_index_of(name):
    """Return the chunk number in a ``base_XofY.bmp`` file name, or None.

    The number is read between the last underscore and the first ``of``
    that follows it.
    """
    underscore = name.rfind("_")
    if underscore == -1:
        return None
    of_pos = name.find("of", underscore)
    if of_pos == -1:
        return None
    try:
        return _leading_int(name[underscore + 1:of_pos])
    except ValueError:
        return None


def _compare_chunk_paths(a, b):
    index_a = chunk_index_of(os.path.basename(a))
    index_b = chunk_index_of(os.path.basename(b))
    if index_a is not None and index_b is not None:
        return (index_a > index_b) - (index_a < index_b)
    return (a > b) - (a < b)


def _direct_matches(entries, basename):
    """Files named ``basename_XofY.bmp``, compared without regard to case."""
    prefix = basename.lower() + "_"
    found = []
    for entry in entries:
        if not _is_bmp(entry):
            continue
        lower = entry.name.lower()
        if not lower.startswith(prefix):
            continue
        of_pos = lower.find("of")
        if of_pos == -1 or not lower.endswith(".bmp"):
            continue
        index_text = lower[len(prefix):of_pos] if of_pos >= len(prefix) else lower[len(prefix):]
        try:
            index = _leading_int(index_text)
        except ValueError as exc:
            print_message(f"  Skipping {entry.name}: {exc}")
            continue
        print_message(f"  Found file: {entry.name} (index: {index})")
        found.append((index, entry.path))
    return found


def _any_chunk_files(entries):
    """Any files named ``<something>_XofY.<ext>`` with positive X and Y."""
    found = []
    for entry in entries:
        if not _is_bmp(entry):
            continue
        name = entry.name
        of_pos = name.find("of")
        if of_pos <= 1:
            continue
        underscore = name.rfind("_", 0, of_pos)
        if underscore == -1:
            continue
        total_text = name[of_pos + 2:]
        dot = total_text.find(".")
        if dot == -1:
            continue
        try:
            index = _leading_int(name[underscore + 1:of_pos])
            total = _leading_int(total_text[:dot])
        except ValueError as exc:
            print_message(f"  Skipping {name}: {exc}")
            continue
        if index > 0 and total > 0:
            print_message(
                f"  Found potential chunk file: {name} (index: {index}/{total})"
            )
            found.append((index, entry.path))
    return found


def find_sub_bmp_files(base_filename):
    """Return the chunk images belonging to ``base_filename``, in chunk order.

    Looks for ``<base>_XofY.bmp`` next to ``base_filename``; if none exist,
    falls back to any chunk-named BMP file in that directory.
    """
    directory, basename = os.path.split(base_filename)
    directory = directory or "."
    print_status(
        f"Searching for sub-BMP files with base name: {basename} in directory: {directory}"
    )
    try:
        entries = _scan(directory)
        indexed = _direct_matches(entries, basename)
        if not indexed:
            print_message(
                "No direct matches found, searching for any chunked files in the directory"
            )
            indexed = _any_chunk_files(entries)
    except OSError as exc:
        print_error(f"Error finding sub-bmp files: {exc}")
        return []
    result = [path for _, path in sorted(indexed)]
    print_status(f"Found {len(result)} sub-BMP files.")
    return result


def _chunks_beside(filename):
    """Chunk images sharing the base name of the existing chunk file ``filename``."""
    name = os.path.basename(filename)
    of_pos = name.find("of")
    if of_pos <= 1:
        return []
    underscore = name.rfind("_", 0, of_pos)
    if underscore == -1:
        return []
    print_message(f"Detected chunked file pattern in: {name}")
    base_name = name[:underscore]
    directory = os.path.dirname(filename)
    print_message(f"Looking for chunks with base name: {base_name} in {directory}")

    chunk_files = []
    for entry in _scan(directory):
        if not _is_bmp(entry):
            continue
        if entry.name.startswith(base_name + "_") and "of" in entry.name:
            chunk_files.append(entry.path)
            print_message(f"  Found chunk: {entry.path}")
    chunk_files.sort(key=functools.cmp_to_key(_compare_chunk_paths))
    if chunk_files:
        print_message(f"Found and sorted {len(chunk_files)} chunk files")
    return chunk_files


def _glob_regex(pattern):
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == ".":
            parts.append(r"\.")
        else:
            parts.append(char)
    return re.compile("".join(parts))


def _match_pattern(filename):
    directory, pattern = ".", filename
    separator = max(filename.rfind("/"), filename.rfind("\\"))
    if separator != -1:
        directory = filename[:separator]
        pattern = filename[separator + 1:]
    regex = _glob_regex(pattern)
    matches = []
    try:
        for entry in _scan(directory):
            if entry.is_file() and regex.fullmatch(entry.name):
                matches.append(entry.path)
    except OSError as exc:
        print_error(f"Error accessing directory: {exc}")
        return matches
    return sorted(matches)


def _bmp_files_in(directory):
    try:
        return sorted(entry.path for entry in _scan(directory) if _is_bmp(entry))
    except OSError as exc:
        print_error(f"Error accessing directory: {exc}")
        return []


def _missing_file(filename):
    print_status(f"Main file not found: {filename}")
    dot = filename.rfind(".")
    base_filename = filename[:dot] if dot != -1 else filename
    print_status(f"Looking for sub-bmp files with base name: {base_filename}")
    files = find_sub_bmp_files(base_filename)
    if not files:
        print_error(f"No sub-bmp files found for: {base_filename}")
        return files
    print_status(f"Found {len(files)} sub-bmp files to process:")
    for path in files:
        print_message(f"  - {path}")
    return files


def _existing_file(filename):
    directory, name = os.path.split(filename)
    of_pos = name.find("of")
    if of_pos > 1:
        underscore = name.rfind("_", 0, of_pos)
        if underscore != -1:
            base_name = name[:underscore]
            base_filename = os.path.join(directory, base_name)
            print_status(
                "Detected chunk file, searching for all related chunks with base name: "
                + base_filename
            )
            files = find_sub_bmp_files(base_filename)
            if len(files) > 1:
                print_status(f"Found {len(files)} related chunk files to process:")
                for path in files:
                    print_message(f"  - {path}")
                return files
    return [filename]


def get_files_to_process(filename):
    """Return the image files that ``filename`` stands for.

    ``filename`` may be a single image, one chunk of a multi-image file, a
    missing file whose chunks exist, a glob pattern with ``*`` or ``?``, or
    a directory of BMP files.
    """
    is_pattern = "*" in filename or "?" in filename
    is_directory = os.path.isdir(filename)
    exists = os.path.exists(filename)

    if is_pattern:
        return _match_pattern(filename)
    if is_directory:
        return _bmp_files_in(filename)
    if exists:
        chunk_files = _chunks_beside(filename)
        if chunk_files:
            return chunk_files
        return _existing_file(filename)
    return _missing_file(filename)