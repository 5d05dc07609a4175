import pytest

from bmpstash.bitmap import BitmapImage
from bmpstash.encoder import build_chunk_header, chunk_output_filename, parse_to_image
from bmpstash.extract import (
    assemble_files,
    collect_chunks,
    find_related_chunks,
    parse_from_image,
)

NAME = "payload.bin"
DATA = bytes(range(256)) * 30
PIECES = [DATA[:2560], DATA[2560:5120], DATA[5120:]]


def _write_image(path, name, piece, chunk_index, total):
    image = BitmapImage(64, 64)
    header = build_chunk_header(name, len(piece), chunk_index, total)
    image.set_data(header, 0)
    image.set_data(piece, len(header))
    image.save(path)
    return str(path)


def _write_chunks(directory, base="payload", pieces=PIECES):
    total = len(pieces)
    return [
        _write_image(directory / chunk_output_filename(base, index, total), NAME, piece, index, total)
        for index, piece in enumerate(pieces)
    ]


def test_find_related_chunks_orders_numerically(tmp_path):
    for index in [11, 2, 1, 10, 3, 4, 5, 6, 7, 8, 9]:
        (tmp_path / f"data_{index}of11.bmp").write_bytes(b"")
    (tmp_path / "other_1of11.bmp").write_bytes(b"")
    (tmp_path / "data_1of3.bmp").write_bytes(b"")
    (tmp_path / "data_2of11.txt").write_bytes(b"")

    result = find_related_chunks(str(tmp_path / "data_1of11.bmp"))

    assert result == [str(tmp_path / f"data_{index}of11.bmp") for index in range(1, 12)]


def test_find_related_chunks_ignores_plain_names(tmp_path):
    (tmp_path / "picture.bmp").write_bytes(b"")
    assert find_related_chunks(str(tmp_path / "picture.bmp")) == []


def test_collect_chunks_skips_unreadable_images(tmp_path):
    first, second, third = _write_chunks(tmp_path)
    junk = tmp_path / "junk.bmp"
    junk.write_bytes(b"not an image")

    chunks, filename = collect_chunks([first, str(junk), second, third])

    assert filename == NAME
    assert sorted(chunks) == [1, 2, 3]
    assert [chunks[key].payload for key in sorted(chunks)] == PIECES


def test_collect_chunks_uses_file_order_without_numbers(tmp_path):
    first = _write_image(tmp_path / "a.bmp", NAME, b"first part", -1, 2)
    second = _write_image(tmp_path / "b.bmp", NAME, b"second part", -1, 2)

    chunks, _ = collect_chunks([first, second])

    assert chunks[1].payload == b"first part"
    assert chunks[2].payload == b"second part"


def test_assemble_files_requires_files():
    with pytest.raises(FileNotFoundError):
        assemble_files([])


def test_assemble_files_requires_valid_chunk(tmp_path):
    junk = tmp_path / "junk.bmp"
    junk.write_bytes(b"nothing useful")
    with pytest.raises(ValueError):
        assemble_files([str(junk)])


def test_parse_from_chunk_file_into_directory(tmp_path):
    images = tmp_path / "images"
    images.mkdir()
    _write_chunks(images)
    out = tmp_path / "out"
    out.mkdir()

    written = parse_from_image(str(images / "payload_2of3.bmp"), str(out))

    assert written == str(out / NAME)
    assert (out / NAME).read_bytes() == DATA


def test_parse_from_single_image_to_file_path(tmp_path):
    path = _write_image(tmp_path / "single.bmp", NAME, PIECES[0], 0, 1)
    target = tmp_path / "nested" / "restored.bin"

    written = parse_from_image(path, str(target))

    assert written == str(target)
    assert target.read_bytes() == PIECES[0]


def test_parse_from_image_without_output_uses_metadata_name(tmp_path, monkeypatch):
    path = _write_image(tmp_path / "single.bmp", NAME, PIECES[1], 0, 1)
    out = tmp_path / "cwd"
    out.mkdir()
    monkeypatch.chdir(out)

    written = parse_from_image(path)

    assert written == NAME
    assert (out / NAME).read_bytes() == PIECES[1]


def test_parse_from_missing_main_file_finds_chunks(tmp_path, monkeypatch):
    _write_chunks(tmp_path)
    out = tmp_path / "cwd"
    out.mkdir()
    monkeypatch.chdir(out)

    parse_from_image(str(tmp_path / "payload.bmp"))

    assert (out / NAME).read_bytes() == DATA


def test_parse_from_missing_input_without_chunks_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_from_image(str(tmp_path / "absent.bmp"))


def test_round_trip_with_encoder(tmp_path):
    source = tmp_path / "notes.txt"
    content = b"some text to hide inside a bitmap\n" * 50
    source.write_bytes(content)
    images = parse_to_image(str(source), str(tmp_path / "encoded"))
    out = tmp_path / "out"
    out.mkdir()

    written = parse_from_image(images[0], str(out))

    assert written == str(out / "notes.txt")
    assert (out / "notes.txt").read_bytes() == content