# bmpstash

bmpstash packs any file into one or more uncompressed 24-bit BMP images and
unpacks them back into the original file, byte for byte.

Each image starts with a 48-byte header stored in its pixel data. The header
records the original file name, how many payload bytes the image holds, and
which chunk of how many this image is. The pixels after the header carry the
file's bytes as red, green and blue values.

From the command line, files up to 9 MB go into a single image named
`<output>.bmp`. Larger files are split into 9 MB chunks, written as
`<output>_1of3.bmp`, `<output>_2of3.bmp` and so on.

## Installation

```
pip install .
```

No third-party libraries are needed.

## Command line

Turn a file into images (mode 0):

```
bmpstash --mode=0 --input=song.wav --output=song
```

Turn images back into a file (mode 1, the default):

```
bmpstash --mode=1 --input=song_1of3.bmp --output=restored/
```

Passing any one chunk of a set is enough: the related chunks in the same
directory are found and joined in chunk order. When `--output` names an
existing directory or ends in `/`, the original file name from the header is
used inside it, and missing parent directories are created; otherwise
`--output` is taken as the full output path. Pass an empty `--output=` to
write the file under the name stored in the images.

The input to mode 1 may also be a directory, which processes every `.bmp` in
it, or a pattern containing `*` or `?`, such as `images/song_*.bmp`. A
pattern, or an input that does not exist (in which case `<input>_XofY.bmp`
chunk images next to it are looked for), is always written under the name
stored in the images; `--output` is not used then.

When `--input` or `--output` is left out, the defaults are
`D:\EnchantedWaterfall.wav` and `D:\EnchantedWaterfall`.

Options:

```
--debug           Enable debug output mode
--mode=<mode>     Select operation mode (0: File to Image, 1: Image to File)
--input=<file>    Specify input file
--output=<file>   Specify output file
--help            Display this help message
```

The command exits with status 0 on success and 1 on a usage error or when a
file cannot be read, decoded or written.

## Library use

```python
from bmpstash.encoder import parse_to_image
from bmpstash.extract import parse_from_image

images = parse_to_image("report.pdf", "report", 9)   # ["report.bmp"]
restored = parse_from_image("report.bmp", "restored/")  # "restored/report.pdf"
```

`parse_to_image` returns the image file names in chunk order and raises
`ValueError` for an empty input file and `OSError` when files cannot be read
or written. `parse_from_image` returns the path it wrote and raises
`FileNotFoundError` when no images are found, `ValueError` when none holds a
readable chunk, and `OSError` when the output cannot be written.

Lower-level pieces:

- `bmpstash.bitmap`: `BitmapImage` (`set_data`, `get_pixel`, `pixel_bytes`,
  `to_bytes`, `save`), `parse_bitmap` and `load_bitmap` for uncompressed
  24-bit BMP files.
- `bmpstash.encoder`: `build_chunk_header`, `chunk_output_filename`,
  `calculate_optimal_rect_dimensions`, `optimize_last_image_dimensions`.
- `bmpstash.chunks`: `extract_metadata`, `extract_chunk_payload` (decodes a
  single image into a `ChunkInfo`), `write_assembled_file`,
  `create_output_path`; `MetadataError` for unreadable headers.
- `bmpstash.discovery`: `get_files_to_process` and `find_sub_bmp_files` work
  out which images belong together.
- `bmpstash.extract`: `collect_chunks`, `assemble_files`,
  `find_related_chunks`.
- `bmpstash.debug`: `set_debug_mode` and the `print_*` helpers that control
  console output.

## Limitations

Only uncompressed 24-bit BMP images are read and written. The data is stored
as plain pixel values: it is neither compressed nor encrypted.