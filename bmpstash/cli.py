"""Command line entry point: encode a file into BMP images or decode it back."""

import os
import sys
from dataclasses import dataclass

from .debug import print_message, set_debug_mode
from .encoder import parse_to_image
from .extract import parse_from_image

FILE_TO_IMAGE = 0
IMAGE_TO_FILE = 1
DEFAULT_INPUT = "D:\\EnchantedWaterfall.wav"
DEFAULT_OUTPUT = "D:\\EnchantedWaterfall"
MAX_CHUNK_SIZE_MB = 9


class UsageError(ValueError):
    """Raised for command line arguments that cannot be understood."""


@dataclass
class Options:
    """Settings taken from the command line."""

    mode: int = IMAGE_TO_FILE
    input_file: str = DEFAULT_INPUT
    output_file: str = DEFAULT_OUTPUT
    debug: bool = False
    show_help: bool = False


def usage():
    """Return the help text."""
    return "\n".join(
        [
            "Usage: bmpstash [options]",
            "Options:",
            "  --debug           Enable debug output mode",
            "  --mode=<mode>     Select operation mode (0: File to Image, 1: Image to File)",
            "  --input=<file>    Specify input file",
            "  --output=<file>   Specify output file",
            "  --help            Display this help message",
        ]
    )


def parse_args(argv):
    """Turn command line arguments into ``Options``.

    ``--help`` stops parsing at once. Raises ``UsageError`` for an invalid
    mode or an unknown option.
    """
    argv = list(argv)
    options = Options()
    print_message(f"Parsing {len(argv) + 1} command line arguments")
    for arg in argv:
        print_message(f"Processing argument: {arg}")
        if arg == "--debug":
            options.debug = True
        elif arg.startswith("--mode="):
            value = arg[len("--mode="):]
            if value == "0":
                options.mode = FILE_TO_IMAGE
            elif value == "1":
                options.mode = IMAGE_TO_FILE
            else:
                raise UsageError(f"Invalid mode: {value}")
        elif arg.startswith("--input="):
            options.input_file = arg[len("--input="):]
            print_message(f"Set input file to: {options.input_file}")
        elif arg.startswith("--output="):
            options.output_file = arg[len("--output="):]
            print_message(f"Set output file to: {options.output_file}")
        elif arg == "--help":
            options.show_help = True
            return options
        else:
            raise UsageError(f"Unknown option: {arg}")
    return options


def main(argv=None):
    """Run the command; returns the process exit status."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        options = parse_args(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        print(usage())
        return 1
    if options.show_help:
        print(usage())
        return 0

    set_debug_mode(options.debug)
    print(f"Current working directory: {os.getcwd()}")
    print("Mode: " + ("File to Image" if options.mode == FILE_TO_IMAGE else "Image to File"))
    if options.debug:
        print("Debug mode: Enabled")

    try:
        if options.mode == FILE_TO_IMAGE:
            print("Converting file to image...")
            print(f"Input: {options.input_file}, Output: {options.output_file}")
            parse_to_image(options.input_file, options.output_file, MAX_CHUNK_SIZE_MB)
        else:
            print("Extracting file from image...")
            print(f"Input image: {options.input_file}")
            if options.output_file:
                print(f"Output path: {options.output_file}")
                parse_from_image(options.input_file, options.output_file)
            else:
                parse_from_image(options.input_file)
    except (OSError, ValueError):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())