import pytest

from bmpstash.cli import (
    DEFAULT_INPUT,
    DEFAULT_OUTPUT,
    FILE_TO_IMAGE,
    IMAGE_TO_FILE,
    Options,
    UsageError,
    main,
    parse_args,
    usage,
)
from bmpstash.debug import get_debug_mode, set_debug_mode


@pytest.fixture(autouse=True)
def _reset_debug():
    yield
    set_debug_mode(False)


def test_parse_args_defaults():
    options = parse_args([])
    assert options == Options(
        mode=IMAGE_TO_FILE, input_file=DEFAULT_INPUT, output_file=DEFAULT_OUTPUT
    )
    assert options.input_file == "D:\\EnchantedWaterfall.wav"


def test_parse_args_all_options():
    options = parse_args(["--mode=0", "--input=in.dat", "--output=out", "--debug"])
    assert options.mode == FILE_TO_IMAGE
    assert options.input_file == "in.dat"
    assert options.output_file == "out"
    assert options.debug is True


def test_parse_args_help_stops_parsing():
    options = parse_args(["--help", "--bogus"])
    assert options.show_help is True


@pytest.mark.parametrize("argv", [["--mode=2"], ["--bogus"], ["input.bmp"]])
def test_parse_args_rejects_bad_arguments(argv):
    with pytest.raises(UsageError):
        parse_args(argv)


def test_usage_lists_options():
    text = usage()
    for option in ["--debug", "--mode=<mode>", "--input=<file>", "--output=<file>", "--help"]:
        assert option in text


def test_main_help(capsys):
    assert main(["--help"]) == 0
    assert usage() in capsys.readouterr().out


def test_main_unknown_option(capsys):
    assert main(["--bogus"]) == 1
    captured = capsys.readouterr()
    assert "Unknown option: --bogus" in captured.err
    assert usage() in captured.out


def test_main_invalid_mode(capsys):
    assert main(["--mode=7"]) == 1
    assert "Invalid mode: 7" in capsys.readouterr().err


def test_main_round_trip(tmp_path, capsys):
    source = tmp_path / "song.wav"
    content = bytes(range(256)) * 20
    source.write_bytes(content)
    base = tmp_path / "img"

    assert main(["--mode=0", f"--input={source}", f"--output={base}"]) == 0
    assert "Mode: File to Image" in capsys.readouterr().out

    out = tmp_path / "out"
    out.mkdir()
    assert main(["--mode=1", f"--input={base}.bmp", f"--output={out}", "--debug"]) == 0
    assert get_debug_mode() is True
    assert "Debug mode: Enabled" in capsys.readouterr().out
    assert (out / "song.wav").read_bytes() == content


def test_main_missing_input_fails(tmp_path):
    assert main(["--mode=1", f"--input={tmp_path / 'absent.bmp'}", "--output="]) == 1


def test_main_encoding_missing_file_fails(tmp_path):
    assert main(["--mode=0", f"--input={tmp_path / 'absent'}", f"--output={tmp_path / 'x'}"]) == 1