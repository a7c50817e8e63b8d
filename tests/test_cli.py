"""Tests for the command-line entry point in --print mode."""

import pytest
from PIL import Image

from glyphgen.cli import build_parser, main, overrides_from_args

BOLD_HI = chr(0x1D407) + chr(0x1D422)


@pytest.fixture
def white_png(tmp_path):
    path = tmp_path / "white.png"
    Image.new("RGB", (4, 4), (255, 255, 255)).save(path)
    return path


def test_text_print(utf8_terminal, capsys, isolated_config):
    assert main(["--print", "--text", "Hi"]) == 0
    assert capsys.readouterr().out == BOLD_HI + "\n"
    assert not isolated_config.exists()


def test_text_style_option(utf8_terminal, capsys):
    assert main(["--print", "--text", "A", "--style", "double_struck"]) == 0
    assert capsys.readouterr().out == "\U0001D538\n"


def test_ascii_print(utf8_terminal, capsys, white_png):
    assert main([str(white_png), "--print", "-w", "4"]) == 0
    assert capsys.readouterr().out == "@@@@\n@@@@\n"


def test_unicode_print(utf8_terminal, capsys, white_png):
    assert main([str(white_png), "--print", "-E", "unicode", "-w", "4", "--color-depth", "none"]) == 0
    assert capsys.readouterr().out == "████\n████\n"


def test_image_engine_without_image(utf8_terminal, capsys):
    assert main(["--print", "-E", "unicode", "--text", "x"]) == 2
    assert "needs an image" in capsys.readouterr().err


def test_unknown_extension_is_rejected(utf8_terminal, capsys, tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("hello", encoding="utf-8")
    assert main([str(notes), "--print"]) == 2
    assert "unsupported image format" in capsys.readouterr().err


def test_unreadable_image(utf8_terminal, capsys, tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"nope")
    assert main([str(bad), "--print"]) == 2
    assert "cannot open" in capsys.readouterr().err


def test_empty_text_is_an_error(utf8_terminal, capsys):
    assert main(["--print", "--text", ""]) == 1
    assert capsys.readouterr().err.startswith("glyphgen: empty_input:")


def test_unicode_refused_without_utf8_locale(monkeypatch, capsys, white_png):
    for var in ("LC_ALL", "LC_CTYPE", "WT_SESSION"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("LANG", "C")
    assert main([str(white_png), "--print", "-E", "unicode", "-w", "4"]) == 1
    assert "invalid_config" in capsys.readouterr().err


def test_overrides_only_hold_given_options():
    args = build_parser().parse_args(["img.png", "-w", "40", "--invert"])
    assert overrides_from_args(args) == {"ascii": {"width": 40, "invert": True}, "unicode": {"width": 40}}


def test_text_without_image_selects_text_engine():
    args = build_parser().parse_args(["--text", "hello", "--colors", "#ff0000", "#00ff00", "#0000ff"])
    partial = overrides_from_args(args)
    assert partial["app"] == {"engine": "text"}
    assert partial["text"]["start_color"] == "#ff0000"
    assert partial["text"]["end_color"] == "#0000ff"
    assert partial["text"]["palette"] == ["#ff0000", "#00ff00", "#0000ff"]
