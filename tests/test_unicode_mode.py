"""Tests for the Blocks, Half-Blocks and Braille renderers."""

import math

import numpy as np
import pytest

from glyphgen.capabilities import TerminalCapabilities
from glyphgen.color import ColorDepth, TermColor, luminance_array
from glyphgen.errors import EmptyInput, InvalidConfig
from glyphgen.image import DecodedImage
from glyphgen.rendering.braille_mode import braille_char
from glyphgen.rendering.unicode_mode import UnicodeConfig, UnicodeMode, render_unicode

RED, GREEN, BLUE = (255, 0, 0), (0, 255, 0), (0, 0, 255)
FULL, BLANK = chr(0x28FF), chr(0x2800)


def _rows(*colors, width=4):
    arr = np.zeros((len(colors), width, 3), dtype=np.uint8)
    for y, c in enumerate(colors):
        arr[y, :] = c
    return DecodedImage.from_array(arr)


class TestBlocks:
    def test_white_is_full_block_with_white_fg(self, white_4x4):
        grid = render_unicode(white_4x4, UnicodeConfig(target_width=4, mode=UnicodeMode.BLOCKS))
        assert grid.text == "████\n████"
        assert grid.rows[0][0].fg == TermColor(ColorDepth.TRUECOLOR, (255, 255, 255))

    def test_black_is_space(self, black_4x4):
        grid = render_unicode(black_4x4, UnicodeConfig(target_width=4, mode=UnicodeMode.BLOCKS))
        assert grid.text == "    \n    "

    def test_width(self, noise_image):
        grid = render_unicode(noise_image, UnicodeConfig(target_width=33, mode=UnicodeMode.BLOCKS))
        assert all(len(row) == 33 for row in grid.rows)


class TestHalfBlocks:
    @pytest.mark.parametrize("height", [1, 2, 3, 4, 5, 9])
    def test_row_count_is_half_rounded_up(self, height):
        img = DecodedImage.solid(6, height, (90, 90, 90))
        # target width == image width keeps every source row as one sample row
        grid = render_unicode(img, UnicodeConfig(target_width=6, mode=UnicodeMode.HALF_BLOCKS))
        assert grid.height == math.ceil(height / 2)

    def test_fg_is_upper_row_bg_is_lower_row(self):
        img = _rows(RED, GREEN, BLUE, (255, 255, 255))
        grid = render_unicode(img, UnicodeConfig(target_width=4))
        cell = grid.rows[0][0]
        assert cell.char == "▀"
        assert cell.fg.rgb == RED
        assert cell.bg.rgb == GREEN
        assert grid.rows[1][0].fg.rgb == BLUE

    def test_odd_height_reuses_upper_color_below(self):
        img = _rows(RED, GREEN, BLUE)
        grid = render_unicode(img, UnicodeConfig(target_width=4))
        assert grid.height == 2
        last = grid.rows[1][0]
        assert last.fg.rgb == BLUE
        assert last.bg.rgb == BLUE

    def test_no_color_uses_half_glyphs(self):
        img = _rows((255, 255, 255), (0, 0, 0), (0, 0, 0), (255, 255, 255))
        grid = render_unicode(img, UnicodeConfig(target_width=4, color_depth=ColorDepth.NONE))
        assert grid.text == "▀▀▀▀\n▄▄▄▄"
        assert grid.to_ansi() == grid.text

    def test_ansi_stream_sets_colors_once_per_run(self):
        img = _rows(RED, GREEN)
        ansi = render_unicode(img, UnicodeConfig(target_width=4)).to_ansi()
        assert ansi == "\x1b[38;2;255;0;0m\x1b[48;2;0;255;0m▀▀▀▀\x1b[0m"

    def test_fragments_merge_runs(self):
        img = _rows(RED, GREEN)
        frags = render_unicode(img, UnicodeConfig(target_width=4)).to_fragments()
        assert frags == [[("fg:#ff0000 bg:#00ff00", "▀▀▀▀")]]


class TestBraille:
    def test_all_lit_and_all_dark(self):
        white = DecodedImage.solid(2, 4, (255, 255, 255))
        black = DecodedImage.solid(2, 4, (0, 0, 0))
        cfg = UnicodeConfig(target_width=1, mode=UnicodeMode.BRAILLE)
        assert render_unicode(white, cfg).text == FULL
        assert render_unicode(black, cfg).text == BLANK

    def test_dot_layout(self):
        arr = np.zeros((4, 2, 3), dtype=np.uint8)
        arr[0, 0] = 255      # dot 1
        arr[3, 1] = 255      # dot 8
        grid = render_unicode(DecodedImage.from_array(arr), UnicodeConfig(target_width=1, mode=UnicodeMode.BRAILLE))
        assert grid.text == chr(0x2800 | 0x01 | 0x80)

    def test_braille_char_bits(self):
        block = np.zeros((4, 2), dtype=bool)
        block[1, 1] = True   # dot 5
        assert braille_char(block) == chr(0x2810)

    def test_threshold_is_tunable(self):
        gray = DecodedImage.solid(2, 4, (100, 100, 100))
        low = UnicodeConfig(target_width=1, mode=UnicodeMode.BRAILLE, braille_threshold=0.1)
        high = UnicodeConfig(target_width=1, mode=UnicodeMode.BRAILLE, braille_threshold=0.9)
        assert render_unicode(gray, low).text == FULL
        assert render_unicode(gray, high).text == BLANK

    def test_dot_needs_luminance_above_threshold(self):
        gray = DecodedImage.solid(2, 4, (100, 100, 100))
        level = float(luminance_array(gray.pixels.astype(np.float64))[0, 0])
        at = UnicodeConfig(target_width=1, mode=UnicodeMode.BRAILLE, braille_threshold=level)
        assert render_unicode(gray, at).text == BLANK

    def test_dither_lights_some_dots_of_mid_gray(self):
        gray = DecodedImage.solid(8, 16, (128, 128, 128))
        cfg = UnicodeConfig(target_width=4, mode=UnicodeMode.BRAILLE, dither=True)
        glyphs = set(render_unicode(gray, cfg).text.replace("\n", ""))
        assert glyphs - {BLANK, FULL}

    def test_threshold_out_of_range(self, white_4x4):
        with pytest.raises(InvalidConfig):
            render_unicode(white_4x4, UnicodeConfig(target_width=2, mode=UnicodeMode.BRAILLE, braille_threshold=2.0))

    def test_single_color_is_mean_of_cell(self):
        arr = np.zeros((4, 2, 3), dtype=np.uint8)
        arr[:2] = (200, 0, 0)
        grid = render_unicode(DecodedImage.from_array(arr), UnicodeConfig(target_width=1, mode=UnicodeMode.BRAILLE))
        assert grid.rows[0][0].fg.rgb == (100, 0, 0)
        assert grid.rows[0][0].bg is None


class TestCapabilities:
    def test_color_falls_back_to_terminal_depth(self, gradient_image):
        caps = TerminalCapabilities(color_depth=ColorDepth.ANSI16)
        grid = render_unicode(gradient_image, UnicodeConfig(target_width=8), caps)
        assert grid.depth == ColorDepth.ANSI16
        assert all(c.fg.depth == ColorDepth.ANSI16 for row in grid.rows for c in row)

    def test_lower_request_is_kept(self, gradient_image):
        caps = TerminalCapabilities(color_depth=ColorDepth.TRUECOLOR)
        grid = render_unicode(gradient_image, UnicodeConfig(target_width=8, color_depth=ColorDepth.ANSI256), caps)
        assert grid.depth == ColorDepth.ANSI256

    def test_no_unicode_terminal_is_rejected(self, white_4x4):
        with pytest.raises(InvalidConfig):
            render_unicode(white_4x4, UnicodeConfig(target_width=4), TerminalCapabilities(unicode=False))


class TestValidation:
    def test_zero_width(self, white_4x4):
        with pytest.raises(InvalidConfig):
            render_unicode(white_4x4, UnicodeConfig(target_width=0))

    def test_empty_image(self, empty_image):
        with pytest.raises(EmptyInput):
            render_unicode(empty_image, UnicodeConfig(target_width=4, mode=UnicodeMode.BRAILLE))

    def test_unknown_depth(self, white_4x4):
        with pytest.raises(InvalidConfig):
            render_unicode(white_4x4, UnicodeConfig(target_width=4, color_depth="512"))
