#!/usr/bin/env python3
# glyphgen/rendering/braille_mode.py
"""
Braille (2x4) renderer.
Encodes eight subpixels per terminal cell using Unicode Braille patterns.
A subpixel's dot is raised when it is brighter than the threshold (or the
ordered-dither map when dithering). The cell takes one foreground color, the
mean of its eight subpixels.
"""

from __future__ import annotations

from typing import List

import numpy as np

from glyphgen.color import ColorDepth, luminance_array, to_term_colors
from glyphgen.image import DecodedImage
from glyphgen.rendering.cells import Cell, CellGrid
from glyphgen.rendering.resample import area_resample, output_grid

__all__ = ["BRAILLE_BASE", "BRAILLE_THRESHOLD", "DOT_BITS", "braille_char", "render_braille"]

BRAILLE_BASE = 0x2800
BRAILLE_THRESHOLD = 0.5

# Braille bit positions:
#  dots: 1 4
#        2 5
#        3 6
#        7 8
# Unicode = 0x2800 | bits
DOT_BITS = np.array(
    (
        (0x01, 0x08),  # row 0: col 0 -> dot1, col 1 -> dot4
        (0x02, 0x10),  # row 1: col 0 -> dot2, col 1 -> dot5
        (0x04, 0x20),  # row 2: col 0 -> dot3, col 1 -> dot6
        (0x40, 0x80),  # row 3: col 0 -> dot7, col 1 -> dot8
    ),
    dtype=np.int32,
)

# 4x4 Bayer matrix as thresholds in (0, 1).
_BAYER_4 = (np.array(
    (
        (0, 8, 2, 10),
        (12, 4, 14, 6),
        (3, 11, 1, 9),
        (15, 7, 13, 5),
    ),
    dtype=np.float64,
) + 0.5) / 16.0


def braille_char(block: np.ndarray) -> str:
    """block: (4, 2) booleans, True = raised dot."""
    return chr(BRAILLE_BASE | int((DOT_BITS * block.astype(np.int32)).sum()))


def _dither_map(h: int, w: int) -> np.ndarray:
    reps_y = -(-h // 4)
    reps_x = -(-w // 4)
    return np.tile(_BAYER_4, (reps_y, reps_x))[:h, :w]


def render_braille(
    image: DecodedImage,
    target_width: int,
    depth: ColorDepth,
    threshold: float = BRAILLE_THRESHOLD,
    dither: bool = False,
) -> CellGrid:
    # Each terminal cell -> 2x4 subpixels
    pw = target_width * 2
    _, ph = output_grid(image, target_width, 4)
    rows_out = -(-ph // 4)
    ph = rows_out * 4

    arr = area_resample(image, pw, ph)
    gray = luminance_array(arr)
    cutoff = _dither_map(ph, pw) if dither else threshold
    lit = gray > cutoff

    # (rows, 4, cols, 2) -> (rows, cols, 4, 2)
    blocks = lit.reshape(rows_out, 4, target_width, 2).transpose(0, 2, 1, 3)
    codes = (blocks.astype(np.int32) * DOT_BITS).sum(axis=(2, 3))

    cell_rgb = arr.reshape(rows_out, 4, target_width, 2, 3).mean(axis=(1, 3))
    colors = to_term_colors(cell_rgb, depth)

    rows: List[List[Cell]] = []
    for y in range(rows_out):
        rows.append([
            Cell(chr(BRAILLE_BASE + int(codes[y, x])), colors[y][x])
            for x in range(target_width)
        ])
    return CellGrid.build(rows, depth)
