#!/usr/bin/env python3
# glyphgen/rendering/block_mode.py
"""
Shade-block and half-block renderers.

Blocks: one sample row per output row, luminance bucketed into five shades
" ░▒▓█", foreground = quantized mean color of the covered pixels.

Half-blocks: two sample rows per output row using "▀". The upper sample is
the foreground, the lower sample the background, doubling vertical resolution.
With an odd number of sample rows the last row's lower half reuses the upper
color. Without color the glyph itself carries the on/off pattern.
"""

from __future__ import annotations

from typing import List

import numpy as np

from glyphgen.color import ON_OFF_CUTOFF, ColorDepth, luminance_array, to_term_colors
from glyphgen.image import DecodedImage
from glyphgen.rendering.cells import Cell, CellGrid
from glyphgen.rendering.charsets import CharacterSet, charset_index
from glyphgen.rendering.resample import area_resample, output_grid

__all__ = ["UPPER_HALF", "render_blocks", "render_half_blocks"]

UPPER_HALF = "▀"

# (top on, bottom on) -> glyph, used when there is no color to carry the picture.
_MONO_HALVES = {
    (False, False): " ",
    (True, False): "▀",
    (False, True): "▄",
    (True, True): "█",
}


def render_blocks(image: DecodedImage, target_width: int, depth: ColorDepth) -> CellGrid:
    w, h = output_grid(image, target_width)
    arr = area_resample(image, w, h)
    glyphs = charset_index(CharacterSet.blocks()).map_array(luminance_array(arr))
    colors = to_term_colors(arr, depth)

    rows: List[List[Cell]] = []
    for y in range(h):
        rows.append([Cell(glyphs[y, x], colors[y][x]) for x in range(w)])
    return CellGrid.build(rows, depth)


def render_half_blocks(image: DecodedImage, target_width: int, depth: ColorDepth) -> CellGrid:
    w, ph = output_grid(image, target_width, 2)
    arr = area_resample(image, w, ph)

    top = arr[0::2]
    bottom = arr[1::2]
    if bottom.shape[0] < top.shape[0]:
        # Odd sample height: lower half of the last row matches its upper half.
        bottom = np.concatenate([bottom, top[-1:]], axis=0)

    rows: List[List[Cell]] = []
    if depth == ColorDepth.NONE:
        top_on = luminance_array(top) >= ON_OFF_CUTOFF
        bottom_on = luminance_array(bottom) >= ON_OFF_CUTOFF
        for y in range(top.shape[0]):
            rows.append([
                Cell(_MONO_HALVES[(bool(top_on[y, x]), bool(bottom_on[y, x]))])
                for x in range(w)
            ])
        return CellGrid.build(rows, depth)

    fg = to_term_colors(top, depth)
    bg = to_term_colors(bottom, depth)
    for y in range(top.shape[0]):
        rows.append([Cell(UPPER_HALF, fg[y][x], bg[y][x]) for x in range(w)])
    return CellGrid.build(rows, depth)
