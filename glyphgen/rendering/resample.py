#!/usr/bin/env python3
# glyphgen/rendering/resample.py
"""
Output-grid sizing and area-averaging resampling.

Terminal cells are about twice as tall as they are wide, so a grid
target_width columns wide covers target_width / aspect * 0.5 rows of cells.
Engines that pack several source rows into one cell ask for proportionally
more sample rows.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image

from glyphgen.errors import EmptyInput, InvalidConfig
from glyphgen.image import DecodedImage

__all__ = ["CELL_ASPECT", "check_inputs", "output_grid", "area_resample"]

# Cell width / cell height.
CELL_ASPECT = 0.5


def check_inputs(image: DecodedImage, target_width: int) -> None:
    if isinstance(target_width, bool) or not isinstance(target_width, (int, np.integer)) or target_width < 1:
        raise InvalidConfig(f"target width must be a positive integer, got {target_width!r}")
    if not isinstance(image, DecodedImage):
        raise InvalidConfig(f"expected a DecodedImage, got {type(image).__name__}")
    if image.is_empty:
        raise EmptyInput("image has zero area")


def output_grid(image: DecodedImage, target_width: int, samples_per_cell_row: int = 1) -> Tuple[int, int]:
    """Return (width, height) of the sample grid, rounding height to nearest and at least 1."""
    aspect = image.width / image.height
    rows = target_width / aspect * CELL_ASPECT * samples_per_cell_row
    return target_width, max(1, int(np.floor(rows + 0.5)))


def area_resample(image: DecodedImage, width: int, height: int) -> np.ndarray:
    """Box-filter the image to (height, width, 3); each sample is the mean of the pixels it covers."""
    if width < 1 or height < 1:
        raise EmptyInput(f"resampled grid {width}x{height} has zero area")
    if image.width == width and image.height == height:
        return image.pixels.astype(np.float64)
    small = image.to_pil().resize((width, height), Image.BOX)
    return np.asarray(small, dtype=np.float64)
