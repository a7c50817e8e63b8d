#!/usr/bin/env python3
# glyphgen/rendering/ascii_mode.py
"""
ASCII renderer.
Resamples to the cell grid, maps luminance to a dark-to-light character set,
optionally biased toward edges with a Sobel gradient.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from glyphgen.color import luminance_array
from glyphgen.errors import InvalidConfig
from glyphgen.image import DecodedImage
from glyphgen.rendering.charsets import CharacterSet, charset_index
from glyphgen.rendering.resample import area_resample, check_inputs, output_grid

__all__ = [
    "EDGE_BLEND_WEIGHT",
    "AsciiConfig",
    "render_ascii",
    "sobel_magnitude",
    "map_luminance",
]

# Share of the edge map in the blended brightness when edge_enhance is on.
EDGE_BLEND_WEIGHT = 0.5

_SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
_SOBEL_Y = _SOBEL_X.T
# Largest magnitude a [0, 1] field can produce: |Gx| and |Gy| both reach 4.
_SOBEL_MAX = float(np.hypot(4.0, 4.0))


@dataclass(frozen=True)
class AsciiConfig:
    target_width: int = 80
    charset: CharacterSet = field(default_factory=CharacterSet.extended)
    invert: bool = False
    edge_enhance: bool = False
    edge_blend: float = EDGE_BLEND_WEIGHT


def sobel_magnitude(gray: np.ndarray) -> np.ndarray:
    """3x3 Sobel gradient magnitude of a [0, 1] grid, normalised to [0, 1]. Borders use edge padding."""
    padded = np.pad(gray, 1, mode="edge")
    h, w = gray.shape
    gx = np.zeros((h, w), dtype=np.float64)
    gy = np.zeros((h, w), dtype=np.float64)
    for ky in range(3):
        for kx in range(3):
            window = padded[ky:ky + h, kx:kx + w]
            gx += _SOBEL_X[ky, kx] * window
            gy += _SOBEL_Y[ky, kx] * window
    return np.clip(np.hypot(gx, gy) / _SOBEL_MAX, 0.0, 1.0)


def map_luminance(values: np.ndarray, charset: CharacterSet, invert: bool = False) -> np.ndarray:
    index = charset_index(charset)
    v = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0)
    if invert:
        v = 1.0 - v
    return index.map_array(v)


def render_ascii(image: DecodedImage, config: AsciiConfig) -> str:
    """Render to rows of exactly target_width glyphs joined by newlines."""
    # Charset first: an empty set is rejected before any sizing work.
    charset_index(config.charset)
    check_inputs(image, config.target_width)
    if not 0.0 <= config.edge_blend <= 1.0:
        raise InvalidConfig(f"edge blend must be within [0, 1], got {config.edge_blend}")

    w, h = output_grid(image, config.target_width)
    arr = area_resample(image, w, h)
    lum = luminance_array(arr)

    if config.edge_enhance:
        edges = sobel_magnitude(lum)
        lum = (1.0 - config.edge_blend) * lum + config.edge_blend * edges

    glyphs = map_luminance(lum, config.charset, config.invert)
    return "\n".join("".join(glyphs[y, :].tolist()) for y in range(h))
