#!/usr/bin/env python3
# glyphgen/color.py
"""
Luminance and terminal color utilities.

- BT.709 luminance for single samples and whole numpy grids.
- Quantization to the xterm 16/256 palettes (nearest under Euclidean RGB,
  ties to the lowest palette index), TrueColor identity, or on/off for
  terminals without color.
- ANSI escape formatting and gradient helpers.

All functions are pure. Palette tables are built once at import and only read
afterwards, so they can be used from any thread.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Sequence, Tuple, Union

import numpy as np

Rgb = Tuple[int, int, int]

__all__ = [
    "Rgb",
    "ColorDepth",
    "TermColor",
    "luminance",
    "luminance_array",
    "quantize",
    "quantize_array",
    "to_term_colors",
    "palette_rgb",
    "fg_escape",
    "bg_escape",
    "ANSI_RESET",
    "interpolate_color",
    "hue_to_rgb",
    "parse_hex_color",
    "rgb_to_hex",
]

ANSI_RESET = "\x1b[0m"

# Above this luminance a NONE-depth cell counts as "on".
ON_OFF_CUTOFF = 0.5


class ColorDepth(IntEnum):
    NONE = 0
    ANSI16 = 1
    ANSI256 = 2
    TRUECOLOR = 3

    @property
    def label(self) -> str:
        return _DEPTH_LABELS[self]

    @classmethod
    def from_name(cls, name: Union[str, int, "ColorDepth"]) -> "ColorDepth":
        if isinstance(name, ColorDepth):
            return name
        key = str(name).strip().lower()
        for depth, aliases in _DEPTH_ALIASES.items():
            if key in aliases:
                return depth
        raise ValueError(f"unknown color depth: {name!r}")

    def fallback_chain(self) -> List["ColorDepth"]:
        """Depths to try, best first: TrueColor -> 256 -> 16 -> None."""
        return [ColorDepth(v) for v in range(int(self), -1, -1)]

    def next(self) -> "ColorDepth":
        return ColorDepth((int(self) + 1) % 4)

    def prev(self) -> "ColorDepth":
        return ColorDepth((int(self) - 1) % 4)


_DEPTH_LABELS = {
    ColorDepth.NONE: "None",
    ColorDepth.ANSI16: "16 Colors",
    ColorDepth.ANSI256: "256 Colors",
    ColorDepth.TRUECOLOR: "True Color",
}

_DEPTH_ALIASES = {
    ColorDepth.NONE: ("none", "0", "mono", "nocolor"),
    ColorDepth.ANSI16: ("16", "ansi16", "color16"),
    ColorDepth.ANSI256: ("256", "ansi256", "color256"),
    ColorDepth.TRUECOLOR: ("truecolor", "24bit", "rgb", "true"),
}


@dataclass(frozen=True)
class TermColor:
    """A color already reduced to what a terminal of `depth` can show.

    value is a palette index for ANSI16/ANSI256, an RGB triple for TRUECOLOR
    and 0/1 (off/on) for NONE.
    """
    depth: ColorDepth
    value: Union[int, Rgb]

    @property
    def rgb(self) -> Rgb:
        if self.depth == ColorDepth.TRUECOLOR:
            return self.value  # type: ignore[return-value]
        if self.depth == ColorDepth.NONE:
            return (255, 255, 255) if self.value else (0, 0, 0)
        return palette_rgb(int(self.value))


# -------------------------
# Palettes
# -------------------------

_XTERM_16: Sequence[Rgb] = (
    (0, 0, 0), (205, 0, 0), (0, 205, 0), (205, 205, 0),
    (0, 0, 238), (205, 0, 205), (0, 205, 205), (229, 229, 229),
    (127, 127, 127), (255, 0, 0), (0, 255, 0), (255, 255, 0),
    (92, 92, 255), (255, 0, 255), (0, 255, 255), (255, 255, 255),
)

_CUBE_LEVELS = (0, 95, 135, 175, 215, 255)


def _build_palette_256() -> np.ndarray:
    rows = list(_XTERM_16)
    for r in _CUBE_LEVELS:
        for g in _CUBE_LEVELS:
            for b in _CUBE_LEVELS:
                rows.append((r, g, b))
    for i in range(24):
        v = 8 + 10 * i
        rows.append((v, v, v))
    return np.array(rows, dtype=np.int32)


_PALETTE_256 = _build_palette_256()
_PALETTE_256.setflags(write=False)
_PALETTE_16 = _PALETTE_256[:16]
# 216 cube + 24 grays; the 16 system colors are not searched at 256 depth.
_SEARCH_256 = _PALETTE_256[16:]

_CHUNK = 4096


def palette_rgb(index: int) -> Rgb:
    r, g, b = _PALETTE_256[index]
    return int(r), int(g), int(b)


def _nearest(palette: np.ndarray, pixels: np.ndarray) -> np.ndarray:
    """Index of the closest palette row for each pixel; argmin keeps the lowest index on ties."""
    flat = pixels.reshape(-1, 3).astype(np.int32)
    out = np.empty(flat.shape[0], dtype=np.int32)
    for start in range(0, flat.shape[0], _CHUNK):
        chunk = flat[start:start + _CHUNK]
        diff = chunk[:, None, :] - palette[None, :, :]
        dist = np.einsum("ijk,ijk->ij", diff, diff)
        out[start:start + _CHUNK] = np.argmin(dist, axis=1)
    return out.reshape(pixels.shape[:-1])


# -------------------------
# Luminance
# -------------------------

def _clamp_channel(v) -> float:
    return min(255.0, max(0.0, float(v)))


# BT.709 weights scaled to integers; they sum to exactly 10000 so white maps to 1.0.
_W709 = (2126.0, 7152.0, 722.0)
_W709_SCALE = 10000.0 * 255.0


def luminance(sample: Sequence[float]) -> float:
    """BT.709 perceptual brightness of an RGB(A) sample, in [0, 1]."""
    r, g, b = (_clamp_channel(c) for c in sample[:3])
    y = (_W709[0] * r + _W709[1] * g + _W709[2] * b) / _W709_SCALE
    return min(1.0, max(0.0, y))


def luminance_array(arr: np.ndarray) -> np.ndarray:
    """Vectorised BT.709 luminance over an (..., 3+) array of 0..255 samples."""
    rgb = np.clip(arr[..., :3].astype(np.float64), 0.0, 255.0)
    lum = (_W709[0] * rgb[..., 0] + _W709[1] * rgb[..., 1] + _W709[2] * rgb[..., 2]) / _W709_SCALE
    return np.clip(lum, 0.0, 1.0)


# -------------------------
# Quantization
# -------------------------

def _as_rgb(color: Union[Sequence[int], TermColor]) -> Rgb:
    if isinstance(color, TermColor):
        return color.rgb
    r, g, b = (int(round(_clamp_channel(c))) for c in color[:3])
    return r, g, b


def quantize(color: Union[Sequence[int], TermColor], depth: ColorDepth) -> TermColor:
    """Reduce a color to the nearest one a terminal of `depth` can show."""
    depth = ColorDepth(depth)
    rgb = _as_rgb(color)
    if depth == ColorDepth.TRUECOLOR:
        return TermColor(depth, rgb)
    if depth == ColorDepth.NONE:
        return TermColor(depth, 1 if luminance(rgb) >= ON_OFF_CUTOFF else 0)
    px = np.array([rgb], dtype=np.int32)
    if depth == ColorDepth.ANSI256:
        return TermColor(depth, 16 + int(_nearest(_SEARCH_256, px)[0]))
    return TermColor(depth, int(_nearest(_PALETTE_16, px)[0]))


def quantize_array(arr: np.ndarray, depth: ColorDepth) -> np.ndarray:
    """Quantize an (..., 3) grid. TrueColor returns uint8 RGB, other depths integer values."""
    depth = ColorDepth(depth)
    rgb = np.clip(np.rint(arr[..., :3]), 0, 255)
    if depth == ColorDepth.TRUECOLOR:
        return rgb.astype(np.uint8)
    if depth == ColorDepth.NONE:
        return (luminance_array(rgb) >= ON_OFF_CUTOFF).astype(np.int32)
    if depth == ColorDepth.ANSI256:
        return _nearest(_SEARCH_256, rgb) + 16
    return _nearest(_PALETTE_16, rgb)


def to_term_colors(arr: np.ndarray, depth: ColorDepth) -> List[List[TermColor]]:
    """Quantize an (H, W, 3) grid into rows of TermColor values."""
    depth = ColorDepth(depth)
    q = quantize_array(arr, depth)
    if depth == ColorDepth.TRUECOLOR:
        return [[TermColor(depth, (int(p[0]), int(p[1]), int(p[2]))) for p in row] for row in q]
    return [[TermColor(depth, int(v)) for v in row] for row in q]


# -------------------------
# ANSI escapes
# -------------------------

def fg_escape(color: TermColor) -> str:
    if color.depth == ColorDepth.NONE:
        return ""
    if color.depth == ColorDepth.TRUECOLOR:
        r, g, b = color.value  # type: ignore[misc]
        return f"\x1b[38;2;{r};{g};{b}m"
    if color.depth == ColorDepth.ANSI256:
        return f"\x1b[38;5;{color.value}m"
    v = int(color.value)
    return f"\x1b[{30 + v}m" if v < 8 else f"\x1b[{90 + v - 8}m"


def bg_escape(color: TermColor) -> str:
    if color.depth == ColorDepth.NONE:
        return ""
    if color.depth == ColorDepth.TRUECOLOR:
        r, g, b = color.value  # type: ignore[misc]
        return f"\x1b[48;2;{r};{g};{b}m"
    if color.depth == ColorDepth.ANSI256:
        return f"\x1b[48;5;{color.value}m"
    v = int(color.value)
    return f"\x1b[{40 + v}m" if v < 8 else f"\x1b[{100 + v - 8}m"


# -------------------------
# Gradients
# -------------------------

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def interpolate_color(start: Rgb, end: Rgb, t: float) -> Rgb:
    """Linear per-channel blend; t is clamped to [0, 1]."""
    t = min(1.0, max(0.0, float(t)))
    return (
        _round_half_up((1.0 - t) * start[0] + t * end[0]),
        _round_half_up((1.0 - t) * start[1] + t * end[1]),
        _round_half_up((1.0 - t) * start[2] + t * end[2]),
    )


def hue_to_rgb(hue: float) -> Rgb:
    """Fully saturated color for a hue in degrees."""
    h = (hue % 360.0) / 60.0
    x = 1.0 - abs((h % 2.0) - 1.0)
    sector = int(h)
    if sector == 0:
        r, g, b = 1.0, x, 0.0
    elif sector == 1:
        r, g, b = x, 1.0, 0.0
    elif sector == 2:
        r, g, b = 0.0, 1.0, x
    elif sector == 3:
        r, g, b = 0.0, x, 1.0
    elif sector == 4:
        r, g, b = x, 0.0, 1.0
    else:
        r, g, b = 1.0, 0.0, x
    return int(r * 255), int(g * 255), int(b * 255)


def parse_hex_color(value: str) -> Rgb:
    s = value.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6:
        raise ValueError(f"bad hex color: {value!r}")
    return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)


def rgb_to_hex(rgb: Rgb) -> str:
    r, g, b = rgb
    return f"#{r:02x}{g:02x}{b:02x}"
