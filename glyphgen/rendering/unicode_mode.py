#!/usr/bin/env python3
# glyphgen/rendering/unicode_mode.py
"""
Unicode art front-end: validates the request, resolves the color depth
against the terminal, and hands off to the block or braille backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from glyphgen.capabilities import TerminalCapabilities, select_color_depth
from glyphgen.color import ColorDepth
from glyphgen.errors import InvalidConfig
from glyphgen.image import DecodedImage
from glyphgen.rendering.block_mode import render_blocks, render_half_blocks
from glyphgen.rendering.braille_mode import BRAILLE_THRESHOLD, render_braille
from glyphgen.rendering.cells import CellGrid
from glyphgen.rendering.resample import check_inputs

__all__ = ["UnicodeMode", "UnicodeConfig", "render_unicode"]


class UnicodeMode(Enum):
    BLOCKS = "blocks"
    HALF_BLOCKS = "half_blocks"
    BRAILLE = "braille"

    @property
    def label(self) -> str:
        return {"blocks": "Blocks", "half_blocks": "Half-Blocks", "braille": "Braille"}[self.value]

    def next(self) -> "UnicodeMode":
        members = list(UnicodeMode)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> "UnicodeMode":
        members = list(UnicodeMode)
        return members[(members.index(self) - 1) % len(members)]


@dataclass(frozen=True)
class UnicodeConfig:
    target_width: int = 80
    mode: UnicodeMode = UnicodeMode.HALF_BLOCKS
    color_depth: ColorDepth = ColorDepth.TRUECOLOR
    braille_threshold: float = BRAILLE_THRESHOLD
    dither: bool = False


def render_unicode(
    image: DecodedImage,
    config: UnicodeConfig,
    capabilities: Optional[TerminalCapabilities] = None,
) -> CellGrid:
    """Render to a grid of (glyph, fg, bg) cells. Raises InvalidConfig / EmptyInput."""
    if capabilities is not None and not capabilities.unicode:
        raise InvalidConfig("terminal has no Unicode support; only the ASCII engine is available")
    try:
        mode = UnicodeMode(config.mode)
        requested = ColorDepth.from_name(config.color_depth)
    except ValueError as exc:
        raise InvalidConfig(str(exc)) from exc
    check_inputs(image, config.target_width)

    depth = select_color_depth(requested, capabilities)

    if mode == UnicodeMode.BLOCKS:
        return render_blocks(image, config.target_width, depth)
    if mode == UnicodeMode.HALF_BLOCKS:
        return render_half_blocks(image, config.target_width, depth)
    if not 0.0 <= config.braille_threshold <= 1.0:
        raise InvalidConfig(f"braille threshold must be within [0, 1], got {config.braille_threshold}")
    return render_braille(image, config.target_width, depth, config.braille_threshold, config.dither)
