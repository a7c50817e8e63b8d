#!/usr/bin/env python3
# glyphgen/rendering/text_mode.py
"""
Text stylizer.

Maps ASCII letters and digits onto the Unicode "styled" alphanumerics
(Mathematical Alphanumeric Symbols, fullwidth forms, enclosed letters) and
optionally paints a gradient across the result.

Work is done per grapheme cluster: only a cluster's base character is
replaced, combining marks ride along untouched, and the output has exactly
as many clusters as the input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

from glyphgen.color import (
    ANSI_RESET,
    ColorDepth,
    Rgb,
    fg_escape,
    hue_to_rgb,
    interpolate_color,
    quantize,
)
from glyphgen.errors import EmptyInput, InternalFailure, InvalidConfig
from glyphgen.unicode_text import grapheme_count, split_graphemes

__all__ = [
    "UnicodeStyle",
    "NoGradient",
    "Horizontal",
    "Vertical",
    "PerCharacter",
    "Rainbow",
    "Gradient",
    "TextConfig",
    "StyledCluster",
    "style_char",
    "style_text",
    "stylize_clusters",
    "format_clusters",
    "stylize_text",
]


class UnicodeStyle(Enum):
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold_italic"
    SCRIPT = "script"
    BOLD_SCRIPT = "bold_script"
    FRAKTUR = "fraktur"
    DOUBLE_STRUCK = "double_struck"
    SANS_SERIF = "sans_serif"
    SANS_SERIF_BOLD = "sans_serif_bold"
    MONOSPACE = "monospace"
    FULLWIDTH = "fullwidth"
    CIRCLED = "circled"
    NEGATIVE_CIRCLED = "negative_circled"
    SQUARED = "squared"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title().replace("Double Struck", "Double-Struck").replace(
            "Sans Serif", "Sans-Serif")

    @classmethod
    def from_name(cls, name: Union[str, "UnicodeStyle"]) -> "UnicodeStyle":
        if isinstance(name, UnicodeStyle):
            return name
        key = str(name).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            raise InvalidConfig(f"unknown text style: {name!r}") from None

    def next(self) -> "UnicodeStyle":
        members = list(UnicodeStyle)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> "UnicodeStyle":
        members = list(UnicodeStyle)
        return members[(members.index(self) - 1) % len(members)]


# style -> (A base, a base or None, 0 base or None)
_BASES: Dict[UnicodeStyle, Tuple[int, Optional[int], Optional[int]]] = {
    UnicodeStyle.BOLD: (0x1D400, 0x1D41A, 0x1D7CE),
    UnicodeStyle.ITALIC: (0x1D434, 0x1D44E, None),
    UnicodeStyle.BOLD_ITALIC: (0x1D468, 0x1D482, None),
    UnicodeStyle.SCRIPT: (0x1D49C, 0x1D4B6, None),
    UnicodeStyle.BOLD_SCRIPT: (0x1D4D0, 0x1D4EA, None),
    UnicodeStyle.FRAKTUR: (0x1D504, 0x1D51E, None),
    UnicodeStyle.DOUBLE_STRUCK: (0x1D538, 0x1D552, 0x1D7D8),
    UnicodeStyle.SANS_SERIF: (0x1D5A0, 0x1D5BA, 0x1D7E2),
    UnicodeStyle.SANS_SERIF_BOLD: (0x1D5D4, 0x1D5EE, 0x1D7EC),
    UnicodeStyle.MONOSPACE: (0x1D670, 0x1D68A, 0x1D7F6),
    UnicodeStyle.FULLWIDTH: (0xFF21, 0xFF41, 0xFF10),
    UnicodeStyle.CIRCLED: (0x24B6, 0x24D0, 0x2460),
    UnicodeStyle.NEGATIVE_CIRCLED: (0x1F150, None, None),
    UnicodeStyle.SQUARED: (0x1F130, None, None),
}

# Reserved holes in the math alphanumeric block; the letters live in
# Letterlike Symbols instead.
_HOLES: Dict[UnicodeStyle, Dict[str, int]] = {
    UnicodeStyle.ITALIC: {"h": 0x210E},
    UnicodeStyle.SCRIPT: {
        "B": 0x212C, "E": 0x2130, "F": 0x2131, "H": 0x210B, "I": 0x2110,
        "L": 0x2112, "M": 0x2133, "R": 0x211B,
        "e": 0x212F, "g": 0x210A, "o": 0x2134,
    },
    UnicodeStyle.FRAKTUR: {"C": 0x212D, "H": 0x210C, "I": 0x2111, "R": 0x211C, "Z": 0x2128},
    UnicodeStyle.DOUBLE_STRUCK: {
        "C": 0x2102, "H": 0x210D, "N": 0x2115, "P": 0x2119, "Q": 0x211A, "R": 0x211D, "Z": 0x2124,
    },
}

_CIRCLED_ZERO = 0x24EA


def style_char(c: str, style: UnicodeStyle) -> str:
    """Styled form of one character, or the character itself when the style has none."""
    if not ("0" <= c <= "9" or "A" <= c <= "Z" or "a" <= c <= "z"):
        return c
    hole = _HOLES.get(style, {}).get(c)
    if hole is not None:
        return chr(hole)
    upper, lower, digits = _BASES[style]
    if "A" <= c <= "Z":
        return chr(upper + ord(c) - ord("A"))
    if "a" <= c <= "z":
        if lower is None:
            return style_char(c.upper(), style)
        return chr(lower + ord(c) - ord("a"))
    if digits is None:
        return c
    if style == UnicodeStyle.CIRCLED:
        return chr(_CIRCLED_ZERO) if c == "0" else chr(digits + ord(c) - ord("1"))
    return chr(digits + ord(c) - ord("0"))


def _style_cluster(cluster: str, style: UnicodeStyle) -> str:
    return style_char(cluster[0], style) + cluster[1:]


def style_text(text: str, style: UnicodeStyle) -> str:
    """Styled text without color."""
    return "".join(_style_cluster(g, style) for g in split_graphemes(text))


# -------------------------
# Gradients
# -------------------------

@dataclass(frozen=True)
class NoGradient:
    pass


@dataclass(frozen=True)
class Horizontal:
    start: Rgb
    end: Rgb


@dataclass(frozen=True)
class Vertical:
    start: Rgb
    end: Rgb


@dataclass(frozen=True)
class PerCharacter:
    colors: Tuple[Rgb, ...]


@dataclass(frozen=True)
class Rainbow:
    pass


Gradient = Union[NoGradient, Horizontal, Vertical, PerCharacter, Rainbow]


@dataclass(frozen=True)
class TextConfig:
    style: UnicodeStyle = UnicodeStyle.BOLD
    gradient: Gradient = field(default_factory=NoGradient)
    color_depth: ColorDepth = ColorDepth.TRUECOLOR


class StyledCluster(NamedTuple):
    text: str
    color: Optional[Rgb]


_NEWLINES = ("\n", "\r\n", "\r")


def _layout(clusters: List[str]) -> List[Tuple[int, int]]:
    """(line, column) for every cluster; newline clusters get column -1."""
    out = []
    line = col = 0
    for g in clusters:
        if g in _NEWLINES:
            out.append((line, -1))
            line += 1
            col = 0
        else:
            out.append((line, col))
            col += 1
    return out


def _t(pos: int, span: int) -> float:
    return pos / (span - 1) if span > 1 else 0.0


def _gradient_colors(clusters: List[str], gradient: Gradient) -> List[Optional[Rgb]]:
    if isinstance(gradient, NoGradient):
        return [None] * len(clusters)

    layout = _layout(clusters)
    colors: List[Optional[Rgb]] = []

    if isinstance(gradient, Horizontal):
        # Runs once across the whole text; line breaks count as positions.
        for i, (_, col) in enumerate(layout):
            colors.append(None if col < 0 else interpolate_color(gradient.start, gradient.end, _t(i, len(layout))))
    elif isinstance(gradient, Vertical):
        # a trailing newline opens no visible line
        used = max((ln for ln, c in layout if c >= 0), default=0) + 1
        for line, col in layout:
            colors.append(None if col < 0 else interpolate_color(gradient.start, gradient.end, _t(line, used)))
    elif isinstance(gradient, PerCharacter):
        if not gradient.colors:
            raise InvalidConfig("per-character gradient needs at least one color")
        k = 0
        for g, (_, col) in zip(clusters, layout):
            if col < 0:
                colors.append(None)
                continue
            colors.append(tuple(gradient.colors[k % len(gradient.colors)]))
            if not g.isspace():
                k += 1
    elif isinstance(gradient, Rainbow):
        visible = sum(1 for _, c in layout if c >= 0)
        i = 0
        for _, col in layout:
            if col < 0:
                colors.append(None)
                continue
            colors.append(hue_to_rgb(i / visible * 360.0))
            i += 1
    else:
        raise InvalidConfig(f"unknown gradient: {gradient!r}")
    return colors


def stylize_clusters(text: str, config: TextConfig) -> List[StyledCluster]:
    """Style and color each grapheme cluster. Raises EmptyInput / InvalidConfig."""
    if not isinstance(text, str):
        raise InvalidConfig(f"expected text, got {type(text).__name__}")
    if not text:
        raise EmptyInput("no text to stylize")
    style = UnicodeStyle.from_name(config.style)

    clusters = split_graphemes(text)
    styled = [_style_cluster(g, style) for g in clusters]
    colors = _gradient_colors(clusters, config.gradient)

    # Clusters must come out as atomic units, one per input cluster.
    if grapheme_count("".join(styled)) != len(clusters) or any(grapheme_count(s) != 1 for s in styled):
        raise InternalFailure("styling changed grapheme cluster boundaries")
    return [StyledCluster(s, c) for s, c in zip(styled, colors)]


def format_clusters(clusters: List[StyledCluster], depth: ColorDepth) -> str:
    """Join clusters, wrapping colored ones in ANSI foreground escapes. Whitespace stays bare."""
    out: List[str] = []
    for cluster in clusters:
        if cluster.color is None or depth == ColorDepth.NONE or cluster.text.isspace():
            out.append(cluster.text)
            continue
        out.append(fg_escape(quantize(cluster.color, depth)))
        out.append(cluster.text)
        out.append(ANSI_RESET)
    return "".join(out)


def stylize_text(text: str, config: TextConfig) -> str:
    try:
        depth = ColorDepth.from_name(config.color_depth)
    except ValueError as exc:
        raise InvalidConfig(str(exc)) from exc
    return format_clusters(stylize_clusters(text, config), depth)
