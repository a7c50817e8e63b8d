#!/usr/bin/env python3
# glyphgen/rendering/renderer.py
"""
Engine selection and the common render entry point.

- Common API: render(payload, config, capabilities) -> Rendered
- The engine is picked once from the config type; the per-pixel loops never
  branch on it.
- Every engine's output is offered both as a finished stream (plain text or
  ANSI escapes) and as prompt_toolkit style runs
  (list[list[tuple[str, str]]] with "fg:#RRGGBB bg:#RRGGBB" tokens).
"""

from __future__ import annotations

from enum import Enum
from typing import List, NamedTuple, Optional, Union

from glyphgen.capabilities import TerminalCapabilities, select_color_depth
from glyphgen.color import ColorDepth, quantize, rgb_to_hex
from glyphgen.errors import EmptyInput, InvalidConfig
from glyphgen.image import DecodedImage
from glyphgen.rendering.ascii_mode import AsciiConfig, render_ascii
from glyphgen.rendering.cells import FrameFrag, LineFrag
from glyphgen.rendering.charsets import charset_index
from glyphgen.rendering.resample import check_inputs
from glyphgen.rendering.text_mode import (
    StyledCluster,
    TextConfig,
    UnicodeStyle,
    format_clusters,
    stylize_clusters,
)
from glyphgen.rendering.unicode_mode import UnicodeConfig, UnicodeMode, render_unicode

__all__ = [
    "EngineKind",
    "RenderConfig",
    "Payload",
    "Rendered",
    "engine_for",
    "validate",
    "render",
]

RenderConfig = Union[AsciiConfig, UnicodeConfig, TextConfig]
Payload = Union[DecodedImage, str]


class EngineKind(Enum):
    ASCII = "ascii"
    UNICODE = "unicode"
    TEXT = "text"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Rendered(NamedTuple):
    output: str                 # finished stream: plain text or ANSI escapes
    fragments: FrameFrag        # same frame as style runs


_ENGINES = {
    AsciiConfig: EngineKind.ASCII,
    UnicodeConfig: EngineKind.UNICODE,
    TextConfig: EngineKind.TEXT,
}


def _depth(value) -> ColorDepth:
    try:
        return ColorDepth.from_name(value)
    except ValueError as exc:
        raise InvalidConfig(str(exc)) from exc


def engine_for(config: RenderConfig) -> EngineKind:
    kind = _ENGINES.get(type(config))
    if kind is None:
        raise InvalidConfig(f"not a render config: {type(config).__name__}")
    return kind


def validate(payload: Payload, config: RenderConfig,
             capabilities: Optional[TerminalCapabilities] = None) -> EngineKind:
    """
    Checks that need no pixel work: config and payload types, sizes, the
    character set, and whether the terminal can show the engine's glyphs at all.
    """
    kind = engine_for(config)
    if kind != EngineKind.ASCII and capabilities is not None and not capabilities.unicode:
        raise InvalidConfig("terminal has no Unicode support; only the ASCII engine is available")

    if kind == EngineKind.TEXT:
        if not isinstance(payload, str):
            raise InvalidConfig("the text engine takes a string payload")
        if not payload:
            raise EmptyInput("no text to stylize")
        UnicodeStyle.from_name(config.style)
        _depth(config.color_depth)
        return kind

    if kind == EngineKind.ASCII:
        charset_index(config.charset)
    else:
        _depth(config.color_depth)
        try:
            UnicodeMode(config.mode)
        except ValueError as exc:
            raise InvalidConfig(str(exc)) from exc
    check_inputs(payload, config.target_width)
    return kind


def _text_fragments(clusters: List[StyledCluster], depth: ColorDepth) -> FrameFrag:
    frame: FrameFrag = []
    line: LineFrag = []
    for cluster in clusters:
        if cluster.text in ("\n", "\r\n", "\r"):
            frame.append(line if line else [("", "")])
            line = []
            continue
        style = ""
        if cluster.color is not None and depth != ColorDepth.NONE and not cluster.text.isspace():
            style = f"fg:{rgb_to_hex(quantize(cluster.color, depth).rgb)}"
        if line and line[-1][0] == style:
            line[-1] = (style, line[-1][1] + cluster.text)
        else:
            line.append((style, cluster.text))
    frame.append(line if line else [("", "")])
    return frame


def render(payload: Payload, config: RenderConfig,
           capabilities: Optional[TerminalCapabilities] = None) -> Rendered:
    kind = validate(payload, config, capabilities)

    if kind == EngineKind.ASCII:
        text = render_ascii(payload, config)
        return Rendered(text, [[("", row)] for row in text.split("\n")])

    if kind == EngineKind.UNICODE:
        grid = render_unicode(payload, config, capabilities)
        return Rendered(grid.to_ansi(), grid.to_fragments())

    depth = select_color_depth(_depth(config.color_depth), capabilities)
    if depth != config.color_depth:
        config = TextConfig(config.style, config.gradient, depth)
    clusters = stylize_clusters(payload, config)
    return Rendered(format_clusters(clusters, depth), _text_fragments(clusters, depth))
