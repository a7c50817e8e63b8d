#!/usr/bin/env python3
# glyphgen/capabilities.py
"""
Terminal capability descriptor and color-depth fallback selection.

The render core never probes the terminal itself; callers pass a
TerminalCapabilities value. detect_capabilities() is provided for the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from glyphgen.color import ColorDepth

__all__ = [
    "TerminalCapabilities",
    "detect_capabilities",
    "select_color_depth",
]


@dataclass(frozen=True)
class TerminalCapabilities:
    color_depth: ColorDepth = ColorDepth.TRUECOLOR
    unicode: bool = True


def select_color_depth(requested: ColorDepth, caps: Optional[TerminalCapabilities] = None) -> ColorDepth:
    """First depth in the requested depth's fallback chain that the terminal supports."""
    requested = ColorDepth.from_name(requested)
    if caps is None:
        return requested
    for depth in requested.fallback_chain():
        if depth <= caps.color_depth:
            return depth
    return ColorDepth.NONE


def _detect_color(env: Mapping[str, str]) -> ColorDepth:
    if "NO_COLOR" in env:
        return ColorDepth.NONE

    colorterm = env.get("COLORTERM", "").lower()
    if "truecolor" in colorterm or "24bit" in colorterm:
        return ColorDepth.TRUECOLOR

    term = env.get("TERM", "").lower()
    if term:
        if any(k in term for k in ("kitty", "alacritty", "iterm", "vte", "256color")):
            return ColorDepth.TRUECOLOR if "COLORTERM" in env else ColorDepth.ANSI256
        if "xterm" in term:
            return ColorDepth.ANSI256 if "256" in term else ColorDepth.ANSI16
        if "screen" in term or "tmux" in term:
            return ColorDepth.ANSI256
        if "linux" in term or "console" in term:
            return ColorDepth.ANSI16
        if term == "dumb":
            return ColorDepth.NONE

    if "WT_SESSION" in env:
        return ColorDepth.TRUECOLOR
    return ColorDepth.ANSI256


def _detect_unicode(env: Mapping[str, str]) -> bool:
    if "WT_SESSION" in env:
        return True
    return any("UTF" in env.get(k, "").upper() for k in ("LC_ALL", "LC_CTYPE", "LANG"))


def detect_capabilities(env: Optional[Mapping[str, str]] = None) -> TerminalCapabilities:
    """Guess capabilities from NO_COLOR/COLORTERM/TERM/WT_SESSION and the locale."""
    env = os.environ if env is None else env
    return TerminalCapabilities(color_depth=_detect_color(env), unicode=_detect_unicode(env))
