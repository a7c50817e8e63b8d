#!/usr/bin/env python3
# glyphgen/rendering/cells.py
"""
Colored cell grid produced by the Unicode renderers.

Each cell is a (character, foreground, optional background) triple. The grid
can be serialised to an ANSI escape stream for terminals, or to style runs
(list[list[tuple[str, str]]]) for prompt_toolkit FormattedText, where styles
use "fg:#RRGGBB bg:#RRGGBB" tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

from glyphgen.color import ANSI_RESET, ColorDepth, TermColor, bg_escape, fg_escape, rgb_to_hex

StyleRun = Tuple[str, str]                # (style, text)
LineFrag = List[StyleRun]                 # one terminal row as runs
FrameFrag = List[LineFrag]                # full frame as rows

__all__ = ["Cell", "CellGrid", "StyleRun", "LineFrag", "FrameFrag"]


class Cell(NamedTuple):
    char: str
    fg: Optional[TermColor] = None
    bg: Optional[TermColor] = None

    @property
    def style(self) -> str:
        parts = []
        if self.fg is not None and self.fg.depth != ColorDepth.NONE:
            parts.append(f"fg:{rgb_to_hex(self.fg.rgb)}")
        if self.bg is not None and self.bg.depth != ColorDepth.NONE:
            parts.append(f"bg:{rgb_to_hex(self.bg.rgb)}")
        return " ".join(parts)


@dataclass(frozen=True)
class CellGrid:
    rows: Tuple[Tuple[Cell, ...], ...]
    depth: ColorDepth

    @classmethod
    def build(cls, rows: Sequence[Sequence[Cell]], depth: ColorDepth) -> "CellGrid":
        return cls(tuple(tuple(r) for r in rows), depth)

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def text(self) -> str:
        return "\n".join("".join(c.char for c in row) for row in self.rows)

    def to_ansi(self) -> str:
        """Escape stream; colors are emitted only where they change and reset at each row end."""
        lines = []
        for row in self.rows:
            buf: List[str] = []
            last_fg: Optional[TermColor] = None
            last_bg: Optional[TermColor] = None
            colored = False
            for cell in row:
                if cell.fg is not None and cell.fg != last_fg:
                    esc = fg_escape(cell.fg)
                    if esc:
                        buf.append(esc)
                        colored = True
                    last_fg = cell.fg
                if cell.bg is not None and cell.bg != last_bg:
                    esc = bg_escape(cell.bg)
                    if esc:
                        buf.append(esc)
                        colored = True
                    last_bg = cell.bg
                buf.append(cell.char)
            if colored:
                buf.append(ANSI_RESET)
            lines.append("".join(buf))
        return "\n".join(lines)

    def to_fragments(self) -> FrameFrag:
        frame: FrameFrag = []
        for row in self.rows:
            line: LineFrag = []
            run_style = None
            run_text: List[str] = []
            for cell in row:
                style = cell.style
                if style != run_style and run_text:
                    line.append((run_style, "".join(run_text)))
                    run_text = []
                run_style = style
                run_text.append(cell.char)
            if run_text:
                line.append((run_style, "".join(run_text)))
            frame.append(line if line else [("", "")])
        return frame
