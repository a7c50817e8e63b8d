#!/usr/bin/env python3
# glyphgen/ui/preview.py
"""prompt_toolkit UIControl that shows the latest render for the active engine."""

from __future__ import annotations

from typing import Dict, List, Optional

from prompt_toolkit.application import get_app_or_none
from prompt_toolkit.data_structures import Point
from prompt_toolkit.layout.controls import UIContent, UIControl

from glyphgen.dispatcher import RenderDispatcher, RenderFailure, RenderSuccess, ResultTracker
from glyphgen.perf import PerfMetrics
from glyphgen.rendering.cells import FrameFrag, LineFrag
from glyphgen.rendering.renderer import EngineKind
from glyphgen.ui.state import PreviewState
from glyphgen.unicode_text import cluster_width, display_width, split_graphemes, truncate_to_width

PAGE_ROWS = 10
STEP_COLUMNS = 5


def fit_line(line: LineFrag, width: int) -> LineFrag:
    """Crop or pad a row of style runs to exactly width display columns."""
    out: LineFrag = []
    used = 0
    for style, text in line:
        if used >= width:
            break
        w = display_width(text)
        if used + w <= width:
            out.append((style, text))
            used += w
            continue
        kept = truncate_to_width(text, width - used)
        if kept:
            out.append((style, kept))
            used += display_width(kept)
        break
    if used < width:
        out.append(("", " " * (width - used)))
    return out


def skip_columns(line: LineFrag, start: int) -> LineFrag:
    """Drop the first start display columns; a wide glyph cut by the edge becomes spaces."""
    if start <= 0:
        return line
    out: LineFrag = []
    skipped = 0
    for style, text in line:
        if skipped >= start:
            out.append((style, text))
            continue
        w = display_width(text)
        if skipped + w <= start:
            skipped += w
            continue
        kept: List[str] = []
        for g in split_graphemes(text):
            if skipped < start:
                skipped += cluster_width(g)
                if skipped > start:
                    kept.append(" " * (skipped - start))
                continue
            kept.append(g)
        if kept:
            out.append((style, "".join(kept)))
    return out


def line_width(line: LineFrag) -> int:
    return sum(display_width(text) for _, text in line)


class PreviewControl(UIControl):
    """Submit renders for the current settings and show authoritative results."""

    def __init__(self, state: PreviewState, dispatcher: RenderDispatcher, perf: Optional[PerfMetrics] = None):
        self.state = state
        self.dispatcher = dispatcher
        self.perf = perf or PerfMetrics()
        self._tracker = ResultTracker()
        self._frames: Dict[EngineKind, RenderSuccess] = {}
        self._errors: Dict[EngineKind, str] = {}
        self._scroll = 0
        self._scroll_x = 0
        self._window = None

    # -------- UIControl interface --------

    def is_focusable(self) -> bool:
        return True

    def preferred_width(self, max_available_width: int) -> int:
        return max_available_width

    def preferred_height(
        self,
        width: int,
        max_available_height: int,
        wrap_lines: bool,
        get_line_prefix,
    ) -> int:
        return max_available_height

    def create_content(self, width: int, height: int) -> UIContent:
        width = max(1, int(width))
        height = max(1, int(height))
        self.drain_results()

        source = self.current_fragments()
        self._scroll = max(0, min(self._scroll, len(source) - 1))
        widest = max((line_width(line) for line in source), default=0)
        self._scroll_x = max(0, min(self._scroll_x, widest - 1))
        visible = source[self._scroll:self._scroll + height]
        lines = [fit_line(skip_columns(line, self._scroll_x), width) for line in visible]
        blank = [("", " " * width)]

        return UIContent(
            get_line=lambda i: lines[i] if 0 <= i < len(lines) else blank,
            line_count=height,
            cursor_position=Point(x=0, y=0),
        )

    def bind_window(self, window) -> None:
        """Remember the Window that hosts this control for focus management."""
        self._window = window

    def focus(self) -> None:
        app = get_app_or_none()
        if app and self._window is not None:
            app.layout.focus(self._window)

    # -------- results --------

    def drain_results(self) -> int:
        """Apply newly delivered results; returns how many were authoritative."""
        accepted = 0
        for result in self.dispatcher.poll_results():
            if not self._tracker.accept(result):
                continue
            accepted += 1
            if isinstance(result, RenderSuccess):
                self._frames[result.engine] = result
                self._errors.pop(result.engine, None)
                self.perf.record(result.elapsed_ms)
                self.state.last_render_ms = result.elapsed_ms
                if result.engine == self.state.engine:
                    self.state.error_msg = ""
            elif isinstance(result, RenderFailure):
                # An error replaces whatever that engine showed before.
                self._frames.pop(result.engine, None)
                message = f"{result.engine.label}: {result.message}"
                self._errors[result.engine] = message
                if result.engine == self.state.engine:
                    self.state.set_error(message)
        return accepted

    def current_fragments(self) -> FrameFrag:
        frame = self._frames.get(self.state.engine)
        if frame is not None:
            return frame.fragments
        error = self._errors.get(self.state.engine)
        if error:
            return [[("class:status.error", error)]]
        if self.state.payload() is None:
            return [[("", "No input loaded. Press l to load an image or t to enter text.")]]
        return [[("", "Rendering...")]]

    def current_output(self) -> Optional[str]:
        frame = self._frames.get(self.state.engine)
        return frame.output if frame is not None else None

    def engine_error(self, engine: EngineKind) -> Optional[str]:
        return self._errors.get(engine)

    # -------- user actions --------

    def request_render(self) -> None:
        payload = self.state.payload()
        if payload is None:
            return
        self.dispatcher.submit(payload, self.state.snapshot_config())

    def scroll(self, dy: int) -> None:
        self._scroll = max(0, self._scroll + dy)

    def scroll_x(self, dx: int) -> None:
        self._scroll_x = max(0, self._scroll_x + dx)

    def page(self, pages: int) -> None:
        self.scroll(pages * PAGE_ROWS)

    def scroll_end(self) -> None:
        self._scroll = max(0, len(self.current_fragments()) - 1)

    def reset_scroll(self) -> None:
        self._scroll = 0
        self._scroll_x = 0

    @property
    def offset(self):
        """(column, row) of the top-left visible cell."""
        return self._scroll_x, self._scroll
