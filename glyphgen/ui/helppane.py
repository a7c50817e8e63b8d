#!/usr/bin/env python3
# glyphgen/ui/helppane.py

from __future__ import annotations

from prompt_toolkit.filters import Condition
from prompt_toolkit.layout import ConditionalContainer
from prompt_toolkit.widgets import Frame, TextArea

_HELP_TEXT = (
    "Engines:\n"
    "  1 / 2 / 3   ASCII / Unicode / Text\n"
    "\n"
    "Image:\n"
    "  + / -       Wider / narrower output\n"
    "  c           Cycle character set (ASCII)\n"
    "  i           Toggle invert (ASCII)\n"
    "  e           Toggle edge enhancement (ASCII)\n"
    "  m           Cycle Blocks / Half-Blocks / Braille\n"
    "  d           Cycle color depth\n"
    "  l           Load an image\n"
    "\n"
    "Text:\n"
    "  t           Edit text\n"
    "  s           Cycle Unicode style\n"
    "  g           Cycle gradient\n"
    "\n"
    "Preview:\n"
    "  ↑ ↓ ← →     Scroll\n"
    "  PgUp PgDn   Scroll a page\n"
    "  Home End    Top-left / last line\n"
    "  h           Toggle this help\n"
    "  q           Quit\n"
)


class HelpPane:
    def __init__(self, visible: bool = False):
        self._visible = visible
        self.text_area = TextArea(
            text=_HELP_TEXT,
            style="class:help",
            read_only=True,
            focusable=False,
        )
        self.frame = Frame(self.text_area, title="Keys", style="class:help")
        self.container = ConditionalContainer(self.frame, filter=Condition(lambda: self._visible))

    def __pt_container__(self):
        return self.container

    @property
    def visible(self) -> bool:
        return self._visible

    def toggle(self) -> None:
        self._visible = not self._visible
