#!/usr/bin/env python3
# glyphgen/ui/prompt.py
"""
One-line input bar for editing the stylizer text and typing an image path.
Hidden until opened; Enter submits, Escape cancels.
"""

from __future__ import annotations

from typing import Callable, Optional

from prompt_toolkit.application import get_app_or_none
from prompt_toolkit.filters import Condition
from prompt_toolkit.layout import ConditionalContainer
from prompt_toolkit.widgets import Frame, TextArea

TEXT = "text"
PATH = "path"

_TITLES = {
    TEXT: "Text (Enter to apply, Esc to cancel)",
    PATH: "Image path (Enter to load, Esc to cancel)",
}


class InputPrompt:
    def __init__(
        self,
        on_submit: Callable[[str, str], bool],
        on_close: Optional[Callable[[], None]] = None,
    ):
        self.kind: Optional[str] = None
        self.on_submit = on_submit
        self.on_close = on_close
        self.text_area = TextArea(
            multiline=False,
            accept_handler=self._accept,
            style="class:prompt",
        )
        self.frame = Frame(self.text_area, title=lambda: _TITLES.get(self.kind, ""), style="class:prompt")
        self.container = ConditionalContainer(self.frame, filter=Condition(lambda: self.active))

    def __pt_container__(self):
        return self.container

    @property
    def active(self) -> bool:
        return self.kind is not None

    @property
    def text(self) -> str:
        return self.text_area.text

    def open(self, kind: str, initial: str = "") -> None:
        if kind not in _TITLES:
            raise ValueError(f"unknown prompt kind: {kind!r}")
        self.kind = kind
        self.text_area.text = initial
        self.text_area.buffer.cursor_position = len(initial)
        app = get_app_or_none()
        if app is not None:
            app.layout.focus(self.text_area)

    def close(self) -> None:
        self.kind = None
        if self.on_close is not None:
            self.on_close()

    def submit(self, value: str) -> bool:
        """Hand value to on_submit; the prompt closes only when it is accepted."""
        if self.kind is None:
            return False
        accepted = self.on_submit(self.kind, value)
        if accepted:
            self.close()
        return accepted

    def _accept(self, buffer) -> bool:
        # True keeps the typed text so a rejected path can be corrected.
        return not self.submit(buffer.text)
