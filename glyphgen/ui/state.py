#!/usr/bin/env python3
# glyphgen/ui/state.py
"""Mutable runtime state for the glyphgen TUI."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from glyphgen.color import ColorDepth
from glyphgen.config import GRADIENTS, MAX_WIDTH, Config
from glyphgen.image import DecodedImage
from glyphgen.rendering.charsets import CharacterSet
from glyphgen.rendering.renderer import EngineKind, Payload, RenderConfig
from glyphgen.rendering.text_mode import UnicodeStyle
from glyphgen.rendering.unicode_mode import UnicodeMode

MIN_ZOOM_WIDTH = 10


def zoom_step(width: int, zoom_in: bool) -> int:
    """Zooming in narrows the output by a fifth, zooming out widens it by a quarter."""
    if zoom_in:
        return max(MIN_ZOOM_WIDTH, (width * 4) // 5)
    return min(MAX_WIDTH, (width * 5) // 4)


@dataclass
class PreviewState:
    cfg: Config
    image: Optional[DecodedImage] = None
    text: str = ""

    engine: EngineKind = field(init=False)
    last_render_ms: float = 0.0
    info_msg: str = ""
    error_msg: str = ""

    # Internal lock for multi-thread updates
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        self.engine = EngineKind(self.cfg["app"].get("engine", "ascii"))
        if self.engine != EngineKind.TEXT and self.image is None and self.text:
            self.engine = EngineKind.TEXT

    # ------------- engine -------------

    def set_engine(self, engine: EngineKind) -> None:
        with self._lock:
            self.engine = engine
            self.cfg["app"]["engine"] = engine.value

    def payload(self) -> Optional[Payload]:
        with self._lock:
            return self.text if self.engine == EngineKind.TEXT else self.image

    def snapshot_config(self, engine: Optional[EngineKind] = None) -> RenderConfig:
        """Immutable config value for the next request."""
        with self._lock:
            engine = engine or self.engine
            if engine == EngineKind.ASCII:
                return self.cfg.ascii_config()
            if engine == EngineKind.UNICODE:
                return self.cfg.unicode_config()
            return self.cfg.text_config()

    # ------------- setters -------------

    def width(self) -> Optional[int]:
        with self._lock:
            if self.engine == EngineKind.TEXT:
                return None
            return int(self.cfg[self.engine.value]["width"])

    def adjust_width(self, zoom_in: bool) -> Optional[int]:
        """Step the active engine's width; None for the text engine."""
        with self._lock:
            if self.engine == EngineKind.TEXT:
                return None
            section = self.cfg[self.engine.value]
            section["width"] = zoom_step(int(section["width"]), zoom_in)
            return section["width"]

    def cycle_charset(self) -> str:
        with self._lock:
            a = self.cfg["ascii"]
            nxt = CharacterSet.from_name(a["charset"], a["custom_charset"]).next()
            a["charset"] = nxt.kind
            return nxt.name

    def toggle(self, section: str, key: str) -> bool:
        with self._lock:
            self.cfg[section][key] = not bool(self.cfg[section][key])
            return self.cfg[section][key]

    def cycle_mode(self) -> str:
        with self._lock:
            nxt = UnicodeMode(self.cfg["unicode"]["mode"]).next()
            self.cfg["unicode"]["mode"] = nxt.value
            return nxt.label

    def cycle_color_depth(self) -> str:
        with self._lock:
            section = self.cfg["text" if self.engine == EngineKind.TEXT else "unicode"]
            # Walk down the fallback order, wrapping to TrueColor.
            nxt = ColorDepth.from_name(section["color_depth"]).prev()
            section["color_depth"] = nxt.name.lower()
            return nxt.label

    def cycle_style(self) -> str:
        with self._lock:
            nxt = UnicodeStyle.from_name(self.cfg["text"]["style"]).next()
            self.cfg["text"]["style"] = nxt.value
            return nxt.label

    def cycle_gradient(self) -> str:
        with self._lock:
            t = self.cfg["text"]
            t["gradient"] = GRADIENTS[(GRADIENTS.index(t["gradient"]) + 1) % len(GRADIENTS)]
            return t["gradient"]

    def set_text(self, text: str) -> None:
        with self._lock:
            self.text = text

    def set_image(self, image: DecodedImage) -> None:
        with self._lock:
            self.image = image

    # ------------- info -------------

    def set_info(self, msg: str) -> None:
        with self._lock:
            self.info_msg = msg
            self.error_msg = ""

    def set_error(self, msg: str) -> None:
        with self._lock:
            self.error_msg = msg
