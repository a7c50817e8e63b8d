#!/usr/bin/env python3
# glyphgen/ui/statusbar.py

from __future__ import annotations

from prompt_toolkit.widgets import Label

from glyphgen.config import Config
from glyphgen.perf import PerfMetrics
from glyphgen.rendering.renderer import EngineKind
from glyphgen.ui.state import PreviewState


def status_text(state: PreviewState, cfg: Config, perf: PerfMetrics) -> str:
    engine = state.engine
    if engine == EngineKind.ASCII:
        a = cfg["ascii"]
        detail = f"w={a['width']} charset={a['charset']}"
        if a["invert"]:
            detail += " invert"
        if a["edge_enhance"]:
            detail += " edges"
    elif engine == EngineKind.UNICODE:
        u = cfg["unicode"]
        detail = f"w={u['width']} mode={u['mode']} color={u['color_depth']}"
    else:
        t = cfg["text"]
        detail = f"style={t['style']} gradient={t['gradient']}"

    msg = f" [{engine.label}] {detail}"
    if cfg["ui"].get("show_latency_ms", True) and len(perf):
        msg += f"  render={perf.last_ms:.1f}ms avg={perf.avg_ms:.1f}ms"
    if state.error_msg:
        msg += f"  {state.error_msg}"
    elif state.info_msg:
        msg += f"  {state.info_msg}"
    return msg


class StatusBar:
    def __init__(self, state: PreviewState, cfg: Config, perf: PerfMetrics):
        self.state = state
        self.cfg = cfg
        self.perf = perf
        # Plain text: messages may contain markup characters from user input.
        self.label = Label(lambda: status_text(self.state, self.cfg, self.perf))
        self.label.window.style = self.style

    def __pt_container__(self):
        return self.label

    def style(self) -> str:
        if self.state.error_msg:
            return "class:status.error"
        if self.perf.is_degraded():
            return "class:status.slow"
        return "class:status"
