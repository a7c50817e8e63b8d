#!/usr/bin/env python3
# glyphgen/ui/app.py
"""Compose the prompt_toolkit application for the interactive preview."""

from typing import Optional

from prompt_toolkit.application import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import ConditionalKeyBindings, KeyBindings, merge_key_bindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.shortcuts import set_title

from glyphgen import actions
from glyphgen.capabilities import TerminalCapabilities, detect_capabilities
from glyphgen.config import Config
from glyphgen.dispatcher import RenderDispatcher
from glyphgen.image import DecodedImage
from glyphgen.perf import PerfMetrics
from glyphgen.rendering.renderer import EngineKind
from glyphgen.styles import make_style
from glyphgen.ui.helppane import HelpPane
from glyphgen.ui.preview import STEP_COLUMNS, PreviewControl
from glyphgen.ui.prompt import PATH, TEXT, InputPrompt
from glyphgen.ui.state import PreviewState
from glyphgen.ui.statusbar import StatusBar


class GlyphApp:
    def __init__(
        self,
        cfg: Config,
        image: Optional[DecodedImage] = None,
        text: str = "",
        capabilities: Optional[TerminalCapabilities] = None,
    ):
        self.cfg = cfg
        self.capabilities = capabilities or detect_capabilities()
        self.state = PreviewState(cfg, image=image, text=text)
        if image is None and not text:
            self.state.set_info("Nothing to render")
        self.perf = PerfMetrics()
        self.dispatcher = RenderDispatcher(self.capabilities, on_result=self._on_result)
        self.preview = PreviewControl(self.state, self.dispatcher, self.perf)
        self.status = StatusBar(self.state, self.cfg, self.perf)
        self.help_pane = HelpPane(visible=bool(cfg["ui"].get("show_help")))
        self.prompt = InputPrompt(self._on_prompt, on_close=self.preview.focus)

        self.preview_window = Window(
            content=self.preview,
            dont_extend_width=False,
            wrap_lines=False,
            style="class:preview",
        )
        self.preview.bind_window(self.preview_window)
        self.root = HSplit([
            self.preview_window,
            self.prompt,        # hidden unless editing
            self.status,        # Use the container directly
            self.help_pane,     # height 0 when hidden
        ])

        self.kb = self._build_key_bindings()
        self.app = Application(
            layout=Layout(self.root, focused_element=self.preview_window),
            key_bindings=self.kb,
            full_screen=True,
            style=make_style(cfg),
            mouse_support=False,
        )

    def _on_result(self, result) -> None:
        # Called on a worker thread; the UI picks results up on redraw.
        self.app.invalidate()

    def _on_prompt(self, kind: str, value: str) -> bool:
        if kind == TEXT:
            return actions.submit_text(self.state, self.preview, value)
        return actions.load_image(self.state, self.preview, value)

    def _build_key_bindings(self):
        kb = KeyBindings()
        state, preview, prompt = self.state, self.preview, self.prompt

        @kb.add("q")
        def _(event):
            event.app.exit()

        @kb.add("1")
        def _(event):
            actions.set_engine(state, preview, EngineKind.ASCII)

        @kb.add("2")
        def _(event):
            actions.set_engine(state, preview, EngineKind.UNICODE)

        @kb.add("3")
        def _(event):
            actions.set_engine(state, preview, EngineKind.TEXT)

        @kb.add("+")
        @kb.add("=")
        def _(event):
            actions.zoom(state, preview, wider=True)

        @kb.add("-")
        def _(event):
            actions.zoom(state, preview, wider=False)

        @kb.add("c")
        def _(event):
            actions.cycle_charset(state, preview)

        @kb.add("i")
        def _(event):
            actions.toggle_invert(state, preview)

        @kb.add("e")
        def _(event):
            actions.toggle_edges(state, preview)

        @kb.add("m")
        def _(event):
            actions.cycle_mode(state, preview)

        @kb.add("d")
        def _(event):
            actions.cycle_color_depth(state, preview)

        @kb.add("s")
        def _(event):
            actions.cycle_style(state, preview)

        @kb.add("g")
        def _(event):
            actions.cycle_gradient(state, preview)

        @kb.add("t")
        def _(event):
            prompt.open(TEXT, state.text)

        @kb.add("l")
        def _(event):
            prompt.open(PATH)

        @kb.add("up")
        def _(event):
            preview.scroll(-1)

        @kb.add("down")
        def _(event):
            preview.scroll(1)

        @kb.add("left")
        def _(event):
            preview.scroll_x(-STEP_COLUMNS)

        @kb.add("right")
        def _(event):
            preview.scroll_x(STEP_COLUMNS)

        @kb.add("pageup")
        def _(event):
            preview.page(-1)

        @kb.add("pagedown")
        def _(event):
            preview.page(1)

        @kb.add("home")
        def _(event):
            preview.reset_scroll()

        @kb.add("end")
        def _(event):
            preview.scroll_end()

        @kb.add("h")
        def _(event):
            self.help_pane.toggle()
            event.app.invalidate()

        editing = Condition(lambda: prompt.active)
        prompt_kb = KeyBindings()

        @prompt_kb.add("escape")
        def _(event):
            prompt.close()

        return merge_key_bindings([
            ConditionalKeyBindings(kb, filter=~editing),
            ConditionalKeyBindings(prompt_kb, filter=editing),
        ])

    def run(self):
        set_title(self.cfg["app"]["title"])
        self.preview.request_render()
        try:
            self.app.run()
        finally:
            self.dispatcher.shutdown(timeout=self.cfg["app"]["shutdown_timeout_s"])
            self.cfg["ui"]["show_help"] = self.help_pane.visible
