#!/usr/bin/env python3
# glyphgen/actions.py
"""
Setting-change actions shared by the key bindings.
Each action updates PreviewState, reports it in the status bar, and asks
PreviewControl for a fresh render.
"""

from __future__ import annotations

import os

from glyphgen.image import is_supported_format, open_image
from glyphgen.rendering.renderer import EngineKind
from glyphgen.ui.preview import PreviewControl
from glyphgen.ui.state import PreviewState


def set_engine(state: PreviewState, control: PreviewControl, engine: EngineKind):
    state.set_engine(engine)
    state.set_info(f"Engine: {engine.label}")
    error = control.engine_error(engine)
    if error:
        state.set_error(error)
    control.reset_scroll()
    control.request_render()


def zoom(state: PreviewState, control: PreviewControl, wider: bool):
    width = state.adjust_width(zoom_in=not wider)
    if width is None:
        state.set_info("Width does not apply to the text engine")
        return
    state.set_info(f"Width {width}")
    control.request_render()


def cycle_charset(state: PreviewState, control: PreviewControl):
    state.set_info(f"Charset: {state.cycle_charset()}")
    control.request_render()


def toggle_invert(state: PreviewState, control: PreviewControl):
    state.set_info(f"Invert {'on' if state.toggle('ascii', 'invert') else 'off'}")
    control.request_render()


def toggle_edges(state: PreviewState, control: PreviewControl):
    state.set_info(f"Edge enhance {'on' if state.toggle('ascii', 'edge_enhance') else 'off'}")
    control.request_render()


def cycle_mode(state: PreviewState, control: PreviewControl):
    state.set_info(f"Mode: {state.cycle_mode()}")
    control.request_render()


def cycle_color_depth(state: PreviewState, control: PreviewControl):
    state.set_info(f"Color: {state.cycle_color_depth()}")
    control.request_render()


def cycle_style(state: PreviewState, control: PreviewControl):
    state.set_info(f"Style: {state.cycle_style()}")
    control.request_render()


def cycle_gradient(state: PreviewState, control: PreviewControl):
    state.set_info(f"Gradient: {state.cycle_gradient()}")
    control.request_render()


def submit_text(state: PreviewState, control: PreviewControl, text: str) -> bool:
    state.set_text(text)
    if state.engine != EngineKind.TEXT:
        state.set_engine(EngineKind.TEXT)
    state.set_info("Text updated")
    control.reset_scroll()
    control.request_render()
    return True


def load_image(state: PreviewState, control: PreviewControl, path: str) -> bool:
    """Open path for the image engines. Returns False (with an error shown) when it cannot."""
    path = os.path.expanduser(path.strip())
    if not path:
        state.set_error("Path is empty")
        return False
    if not os.path.isfile(path):
        state.set_error(f"File not found: {path}")
        return False
    if not is_supported_format(path):
        state.set_error(f"Unsupported image format: {os.path.basename(path)}")
        return False
    try:
        image = open_image(path)
    except (OSError, ValueError) as exc:
        state.set_error(f"Failed to load: {exc}")
        return False
    state.set_image(image)
    if state.engine == EngineKind.TEXT:
        state.set_engine(EngineKind.ASCII)
    state.set_info(f"Loaded {os.path.basename(path)} ({image.width}x{image.height})")
    control.reset_scroll()
    control.request_render()
    return True
