#!/usr/bin/env python3
# glyphgen/styles.py
"""
Style definitions for the glyphgen TUI.
Provides light, dark, and auto themes for prompt_toolkit.
"""

import os

from prompt_toolkit.styles import Style

from glyphgen.config import Config

_DARK = {
    "status": "bg:#303030 #cccccc",
    "status.error": "bg:#303030 #ff5f5f bold",
    "status.slow": "bg:#303030 #ffaf00",
    "help": "bg:#202020 #dddddd",
    "prompt": "bg:#262626 #ffffff",
    "preview": "",
}

_LIGHT = {
    "status": "bg:#cccccc #000000",
    "status.error": "bg:#cccccc #af0000 bold",
    "status.slow": "bg:#cccccc #875f00",
    "help": "bg:#eeeeee #000000",
    "prompt": "bg:#ffffff #000000",
    "preview": "",
}


def theme_name(cfg: Config) -> str:
    theme = cfg["ui"].get("theme", "auto")
    if theme in ("light", "dark"):
        return theme
    # Auto: honour an explicit hint from the environment, else dark.
    return "light" if os.getenv("TERM_THEME", "").lower() == "light" else "dark"


def make_style(cfg: Config) -> Style:
    return Style.from_dict(_LIGHT if theme_name(cfg) == "light" else _DARK)
