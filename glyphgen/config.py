#!/usr/bin/env python3
# glyphgen/config.py
"""
Config loader/saver and defaults for glyphgen.

Goals:
- Single JSON file per user.
- Safe atomic writes.
- Deep-merge of user config over defaults.
- Basic validation with sane fallbacks.
- Builders for the immutable per-request render configs.

Usage:
    from glyphgen.config import Config
    cfg = Config.load()                 # $GLYPHGEN_CONFIG or OS-specific
    cfg["ascii"]["width"] = 120
    cfg.save()
    request_cfg = cfg.ascii_config()
"""

from __future__ import annotations

import json
import os
import platform
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from glyphgen.color import ColorDepth, parse_hex_color
from glyphgen.rendering.ascii_mode import EDGE_BLEND_WEIGHT, AsciiConfig
from glyphgen.rendering.braille_mode import BRAILLE_THRESHOLD
from glyphgen.rendering.charsets import CharacterSet
from glyphgen.rendering.text_mode import (
    Gradient,
    Horizontal,
    NoGradient,
    PerCharacter,
    Rainbow,
    TextConfig,
    UnicodeStyle,
    Vertical,
)
from glyphgen.rendering.unicode_mode import UnicodeConfig, UnicodeMode

# ----------------------------
# Defaults
# ----------------------------

MIN_WIDTH = 1
MAX_WIDTH = 4000

GRADIENTS = ("none", "horizontal", "vertical", "per_character", "rainbow")

DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {
        "title": "glyphgen",
        "engine": "ascii",                # ascii | unicode | text
        "shutdown_timeout_s": 3.0,
    },
    "ascii": {
        "width": 80,
        "charset": "extended",            # standard | extended | blocks | custom
        "custom_charset": "",
        "invert": False,
        "edge_enhance": False,
        "edge_blend": EDGE_BLEND_WEIGHT,
    },
    "unicode": {
        "width": 80,
        "mode": "half_blocks",            # blocks | half_blocks | braille
        "color_depth": "truecolor",       # none | 16 | 256 | truecolor
        "braille_threshold": BRAILLE_THRESHOLD,
        "dither": False,
    },
    "text": {
        "style": "bold",
        "gradient": "none",               # none | horizontal | vertical | per_character | rainbow
        "start_color": "#ff0000",
        "end_color": "#0000ff",
        "palette": ["#ff0000", "#00ff00", "#0000ff"],
        "color_depth": "truecolor",
    },
    "ui": {
        "theme": "auto",                  # auto | light | dark
        "show_help": False,
        "show_latency_ms": True,
    },
    "logging": {
        "level": "WARNING",
        "file": None,                     # path or None
        "rotate_bytes": 5 * 1024 * 1024,
        "rotate_keep": 3,
    },
}

# ----------------------------
# Helpers
# ----------------------------

def _os_config_home() -> str:
    """Return per-OS config base directory."""
    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.path.expanduser("~\\AppData\\Roaming")
        return os.path.join(base, "glyphgen")
    if platform.system() == "Darwin":
        return os.path.join(os.path.expanduser("~/Library/Application Support"), "glyphgen")
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return os.path.join(base, "glyphgen")

def _default_config_path() -> str:
    """Resolve default config path, honoring GLYPHGEN_CONFIG env override."""
    env = os.environ.get("GLYPHGEN_CONFIG")
    if env:
        return os.path.expanduser(env)
    return os.path.join(_os_config_home(), "glyphgen.json")

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Return deep-merged copy of dicts: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_cfg_", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise

def _coerce_num(v: Any, default: float, minmax: Optional[Tuple[float, float]] = None) -> float:
    if isinstance(v, bool):
        return float(default)
    try:
        x = float(v)
    except (TypeError, ValueError):
        return float(default)
    if x != x:  # NaN
        return float(default)
    if minmax:
        lo, hi = minmax
        if x < lo: x = lo
        if x > hi: x = hi
    return x

def _coerce_int(v: Any, default: int, minmax: Optional[Tuple[int, int]] = None) -> int:
    if isinstance(v, bool):
        return int(default)
    try:
        x = int(v)
    except (TypeError, ValueError):
        return int(default)
    if minmax:
        lo, hi = minmax
        if x < lo: x = lo
        if x > hi: x = hi
    return x

def _coerce_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"): return True
        if s in ("0", "false", "no", "off"): return False
    return default

def _coerce_hex(v: Any, default: str) -> str:
    try:
        parse_hex_color(str(v))
    except ValueError:
        return default
    return str(v).strip().lower()

def _coerce_choice(v: Any, choices, default: str) -> str:
    s = str(v).strip().lower() if v is not None else ""
    return s if s in choices else default

# ----------------------------
# Validation
# ----------------------------

def _validate(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return validated copy with fallbacks applied."""
    c = _deep_merge(DEFAULT_CONFIG, cfg or {})

    # app
    app = c["app"]
    app["title"] = str(app.get("title") or DEFAULT_CONFIG["app"]["title"])
    app["engine"] = _coerce_choice(app.get("engine"), ("ascii", "unicode", "text"), DEFAULT_CONFIG["app"]["engine"])
    app["shutdown_timeout_s"] = _coerce_num(app.get("shutdown_timeout_s"), 3.0, (0.5, 30.0))

    # ascii
    a = c["ascii"]
    a["width"] = _coerce_int(a.get("width"), 80, (MIN_WIDTH, MAX_WIDTH))
    a["charset"] = _coerce_choice(a.get("charset"), ("standard", "extended", "blocks", "custom"),
                                  DEFAULT_CONFIG["ascii"]["charset"])
    a["custom_charset"] = str(a.get("custom_charset") or "")
    if a["charset"] == "custom" and not a["custom_charset"]:
        a["charset"] = DEFAULT_CONFIG["ascii"]["charset"]
    for key in ("invert", "edge_enhance"):
        a[key] = _coerce_bool(a.get(key), DEFAULT_CONFIG["ascii"][key])
    a["edge_blend"] = _coerce_num(a.get("edge_blend"), EDGE_BLEND_WEIGHT, (0.0, 1.0))

    # unicode
    u = c["unicode"]
    u["width"] = _coerce_int(u.get("width"), 80, (MIN_WIDTH, MAX_WIDTH))
    u["mode"] = _coerce_choice(u.get("mode"), tuple(m.value for m in UnicodeMode), DEFAULT_CONFIG["unicode"]["mode"])
    try:
        ColorDepth.from_name(u.get("color_depth"))
    except ValueError:
        u["color_depth"] = DEFAULT_CONFIG["unicode"]["color_depth"]
    u["braille_threshold"] = _coerce_num(u.get("braille_threshold"), BRAILLE_THRESHOLD, (0.0, 1.0))
    u["dither"] = _coerce_bool(u.get("dither"), DEFAULT_CONFIG["unicode"]["dither"])

    # text
    t = c["text"]
    t["style"] = _coerce_choice(t.get("style"), tuple(s.value for s in UnicodeStyle), DEFAULT_CONFIG["text"]["style"])
    t["gradient"] = _coerce_choice(t.get("gradient"), GRADIENTS, DEFAULT_CONFIG["text"]["gradient"])
    t["start_color"] = _coerce_hex(t.get("start_color"), DEFAULT_CONFIG["text"]["start_color"])
    t["end_color"] = _coerce_hex(t.get("end_color"), DEFAULT_CONFIG["text"]["end_color"])
    palette = t.get("palette")
    if isinstance(palette, list):
        palette = [_coerce_hex(x, "") for x in palette]
        palette = [x for x in palette if x]
    t["palette"] = palette or DEFAULT_CONFIG["text"]["palette"][:]
    try:
        ColorDepth.from_name(t.get("color_depth"))
    except ValueError:
        t["color_depth"] = DEFAULT_CONFIG["text"]["color_depth"]

    # ui
    ui = c["ui"]
    if ui.get("theme") not in ("auto", "light", "dark"):
        ui["theme"] = DEFAULT_CONFIG["ui"]["theme"]
    ui["show_help"] = _coerce_bool(ui.get("show_help"), DEFAULT_CONFIG["ui"]["show_help"])
    ui["show_latency_ms"] = _coerce_bool(ui.get("show_latency_ms"), DEFAULT_CONFIG["ui"]["show_latency_ms"])

    # logging
    lg = c["logging"]
    if lg.get("level") not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"):
        lg["level"] = DEFAULT_CONFIG["logging"]["level"]
    lf = lg.get("file")
    lg["file"] = str(lf) if lf else None
    lg["rotate_bytes"] = _coerce_int(lg.get("rotate_bytes"), DEFAULT_CONFIG["logging"]["rotate_bytes"], (256 * 1024, 50 * 1024 * 1024))
    lg["rotate_keep"]  = _coerce_int(lg.get("rotate_keep"), DEFAULT_CONFIG["logging"]["rotate_keep"], (0, 50))

    return c

# ----------------------------
# Public API
# ----------------------------

@dataclass
class Config:
    """Thin wrapper around a nested dict with load/save/merge."""
    data: Dict[str, Any] = field(default_factory=lambda: _validate(json.loads(json.dumps(DEFAULT_CONFIG))))
    path: str = field(default_factory=_default_config_path)

    # --- Mapping-style access
    def __getitem__(self, k: str) -> Any:
        return self.data[k]

    def __setitem__(self, k: str, v: Any) -> None:
        self.data[k] = v

    def get(self, k: str, default: Any = None) -> Any:
        return self.data.get(k, default)

    # --- Ops
    @classmethod
    def load(cls, path: Optional[str] = None, create_if_missing: bool = True) -> "Config":
        cfg_path = os.path.expanduser(path) if path else _default_config_path()
        if not os.path.exists(cfg_path):
            cfg = _validate(DEFAULT_CONFIG)
            if create_if_missing:
                _atomic_write_json(cfg_path, cfg)
            return cls(cfg, cfg_path)

        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                user_cfg = json.load(f)
            if not isinstance(user_cfg, dict):
                raise ValueError("config root must be an object")
        except ValueError:
            # Corrupt file. Backup and regenerate.
            shutil.copyfile(cfg_path, cfg_path + ".corrupt.bak")
            user_cfg = {}
            validated = _validate(user_cfg)
            _atomic_write_json(cfg_path, validated)
            return cls(validated, cfg_path)

        return cls(_validate(user_cfg), cfg_path)

    def save(self) -> None:
        """Persist to JSON atomically."""
        full = _validate(self.data)
        _atomic_write_json(self.path, full)
        self.data = full  # sync in-memory with normalized values

    def update(self, partial: Dict[str, Any]) -> None:
        """Deep-merge a partial config then validate."""
        merged = _deep_merge(self.data, partial)
        self.data = _validate(merged)

    # --- Request config builders
    def ascii_config(self) -> AsciiConfig:
        a = self.data["ascii"]
        return AsciiConfig(
            target_width=int(a["width"]),
            charset=CharacterSet.from_name(a["charset"], a.get("custom_charset", "")),
            invert=bool(a["invert"]),
            edge_enhance=bool(a["edge_enhance"]),
            edge_blend=float(a["edge_blend"]),
        )

    def unicode_config(self) -> UnicodeConfig:
        u = self.data["unicode"]
        return UnicodeConfig(
            target_width=int(u["width"]),
            mode=UnicodeMode(u["mode"]),
            color_depth=ColorDepth.from_name(u["color_depth"]),
            braille_threshold=float(u["braille_threshold"]),
            dither=bool(u["dither"]),
        )

    def text_config(self) -> TextConfig:
        t = self.data["text"]
        return TextConfig(
            style=UnicodeStyle.from_name(t["style"]),
            gradient=gradient_from_settings(t["gradient"], t["start_color"], t["end_color"], t["palette"]),
            color_depth=ColorDepth.from_name(t["color_depth"]),
        )


def gradient_from_settings(name: str, start: str, end: str, palette) -> Gradient:
    """Build a gradient value from its config names and hex colors."""
    if name == "horizontal":
        return Horizontal(parse_hex_color(start), parse_hex_color(end))
    if name == "vertical":
        return Vertical(parse_hex_color(start), parse_hex_color(end))
    if name == "per_character":
        return PerCharacter(tuple(parse_hex_color(c) for c in palette))
    if name == "rainbow":
        return Rainbow()
    return NoGradient()


__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "GRADIENTS",
    "MIN_WIDTH",
    "MAX_WIDTH",
    "gradient_from_settings",
    "_default_config_path",
]
