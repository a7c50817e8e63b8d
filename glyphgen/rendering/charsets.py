#!/usr/bin/env python3
# glyphgen/rendering/charsets.py
"""
Character sets and the brightness -> glyph index.

Glyphs are ordered dark to light. Glyph i owns the brightness bucket
floor(v * (n - 1)) == i. charset_index() is cached per CharacterSet value, so
concurrent requests with the same set share one read-only index.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Tuple

import numpy as np

from glyphgen.errors import InvalidConfig
from glyphgen.unicode_text import cluster_width, split_graphemes

__all__ = [
    "CharacterSet",
    "CharsetIndex",
    "charset_index",
    "default_palettes",
]

# Guards floor() against products like 0.999.. * (n - 1) landing a hair below an integer.
_BUCKET_EPS = 1e-9

_ORDER = ("standard", "extended", "blocks")


def default_palettes() -> Dict[str, str]:
    return {
        "standard": " .:-=+*#%@",
        "extended": " .'`^\",:;Il!i><~+_-?][}{1)(|/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$",
        "blocks": " ░▒▓█",
    }


@dataclass(frozen=True)
class CharacterSet:
    kind: str
    glyphs: str

    @classmethod
    def standard(cls) -> "CharacterSet":
        return cls("standard", default_palettes()["standard"])

    @classmethod
    def extended(cls) -> "CharacterSet":
        return cls("extended", default_palettes()["extended"])

    @classmethod
    def blocks(cls) -> "CharacterSet":
        return cls("blocks", default_palettes()["blocks"])

    @classmethod
    def custom(cls, glyphs: str) -> "CharacterSet":
        return cls("custom", glyphs)

    @classmethod
    def from_name(cls, name: str, custom: str = "") -> "CharacterSet":
        key = (name or "").strip().lower()
        if key == "custom":
            return cls.custom(custom)
        palettes = default_palettes()
        if key not in palettes:
            raise InvalidConfig(f"unknown character set: {name!r}")
        return cls(key, palettes[key])

    @property
    def name(self) -> str:
        return self.kind.capitalize()

    def next(self) -> "CharacterSet":
        if self.kind not in _ORDER:
            return CharacterSet.standard()
        return CharacterSet.from_name(_ORDER[(_ORDER.index(self.kind) + 1) % len(_ORDER)])

    def prev(self) -> "CharacterSet":
        if self.kind not in _ORDER:
            return CharacterSet.standard()
        return CharacterSet.from_name(_ORDER[(_ORDER.index(self.kind) - 1) % len(_ORDER)])


class CharsetIndex:
    """Read-only brightness -> glyph lookup for one CharacterSet."""

    def __init__(self, glyphs: Tuple[str, ...]):
        self.glyphs = np.array(glyphs, dtype=object)
        self.glyphs.setflags(write=False)
        self.size = len(glyphs)

    def bucket(self, v: float) -> int:
        i = int(math.floor(float(v) * (self.size - 1) + _BUCKET_EPS))
        return min(self.size - 1, max(0, i))

    def lookup(self, v: float) -> str:
        return self.glyphs[self.bucket(v)]

    def buckets(self, values: np.ndarray) -> np.ndarray:
        idx = np.floor(np.asarray(values, dtype=np.float64) * (self.size - 1) + _BUCKET_EPS)
        return np.clip(idx, 0, self.size - 1).astype(np.intp)

    def map_array(self, values: np.ndarray) -> np.ndarray:
        return self.glyphs[self.buckets(values)]


@lru_cache(maxsize=32)
def charset_index(charset: CharacterSet) -> CharsetIndex:
    """Validate a character set and build its index. Raises InvalidConfig."""
    glyphs = tuple(split_graphemes(charset.glyphs))
    if not glyphs:
        raise InvalidConfig(f"{charset.name} character set is empty")
    for g in glyphs:
        if cluster_width(g) != 1:
            raise InvalidConfig(f"glyph {g!r} is not one column wide")
    return CharsetIndex(glyphs)
