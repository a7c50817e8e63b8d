#!/usr/bin/env python3
# glyphgen/unicode_text.py
"""
Grapheme-cluster and display-width helpers.

Clusters come from the `regex` module's extended grapheme matcher (\\X).
Widths come from wcwidth, measured per cluster so a base letter plus its
combining marks counts once.
"""

from __future__ import annotations

from typing import List

import regex
from wcwidth import wcswidth, wcwidth

__all__ = [
    "split_graphemes",
    "grapheme_count",
    "cluster_width",
    "display_width",
    "truncate_to_width",
]

_GRAPHEME = regex.compile(r"\X")


def split_graphemes(s: str) -> List[str]:
    return _GRAPHEME.findall(s)


def grapheme_count(s: str) -> int:
    return len(split_graphemes(s))


def cluster_width(cluster: str) -> int:
    w = wcswidth(cluster)
    if w >= 0:
        return w
    # Control characters inside the cluster; count what is printable.
    return sum(max(0, wcwidth(ch)) for ch in cluster)


def display_width(s: str) -> int:
    return sum(cluster_width(g) for g in split_graphemes(s))


def truncate_to_width(s: str, max_width: int) -> str:
    out = []
    used = 0
    for g in split_graphemes(s):
        w = cluster_width(g)
        if used + w > max_width:
            break
        out.append(g)
        used += w
    return "".join(out)
