#!/usr/bin/env python3
# glyphgen/version.py
"""
Version and build metadata for glyphgen.
"""

__version__ = "0.4.0"
__build__ = "2026-10-19"
__license__ = "MIT"

def version_info() -> str:
    """Return human-readable version string."""
    return f"glyphgen v{__version__} (build {__build__})"
