#!/usr/bin/env python3
# glyphgen/errors.py
"""
Error kinds raised by the render engines.

Engines raise RenderError subclasses. The dispatcher turns them (and any other
exception escaping an engine) into RenderFailure results.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ErrorKind",
    "RenderError",
    "InvalidConfig",
    "EmptyInput",
    "InternalFailure",
]


class ErrorKind(Enum):
    INVALID_CONFIG = "invalid_config"
    EMPTY_INPUT = "empty_input"
    INTERNAL_FAILURE = "internal_failure"


class RenderError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidConfig(RenderError):
    """Empty custom charset, zero target width, unusable color depth."""
    kind = ErrorKind.INVALID_CONFIG


class EmptyInput(RenderError):
    """Zero-area image or empty text."""
    kind = ErrorKind.EMPTY_INPUT


class InternalFailure(RenderError):
    kind = ErrorKind.INTERNAL_FAILURE
