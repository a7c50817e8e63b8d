#!/usr/bin/env python3
# glyphgen/image.py
"""
Immutable decoded raster shared by render requests.

A DecodedImage wraps an (H, W, 3) uint8 numpy array whose writeable flag is
cleared, so the same object can be handed to any number of worker threads.
Alpha is dropped on construction; no engine uses it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image

__all__ = [
    "DecodedImage",
    "open_image",
    "supported_extensions",
    "is_supported_format",
]

_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "bmp", "webp", "tiff", "tif")


@dataclass(frozen=True, eq=False)
class DecodedImage:
    pixels: np.ndarray

    def __post_init__(self):
        arr = np.asarray(self.pixels)
        if arr.ndim != 3 or arr.shape[2] < 3:
            raise ValueError(f"expected (H, W, 3|4) samples, got shape {arr.shape}")
        arr = np.array(arr[..., :3], dtype=np.uint8, copy=True)
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    # --- constructors

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "DecodedImage":
        arr = np.asarray(arr)
        if arr.ndim == 2:
            arr = np.repeat(arr[..., None], 3, axis=2)
        return cls(np.clip(arr, 0, 255).astype(np.uint8))

    @classmethod
    def from_buffer(cls, width: int, height: int, data: bytes, channels: int = 3) -> "DecodedImage":
        """Row-major 8-bit RGB or RGBA buffer."""
        if channels not in (3, 4):
            raise ValueError("channels must be 3 (RGB) or 4 (RGBA)")
        expected = width * height * channels
        if len(data) != expected:
            raise ValueError(f"buffer holds {len(data)} bytes, expected {expected}")
        arr = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, channels)
        return cls(arr)

    @classmethod
    def from_pil(cls, img: Image.Image) -> "DecodedImage":
        if img.mode != "RGB":
            img = img.convert("RGB")
        return cls(np.asarray(img, dtype=np.uint8))

    @classmethod
    def solid(cls, width: int, height: int, rgb: Tuple[int, int, int]) -> "DecodedImage":
        arr = np.empty((height, width, 3), dtype=np.uint8)
        arr[...] = rgb
        return cls(arr)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))


def open_image(path: Union[str, Path]) -> DecodedImage:
    """Decode an image file with Pillow."""
    with Image.open(path) as img:
        img.load()
        return DecodedImage.from_pil(img)


def supported_extensions() -> Tuple[str, ...]:
    return _EXTENSIONS


def is_supported_format(path: Union[str, Path]) -> bool:
    suffix = Path(path).suffix.lower().lstrip(".")
    return suffix in _EXTENSIONS
