"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from glyphgen.image import DecodedImage


def gradient_pixels(width: int, height: int) -> np.ndarray:
    """Dark-to-light ramp from left to right, tinted blue toward the bottom."""
    xs = np.linspace(0, 255, width)
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[..., 0] = xs
    arr[..., 1] = xs
    arr[..., 2] = np.linspace(0, 255, height)[:, None]
    return arr


@pytest.fixture
def white_4x4() -> DecodedImage:
    return DecodedImage.solid(4, 4, (255, 255, 255))


@pytest.fixture
def black_4x4() -> DecodedImage:
    return DecodedImage.solid(4, 4, (0, 0, 0))


@pytest.fixture
def gradient_image() -> DecodedImage:
    return DecodedImage.from_array(gradient_pixels(64, 48))


@pytest.fixture
def noise_image() -> DecodedImage:
    rng = np.random.default_rng(1234)
    return DecodedImage.from_array(rng.integers(0, 256, size=(37, 53, 3), dtype=np.uint8))


@pytest.fixture
def empty_image() -> DecodedImage:
    return DecodedImage.from_array(np.zeros((0, 5, 3), dtype=np.uint8))


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Never touch the real per-user config."""
    path = tmp_path / "glyphgen.json"
    monkeypatch.setenv("GLYPHGEN_CONFIG", str(path))
    return path


@pytest.fixture
def utf8_terminal(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("LANG", "en_US.UTF-8")
    monkeypatch.setenv("COLORTERM", "truecolor")
    monkeypatch.setenv("TERM", "xterm-256color")
