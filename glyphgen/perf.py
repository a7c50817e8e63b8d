#!/usr/bin/env python3
# glyphgen/perf.py
"""Rolling render-time statistics shown in the status bar."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque

MAX_SAMPLES = 60
DEGRADED_FPS = 30.0


class PerfMetrics:
    def __init__(self, max_samples: int = MAX_SAMPLES):
        self._samples: Deque[float] = deque(maxlen=max_samples)
        self._lock = threading.Lock()
        self.last_ms = 0.0

    def record(self, elapsed_ms: float) -> None:
        with self._lock:
            self._samples.append(max(0.0, float(elapsed_ms)))
            self.last_ms = float(elapsed_ms)

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def avg_ms(self) -> float:
        with self._lock:
            if not self._samples:
                return 0.0
            return sum(self._samples) / len(self._samples)

    @property
    def fps(self) -> float:
        avg = self.avg_ms
        return 1000.0 / avg if avg > 0.0 else 0.0

    def is_degraded(self) -> bool:
        fps = self.fps
        return 0.0 < fps < DEGRADED_FPS
