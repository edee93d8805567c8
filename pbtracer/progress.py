"""Thread-safe percentage progress reporting."""

from __future__ import annotations

import threading

import numpy as np

from .logger import get_logger


class Progress:
    """Counts finished work items and logs each time ``step`` percent more is done."""

    def __init__(self, total: int, step: int = 2) -> None:
        if total < 0:
            raise ValueError("total must not be negative")
        if step < 0:
            raise ValueError("step must not be negative")
        self.total = int(total)
        self.step = int(step)
        self.current = 0
        self.percent = 0
        self.last_percent = 0
        self._lock = threading.Lock()
        get_logger().info("Render - 0%")

    def update(self, count: int) -> None:
        """Add ``count`` finished items and log if a reporting threshold was crossed."""
        with self._lock:
            self.current += count
            if self.total == 0:
                self.percent = 100
            else:
                ratio = np.float32(self.current) / np.float32(self.total) * np.float32(100.0)
                self.percent = int(ratio)
            if self.percent - self.last_percent >= self.step or self.percent == 100:
                self.last_percent = self.percent
                get_logger().info("Render - %d%%", self.percent)