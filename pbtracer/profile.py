"""Wall-clock timing of a block of work, reported through the logger."""

from __future__ import annotations

import time
from typing import Optional

from .logger import get_logger


class Profile:
    """Context manager that logs how many milliseconds its block took."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.start = time.perf_counter()
        self.elapsed_ms: Optional[int] = None

    def __enter__(self) -> "Profile":
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        get_logger().info("Profile %s cost %d ms", self.name, self.elapsed_ms)
        return False