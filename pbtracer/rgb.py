"""8-bit gamma-encoded colours and a heat-map palette for debugging views."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

_GAMMA = 2.2


def _clamp_channel(value: float) -> int:
    return min(max(value, 0), 255)


def _encode(value: float) -> int:
    value = float(value)
    if math.isnan(value) or value <= 0.0:
        return 0
    scaled = value ** (1.0 / _GAMMA) * 255.0
    if math.isinf(scaled):
        return 255
    return _clamp_channel(int(scaled))


@dataclass(frozen=True)
class RGB:
    """A colour with integer channels in 0..255."""

    red: int
    green: int
    blue: int

    @classmethod
    def from_color(cls, color) -> "RGB":
        """Gamma-encode a linear colour into 8-bit channels."""
        r, g, b = (float(c) for c in np.asarray(color, dtype=float))
        return cls(_encode(r), _encode(g), _encode(b))

    def to_color(self) -> np.ndarray:
        """Decode the channels back into a linear colour."""
        channels = np.array([self.red, self.green, self.blue], dtype=float) / 255.0
        return channels**_GAMMA

    @staticmethod
    def heat_map(t: float) -> "RGB":
        """Map ``t`` in [0, 1] onto a viridis-like palette; out of range gives red."""
        if t < 0.0 or t > 1.0:
            return RGB(255, 0, 0)
        idx_f = t * (len(_PALETTE) - 1)
        idx = math.floor(idx_f)
        if idx >= len(_PALETTE) - 1:
            return _PALETTE[-1]
        return lerp(_PALETTE[idx], _PALETTE[idx + 1], idx_f - idx)


def lerp(v0: RGB, v1: RGB, t: float) -> RGB:
    """Linearly interpolate between two colours, truncating to integers."""

    def channel(a: int, b: int) -> int:
        return _clamp_channel(int(a + (b - a) * t))

    return RGB(
        channel(v0.red, v1.red),
        channel(v0.green, v1.green),
        channel(v0.blue, v1.blue),
    )


_PALETTE = (
    RGB(68, 1, 84),
    RGB(71, 17, 100),
    RGB(72, 31, 112),
    RGB(71, 45, 123),
    RGB(68, 58, 131),
    RGB(64, 70, 136),
    RGB(59, 82, 139),
    RGB(54, 93, 141),
    RGB(49, 104, 142),
    RGB(44, 114, 142),
    RGB(40, 124, 142),
    RGB(36, 134, 142),
    RGB(33, 144, 140),
    RGB(31, 154, 138),
    RGB(32, 164, 134),
    RGB(39, 173, 129),
    RGB(53, 183, 121),
    RGB(71, 193, 110),
    RGB(93, 200, 99),
    RGB(117, 208, 84),
    RGB(143, 215, 68),
    RGB(170, 220, 50),
    RGB(199, 224, 32),
    RGB(227, 228, 24),
    RGB(253, 231, 37),
)