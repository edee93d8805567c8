"""Axis-aligned bounding boxes and slab ray tests."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .ray import Ray

_FLOAT_MAX = float(np.finfo(np.float32).max)


def _vec3(values) -> np.ndarray:
    vec = np.array(values, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


def _min(a, b):
    return np.where(b < a, b, a)


def _max(a, b):
    return np.where(a < b, b, a)


class Bounds:
    """An axis-aligned box; the default box is empty (min above max)."""

    __slots__ = ("b_min", "b_max")

    def __init__(self, b_min=None, b_max=None) -> None:
        self.b_min = np.full(3, _FLOAT_MAX) if b_min is None else _vec3(b_min)
        self.b_max = np.full(3, -_FLOAT_MAX) if b_max is None else _vec3(b_max)

    def __repr__(self) -> str:
        return f"Bounds(b_min={self.b_min.tolist()}, b_max={self.b_max.tolist()})"

    def expand(self, other) -> None:
        """Grow the box to contain a point or another ``Bounds``."""
        if isinstance(other, Bounds):
            low, high = other.b_min, other.b_max
        else:
            low = high = _vec3(other)
        self.b_min = _min(self.b_min, low)
        self.b_max = _max(self.b_max, high)

    def has_intersection(
        self, ray: Ray, t_min: float, t_max: float, inv_dir: Optional[np.ndarray] = None
    ) -> bool:
        """Whether the ray overlaps the box anywhere within [t_min, t_max]."""
        with np.errstate(all="ignore"):
            if inv_dir is None:
                inv_dir = 1.0 / ray.direction
            else:
                inv_dir = np.asarray(inv_dir, dtype=float)
            t1 = (self.b_min - ray.origin) * inv_dir
            t2 = (self.b_max - ray.origin) * inv_dir
        near_t = _min(t1, t2)
        far_t = _max(t1, t2)
        near = _max(near_t[0], _max(near_t[1], near_t[2]))
        far = _min(far_t[0], _min(far_t[1], far_t[2]))
        return bool(_max(near, t_min) <= _min(far, t_max))

    def diagonal(self) -> np.ndarray:
        """Vector from the minimum to the maximum corner."""
        return self.b_max - self.b_min

    def surface_area(self) -> float:
        """Total area of the box's six faces."""
        dx, dy, dz = self.diagonal()
        return float((dx * (dy + dz) + dy * dz) * 2.0)