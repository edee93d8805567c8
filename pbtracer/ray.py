"""Rays, surface materials and ray-surface hit records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


def _vec3(values) -> np.ndarray:
    vec = np.array(values, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


@dataclass(eq=False)
class Material:
    """Surface description: diffuse albedo, mirror flag and emitted radiance."""

    albedo: np.ndarray = field(default_factory=lambda: np.ones(3))
    is_specular: bool = False
    emission: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.albedo = _vec3(self.albedo)
        self.emission = _vec3(self.emission)
        self.is_specular = bool(self.is_specular)


@dataclass(eq=False)
class Ray:
    """A half-line starting at ``origin`` and running along ``direction``."""

    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self) -> None:
        self.origin = _vec3(self.origin)
        self.direction = _vec3(self.direction)

    def hit(self, t: float) -> np.ndarray:
        """Return the point at parameter ``t`` along the ray."""
        return self.origin + t * self.direction

    def object_from_world(self, object_from_world) -> "Ray":
        """Transform the ray by a 4x4 matrix (points with w=1, directions with w=0)."""
        matrix = np.asarray(object_from_world, dtype=float)
        if matrix.shape != (4, 4):
            raise ValueError(f"expected a 4x4 matrix, got shape {matrix.shape}")
        origin = matrix @ np.append(self.origin, 1.0)
        direction = matrix @ np.append(self.direction, 0.0)
        return Ray(origin[:3], direction[:3])


@dataclass(eq=False)
class HitInfo:
    """Where and how a ray met a surface, plus traversal statistics."""

    t: float
    hit_point: np.ndarray
    normal: np.ndarray
    material: Optional[Material] = None
    bounds_test_count: int = 0
    triangle_test_count: int = 0
    bounds_depth: int = 0

    def __post_init__(self) -> None:
        self.t = float(self.t)
        self.hit_point = _vec3(self.hit_point)
        self.normal = _vec3(self.normal)