"""Orthonormal shading frame built around a surface normal."""

from __future__ import annotations

import numpy as np


def _normalize(vec: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return vec / np.linalg.norm(vec)


class Frame:
    """Local coordinate system whose y axis is the given world-space normal."""

    def __init__(self, normal) -> None:
        normal = np.array(normal, dtype=float)
        self.y_axis = normal
        up = np.array([0.0, 1.0, 0.0]) if abs(normal[1]) < 0.99999 else np.array([0.0, 0.0, 1.0])
        self.x_axis = _normalize(np.cross(up, normal))
        self.z_axis = _normalize(np.cross(self.x_axis, self.y_axis))

    def local_from_world(self, world_dir) -> np.ndarray:
        """Express a world direction in frame coordinates (normalized)."""
        world_dir = np.asarray(world_dir, dtype=float)
        local = np.array(
            [
                np.dot(world_dir, self.x_axis),
                np.dot(world_dir, self.y_axis),
                np.dot(world_dir, self.z_axis),
            ]
        )
        return _normalize(local)

    def world_from_local(self, local_dir) -> np.ndarray:
        """Express a frame direction in world coordinates (normalized)."""
        lx, ly, lz = np.asarray(local_dir, dtype=float)
        return _normalize(lx * self.x_axis + ly * self.y_axis + lz * self.z_axis)