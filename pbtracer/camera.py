"""Film that accumulates pixel samples and the pinhole camera that looks through it."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np

from .logger import get_logger
from .ray import Ray

_INV_GAMMA = 1.0 / 2.2


def _vec3(values) -> np.ndarray:
    vec = np.array(values, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


def _normalize(vec: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return vec / np.linalg.norm(vec)


@dataclass(eq=False)
class Pixel:
    """Sum of the colour samples taken for one pixel, and how many there were."""

    color: np.ndarray = field(default_factory=lambda: np.zeros(3))
    sample_count: int = 0


class Film:
    """A grid of pixels that collects radiance samples and writes binary PPM."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("film width and height must be positive")
        self.width = int(width)
        self.height = int(height)
        self._colors = np.zeros((self.height, self.width, 3))
        self._counts = np.zeros((self.height, self.width), dtype=np.int64)

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside a {self.width}x{self.height} film")

    def pixel(self, x: int, y: int) -> Pixel:
        """A copy of the accumulated state of pixel (x, y)."""
        self._check(x, y)
        return Pixel(self._colors[y, x].copy(), int(self._counts[y, x]))

    def add_sample(self, x: int, y: int, color) -> None:
        """Add one colour sample to pixel (x, y)."""
        self._check(x, y)
        self._colors[y, x] += _vec3(color)
        self._counts[y, x] += 1

    def clear(self) -> None:
        """Drop every sample taken so far."""
        self._colors.fill(0.0)
        self._counts.fill(0)

    def to_ppm(self) -> bytes:
        """Encode the averaged, gamma-corrected image as binary PPM (P6)."""
        with np.errstate(all="ignore"):
            mean = self._colors / self._counts[..., None]
            encoded = np.power(np.clip(mean, 0.0, None), _INV_GAMMA) * 255.0
        encoded = np.nan_to_num(encoded, nan=0.0, posinf=255.0)
        channels = np.floor(np.clip(encoded, 0.0, 255.0)).astype(np.uint8)
        header = f"P6\n{self.width} {self.height}\n255\n".encode("ascii")
        return header + channels.tobytes()

    def save(self, filename: Union[str, Path]) -> Path:
        """Write the image to ``filename`` as PPM and return the path."""
        path = Path(filename)
        path.write_bytes(self.to_ppm())
        get_logger().info("Film saved to: %s", path.resolve())
        return path


def _perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Left-handed perspective projection with depth mapped to [0, 1]."""
    tan_half = math.tan(fovy / 2.0)
    matrix = np.zeros((4, 4))
    matrix[0, 0] = 1.0 / (aspect * tan_half)
    matrix[1, 1] = 1.0 / tan_half
    matrix[2, 2] = far / (far - near)
    matrix[2, 3] = -(far * near) / (far - near)
    matrix[3, 2] = 1.0
    return matrix


def _look_at(eye: np.ndarray, center: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Left-handed view matrix looking from ``eye`` towards ``center``."""
    forward = _normalize(center - eye)
    side = _normalize(np.cross(up, forward))
    upward = np.cross(forward, side)
    matrix = np.identity(4)
    matrix[0, :3] = side
    matrix[1, :3] = upward
    matrix[2, :3] = forward
    matrix[:3, 3] = [-np.dot(side, eye), -np.dot(upward, eye), -np.dot(forward, eye)]
    return matrix


class Camera:
    """Pinhole camera at ``position`` looking at ``viewpoint`` with vertical field ``fovy`` degrees."""

    def __init__(self, film: Film, position, viewpoint, fovy: float) -> None:
        self.film = film
        self.position = _vec3(position)
        viewpoint = _vec3(viewpoint)
        if np.allclose(viewpoint, self.position):
            raise ValueError("camera position and viewpoint must differ")
        aspect = film.width / film.height
        self.camera_from_clip = np.linalg.inv(_perspective(math.radians(fovy), aspect, 1.0, 2.0))
        self.world_from_camera = np.linalg.inv(
            _look_at(self.position, viewpoint, np.array([0.0, 1.0, 0.0]))
        )

    def generate_ray(self, pixel_coord, offset=(0.5, 0.5)) -> Ray:
        """Primary ray through ``pixel_coord`` shifted by ``offset`` within the pixel."""
        size = np.array([self.film.width, self.film.height], dtype=float)
        ndc = (np.asarray(pixel_coord, dtype=float) + np.asarray(offset, dtype=float)) / size
        ndc[1] = 1.0 - ndc[1]  # screen y runs down, NDC y runs up
        ndc = ndc * 2.0 - 1.0
        # With the near plane at 1 the clip point (x, y, 0, 1) lies on it directly.
        clip = np.array([ndc[0], ndc[1], 0.0, 1.0])
        world = (self.world_from_camera @ self.camera_from_clip @ clip)[:3]
        return Ray(self.position, _normalize(world - self.position))