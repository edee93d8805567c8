"""Renderers that turn a scene seen through a camera into an image."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from .camera import Camera
from .frame import Frame
from .progress import Progress
from .rgb import RGB
from .rng import RNG
from .scene import Scene
from .thread_pool import ThreadPool, default_pool

_MAX_BATCH = 32
_BOUNDS_TEST_SCALE = 150.0
_TRIANGLE_TEST_SCALE = 7.0
_DEPTH_SCALE = 32.0

PixelCoord = Tuple[int, int]


class Renderer(ABC):
    """Base class: accumulates ``render_pixel`` samples on the camera's film."""

    def __init__(
        self,
        camera: Camera,
        scene: Scene,
        seed: int = 0,
        pool: Optional[ThreadPool] = None,
    ) -> None:
        self.camera = camera
        self.scene = scene
        self.rng = RNG(seed)
        self.pool = pool

    def render(self, filename: Union[str, Path], spp: int) -> None:
        """Take ``spp`` samples per pixel in growing batches, saving after each batch.

        Batches double in size up to 32 samples, so the last batch may take the
        total past ``spp``.
        """
        if spp < 0:
            raise ValueError("samples per pixel must not be negative")
        film = self.camera.film
        film.clear()
        progress = Progress(film.width * film.height * spp)
        pool = self.pool if self.pool is not None else default_pool()
        current, increase = 0, 1
        while current < spp:

            def sample(x: int, y: int, count: int = increase) -> None:
                for _ in range(count):
                    film.add_sample(x, y, self.render_pixel((x, y)))
                progress.update(count)

            pool.parallel_for(film.width, film.height, sample)
            pool.wait()
            current += increase
            increase = min(current, _MAX_BATCH)
            film.save(filename)

    @abstractmethod
    def render_pixel(self, pixel_coord: PixelCoord) -> np.ndarray:
        """Return one radiance sample for the pixel at ``pixel_coord``."""


class RTRenderer(Renderer):
    """Path tracer with diffuse and mirror bounces and emissive surfaces."""

    def _sample_hemisphere(self) -> np.ndarray:
        while True:
            direction = np.array(
                [self.rng.uniform(), self.rng.uniform(), self.rng.uniform()]
            ) * 2.0 - 1.0
            if np.linalg.norm(direction) <= 1.0:
                break
        if direction[1] < 0.0:
            direction[1] = -direction[1]
        return direction

    def render_pixel(self, pixel_coord: PixelCoord) -> np.ndarray:
        offset = (abs(self.rng.uniform()), abs(self.rng.uniform()))
        ray = self.camera.generate_ray(pixel_coord, offset)
        beta = np.ones(3)
        color = np.zeros(3)
        while True:
            hit = self.scene.intersect(ray)
            if hit is None:
                break
            material = hit.material
            color += beta * material.emission
            beta = beta * material.albedo
            ray.origin = hit.hit_point
            frame = Frame(hit.normal)
            if material.is_specular:
                view = frame.local_from_world(-ray.direction)
                light = np.array([-view[0], view[1], -view[2]])
            else:
                light = self._sample_hemisphere()
            ray.direction = frame.world_from_local(light)
        return color


class _HeatMapRenderer(Renderer):
    """Colours each hit by a traversal statistic on a heat-map palette."""

    def _statistic(self, hit) -> float:
        raise NotImplementedError

    def render_pixel(self, pixel_coord: PixelCoord) -> np.ndarray:
        hit = self.scene.intersect(self.camera.generate_ray(pixel_coord))
        if hit is None:
            return np.zeros(3)
        return RGB.heat_map(self._statistic(hit)).to_color()


class BTCRenderer(_HeatMapRenderer):
    """Heat map of how many bounding boxes were tested per primary ray."""

    def _statistic(self, hit) -> float:
        return hit.bounds_test_count / _BOUNDS_TEST_SCALE

    def render_pixel(self, pixel_coord: PixelCoord) -> np.ndarray:
        return super().render_pixel(pixel_coord)


class TTCRenderer(_HeatMapRenderer):
    """Heat map of how many triangles were tested per primary ray."""

    def _statistic(self, hit) -> float:
        return hit.triangle_test_count / _TRIANGLE_TEST_SCALE

    def render_pixel(self, pixel_coord: PixelCoord) -> np.ndarray:
        return super().render_pixel(pixel_coord)


class BDRenderer(_HeatMapRenderer):
    """Heat map of the hierarchy depth of the leaf that was hit."""

    def _statistic(self, hit) -> float:
        return hit.bounds_depth / _DEPTH_SCALE

    def render_pixel(self, pixel_coord: PixelCoord) -> np.ndarray:
        return super().render_pixel(pixel_coord)


class NormalRenderer(Renderer):
    """Shows the surface normal of the first hit mapped into [0, 1]."""

    def render_pixel(self, pixel_coord: PixelCoord) -> np.ndarray:
        hit = self.scene.intersect(self.camera.generate_ray(pixel_coord))
        if hit is None:
            return np.zeros(3)
        return hit.normal * 0.5 + 0.5