"""A collection of shapes, each placed in the world with its own transform and material."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .ray import HitInfo, Material, Ray
from .shapes import Shape


def _vec3(values) -> np.ndarray:
    vec = np.array(values, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


def _normalize(vec: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return vec / np.linalg.norm(vec)


def _translation(offset: np.ndarray) -> np.ndarray:
    matrix = np.identity(4)
    matrix[:3, 3] = offset
    return matrix


def _scaling(factors: np.ndarray) -> np.ndarray:
    return np.diag([factors[0], factors[1], factors[2], 1.0])


def _rotation(degrees: float, axis: int) -> np.ndarray:
    angle = math.radians(degrees)
    c, s = math.cos(angle), math.sin(angle)
    i, j = [(1, 2), (2, 0), (0, 1)][axis]
    matrix = np.identity(4)
    matrix[i, i] = c
    matrix[i, j] = -s
    matrix[j, i] = s
    matrix[j, j] = c
    return matrix


@dataclass(eq=False)
class ShapeInfo:
    """A shape placed in the scene, with its material and both transforms."""

    shape: Shape
    material: Material
    world_from_object: np.ndarray
    object_from_world: np.ndarray


class Scene(Shape):
    """Shapes in world space; intersection returns the nearest hit among them."""

    def __init__(self) -> None:
        self.shape_infos: List[ShapeInfo] = []

    def add_shape(
        self,
        shape: Shape,
        material: Optional[Material] = None,
        position=(0.0, 0.0, 0.0),
        scale=(1.0, 1.0, 1.0),
        rotate=(0.0, 0.0, 0.0),
    ) -> ShapeInfo:
        """Place ``shape`` scaled, then rotated about x, y, z (degrees), then translated."""
        rotate = _vec3(rotate)
        world_from_object = (
            _translation(_vec3(position))
            @ _rotation(rotate[2], 2)
            @ _rotation(rotate[1], 1)
            @ _rotation(rotate[0], 0)
            @ _scaling(_vec3(scale))
        )
        try:
            object_from_world = np.linalg.inv(world_from_object)
        except np.linalg.LinAlgError:
            raise ValueError("shape transform is not invertible") from None
        info = ShapeInfo(
            shape,
            material if material is not None else Material(),
            world_from_object,
            object_from_world,
        )
        self.shape_infos.append(info)
        return info

    def intersect(
        self, ray: Ray, t_min: float = 1e-5, t_max: float = math.inf
    ) -> Optional[HitInfo]:
        """Nearest hit in (t_min, t_max), reported in world space with its material."""
        closest: Optional[HitInfo] = None
        closest_info: Optional[ShapeInfo] = None
        for info in self.shape_infos:
            hit = info.shape.intersect(ray.object_from_world(info.object_from_world), t_min, t_max)
            if hit is not None:
                closest, closest_info, t_max = hit, info, hit.t

        if closest is None or closest_info is None:
            return None
        closest.hit_point = (closest_info.world_from_object @ np.append(closest.hit_point, 1.0))[:3]
        normal = closest_info.object_from_world.T @ np.append(closest.normal, 0.0)
        closest.normal = _normalize(normal[:3])
        closest.material = closest_info.material
        return closest