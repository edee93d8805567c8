"""Analytic primitives that a ray can hit: spheres, planes and triangles."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .ray import HitInfo, Ray


def _vec3(values) -> np.ndarray:
    vec = np.array(values, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


def _normalize(vec: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return vec / np.linalg.norm(vec)


class Shape(ABC):
    """Anything that can report the nearest ray hit inside (t_min, t_max)."""

    @abstractmethod
    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitInfo]:
        """Return the hit in the open interval (t_min, t_max), or None."""


class Sphere(Shape):
    """A sphere given by its centre and radius."""

    def __init__(self, center, radius: float) -> None:
        self.center = _vec3(center)
        self.radius = float(radius)

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitInfo]:
        center_to_ray = ray.origin - self.center
        a = float(np.dot(ray.direction, ray.direction))
        b = 2.0 * float(np.dot(center_to_ray, ray.direction))
        c = float(np.dot(center_to_ray, center_to_ray)) - self.radius * self.radius
        discriminant = b * b - 4.0 * a * c
        if discriminant < 0.0 or a == 0.0:
            return None
        root = math.sqrt(discriminant)
        hit_t = (-b - root) * 0.5 / a
        if hit_t < 0.0:
            hit_t = (-b + root) * 0.5 / a
        if t_min < hit_t < t_max:
            hit_point = ray.hit(hit_t)
            return HitInfo(hit_t, hit_point, _normalize(hit_point - self.center))
        return None


class Plane(Shape):
    """An infinite plane through ``point`` with unit ``normal``."""

    def __init__(self, point, normal) -> None:
        self.point = _vec3(point)
        self.normal = _normalize(_vec3(normal))

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitInfo]:
        with np.errstate(divide="ignore", invalid="ignore"):
            hit_t = np.dot(self.point - ray.origin, self.normal) / np.dot(ray.direction, self.normal)
        if t_min < hit_t < t_max:
            return HitInfo(hit_t, ray.hit(hit_t), self.normal.copy())
        return None


class Triangle(Shape):
    """A triangle with per-vertex normals; without them the face normal is used."""

    def __init__(self, p0, p1, p2, n0=None, n1=None, n2=None) -> None:
        self.p0 = _vec3(p0)
        self.p1 = _vec3(p1)
        self.p2 = _vec3(p2)
        given = [n is not None for n in (n0, n1, n2)]
        if all(given):
            self.n0, self.n1, self.n2 = _vec3(n0), _vec3(n1), _vec3(n2)
        elif any(given):
            raise ValueError("either all three vertex normals or none must be given")
        else:
            face = _normalize(np.cross(self.p1 - self.p0, self.p2 - self.p0))
            self.n0, self.n1, self.n2 = face, face.copy(), face.copy()

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitInfo]:
        with np.errstate(divide="ignore", invalid="ignore"):
            e1 = self.p1 - self.p0
            e2 = self.p2 - self.p0
            s1 = np.cross(ray.direction, e2)
            inv_det = np.float64(1.0) / np.dot(e1, s1)

            s = ray.origin - self.p0
            u = np.dot(s, s1) * inv_det
            if u < 0.0 or u > 1.0:
                return None

            s2 = np.cross(s, e1)
            v = np.dot(ray.direction, s2) * inv_det
            if v < 0.0 or u + v > 1.0:
                return None

            t = np.dot(e2, s2) * inv_det
        if t_min < t < t_max:
            normal = (1.0 - u - v) * self.n0 + u * self.n1 + v * self.n2
            return HitInfo(t, ray.hit(t), _normalize(normal))
        return None