"""Triangle meshes loaded from Wavefront OBJ files, wrapped in a BVH."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from .bvh import BVH
from .logger import get_logger
from .ray import HitInfo, Ray
from .shapes import Shape, Triangle


def _floats(fields: List[str], line_no: int) -> np.ndarray:
    if len(fields) < 3:
        raise ValueError(f"line {line_no}: expected three coordinates")
    try:
        return np.array([float(value) for value in fields[:3]])
    except ValueError as error:
        raise ValueError(f"line {line_no}: {error}") from None


def _parse_index(token: str, count: int, line_no: int) -> int:
    try:
        value = int(token)
    except ValueError:
        raise ValueError(f"line {line_no}: bad index {token!r}") from None
    index = value - 1 if value > 0 else count + value
    if value == 0 or not 0 <= index < count:
        raise ValueError(f"line {line_no}: index {value} out of range")
    return index


def _face_corner(
    token: str, position_count: int, normal_count: int, line_no: int
) -> Tuple[int, Optional[int]]:
    parts = token.split("/")
    if len(parts) > 3:
        raise ValueError(f"line {line_no}: bad face corner {token!r}")
    position = _parse_index(parts[0], position_count, line_no)
    normal = None
    if len(parts) == 3 and parts[2]:
        normal = _parse_index(parts[2], normal_count, line_no)
    return position, normal


def parse_obj(lines: Iterable[str]) -> List[Triangle]:
    """Read the triangles of an OBJ document.

    Faces may use any of the ``v``, ``v/vt``, ``v//vn`` and ``v/vt/vn`` forms
    and negative (relative) indices. Faces that are not triangles are skipped;
    triangles without vertex normals get their face normal.
    """
    positions: List[np.ndarray] = []
    normals: List[np.ndarray] = []
    triangles: List[Triangle] = []
    for line_no, raw in enumerate(lines, 1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        keyword, *fields = line.split()
        if keyword == "v":
            positions.append(_floats(fields, line_no))
        elif keyword == "vn":
            normals.append(_floats(fields, line_no))
        elif keyword == "f":
            corners = [
                _face_corner(token, len(positions), len(normals), line_no) for token in fields
            ]
            if len(corners) != 3:
                continue
            points = [positions[p] for p, _ in corners]
            if all(n is not None for _, n in corners):
                triangles.append(Triangle(*points, *(normals[n] for _, n in corners)))
            else:
                triangles.append(Triangle(*points))
    return triangles


def parse_simple_obj(lines: Iterable[str]) -> List[Triangle]:
    """Read an OBJ document whose faces are all triangles written as ``v//vn``."""
    positions: List[np.ndarray] = []
    normals: List[np.ndarray] = []
    triangles: List[Triangle] = []
    for line_no, line in enumerate(lines, 1):
        if line.startswith("v "):
            positions.append(_floats(line.split()[1:], line_no))
        elif line.startswith("vn "):
            normals.append(_floats(line.split()[1:], line_no))
        elif line.startswith("f "):
            fields = line.split()[1:4]
            if len(fields) < 3:
                raise ValueError(f"line {line_no}: a face needs three corners")
            corners = []
            for token in fields:
                parts = token.split("/")
                if len(parts) != 3:
                    raise ValueError(f"line {line_no}: expected v//vn corner, got {token!r}")
                corners.append(
                    (
                        _parse_index(parts[0], len(positions), line_no),
                        _parse_index(parts[2], len(normals), line_no),
                    )
                )
            triangles.append(
                Triangle(
                    *(positions[p] for p, _ in corners),
                    *(normals[n] for _, n in corners),
                )
            )
    return triangles


class Model(Shape):
    """A triangle mesh accelerated by a bounding volume hierarchy."""

    def __init__(self, triangles: Iterable[Triangle], split_method: str = "sah_buckets") -> None:
        self.bvh = BVH(split_method)
        self.bvh.build(triangles)

    @classmethod
    def _load(cls, filename: Union[str, Path], parser) -> "Model":
        path = Path(filename)
        with path.open(encoding="utf-8") as handle:
            triangles = parser(handle)
        if not triangles:
            raise ValueError(f"Model file {path.absolute()} is empty")
        get_logger().info(
            "Model file %s loaded with %d triangles", path.absolute(), len(triangles)
        )
        return cls(triangles)

    @classmethod
    def from_obj(cls, filename: Union[str, Path]) -> "Model":
        """Load a general OBJ file; see :func:`parse_obj`."""
        return cls._load(filename, parse_obj)

    @classmethod
    def from_simple_obj(cls, filename: Union[str, Path]) -> "Model":
        """Load an OBJ file in the restricted ``v//vn`` form; see :func:`parse_simple_obj`."""
        return cls._load(filename, parse_simple_obj)

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitInfo]:
        return self.bvh.intersect(ray, t_min, t_max)