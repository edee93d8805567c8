"""Bounding volume hierarchy over triangles, flattened for fast traversal."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

from .bounds import Bounds
from .logger import get_logger
from .ray import HitInfo, Ray
from .shapes import Shape, Triangle

_MAX_DEPTH = 32
_BUCKET_COUNT = 12
_SAH_PLANES = 11
_SPLIT_METHODS = ("axis", "sah", "sah_buckets")


def _centroids(triangles: List[Triangle]) -> np.ndarray:
    return np.array([(t.p0 + t.p1 + t.p2) / 3.0 for t in triangles], dtype=float).reshape(-1, 3)


def _extents(triangles: List[Triangle]) -> Tuple[np.ndarray, np.ndarray]:
    mins = np.array(
        [np.minimum(np.minimum(t.p0, t.p1), t.p2) for t in triangles], dtype=float
    ).reshape(-1, 3)
    maxs = np.array(
        [np.maximum(np.maximum(t.p0, t.p1), t.p2) for t in triangles], dtype=float
    ).reshape(-1, 3)
    return mins, maxs


def _bounds_of(mins: np.ndarray, maxs: np.ndarray) -> Bounds:
    if len(mins) == 0:
        return Bounds()
    return Bounds(mins.min(axis=0), maxs.max(axis=0))


def _copy_bounds(bounds: Bounds) -> Bounds:
    return Bounds(bounds.b_min, bounds.b_max)


@dataclass(eq=False)
class BVHTreeNode:
    """A node of the hierarchy while it is being built."""

    triangles: List[Triangle] = field(default_factory=list)
    depth: int = 1
    bounds: Bounds = field(default_factory=Bounds)
    children: Optional[Tuple["BVHTreeNode", "BVHTreeNode"]] = None
    split_axis: int = 0

    def update_bounds(self) -> None:
        """Recompute the box from the vertices of the node's triangles."""
        self.bounds = _bounds_of(*_extents(self.triangles))


@dataclass(eq=False)
class BVHNode:
    """A node of the flattened hierarchy.

    Interior nodes have ``triangle_count == 0``; their left child follows them
    directly and ``right`` holds the index of the right child. Leaves use
    ``triangle_idx`` as the start of their run in the ordered triangle list.
    """

    bounds: Bounds
    triangle_count: int
    depth: int
    split_axis: int
    right: int = 0
    triangle_idx: int = 0

    @property
    def is_leaf(self) -> bool:
        return self.triangle_count > 0


@dataclass
class BVHState:
    """Statistics gathered while building a hierarchy."""

    total_node_count: int = 0
    leaf_node_count: int = 0
    max_leaf_node_triangle_count: int = 0

    def add_leaf_node(self, node: BVHTreeNode) -> None:
        """Record ``node`` as a leaf."""
        self.leaf_node_count += 1
        self.max_leaf_node_triangle_count = max(
            self.max_leaf_node_triangle_count, len(node.triangles)
        )


class _Split(NamedTuple):
    axis: int
    left: List[Triangle]
    right: List[Triangle]
    left_bounds: Bounds
    right_bounds: Bounds


def _partition(triangles: List[Triangle], mask: np.ndarray, axis: int) -> Optional[_Split]:
    if mask.all() or not mask.any():
        return None
    mins, maxs = _extents(triangles)
    return _Split(
        axis,
        [t for t, keep in zip(triangles, mask) if keep],
        [t for t, keep in zip(triangles, mask) if not keep],
        _bounds_of(mins[mask], maxs[mask]),
        _bounds_of(mins[~mask], maxs[~mask]),
    )


def _choose_axis_midpoint(node: BVHTreeNode) -> Optional[_Split]:
    """Split at the middle of the longest axis of the node's box."""
    diagonal = node.bounds.diagonal()
    dx, dy, dz = diagonal
    if dx > dy:
        axis = 0 if dx > dz else 2
    else:
        axis = 1 if dy > dz else 2
    mid = node.bounds.b_min[axis] + diagonal[axis] * 0.5
    mask = _centroids(node.triangles)[:, axis] < mid
    split = _partition(node.triangles, mask, axis)
    node.split_axis = axis
    return split


def _choose_sah(node: BVHTreeNode) -> Optional[_Split]:
    """Try evenly spaced planes on every axis and keep the cheapest by surface area."""
    triangles = node.triangles
    centers = _centroids(triangles)
    mins, maxs = _extents(triangles)
    diagonal = node.bounds.diagonal()
    total = len(triangles)
    min_cost = float("inf")
    best = None
    for axis in range(3):
        for i in range(_SAH_PLANES):
            mid = node.bounds.b_min[axis] + diagonal[axis] * (i + 1.0) / float(_BUCKET_COUNT)
            mask = centers[:, axis] < mid
            left_count = int(mask.sum())
            if left_count == 0 or left_count == total:
                continue
            left_bounds = _bounds_of(mins[mask], maxs[mask])
            right_bounds = _bounds_of(mins[~mask], maxs[~mask])
            cost = (
                left_bounds.surface_area() * left_count
                + right_bounds.surface_area() * (total - left_count)
            )
            if cost < min_cost:
                min_cost = cost
                best = (axis, mask, left_bounds, right_bounds)
    if best is None:
        return None
    axis, mask, left_bounds, right_bounds = best
    return _Split(
        axis,
        [t for t, keep in zip(triangles, mask) if keep],
        [t for t, keep in zip(triangles, mask) if not keep],
        left_bounds,
        right_bounds,
    )


def _choose_sah_buckets(node: BVHTreeNode) -> Optional[_Split]:
    """Bin centroids into buckets per axis and keep the cheapest bucket boundary."""
    triangles = node.triangles
    centers = _centroids(triangles)
    mins, maxs = _extents(triangles)
    b_min = node.bounds.b_min
    diagonal = node.bounds.diagonal()
    last = _BUCKET_COUNT - 1
    min_cost = float("inf")
    best = None
    for axis in range(3):
        with np.errstate(all="ignore"):
            scaled = np.floor((centers[:, axis] - b_min[axis]) * _BUCKET_COUNT / diagonal[axis])
        scaled = np.nan_to_num(scaled, nan=0.0, posinf=float(last), neginf=0.0)
        buckets = np.clip(scaled, 0, last).astype(int)
        counts = np.bincount(buckets, minlength=_BUCKET_COUNT)
        bucket_bounds = [
            _bounds_of(mins[buckets == b], maxs[buckets == b]) for b in range(_BUCKET_COUNT)
        ]

        left_bounds = _copy_bounds(bucket_bounds[0])
        left_count = int(counts[0])
        for i in range(1, _BUCKET_COUNT):
            right_count = int(counts[i:].sum())
            if right_count == 0:
                break
            if left_count != 0:
                right_bounds = Bounds()
                for bounds in bucket_bounds[i:]:
                    right_bounds.expand(bounds)
                cost = (
                    left_bounds.surface_area() * left_count
                    + right_bounds.surface_area() * right_count
                )
                if cost < min_cost:
                    min_cost = cost
                    best = (axis, i, buckets, _copy_bounds(left_bounds), right_bounds)
            left_bounds.expand(bucket_bounds[i])
            left_count += int(counts[i])

    if best is None:
        return None
    axis, split_idx, buckets, left_bounds, right_bounds = best
    left = [
        triangles[k] for b in range(split_idx) for k in np.flatnonzero(buckets == b)
    ]
    right = [
        triangles[k]
        for b in range(split_idx, _BUCKET_COUNT)
        for k in np.flatnonzero(buckets == b)
    ]
    return _Split(axis, left, right, left_bounds, right_bounds)


_CHOOSERS: dict = {
    "axis": _choose_axis_midpoint,
    "sah": _choose_sah,
    "sah_buckets": _choose_sah_buckets,
}


class BVH(Shape):
    """Triangle hierarchy; ``split_method`` is one of "axis", "sah", "sah_buckets"."""

    def __init__(self, split_method: str = "sah_buckets") -> None:
        if split_method not in _SPLIT_METHODS:
            raise ValueError(
                f"unknown split method {split_method!r}; expected one of {_SPLIT_METHODS}"
            )
        self.split_method = split_method
        self.nodes: List[BVHNode] = []
        self.ordered_triangles: List[Triangle] = []
        self.state = BVHState()

    def build(self, triangles: Iterable[Triangle]) -> None:
        """Build the hierarchy over ``triangles``, replacing any earlier one."""
        triangles = list(triangles)
        if not triangles:
            raise ValueError("cannot build a BVH from no triangles")
        root = BVHTreeNode(triangles, depth=1)
        root.update_bounds()
        state = BVHState()
        self._split(root, state, _CHOOSERS[self.split_method])

        triangle_count = len(triangles)
        logger = get_logger()
        logger.info("Total Node Count: %d", state.total_node_count)
        logger.info("Leaf Node Count: %d", state.leaf_node_count)
        logger.info("Triangle Count: %d", triangle_count)
        logger.info(
            "Mean Leaf Node Triangle Count: %s", triangle_count / state.leaf_node_count
        )
        logger.info("Max Leaf Node Triangle Count: %d", state.max_leaf_node_triangle_count)

        self.nodes = []
        self.ordered_triangles = []
        self._flatten(root)
        self.state = state

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitInfo]:
        """Nearest triangle hit in (t_min, t_max), with traversal statistics."""
        if not self.nodes:
            return None
        closest: Optional[HitInfo] = None
        bounds_test_count = 0
        triangle_test_count = 0

        dir_is_neg = ray.direction < 0
        with np.errstate(divide="ignore"):
            inv_dir = 1.0 / ray.direction

        stack: List[int] = []
        current = 0
        while True:
            node = self.nodes[current]
            bounds_test_count += 1

            if not node.bounds.has_intersection(ray, t_min, t_max, inv_dir):
                if not stack:
                    break
                current = stack.pop()
                continue

            if not node.is_leaf:
                if dir_is_neg[node.split_axis]:
                    stack.append(current + 1)
                    current = node.right
                else:
                    stack.append(node.right)
                    current += 1
                continue

            triangle_test_count += node.triangle_count
            start = node.triangle_idx
            for triangle in self.ordered_triangles[start : start + node.triangle_count]:
                hit = triangle.intersect(ray, t_min, t_max)
                if hit is not None:
                    t_max = hit.t
                    closest = hit
                    closest.bounds_depth = node.depth
            if not stack:
                break
            current = stack.pop()

        if closest is not None:
            closest.bounds_test_count = bounds_test_count
            closest.triangle_test_count = triangle_test_count
        return closest

    def _split(
        self,
        node: BVHTreeNode,
        state: BVHState,
        choose: Callable[[BVHTreeNode], Optional[_Split]],
    ) -> None:
        state.total_node_count += 1
        if len(node.triangles) == 1 or node.depth > _MAX_DEPTH:
            state.add_leaf_node(node)
            return
        split = choose(node)
        if split is None:
            state.add_leaf_node(node)
            return

        node.split_axis = split.axis
        left = BVHTreeNode(split.left, node.depth + 1, split.left_bounds)
        right = BVHTreeNode(split.right, node.depth + 1, split.right_bounds)
        node.children = (left, right)
        node.triangles = []
        self._split(left, state, choose)
        self._split(right, state, choose)

    def _flatten(self, node: BVHTreeNode) -> int:
        idx = len(self.nodes)
        flat = BVHNode(
            bounds=node.bounds,
            triangle_count=len(node.triangles),
            depth=node.depth,
            split_axis=node.split_axis,
        )
        self.nodes.append(flat)
        if node.children is not None:
            left, right = node.children
            self._flatten(left)
            flat.right = self._flatten(right)
        else:
            flat.triangle_idx = len(self.ordered_triangles)
            self.ordered_triangles.extend(node.triangles)
        return idx