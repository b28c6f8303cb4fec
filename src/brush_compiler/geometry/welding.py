"""
Vertex welding: collapse near-coincident points.

Repeated edge/plane intersection produces points that are a hair apart.
Welding keeps the first point of every cluster, in traversal order, so a
polygon's winding order survives the cleanup.
"""

from __future__ import annotations
from typing import Iterable, List, Sequence

from .plane_math import Vec3


def contains_in_radius(points: Sequence[Vec3], point: Vec3, radius: float) -> bool:
    """Whether any of ``points`` lies within ``radius`` (inclusive) of ``point``."""
    radius_sq = radius * radius
    for p in points:
        dx = p[0] - point[0]
        dy = p[1] - point[1]
        dz = p[2] - point[2]
        if dx * dx + dy * dy + dz * dz <= radius_sq:
            return True
    return False


def weld(points: Iterable[Vec3], radius: float) -> List[Vec3]:
    """Merge points closer than ``radius`` into their first occurrence.

    Every kept pair is farther apart than ``radius``, so welding an already
    welded list returns it unchanged.
    """
    unique: List[Vec3] = []
    for p in points:
        if not contains_in_radius(unique, p, radius):
            unique.append(p)
    return unique
