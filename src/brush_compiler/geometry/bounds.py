"""
Axis-aligned bounding boxes.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional

from .plane_math import Vec3


@dataclass(frozen=True)
class Aabb:
    """Axis-aligned box given by its minimum and maximum corners."""

    mins: Vec3
    maxs: Vec3

    @classmethod
    def from_points(cls, points: Iterable[Vec3]) -> Optional["Aabb"]:
        """Smallest box containing ``points``, or None for an empty set."""
        box: Optional[Aabb] = None
        for p in points:
            box = cls(p, p) if box is None else box.expand(p)
        return box

    @classmethod
    def around(cls, center: Vec3, half_extent: float) -> "Aabb":
        return cls(
            (center[0] - half_extent, center[1] - half_extent, center[2] - half_extent),
            (center[0] + half_extent, center[1] + half_extent, center[2] + half_extent),
        )

    def expand(self, point: Vec3) -> "Aabb":
        return Aabb(
            (min(self.mins[0], point[0]), min(self.mins[1], point[1]), min(self.mins[2], point[2])),
            (max(self.maxs[0], point[0]), max(self.maxs[1], point[1]), max(self.maxs[2], point[2])),
        )

    def union(self, other: "Aabb") -> "Aabb":
        return self.expand(other.mins).expand(other.maxs)

    @property
    def center(self) -> Vec3:
        return (
            (self.mins[0] + self.maxs[0]) * 0.5,
            (self.mins[1] + self.maxs[1]) * 0.5,
            (self.mins[2] + self.maxs[2]) * 0.5,
        )

    @property
    def size(self) -> Vec3:
        return (
            self.maxs[0] - self.mins[0],
            self.maxs[1] - self.mins[1],
            self.maxs[2] - self.mins[2],
        )

    @property
    def longest_axis_length(self) -> float:
        return max(self.size)



def union_all(boxes: Iterable[Optional[Aabb]]) -> Optional[Aabb]:
    """Union of every non-None box, or None when there is none."""
    result: Optional[Aabb] = None
    for box in boxes:
        if box is None:
            continue
        result = box if result is None else result.union(box)
    return result
