"""
Plane geometry for idTech brush faces.

Primary representation: unit normal vector + distance from origin, such that
``dot(normal, p) == dist`` for every point ``p`` on the plane.  Planes are
built from the three ordered points of a MAP face line (right-hand rule fixes
the orientation) or from an explicit normal and distance.

Vectors are plain ``(x, y, z)`` tuples; the helpers below are shared by the
rest of the geometry package.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

Vec3 = Tuple[float, float, float]

EPSILON = 1e-6

ZERO: Vec3 = (0.0, 0.0, 0.0)
AXIS_X: Vec3 = (1.0, 0.0, 0.0)
AXIS_Y: Vec3 = (0.0, 1.0, 0.0)
AXIS_Z: Vec3 = (0.0, 0.0, 1.0)


class DegeneratePlaneError(ValueError):
    """Raised when three points do not span a plane (collinear or coincident)."""


# ---------------------------------------------------------------
# Vector helpers
# ---------------------------------------------------------------

def cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def scale(v: Vec3, s: float) -> Vec3:
    return (v[0] * s, v[1] * s, v[2] * s)


def length(v: Vec3) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def distance(a: Vec3, b: Vec3) -> float:
    return length(sub(a, b))


def normalize(v: Vec3) -> Vec3:
    """Return ``v`` scaled to unit length.

    Raises:
        ValueError: If ``v`` is (nearly) the zero vector.
    """
    ln = length(v)
    if ln < EPSILON:
        raise ValueError(f"Cannot normalize near-zero vector {v}")
    return (v[0] / ln, v[1] / ln, v[2] / ln)


def lerp(a: Vec3, b: Vec3, t: float) -> Vec3:
    """Point between ``a`` and ``b``; coordinates shared by both stay exact."""
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
    )


def average(points: Iterable[Vec3]) -> Vec3:
    """Centroid of a point set; the zero vector for an empty set."""
    sx = sy = sz = 0.0
    count = 0
    for p in points:
        sx += p[0]
        sy += p[1]
        sz += p[2]
        count += 1
    if count == 0:
        return ZERO
    return (sx / count, sy / count, sz / count)


def snapped(v: Vec3, grid: float) -> Vec3:
    """Snap each coordinate to the nearest multiple of ``grid``."""
    if grid <= 0:
        return v
    return (
        round(v[0] / grid) * grid,
        round(v[1] / grid) * grid,
        round(v[2] / grid) * grid,
    )


def is_finite(v: Vec3) -> bool:
    return math.isfinite(v[0]) and math.isfinite(v[1]) and math.isfinite(v[2])


# ---------------------------------------------------------------
# Plane
# ---------------------------------------------------------------

class PlaneSide(Enum):
    """Strict classification of a point against a plane."""
    FRONT = "front"
    BACK = "back"
    ON = "on"


@dataclass(frozen=True)
class Plane:
    """Infinite half-space boundary.

    The normal points to the *front* side.  For brush faces the normal faces
    outward, so the brush interior is behind every one of its planes.
    """

    normal: Vec3 = AXIS_Z
    dist: float = 0.0

    # ---------------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------------

    @classmethod
    def from_points(cls, a: Vec3, b: Vec3, c: Vec3) -> "Plane":
        """Compute plane from three non-collinear points (winding order matters).

        Raises:
            DegeneratePlaneError: If the points are collinear or coincident.
        """
        n = cross(sub(b, a), sub(c, a))
        if length(n) < EPSILON:
            raise DegeneratePlaneError(f"Points {a}, {b}, {c} do not define a plane")
        normal = normalize(n)
        return cls(normal=normal, dist=dot(normal, a))

    @classmethod
    def from_normal_distance(cls, normal: Vec3, dist: float) -> "Plane":
        try:
            unit = normalize(normal)
        except ValueError as exc:
            raise DegeneratePlaneError(str(exc)) from exc
        return cls(normal=unit, dist=dist)

    # ---------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------

    def distance_to(self, point: Vec3) -> float:
        return dot(self.normal, point) - self.dist

    def side_of(self, point: Vec3) -> PlaneSide:
        d = self.distance_to(point)
        if d > 0.0:
            return PlaneSide.FRONT
        if d < 0.0:
            return PlaneSide.BACK
        return PlaneSide.ON

    def is_point_over(self, point: Vec3) -> bool:
        return self.distance_to(point) > 0.0

    def has_point(self, point: Vec3, tolerance: float = EPSILON) -> bool:
        return abs(self.distance_to(point)) <= tolerance

    @property
    def center(self) -> Vec3:
        """Point on the plane closest to the world origin."""
        return scale(self.normal, self.dist)

    def project(self, point: Vec3) -> Vec3:
        return sub(point, scale(self.normal, self.distance_to(point)))

    def flipped(self) -> "Plane":
        return Plane(normal=scale(self.normal, -1.0), dist=-self.dist)

    def is_finite(self) -> bool:
        return is_finite(self.normal) and math.isfinite(self.dist)

    def closest_axis(self) -> Vec3:
        """Coordinate axis best aligned with the normal (+X, +Y or +Z).

        The sign of the normal is dropped: a -Z facing plane returns +Z, which
        is all the seed helper choice needs.  Ties resolve in X, Y, Z order.
        """
        ax, ay, az = abs(self.normal[0]), abs(self.normal[1]), abs(self.normal[2])
        if ax >= ay and ax >= az:
            return AXIS_X
        if ay >= az:
            return AXIS_Y
        return AXIS_Z

    def seed_basis(self) -> Tuple[Vec3, Vec3]:
        """Two orthonormal in-plane axes ``(right, up)``.

        The helper vector switches to -X when the normal is closest to the
        vertical axis, so it is never parallel to the normal.
        """
        helper = (-1.0, 0.0, 0.0) if self.closest_axis() == AXIS_Z else (0.0, 0.0, -1.0)
        up = normalize(cross(helper, self.normal))
        right = normalize(cross(self.normal, up))
        return right, up
