"""
Windings: bounded convex polygons lying on a plane.

A winding is the explicit, finite form of a brush face.  It starts life as an
oversized seed square on the face plane and is cut down by splitting it
against the planes of the sibling faces.

The result of a split is a small sum type (``Front``, ``Back``, ``Split``,
``CoplanarFront``, ``CoplanarBack``) so that a caller can never observe a
combination such as "front and coplanar-back at once".
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Union

from .bounds import Aabb
from .plane_math import (
    EPSILON,
    DegeneratePlaneError,
    Plane,
    Vec3,
    add,
    average,
    cross,
    dot,
    length,
    lerp,
    normalize,
    scale,
    snapped,
    sub,
)
from .welding import weld

# Points closer than this are merged after every split.
DEFAULT_WELD_RADIUS = 0.125


@dataclass(frozen=True)
class Winding:
    """Ordered loop of coplanar points; counter-clockwise around its normal."""

    points: Sequence[Vec3]

    def __post_init__(self):
        object.__setattr__(
            self, "points", tuple((float(p[0]), float(p[1]), float(p[2])) for p in self.points)
        )

    # ---------------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------------

    @classmethod
    def seed(cls, plane: Plane, radius: float) -> "Winding":
        """Square on ``plane`` whose circumscribed radius is exactly ``radius``.

        The square is centred on the point of the plane closest to the world
        origin; callers shift it next to the real face afterwards.
        """
        right, up = plane.seed_basis()
        center = plane.center

        corners = [
            add(add(center, right), up),
            sub(add(center, right), up),
            sub(sub(center, right), up),
            add(sub(center, right), up),
        ]
        centre = average(corners)
        return cls([add(scale(normalize(sub(c, centre)), radius), centre) for c in corners])

    # ---------------------------------------------------------------
    # Properties
    # ---------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Vec3]:
        return iter(self.points)

    @property
    def origin(self) -> Vec3:
        """Vertex centroid."""
        return average(self.points)

    @property
    def plane(self) -> Plane:
        """Plane through the first three points.

        Falls back to Newell's method when those three happen to be collinear.

        Raises:
            DegeneratePlaneError: If the winding has no area at all.
        """
        if len(self.points) < 3:
            raise DegeneratePlaneError(f"Winding with {len(self.points)} points has no plane")
        try:
            return Plane.from_points(self.points[0], self.points[1], self.points[2])
        except DegeneratePlaneError:
            pass

        nx = ny = nz = 0.0
        count = len(self.points)
        for i, cur in enumerate(self.points):
            nxt = self.points[(i + 1) % count]
            nx += (cur[1] - nxt[1]) * (cur[2] + nxt[2])
            ny += (cur[2] - nxt[2]) * (cur[0] + nxt[0])
            nz += (cur[0] - nxt[0]) * (cur[1] + nxt[1])
        if length((nx, ny, nz)) < EPSILON:
            raise DegeneratePlaneError("Winding is degenerate (zero area)")
        normal = normalize((nx, ny, nz))
        return Plane(normal=normal, dist=dot(normal, self.origin))

    def is_valid(self, require_planar: bool = False, tolerance: float = EPSILON) -> bool:
        if len(self.points) < 3:
            return False
        if require_planar:
            try:
                plane = self.plane
            except DegeneratePlaneError:
                return False
            return all(plane.has_point(p, tolerance) for p in self.points)
        return True

    def bounds(self) -> Optional[Aabb]:
        return Aabb.from_points(self.points)

    def area(self) -> float:
        if len(self.points) < 3:
            return 0.0
        first = self.points[0]
        total = (0.0, 0.0, 0.0)
        for i in range(1, len(self.points) - 1):
            total = add(total, cross(sub(self.points[i], first), sub(self.points[i + 1], first)))
        return 0.5 * length(total)

    # ---------------------------------------------------------------
    # Transforms
    # ---------------------------------------------------------------

    def shift(self, offset: Vec3) -> "Winding":
        """Translated copy."""
        return Winding([add(p, offset) for p in self.points])

    def welded(self, radius: float = DEFAULT_WELD_RADIUS) -> "Winding":
        return Winding(weld(self.points, radius))

    def snapped(self, grid: float) -> "Winding":
        return Winding([snapped(p, grid) for p in self.points])

    # ---------------------------------------------------------------
    # Splitting
    # ---------------------------------------------------------------

    def split(self, plane: Plane, weld_radius: float = DEFAULT_WELD_RADIUS) -> "SplitResult":
        """Split this winding by ``plane``.

        Vertices are classified with strict comparisons; points exactly on the
        plane go to both halves.  Halves produced by an actual cut are welded
        with ``weld_radius`` to drop near-duplicate intersection points.
        """
        distances = [plane.distance_to(p) for p in self.points]

        num_front = sum(1 for d in distances if d > 0.0)
        num_back = sum(1 for d in distances if d < 0.0)

        if num_front == 0 and num_back == 0:
            if dot(self.plane.normal, plane.normal) >= 0.0:
                return CoplanarFront(self)
            return CoplanarBack(self)
        if num_back == 0:
            return Front(self)
        if num_front == 0:
            return Back(self)

        front_points: List[Vec3] = []
        back_points: List[Vec3] = []
        count = len(self.points)
        for i in range(count):
            j = (i + 1) % count
            v1, v2 = self.points[i], self.points[j]
            d1, d2 = distances[i], distances[j]

            if d1 <= 0.0:
                back_points.append(v1)
            if d1 >= 0.0:
                front_points.append(v1)

            if (d1 < 0.0 < d2) or (d2 < 0.0 < d1):
                t = d1 / (d1 - d2)
                crossing = lerp(v1, v2, t)
                back_points.append(crossing)
                front_points.append(crossing)

        return Split(
            front=Winding(weld(front_points, weld_radius)),
            back=Winding(weld(back_points, weld_radius)),
        )


# ---------------------------------------------------------------
# Split results
# ---------------------------------------------------------------

@dataclass(frozen=True)
class Front:
    """Winding lies entirely in front of the plane."""
    winding: Winding

    @property
    def back_winding(self) -> Optional[Winding]:
        return None


@dataclass(frozen=True)
class Back:
    """Winding lies entirely behind the plane."""
    winding: Winding

    @property
    def back_winding(self) -> Optional[Winding]:
        return self.winding


@dataclass(frozen=True)
class Split:
    """Plane cuts through the winding."""
    front: Winding
    back: Winding

    @property
    def back_winding(self) -> Optional[Winding]:
        return self.back


@dataclass(frozen=True)
class CoplanarFront:
    """Winding lies on the plane and faces the same way."""
    winding: Winding

    @property
    def back_winding(self) -> Optional[Winding]:
        return None


@dataclass(frozen=True)
class CoplanarBack:
    """Winding lies on the plane and faces the opposite way."""
    winding: Winding

    @property
    def back_winding(self) -> Optional[Winding]:
        return None


SplitResult = Union[Front, Back, Split, CoplanarFront, CoplanarBack]
