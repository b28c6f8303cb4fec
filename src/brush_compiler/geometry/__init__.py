"""
Geometry primitives for brush reconstruction.

Planes, windings (bounded convex polygons), vertex welding and bounding boxes.
"""

from .plane_math import (
    Vec3,
    EPSILON,
    Plane,
    PlaneSide,
    DegeneratePlaneError,
)
from .winding import (
    DEFAULT_WELD_RADIUS,
    Winding,
    SplitResult,
    Front,
    Back,
    Split,
    CoplanarFront,
    CoplanarBack,
)
from .welding import weld, contains_in_radius
from .bounds import Aabb, union_all

__all__ = [
    'Vec3',
    'EPSILON',
    'Plane',
    'PlaneSide',
    'DegeneratePlaneError',
    'DEFAULT_WELD_RADIUS',
    'Winding',
    'SplitResult',
    'Front',
    'Back',
    'Split',
    'CoplanarFront',
    'CoplanarBack',
    'weld',
    'contains_in_radius',
    'Aabb',
    'union_all',
]
