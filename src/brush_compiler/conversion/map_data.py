"""
In-memory brush map records.

These are the shapes handed over by the external MAP parser: entities own
brushes, brushes own faces, and each face carries its three authored plane
points plus texture projection data.  The compiler fills in ``Face.polygon``
exactly once per compile pass.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from brush_compiler.geometry.bounds import Aabb
from brush_compiler.geometry.plane_math import (
    DegeneratePlaneError,
    Plane,
    Vec3,
    ZERO,
    average,
    is_finite,
)
from brush_compiler.geometry.winding import Winding

logger = logging.getLogger(__name__)

Vec2 = Tuple[float, float]
Vec4 = Tuple[float, float, float, float]

WORLDSPAWN = "worldspawn"
FUNC_GROUP = "func_group"

DEFAULT_MATERIAL = "CRATE1_5"


class FaceState(Enum):
    """Clip state of a face within one compile pass."""
    UNCLIPPED = "unclipped"
    CLIPPED = "clipped"
    UNRESOLVED = "unresolved"


class FaceStateError(RuntimeError):
    """Raised on an attempt to re-clip a face that already reached a terminal state."""


@dataclass
class Face:
    """
    A single brush face.

    The three ``plane_definition`` points are ordered so that
    ``cross(b - a, c - a)`` points out of the brush.  ``projection_uvs`` holds
    the U and V texture axes with their offsets in the fourth component.
    """
    plane_definition: Tuple[Vec3, Vec3, Vec3]
    material_name: str = DEFAULT_MATERIAL
    projection_uvs: Tuple[Vec4, Vec4] = ((1.0, 0.0, 0.0, 0.0), (0.0, -1.0, 0.0, 0.0))
    rotation: float = 0.0
    scale: Vec2 = (1.0, 1.0)

    # Derived at construction, None when the definition is degenerate
    plane: Optional[Plane] = field(default=None, init=False, compare=False)
    # Filled in by the brush clipper
    polygon: Optional[Winding] = field(default=None, init=False, compare=False)
    state: FaceState = field(default=FaceState.UNCLIPPED, init=False, compare=False)
    unresolved_reason: Optional[str] = field(default=None, init=False, compare=False)

    def __post_init__(self):
        self.plane_definition = tuple(
            (float(p[0]), float(p[1]), float(p[2])) for p in self.plane_definition
        )
        if len(self.plane_definition) != 3:
            raise ValueError(
                f"Face plane definition needs 3 points, got {len(self.plane_definition)}"
            )
        if not all(is_finite(p) for p in self.plane_definition):
            self.plane = None
            return
        try:
            self.plane = Plane.from_points(*self.plane_definition)
        except DegeneratePlaneError:
            self.plane = None

    @classmethod
    def from_definition(cls, p1: Vec3, p2: Vec3, p3: Vec3, material_name: str,
                        u_axis: Sequence[float], v_axis: Sequence[float],
                        rotation: float = 0.0, scale_x: float = 1.0,
                        scale_y: float = 1.0) -> "Face":
        """Build a face from the fields of a Valve 220 face line."""
        return cls(
            plane_definition=(p1, p2, p3),
            material_name=material_name,
            projection_uvs=(
                tuple(float(c) for c in u_axis),
                tuple(float(c) for c in v_axis),
            ),
            rotation=float(rotation),
            scale=(float(scale_x), float(scale_y)),
        )

    @property
    def centre(self) -> Vec3:
        """Mean of the three authored points; always on the face plane."""
        return average(self.plane_definition)

    def resolve(self, polygon: Winding) -> None:
        """Store the finished polygon (UNCLIPPED -> CLIPPED)."""
        if self.state is not FaceState.UNCLIPPED:
            raise FaceStateError(f"Face already {self.state.value}")
        self.polygon = polygon
        self.state = FaceState.CLIPPED

    def mark_unresolved(self, reason: str) -> None:
        """Record a failed clip (UNCLIPPED -> UNRESOLVED)."""
        if self.state is not FaceState.UNCLIPPED:
            raise FaceStateError(f"Face already {self.state.value}")
        self.polygon = None
        self.state = FaceState.UNRESOLVED
        self.unresolved_reason = reason

    def calculate_uv(self, point: Vec3, image_width: int, image_height: int) -> Vec2:
        from .uv_projection import calculate_uv

        return calculate_uv(point, self.projection_uvs, self.scale, image_width, image_height)


@dataclass
class Brush:
    """
    A convex solid: the intersection of the back half-spaces of its faces.

    Until the faces are clipped, ``bounding_box`` is the box around the
    authored plane points; it is what the clipper sizes its seed windings
    from.  After clipping it is regenerated from the finished polygons.
    """
    faces: List[Face] = field(default_factory=list)
    bounding_box: Optional[Aabb] = None

    def __post_init__(self):
        if self.bounding_box is None:
            self.bounding_box = self.authored_bounds()

    @classmethod
    def box(cls, mins: Vec3, maxs: Vec3, material: str = DEFAULT_MATERIAL) -> "Brush":
        """Axis-aligned box brush with 6 outward-facing faces."""
        x1, y1, z1 = mins
        x2, y2, z2 = maxs

        wall_x = ((0.0, 1.0, 0.0, 0.0), (0.0, 0.0, -1.0, 0.0))
        wall_y = ((1.0, 0.0, 0.0, 0.0), (0.0, 0.0, -1.0, 0.0))
        floor = ((1.0, 0.0, 0.0, 0.0), (0.0, -1.0, 0.0, 0.0))

        faces = [
            # Left face (X = x1 plane)
            Face(((x1, y1, z1), (x1, y1, z2), (x1, y2, z1)), material, wall_x),
            # Right face (X = x2 plane)
            Face(((x2, y1, z1), (x2, y2, z1), (x2, y1, z2)), material, wall_x),
            # Front face (Y = y1 plane)
            Face(((x1, y1, z1), (x2, y1, z1), (x1, y1, z2)), material, wall_y),
            # Back face (Y = y2 plane)
            Face(((x1, y2, z1), (x1, y2, z2), (x2, y2, z1)), material, wall_y),
            # Bottom face (Z = z1 plane)
            Face(((x1, y1, z1), (x1, y2, z1), (x2, y1, z1)), material, floor),
            # Top face (Z = z2 plane)
            Face(((x1, y1, z2), (x2, y1, z2), (x1, y2, z2)), material, floor),
        ]
        return cls(faces=faces)

    @property
    def centre(self) -> Vec3:
        return average(face.centre for face in self.faces)

    def authored_bounds(self) -> Optional[Aabb]:
        return Aabb.from_points(
            p for face in self.faces for p in face.plane_definition if is_finite(p)
        )

    def regenerate_bounds(self) -> None:
        """Recompute the box from finished polygons (kept as-is if none resolved)."""
        from .bounds import brush_bounds

        box = brush_bounds(self)
        if box is not None:
            self.bounding_box = box


@dataclass
class Entity:
    """
    A map entity.

    Brush entities (worldspawn, func_door, ...) own brushes; point entities
    (lights, spawns) have none and are positioned by their ``origin`` key.
    """
    class_name: str
    pairs: Dict[str, str] = field(default_factory=dict)
    brushes: List[Brush] = field(default_factory=list)
    bounding_box: Optional[Aabb] = None
    centre: Vec3 = ZERO

    def __post_init__(self):
        if self.centre == ZERO and "origin" in self.pairs:
            self.centre = _parse_vector(self.pairs["origin"], self.class_name)

    def set_property(self, key: str, value) -> None:
        """Set an entity property with proper type conversion."""
        if isinstance(value, (list, tuple)) and len(value) == 3:
            # Convert 3D coordinates to space-separated string
            self.pairs[key] = f"{_format_number(value[0])} {_format_number(value[1])} {_format_number(value[2])}"
        elif isinstance(value, bool):
            self.pairs[key] = "1" if value else "0"
        else:
            self.pairs[key] = str(value)

    def is_world(self) -> bool:
        return self.class_name == WORLDSPAWN

    def is_point_entity(self) -> bool:
        return len(self.brushes) == 0

    def faces(self) -> Iterator[Face]:
        for brush in self.brushes:
            yield from brush.faces

    def brush_origin(self) -> Vec3:
        from .bounds import compute_brush_origin

        return compute_brush_origin(self)

    def regenerate_bounds(self) -> None:
        from .bounds import entity_bounds

        self.bounding_box = entity_bounds(self)


@dataclass
class MapDocument:
    """Ordered collection of entities, as produced by the MAP parser."""
    entities: List[Entity] = field(default_factory=list)

    @property
    def worldspawn(self) -> Optional[Entity]:
        return next((e for e in self.entities if e.is_world()), None)

    def brushes(self) -> Iterator[Tuple[int, int, Brush]]:
        """Yield ``(entity_index, brush_index, brush)`` in document order."""
        for entity_index, entity in enumerate(self.entities):
            for brush_index, brush in enumerate(entity.brushes):
                yield entity_index, brush_index, brush

    @property
    def brush_count(self) -> int:
        return sum(len(e.brushes) for e in self.entities)

    def merge_into(self, target_class: str, source_class: str) -> int:
        """
        Move the brushes of every ``source_class`` entity into the first
        ``target_class`` entity and drop the emptied sources.

        Used to fold editor-only ``func_group`` entities into worldspawn.

        Returns:
            Number of entities merged.
        """
        target = next((e for e in self.entities if e.class_name == target_class), None)
        if target is None:
            return 0

        sources = [e for e in self.entities if e.class_name == source_class and e is not target]
        for source in sources:
            target.brushes.extend(source.brushes)
        if sources:
            self.entities = [e for e in self.entities if not any(e is s for s in sources)]
            logger.debug("Merged %d %s entities into %s", len(sources), source_class, target_class)
        return len(sources)

    def remove_faces(self, predicate: Callable[[Face], bool]) -> int:
        """
        Delete every face matching ``predicate``; brushes left without faces
        are dropped as well.

        Returns:
            Number of faces removed.
        """
        removed = 0
        for entity in self.entities:
            kept_brushes = []
            for brush in entity.brushes:
                kept = [face for face in brush.faces if not predicate(face)]
                removed += len(brush.faces) - len(kept)
                brush.faces = kept
                if kept:
                    kept_brushes.append(brush)
            entity.brushes = kept_brushes
        return removed


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def _parse_vector(text: str, class_name: str) -> Vec3:
    parts = text.split()
    try:
        if len(parts) != 3:
            raise ValueError(text)
        return (float(parts[0]), float(parts[1]), float(parts[2]))
    except ValueError:
        logger.warning("Entity '%s' has malformed origin '%s', using 0 0 0", class_name, text)
        return ZERO
