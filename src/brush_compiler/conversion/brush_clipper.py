"""
Brush clipping: turns the half-space faces of a brush into finite polygons.

For every face, an oversized seed square is laid on the face plane next to the
authored face points and cut down by each sibling plane in turn.  Whatever
survives behind all siblings is the face polygon.

The work is split in two steps so that brushes can be clipped on worker
threads:

- ``BrushClipper.run`` reads the brush and returns a ``BrushClipResult``
  without touching the brush.
- ``BrushClipper.apply`` writes the outcomes back onto the faces and
  regenerates the brush bounds.  It must run on the thread that owns the
  document.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from brush_compiler.geometry.plane_math import Plane, Vec3, sub
from brush_compiler.geometry.winding import (
    DEFAULT_WELD_RADIUS,
    Back,
    CoplanarBack,
    CoplanarFront,
    Split,
    Winding,
)

from .map_data import Brush, FaceState

logger = logging.getLogger(__name__)

# Seed radius relative to the longest side of the brush box
DEFAULT_SEED_RADIUS_SCALE = 2.5

# Finished vertices are snapped to this grid
DEFAULT_GRID_SNAP = 0.25

# Minimum number of sibling planes every finished vertex must touch
MIN_SUPPORTING_PLANES = 2

# Reasons recorded on unresolved faces
REASON_DEGENERATE_PLANE = "degenerate_plane"
REASON_EMPTY_BOUNDS = "empty_bounds"
REASON_CLIPPED_AWAY = "clipped_away"
REASON_INVERTED = "inverted_plane"
REASON_OPEN_BRUSH = "open_brush"
REASON_COLLAPSED = "collapsed"


@dataclass
class ClipSettings:
    """Tolerances used while clipping one brush."""
    seed_radius_scale: float = DEFAULT_SEED_RADIUS_SCALE
    weld_radius: float = DEFAULT_WELD_RADIUS
    grid_snap: float = DEFAULT_GRID_SNAP
    # None means "same as weld_radius"
    boundary_tolerance: Optional[float] = None

    @property
    def effective_boundary_tolerance(self) -> float:
        if self.boundary_tolerance is None:
            return self.weld_radius
        return self.boundary_tolerance


@dataclass(frozen=True)
class FaceClipOutcome:
    """Result of clipping a single face.

    ``polygon`` is set only when ``state`` is CLIPPED; ``reason`` only when it
    is UNRESOLVED.  ``duplicate_of`` lists sibling faces that share this face's
    plane and were skipped.
    """
    face_index: int
    state: FaceState
    polygon: Optional[Winding] = None
    reason: Optional[str] = None
    duplicate_of: Tuple[int, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.state is FaceState.CLIPPED


@dataclass
class BrushClipResult:
    """Per-face outcomes of one brush, in face order."""
    outcomes: List[FaceClipOutcome] = field(default_factory=list)

    @property
    def resolved_count(self) -> int:
        return sum(1 for o in self.outcomes if o.resolved)

    @property
    def unresolved(self) -> List[FaceClipOutcome]:
        return [o for o in self.outcomes if not o.resolved]


class BrushClipper:
    """Clips the faces of a brush against each other."""

    def __init__(self, settings: Optional[ClipSettings] = None):
        self.settings = settings or ClipSettings()

    def clip_brush(self, brush: Brush) -> BrushClipResult:
        """Clip every face of ``brush`` in place."""
        result = self.run(brush)
        self.apply(brush, result)
        return result

    def run(self, brush: Brush) -> BrushClipResult:
        """Compute the polygon of every face without modifying the brush."""
        planes = [face.plane for face in brush.faces]
        result = BrushClipResult()

        radius = 0.0
        if brush.bounding_box is not None:
            radius = brush.bounding_box.longest_axis_length * self.settings.seed_radius_scale

        for index, face in enumerate(brush.faces):
            result.outcomes.append(self.clip_face(index, face.centre, planes, radius))
        return result

    def clip_face(self, index: int, centre: Vec3, planes: List[Optional[Plane]],
                  radius: float) -> FaceClipOutcome:
        """Clip face ``index`` against every other plane in ``planes``."""
        plane = planes[index]
        if plane is None:
            return _unresolved(index, REASON_DEGENERATE_PLANE)
        if not radius > 0.0:
            return _unresolved(index, REASON_EMPTY_BOUNDS)

        seed = Winding.seed(plane, radius)
        poly = seed.shift(sub(centre, seed.origin))

        duplicates = []
        for other_index, other in enumerate(planes):
            if other_index == index or other is None:
                continue

            split = poly.split(other, self.settings.weld_radius)
            if isinstance(split, Back):
                continue
            if isinstance(split, CoplanarFront):
                duplicates.append(other_index)
                continue
            if isinstance(split, Split):
                if len(split.back) < 3:
                    return _unresolved(index, REASON_CLIPPED_AWAY)
                poly = split.back
                continue
            # Front: the face is entirely outside a sibling
            # CoplanarBack: a sibling faces the other way on the same plane
            if isinstance(split, CoplanarBack):
                return _unresolved(index, REASON_INVERTED)
            return _unresolved(index, REASON_CLIPPED_AWAY)

        if not self._is_bounded(poly, index, planes, duplicates):
            return _unresolved(index, REASON_OPEN_BRUSH)

        poly = poly.snapped(self.settings.grid_snap).welded(self.settings.weld_radius)
        if len(poly) < 3:
            return _unresolved(index, REASON_COLLAPSED)

        return FaceClipOutcome(
            face_index=index,
            state=FaceState.CLIPPED,
            polygon=poly,
            duplicate_of=tuple(duplicates),
        )

    def apply(self, brush: Brush, result: BrushClipResult,
              entity_index: Optional[int] = None, brush_index: Optional[int] = None) -> None:
        """Store clip outcomes on the faces and regenerate the brush box.

        ``entity_index`` and ``brush_index`` locate the brush in its document
        for the unresolved-face warnings.

        Raises:
            FaceStateError: If a face was already clipped in this pass.
        """
        location = _location(entity_index, brush_index)
        for outcome in result.outcomes:
            face = brush.faces[outcome.face_index]
            if outcome.resolved:
                face.resolve(outcome.polygon)
            else:
                face.mark_unresolved(outcome.reason)
                logger.warning(
                    "%sface %d (%s) unresolved: %s",
                    location, outcome.face_index, face.material_name, outcome.reason,
                )
        brush.regenerate_bounds()

    def _is_bounded(self, poly: Winding, index: int, planes: List[Optional[Plane]],
                    duplicates: List[int]) -> bool:
        """Check that every vertex was produced by sibling planes.

        A vertex left over from the seed square touches fewer than two
        sibling planes; it means nothing closes the brush in that direction.
        Duplicates of the face's own plane touch every vertex and never count.
        """
        tolerance = self.settings.effective_boundary_tolerance
        skipped = set(duplicates)
        skipped.add(index)
        for point in poly:
            touching = 0
            for other_index, other in enumerate(planes):
                if other_index in skipped or other is None:
                    continue
                if other.has_point(point, tolerance):
                    touching += 1
                    if touching >= MIN_SUPPORTING_PLANES:
                        break
            if touching < MIN_SUPPORTING_PLANES:
                return False
        return True


def _location(entity_index: Optional[int], brush_index: Optional[int]) -> str:
    parts = []
    if entity_index is not None:
        parts.append(f"Entity {entity_index} ")
    if brush_index is not None:
        parts.append(f"brush {brush_index} " if parts else f"Brush {brush_index} ")
    return "".join(parts)


def _unresolved(index: int, reason: str) -> FaceClipOutcome:
    return FaceClipOutcome(face_index=index, state=FaceState.UNRESOLVED, reason=reason)
