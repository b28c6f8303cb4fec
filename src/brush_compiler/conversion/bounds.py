"""
Brush and entity bounds, and brush-entity pivot origins.

Bounds are computed from finished face polygons, so these functions must only
run after every face of the brush (or entity) has been clipped.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Optional

from brush_compiler.geometry.bounds import Aabb, union_all
from brush_compiler.geometry.plane_math import Vec3, ZERO

if TYPE_CHECKING:
    from .map_data import Brush, Entity, MapDocument

logger = logging.getLogger(__name__)

# Half extent of the box given to point entities
POINT_ENTITY_EXTENT = 0.001

ORIGIN_MATERIAL = "origin"


def brush_bounds(brush: "Brush") -> Optional[Aabb]:
    """Union of the AABBs of all finished face polygons (None if none)."""
    return union_all(face.polygon.bounds() for face in brush.faces if face.polygon is not None)


def entity_bounds(entity: "Entity") -> Aabb:
    """Union of brush boxes; point entities get a tiny box around their centre."""
    box = union_all(brush.bounding_box for brush in entity.brushes)
    if box is None:
        return Aabb.around(entity.centre, POINT_ENTITY_EXTENT)
    return box


def compute_brush_origin(entity: "Entity") -> Vec3:
    """Pivot point of a brush entity.

    Worldspawn is always anchored at the world origin.  Other entities use the
    mean centre of all faces not textured with an origin material; with no such
    face, the bounding box centre is used.
    """
    if entity.is_world():
        return ZERO

    sx = sy = sz = 0.0
    count = 0
    for face in entity.faces():
        if ORIGIN_MATERIAL in face.material_name.lower():
            continue
        c = face.centre
        sx += c[0]
        sy += c[1]
        sz += c[2]
        count += 1

    if count == 0:
        box = entity.bounding_box or entity_bounds(entity)
        return box.center

    return (sx / count, sy / count, sz / count)


def assign_brush_origins(document: "MapDocument") -> int:
    """Write an ``origin`` key on brush entities that lack one.

    Returns:
        Number of entities updated.
    """
    updated = 0
    for entity in document.entities:
        if entity.is_world() or entity.is_point_entity() or "origin" in entity.pairs:
            continue
        origin = compute_brush_origin(entity)
        entity.set_property("origin", origin)
        updated += 1
        logger.debug("Entity '%s' origin set to %s", entity.class_name, entity.pairs["origin"])
    return updated


def map_boundaries(document: "MapDocument") -> Optional[Aabb]:
    """Union of every entity box in the document."""
    return union_all(entity.bounding_box or entity_bounds(entity) for entity in document.entities)
