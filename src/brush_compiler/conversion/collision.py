"""
Collision geometry built from clipped brush faces.

Each brush entity gets one CollisionMesh made of per-material meshlets.  A
meshlet is a flat list of triangle corner positions; ``to_mesh`` collapses
shared corners into an indexed buffer for the physics backend.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .map_data import Entity, FaceState, MapDocument
from .mesh_builder import MaterialLookup, default_material_lookup

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

# Entities carrying this key never collide
NONSOLID_KEY = "elc_nonsolid"


@dataclass
class CollisionMeshlet:
    """Collision triangles of one material (positions come in triplets)."""
    material_name: str
    positions: List[Vec3] = field(default_factory=list)

    @property
    def triangle_count(self) -> int:
        return len(self.positions) // 3

    def to_mesh(self) -> Tuple[np.ndarray, np.ndarray]:
        """Deduplicate positions into an indexed mesh.

        Returns:
            Tuple of (positions, indices).
            positions: Shape (N, 3), dtype=float32, unique, in first-seen order
            indices: Shape (M * 3,), dtype=uint32
        """
        unique: Dict[Vec3, int] = {}
        indices: List[int] = []
        for p in self.positions:
            idx = unique.get(p)
            if idx is None:
                idx = len(unique)
                unique[p] = idx
            indices.append(idx)

        return (
            np.array(list(unique.keys()), dtype=np.float32).reshape(-1, 3),
            np.array(indices, dtype=np.uint32),
        )


@dataclass
class CollisionMesh:
    """All collision meshlets of one entity."""
    entity_index: int
    meshlets: List[CollisionMeshlet] = field(default_factory=list)

    @property
    def triangle_count(self) -> int:
        return sum(m.triangle_count for m in self.meshlets)

    def to_meshes(self) -> List[Tuple[np.ndarray, np.ndarray]]:
        return [m.to_mesh() for m in self.meshlets]


def build_entity_collision(entity: Entity, entity_index: int = 0,
                           material_lookup: Optional[MaterialLookup] = None) -> Optional[CollisionMesh]:
    """Build the collision mesh of one entity.

    Returns:
        None for non-solid entities, point entities and entities whose faces
        are all non-colliding or unresolved.
    """
    if NONSOLID_KEY in entity.pairs or entity.is_point_entity():
        return None

    lookup = material_lookup or default_material_lookup
    by_material: Dict[str, CollisionMeshlet] = {}
    for face in entity.faces():
        if face.state is not FaceState.CLIPPED or face.polygon is None:
            continue
        if lookup(face.material_name).nocollision:
            continue

        meshlet = by_material.get(face.material_name)
        if meshlet is None:
            meshlet = CollisionMeshlet(face.material_name)
            by_material[face.material_name] = meshlet

        points = face.polygon.points
        for i in range(1, len(points) - 1):
            meshlet.positions.extend((points[0], points[i], points[i + 1]))

    if not by_material:
        return None
    return CollisionMesh(entity_index=entity_index, meshlets=list(by_material.values()))


def build_collision_meshes(document: MapDocument,
                           material_lookup: Optional[MaterialLookup] = None) -> List[CollisionMesh]:
    """Collision meshes of every solid brush entity, in document order."""
    meshes = []
    for entity_index, entity in enumerate(document.entities):
        mesh = build_entity_collision(entity, entity_index, material_lookup)
        if mesh is not None:
            meshes.append(mesh)
    logger.debug("Built %d collision meshes", len(meshes))
    return meshes
