"""
Mesh builder for converting clipped brush faces to renderable geometry.

Reads the finished ``Face.polygon`` of every clipped face and converts it to
per-material vertex/index buffers ready to hand to a render backend.  Texture
sizes and tool flags come from the material system through a lookup callable.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .map_data import Face, FaceState, MapDocument

Vec3 = Tuple[float, float, float]

# Image size assumed when the material system knows nothing about a texture
DEFAULT_TEXTURE_SIZE = 64

# Material name fragments treated as tool textures by default_material_lookup
NODRAW_FRAGMENTS = ("nodraw", "skip", "clip", "trigger", "origin", "hint")
NOCOLLISION_FRAGMENTS = ("nocollision", "trigger", "origin", "hint", "skip")


@dataclass(frozen=True)
class MaterialInfo:
    """What the compiler needs to know about a material."""
    width: int = DEFAULT_TEXTURE_SIZE
    height: int = DEFAULT_TEXTURE_SIZE
    nodraw: bool = False
    nocollision: bool = False


MaterialLookup = Callable[[str], MaterialInfo]


def default_material_lookup(material_name: str) -> MaterialInfo:
    """Fallback lookup that flags tool textures by name."""
    name = material_name.lower()
    return MaterialInfo(
        nodraw=any(f in name for f in NODRAW_FRAGMENTS),
        nocollision=any(f in name for f in NOCOLLISION_FRAGMENTS),
    )


@dataclass
class RenderSurface:
    """Renderable triangles of one material."""
    material_name: str
    positions: np.ndarray  # Shape: (N, 3), dtype=float32
    normals: np.ndarray    # Shape: (N, 3), dtype=float32
    uvs: np.ndarray        # Shape: (N, 2), dtype=float32
    indices: np.ndarray    # Shape: (M, 3), dtype=uint32

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    @property
    def is_empty(self) -> bool:
        return len(self.positions) == 0


class _SurfaceData:
    __slots__ = ("positions", "normals", "uvs", "indices")

    def __init__(self):
        self.positions: List[Vec3] = []
        self.normals: List[Vec3] = []
        self.uvs: List[Tuple[float, float]] = []
        self.indices: List[List[int]] = []


class MeshBuilder:
    """Accumulates clipped faces into one RenderSurface per material."""

    def __init__(self, material_lookup: Optional[MaterialLookup] = None):
        self.material_lookup = material_lookup or default_material_lookup
        self._surfaces: Dict[str, _SurfaceData] = {}
        self._materials: Dict[str, MaterialInfo] = {}
        self.skipped_faces = 0

    def clear(self):
        """Clear all mesh data."""
        self._surfaces.clear()
        self._materials.clear()
        self.skipped_faces = 0

    def _material(self, name: str) -> MaterialInfo:
        info = self._materials.get(name)
        if info is None:
            info = self.material_lookup(name)
            self._materials[name] = info
        return info

    def add_document(self, document: MapDocument):
        """Add every clipped face of every entity."""
        for _, _, brush in document.brushes():
            for face in brush.faces:
                self.add_face(face)

    def add_face(self, face: Face):
        """Triangulate a single clipped face (no-op for unresolved or nodraw faces)."""
        if face.state is not FaceState.CLIPPED or face.polygon is None:
            self.skipped_faces += 1
            return
        info = self._material(face.material_name)
        if info.nodraw:
            return

        data = self._surfaces.get(face.material_name)
        if data is None:
            data = _SurfaceData()
            self._surfaces[face.material_name] = data

        points = face.polygon.points
        normal = face.plane.normal
        first_idx = len(data.positions)

        for p in points:
            data.positions.append(p)
            data.normals.append(normal)
            data.uvs.append(face.calculate_uv(p, info.width, info.height))

        # Fan from first vertex; polygons are convex
        for i in range(1, len(points) - 1):
            data.indices.append([first_idx, first_idx + i, first_idx + i + 1])

    def build(self) -> Dict[str, RenderSurface]:
        """Build the final surfaces, keyed by material in first-seen order."""
        return {
            name: RenderSurface(
                material_name=name,
                positions=np.array(data.positions, dtype=np.float32).reshape(-1, 3),
                normals=np.array(data.normals, dtype=np.float32).reshape(-1, 3),
                uvs=np.array(data.uvs, dtype=np.float32).reshape(-1, 2),
                indices=np.array(data.indices, dtype=np.uint32).reshape(-1, 3),
            )
            for name, data in self._surfaces.items()
        }


def build_render_surfaces(document: MapDocument,
                          material_lookup: Optional[MaterialLookup] = None) -> Dict[str, RenderSurface]:
    """Convenience function to build render surfaces in one call."""
    builder = MeshBuilder(material_lookup)
    builder.add_document(document)
    return builder.build()
