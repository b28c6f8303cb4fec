"""
Brush to polygon conversion package.

Holds the parsed map records, the brush clipper that turns face planes into
polygons, and the consumers of the finished polygons (UVs, bounds, render
surfaces, collision meshes, OBJ export).
"""

from .map_data import (
    Face,
    FaceState,
    FaceStateError,
    Brush,
    Entity,
    MapDocument,
    WORLDSPAWN,
    FUNC_GROUP,
)
from .brush_clipper import (
    ClipSettings,
    BrushClipper,
    BrushClipResult,
    FaceClipOutcome,
)
from .uv_projection import calculate_uv
from .bounds import (
    brush_bounds,
    entity_bounds,
    compute_brush_origin,
    assign_brush_origins,
    map_boundaries,
)
from .mesh_builder import (
    MaterialInfo,
    MeshBuilder,
    RenderSurface,
    build_render_surfaces,
    default_material_lookup,
)
from .collision import (
    CollisionMesh,
    CollisionMeshlet,
    build_collision_meshes,
)
from .obj_writer import ObjWriter

__all__ = [
    'Face',
    'FaceState',
    'FaceStateError',
    'Brush',
    'Entity',
    'MapDocument',
    'WORLDSPAWN',
    'FUNC_GROUP',
    'ClipSettings',
    'BrushClipper',
    'BrushClipResult',
    'FaceClipOutcome',
    'calculate_uv',
    'brush_bounds',
    'entity_bounds',
    'compute_brush_origin',
    'assign_brush_origins',
    'map_boundaries',
    'MaterialInfo',
    'MeshBuilder',
    'RenderSurface',
    'build_render_surfaces',
    'default_material_lookup',
    'CollisionMesh',
    'CollisionMeshlet',
    'build_collision_meshes',
    'ObjWriter',
]
