"""
idTech brush compiler.

Reconstructs explicit convex face polygons from half-space brushes, ready for
mesh generation, UV mapping and collision export.
"""

from .geometry import Plane, Winding, DegeneratePlaneError, Aabb
from .conversion import (
    Face,
    FaceState,
    Brush,
    Entity,
    MapDocument,
    BrushClipper,
    ClipSettings,
)
from .pipeline import GeometryCompiler, CompileSettings, CompileResult, compile_document

__version__ = "0.1.0"

__all__ = [
    'Plane',
    'Winding',
    'DegeneratePlaneError',
    'Aabb',
    'Face',
    'FaceState',
    'Brush',
    'Entity',
    'MapDocument',
    'BrushClipper',
    'ClipSettings',
    'GeometryCompiler',
    'CompileSettings',
    'CompileResult',
    'compile_document',
]
