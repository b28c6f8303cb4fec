"""
Wavefront OBJ export of compiled brush geometry.

Writes the finished face polygons as-is (one OBJ polygon per face) plus an
optional .mtl listing every material.  Meant for inspecting clipper output in
any 3D viewer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from .map_data import Brush, FaceState, MapDocument

Vec3 = Tuple[float, float, float]


class ObjWriter:
    """Write clipped brush faces as Wavefront OBJ + optional MTL."""

    def __init__(self):
        self._vertices: List[Vec3] = []
        self._faces: List[Tuple[List[int], str]] = []  # (vertex indices 1-based, material)
        self._materials: Dict[str, bool] = {}

    def add_brushes(self, brushes: List[Brush]):
        for brush in brushes:
            for face in brush.faces:
                if face.state is not FaceState.CLIPPED or face.polygon is None:
                    continue
                indices = []
                for v in face.polygon:
                    self._vertices.append(v)
                    indices.append(len(self._vertices))  # 1-based
                self._faces.append((indices, face.material_name))
                self._materials[face.material_name] = True

    def add_document(self, document: MapDocument):
        self.add_brushes([brush for _, _, brush in document.brushes()])

    def write(self, obj_path: str, write_mtl: bool = True):
        """Write .obj (and optionally .mtl) files."""
        obj_p = Path(obj_path)
        mtl_name = obj_p.stem + ".mtl"

        lines = []
        lines.append("# Brush compiler OBJ export")
        lines.append(f"# {len(self._vertices)} vertices, {len(self._faces)} faces")
        if write_mtl:
            lines.append(f"mtllib {mtl_name}")
        lines.append("")

        # Map Z is up; OBJ Y is up
        for v in self._vertices:
            lines.append(f"v {v[0]:.4f} {v[2]:.4f} {-v[1]:.4f}")

        lines.append("")

        # Stable sort keeps document order within a material
        current_mat = None
        for indices, mat in sorted(self._faces, key=lambda f: f[1]):
            if mat != current_mat:
                lines.append(f"usemtl {mat}")
                current_mat = mat
            lines.append("f " + " ".join(str(i) for i in indices))

        obj_p.write_text("\n".join(lines) + "\n")

        if write_mtl:
            self._write_mtl(str(obj_p.parent / mtl_name))

    def _write_mtl(self, mtl_path: str):
        lines = ["# Brush compiler MTL", ""]
        for mat in sorted(self._materials.keys()):
            lines.append(f"newmtl {mat}")
            lines.append("Kd 0.8 0.8 0.8")
            lines.append("d 1.0")
            lines.append("")
        Path(mtl_path).write_text("\n".join(lines) + "\n")

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def face_count(self) -> int:
        return len(self._faces)
