import numpy as np
import pytest

from brush_compiler.conversion.collision import (
    CollisionMeshlet,
    build_collision_meshes,
    build_entity_collision,
)
from brush_compiler.conversion.map_data import Brush, Entity, MapDocument
from brush_compiler.conversion.mesh_builder import (
    MaterialInfo,
    MeshBuilder,
    build_render_surfaces,
    default_material_lookup,
)
from brush_compiler.conversion.obj_writer import ObjWriter
from brush_compiler.pipeline import compile_document


def _compiled_cube(material="CRATE1_5", **pairs):
    cube = Brush.box((0, 0, 0), (64, 64, 64), material)
    document = MapDocument([Entity("worldspawn", dict(pairs), [cube])])
    compile_document(document)
    return document, cube


def test_render_surface_per_material():
    document, cube = _compiled_cube()
    cube.faces[5].material_name = "TOP"

    surfaces = build_render_surfaces(document)

    assert list(surfaces) == ["CRATE1_5", "TOP"]
    crate = surfaces["CRATE1_5"]
    assert crate.positions.dtype == np.float32
    assert crate.indices.dtype == np.uint32
    assert crate.positions.shape == (20, 3)
    assert crate.normals.shape == (20, 3)
    assert crate.uvs.shape == (20, 2)
    assert crate.indices.shape == (10, 3)
    assert int(crate.indices.max()) == 19

    top = surfaces["TOP"]
    assert top.triangle_count == 2
    assert np.allclose(top.normals, [0.0, 0.0, 1.0])


def test_render_uvs_use_material_size():
    document, cube = _compiled_cube()
    sizes = {"CRATE1_5": MaterialInfo(width=128, height=32)}
    surface = build_render_surfaces(document, lambda name: sizes[name])["CRATE1_5"]

    # Top face projects x onto u (offset 0), 64 units on a 128 wide image
    top = cube.faces[5]
    first = top.polygon.points[0]
    expected = top.calculate_uv(first, 128, 32)
    row = np.where((surface.positions == np.array(first, dtype=np.float32)).all(axis=1))[0]
    assert any(np.allclose(surface.uvs[i], expected) for i in row)
    assert surface.uvs[:, 0].max() == pytest.approx(0.5)


def test_nodraw_faces_are_skipped():
    document, cube = _compiled_cube()
    cube.faces[0].material_name = "common/nodraw"

    builder = MeshBuilder()
    builder.add_document(document)
    surfaces = builder.build()

    assert "common/nodraw" not in surfaces
    assert surfaces["CRATE1_5"].triangle_count == 10
    assert builder.skipped_faces == 0


def test_default_material_lookup_flags_tools():
    assert default_material_lookup("common/clip") == MaterialInfo(nodraw=True, nocollision=False)
    assert default_material_lookup("TRIGGER") == MaterialInfo(nodraw=True, nocollision=True)
    assert default_material_lookup("CRATE1_5") == MaterialInfo()


def test_collision_mesh_from_cube():
    document, _ = _compiled_cube()
    meshes = build_collision_meshes(document)

    assert len(meshes) == 1
    mesh = meshes[0]
    assert mesh.entity_index == 0
    assert mesh.triangle_count == 12

    positions, indices = mesh.meshlets[0].to_mesh()
    assert positions.shape == (8, 3)
    assert indices.shape == (36,)
    assert indices.dtype == np.uint32
    assert set(map(tuple, positions.tolist())) == {
        (x, y, z) for x in (0.0, 64.0) for y in (0.0, 64.0) for z in (0.0, 64.0)
    }


def test_nonsolid_and_nocollision_are_skipped():
    document, cube = _compiled_cube(elc_nonsolid="1")
    assert build_collision_meshes(document) == []

    document, cube = _compiled_cube()
    cube.faces[5].material_name = "common/nocollision"
    mesh = build_entity_collision(document.entities[0])
    assert [m.material_name for m in mesh.meshlets] == ["CRATE1_5"]
    assert mesh.triangle_count == 10


def test_meshlet_to_mesh_keeps_first_seen_order():
    meshlet = CollisionMeshlet("X", [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 1, 0), (1, 0, 0), (1, 1, 0)])
    positions, indices = meshlet.to_mesh()
    assert positions.tolist() == [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]]
    assert indices.tolist() == [0, 1, 2, 2, 1, 3]


def test_obj_export(tmp_path):
    document, _ = _compiled_cube()
    writer = ObjWriter()
    writer.add_document(document)
    writer.write(str(tmp_path / "cube.obj"))

    assert writer.vertex_count == 24
    assert writer.face_count == 6
    text = (tmp_path / "cube.obj").read_text()
    assert "mtllib cube.mtl" in text
    assert sum(1 for line in text.splitlines() if line.startswith("f ")) == 6
    assert "newmtl CRATE1_5" in (tmp_path / "cube.mtl").read_text()
