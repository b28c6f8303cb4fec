import math

import pytest

from brush_compiler.conversion.brush_clipper import (
    REASON_DEGENERATE_PLANE,
    REASON_OPEN_BRUSH,
    BrushClipper,
    ClipSettings,
)
from brush_compiler.conversion.map_data import Brush, Face, FaceState, FaceStateError
from brush_compiler.geometry.plane_math import dot


def _assert_face_polygons_valid(brush):
    for face in brush.faces:
        if face.state is not FaceState.CLIPPED:
            continue
        assert len(face.polygon) >= 3
        for p in face.polygon:
            assert face.plane.has_point(p, 1e-6)
        # Wound counter-clockwise around the outward normal
        assert dot(face.polygon.plane.normal, face.plane.normal) == pytest.approx(1.0)


def test_unit_cube_clips_to_six_squares(unit_cube):
    result = BrushClipper().clip_brush(unit_cube)

    assert result.resolved_count == 6
    for face in unit_cube.faces:
        assert face.state is FaceState.CLIPPED
        assert len(face.polygon) == 4
        assert face.polygon.area() == pytest.approx(1.0)
        for p in face.polygon:
            assert all(abs(c) == 0.5 for c in p)
    _assert_face_polygons_valid(unit_cube)

    box = unit_cube.bounding_box
    assert box.mins == (-0.5, -0.5, -0.5)
    assert box.maxs == (0.5, 0.5, 0.5)


def test_pyramid_faces(pyramid):
    BrushClipper().clip_brush(pyramid)

    base, *sides = pyramid.faces
    assert base.state is FaceState.CLIPPED
    assert sorted(base.polygon.points) == [
        (-1.0, -1.0, 0.0), (-1.0, 1.0, 0.0), (1.0, -1.0, 0.0), (1.0, 1.0, 0.0),
    ]
    for side in sides:
        assert side.state is FaceState.CLIPPED
        assert len(side.polygon) == 3
        assert (0.0, 0.0, 1.0) in side.polygon.points
    _assert_face_polygons_valid(pyramid)
    assert pyramid.bounding_box.maxs == (1.0, 1.0, 1.0)


def test_far_from_origin_cube_stays_exact():
    brush = Brush.box((65535.5, -65536.5, 65535.5), (65536.5, -65535.5, 65536.5))
    BrushClipper().clip_brush(brush)

    for face in brush.faces:
        assert face.state is FaceState.CLIPPED
        assert len(face.polygon) == 4
        assert face.polygon.area() == pytest.approx(1.0)
        for x, y, z in face.polygon:
            assert x in (65535.5, 65536.5)
            assert y in (-65536.5, -65535.5)
            assert z in (65535.5, 65536.5)


def test_run_does_not_modify_brush(unit_cube):
    authored = unit_cube.bounding_box
    result = BrushClipper().run(unit_cube)

    assert len(result.outcomes) == 6
    assert [o.face_index for o in result.outcomes] == list(range(6))
    assert all(face.state is FaceState.UNCLIPPED for face in unit_cube.faces)
    assert all(face.polygon is None for face in unit_cube.faces)
    assert unit_cube.bounding_box is authored


def test_open_brush_reports_unresolved_faces(unit_cube):
    del unit_cube.faces[1]  # +X face
    result = BrushClipper().clip_brush(unit_cube)

    left = unit_cube.faces[0]
    assert left.state is FaceState.CLIPPED
    assert left.polygon.area() == pytest.approx(1.0)

    for face in unit_cube.faces[1:]:
        assert face.state is FaceState.UNRESOLVED
        assert face.polygon is None
        assert face.unresolved_reason == REASON_OPEN_BRUSH
    assert len(result.unresolved) == 4


def test_duplicate_face_does_not_close_open_brush():
    brush = Brush.box((-16, -16, -16), (16, 16, 16))
    del brush.faces[5]  # +Z face
    brush.faces.append(Face(brush.faces[1].plane_definition))

    result = BrushClipper().clip_brush(brush)

    right, duplicate = brush.faces[1], brush.faces[5]
    assert right.state is FaceState.UNRESOLVED
    assert right.unresolved_reason == REASON_OPEN_BRUSH
    assert duplicate.state is FaceState.UNRESOLVED
    # Only the bottom is closed by its neighbours
    assert [o.face_index for o in result.outcomes if o.resolved] == [4]
    for point in brush.faces[4].polygon:
        assert point[2] == -16.0


def test_unresolved_warning_names_document_location(unit_cube, caplog):
    del unit_cube.faces[1]
    clipper = BrushClipper()
    result = clipper.run(unit_cube)

    with caplog.at_level("WARNING", logger="brush_compiler.conversion.brush_clipper"):
        clipper.apply(unit_cube, result, entity_index=2, brush_index=7)

    assert "Entity 2 brush 7 face 1" in caplog.text
    assert REASON_OPEN_BRUSH in caplog.text


def test_degenerate_face_does_not_abort_brush(unit_cube):
    unit_cube.faces.append(Face(((0, 0, 0), (1, 0, 0), (2, 0, 0)), "BROKEN"))
    clipper = BrushClipper()
    result = clipper.clip_brush(unit_cube)

    assert result.resolved_count == 6
    broken = unit_cube.faces[-1]
    assert broken.state is FaceState.UNRESOLVED
    assert broken.unresolved_reason == REASON_DEGENERATE_PLANE
    for face in unit_cube.faces[:6]:
        assert face.polygon.area() == pytest.approx(1.0)


def test_duplicate_plane_is_ignored(unit_cube):
    top = unit_cube.faces[5]
    unit_cube.faces.append(Face(top.plane_definition, "COPY"))
    result = BrushClipper().clip_brush(unit_cube)

    assert result.resolved_count == 7
    assert result.outcomes[6].duplicate_of == (5,)
    assert result.outcomes[5].duplicate_of == (6,)
    assert unit_cube.faces[6].polygon == unit_cube.faces[5].polygon


def test_inverted_face_opens_the_brush(unit_cube):
    a, b, c = unit_cube.faces[5].plane_definition
    unit_cube.faces[5] = Face((a, c, b))
    result = BrushClipper().clip_brush(unit_cube)

    # The flipped top keeps z >= 0.5, so nothing closes the sides from above
    for face in unit_cube.faces[:4]:
        assert face.unresolved_reason == REASON_OPEN_BRUSH
    # The bottom lies entirely outside the flipped top
    assert unit_cube.faces[4].state is FaceState.UNRESOLVED
    assert result.resolved_count == 1


def test_brush_without_faces_has_no_outcomes():
    result = BrushClipper().run(Brush())
    assert result.outcomes == []


def test_apply_twice_raises(unit_cube):
    clipper = BrushClipper()
    result = clipper.clip_brush(unit_cube)
    with pytest.raises(FaceStateError):
        clipper.apply(unit_cube, result)


def test_clip_is_deterministic(pyramid):
    clipper = BrushClipper(ClipSettings(seed_radius_scale=4.0))
    first = clipper.run(pyramid)
    second = clipper.run(pyramid)
    assert first == second


def test_settings_defaults():
    settings = ClipSettings()
    assert settings.seed_radius_scale == 2.5
    assert settings.weld_radius == 0.125
    assert settings.grid_snap == 0.25
    assert settings.effective_boundary_tolerance == 0.125
    assert ClipSettings(boundary_tolerance=0.5).effective_boundary_tolerance == 0.5


def test_seed_radius_follows_brush_size():
    brush = Brush.box((0, 0, 0), (512, 16, 16))
    BrushClipper().clip_brush(brush)
    top = brush.faces[5]
    assert top.polygon.area() == pytest.approx(512 * 16)
    assert math.isclose(brush.bounding_box.longest_axis_length, 512.0)
