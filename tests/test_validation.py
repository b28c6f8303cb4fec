import math

from brush_compiler.conversion.brush_clipper import BrushClipper
from brush_compiler.conversion.map_data import Brush, Entity, Face, MapDocument
from brush_compiler.validation import (
    ALL_RULES,
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationStage,
    check_brush,
    check_clip_result,
    get_rule,
    validate_document,
)


def test_rule_table():
    assert set(ALL_RULES) == {
        "BRUSH-001", "BRUSH-002", "BRUSH-003", "BRUSH-004", "BRUSH-005", "BRUSH-006", "MAP-001",
    }
    assert get_rule("BRUSH-004").severity == Severity.FAIL
    assert get_rule("BRUSH-005").severity == Severity.INFO
    assert get_rule("NOPE") is None

    issue = get_rule("BRUSH-002").issue(entity_index=1, brush_index=2, face_index=3, reason="open_brush")
    assert issue.message == "Face could not be resolved into a polygon (open_brush)"
    assert issue.format().startswith("[WARN] BRUSH-002 entity 1 brush 2 face 3 :: ")


def test_result_pass_fail_and_report():
    result = ValidationResult(stage=ValidationStage.CLIP)
    assert result.passed
    assert result.report() == "Validation passed: No issues found"

    result.add_issue(ValidationIssue(Severity.WARN, "BRUSH-002", "open"))
    assert result.passed
    result.add_issue(ValidationIssue(Severity.FAIL, "BRUSH-004", "nan"))
    assert result.failed
    assert len(result.warnings) == 1
    assert len(result.errors) == 1

    report = result.report()
    assert report.startswith("Validation FAILED (clip): 2 issue(s)")
    data = result.to_dict()
    assert data["fail_count"] == 1
    assert data["issues"][0]["code"] == "BRUSH-002"
    assert data["issues"][0]["entity_index"] is None


def test_check_brush_reports_bad_faces():
    brush = Brush(faces=[
        Face(((0, 0, 0), (1, 0, 0), (2, 0, 0))),
        Face(((0, 0, 0), (0, math.inf, 0), (0, 0, 1))),
    ])
    codes = [i.code for i in check_brush(brush, 0, 4)]
    assert codes == ["BRUSH-003", "BRUSH-001", "BRUSH-004"]


def test_check_clip_result_for_valid_cube(unit_cube):
    result = BrushClipper().run(unit_cube)
    assert check_clip_result(result, 0, 0) == []


def test_validate_document_requires_worldspawn(unit_cube):
    result = validate_document(MapDocument([Entity("func_wall", brushes=[unit_cube])]))
    assert result.stage == ValidationStage.INPUT
    assert [i.code for i in result.issues] == ["MAP-001"]

    result = validate_document(MapDocument([Entity("worldspawn", brushes=[unit_cube])]))
    assert result.passed
    assert not result.issues
