"""
Brush and map validation checks.

Input checks run on the parsed records before clipping:
- Non-finite coordinates (BRUSH-004)
- Degenerate plane definitions (BRUSH-001)
- Too few faces for a closed solid (BRUSH-003)
- Missing worldspawn (MAP-001)

Clip checks turn per-face clip outcomes into issues:
- Unresolved faces (BRUSH-002)
- Duplicate coplanar faces (BRUSH-005)
- Brushes without any resolved face (BRUSH-006)
"""

import math
from typing import List, Optional

from brush_compiler.conversion.brush_clipper import REASON_DEGENERATE_PLANE
from brush_compiler.geometry.plane_math import is_finite

from .core import ValidationIssue, ValidationResult, ValidationStage
from .rules import BRUSH_001, BRUSH_002, BRUSH_003, BRUSH_004, BRUSH_005, BRUSH_006, MAP_001

# A closed convex solid needs at least a tetrahedron
MIN_BRUSH_FACES = 4


def check_face_definition(face, entity_index: Optional[int] = None,
                          brush_index: Optional[int] = None,
                          face_index: Optional[int] = None) -> List[ValidationIssue]:
    """Check the three authored points and texture axes of a face."""
    where = dict(entity_index=entity_index, brush_index=brush_index, face_index=face_index)

    for point in face.plane_definition:
        if not is_finite(point):
            return [BRUSH_004.issue(what="plane point", value=point, **where)]
    for axis in face.projection_uvs:
        if not all(math.isfinite(c) for c in axis):
            return [BRUSH_004.issue(what="texture axis", value=axis, **where)]

    if face.plane is None:
        return [BRUSH_001.issue(points=", ".join(str(p) for p in face.plane_definition), **where)]
    return []


def check_brush(brush, entity_index: Optional[int] = None,
                brush_index: Optional[int] = None) -> List[ValidationIssue]:
    """Run the input checks on one brush and its faces."""
    issues = []
    if len(brush.faces) < MIN_BRUSH_FACES:
        issues.append(BRUSH_003.issue(
            entity_index=entity_index, brush_index=brush_index, count=len(brush.faces)
        ))
    for face_index, face in enumerate(brush.faces):
        issues.extend(check_face_definition(face, entity_index, brush_index, face_index))
    return issues


def check_clip_result(result, entity_index: Optional[int] = None,
                      brush_index: Optional[int] = None) -> List[ValidationIssue]:
    """Convert the outcomes of a BrushClipper run into issues.

    Faces with a degenerate definition are already covered by BRUSH-001 and
    are not reported again.
    """
    issues = []
    for outcome in result.outcomes:
        where = dict(entity_index=entity_index, brush_index=brush_index,
                     face_index=outcome.face_index)
        if not outcome.resolved and outcome.reason != REASON_DEGENERATE_PLANE:
            issues.append(BRUSH_002.issue(reason=outcome.reason, **where))
        for other in outcome.duplicate_of:
            # Report each duplicate pair once, on the later face
            if other < outcome.face_index:
                issues.append(BRUSH_005.issue(other=other, **where))

    if result.outcomes and result.resolved_count == 0:
        issues.append(BRUSH_006.issue(entity_index=entity_index, brush_index=brush_index))
    return issues


def check_map_structure(document) -> List[ValidationIssue]:
    if document.worldspawn is None:
        return [MAP_001.issue()]
    return []


def validate_document(document) -> ValidationResult:
    """Run every input check over a document.

    Returns:
        ValidationResult for the INPUT stage.
    """
    result = ValidationResult(stage=ValidationStage.INPUT)
    for issue in check_map_structure(document):
        result.add_issue(issue)
    for entity_index, brush_index, brush in document.brushes():
        for issue in check_brush(brush, entity_index, brush_index):
            result.add_issue(issue)
    return result
