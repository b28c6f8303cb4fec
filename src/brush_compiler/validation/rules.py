"""
Validation rule definitions.

Each rule has:
- Code: Unique identifier (e.g., "BRUSH-002")
- Severity: FAIL, WARN, or INFO
- Message template: Human-readable description
- Remediation: Suggested fix

Rules are organized by category:
- BRUSH: Brush and face geometry
- MAP: Map structure
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .core import Severity, ValidationIssue


@dataclass(frozen=True)
class ValidationRule:
    """Definition of a validation rule.

    Attributes:
        code: Unique rule code (e.g., "BRUSH-001")
        severity: Default severity for this rule
        message_template: Template for error message (use {placeholders})
        remediation_template: Template for suggested fix
        description: Full description of the rule
    """
    code: str
    severity: Severity
    message_template: str
    remediation_template: Optional[str] = None
    description: Optional[str] = None

    def format_message(self, **kwargs) -> str:
        """Format the message template with provided values."""
        return self.message_template.format(**kwargs)

    def format_remediation(self, **kwargs) -> Optional[str]:
        """Format the remediation template with provided values."""
        if self.remediation_template:
            return self.remediation_template.format(**kwargs)
        return None

    def issue(self, entity_index: Optional[int] = None, brush_index: Optional[int] = None,
              face_index: Optional[int] = None, **kwargs) -> ValidationIssue:
        """Build a ValidationIssue for this rule."""
        return ValidationIssue(
            severity=self.severity,
            code=self.code,
            message=self.format_message(**kwargs),
            remediation=self.format_remediation(**kwargs),
            entity_index=entity_index,
            brush_index=brush_index,
            face_index=face_index,
        )


# =============================================================================
# BRUSH RULES
# =============================================================================

BRUSH_001 = ValidationRule(
    code="BRUSH-001",
    severity=Severity.WARN,
    message_template="Degenerate plane definition: {points}",
    remediation_template="Ensure the three face points are distinct and not collinear",
    description="Three points defining a face plane must span a plane"
)

BRUSH_002 = ValidationRule(
    code="BRUSH-002",
    severity=Severity.WARN,
    message_template="Face could not be resolved into a polygon ({reason})",
    remediation_template="Close the brush: every face must be bounded by its siblings",
    description="A face whose clip never ends in a finite polygon is dropped"
)

BRUSH_003 = ValidationRule(
    code="BRUSH-003",
    severity=Severity.WARN,
    message_template="Brush has {count} faces, at least 4 are needed for a closed solid",
    remediation_template="Add the missing faces or delete the brush",
    description="A convex solid needs at least four bounding planes"
)

BRUSH_004 = ValidationRule(
    code="BRUSH-004",
    severity=Severity.FAIL,
    message_template="Non-finite coordinate in {what}: {value}",
    remediation_template="Re-export the map; coordinates must be finite numbers",
    description="NaN or infinite coordinates poison every clip they touch"
)

BRUSH_005 = ValidationRule(
    code="BRUSH-005",
    severity=Severity.INFO,
    message_template="Face {other} duplicates this face's plane and was ignored",
    remediation_template="Remove the duplicate face",
    description="A coplanar, same-facing sibling does not clip anything"
)

BRUSH_006 = ValidationRule(
    code="BRUSH-006",
    severity=Severity.WARN,
    message_template="No face of the brush could be resolved",
    remediation_template="Check the brush for inverted or missing faces",
    description="A brush without any polygon produces no geometry at all"
)

# =============================================================================
# MAP RULES
# =============================================================================

MAP_001 = ValidationRule(
    code="MAP-001",
    severity=Severity.WARN,
    message_template="Missing worldspawn entity",
    remediation_template="Add a worldspawn entity holding the static world brushes",
    description="Every map needs a worldspawn entity"
)


ALL_RULES: Dict[str, ValidationRule] = {
    rule.code: rule
    for rule in (BRUSH_001, BRUSH_002, BRUSH_003, BRUSH_004, BRUSH_005, BRUSH_006, MAP_001)
}


def get_rule(code: str) -> Optional[ValidationRule]:
    return ALL_RULES.get(code)
