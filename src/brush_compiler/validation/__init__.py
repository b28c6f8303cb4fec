"""
Validation package for the brush compiler.

Public API:
    - ValidationResult, ValidationIssue, Severity: Core result types
    - ValidationStage: Compile stage enumeration
    - ValidationError: Exception raised on FAIL issues when fail_on_errors=True
    - ValidationRule, ALL_RULES: Rule table
    - validate_document, check_brush, check_clip_result: Checks
"""

from .core import (
    Severity,
    ValidationStage,
    ValidationIssue,
    ValidationResult,
    ValidationError,
)
from .rules import ValidationRule, ALL_RULES, get_rule
from .checks import (
    validate_document,
    check_brush,
    check_face_definition,
    check_clip_result,
    check_map_structure,
)

__all__ = [
    # Core types
    'Severity',
    'ValidationStage',
    'ValidationIssue',
    'ValidationResult',
    'ValidationError',
    # Rules
    'ValidationRule',
    'ALL_RULES',
    'get_rule',
    # Checks
    'validate_document',
    'check_brush',
    'check_face_definition',
    'check_clip_result',
    'check_map_structure',
]
