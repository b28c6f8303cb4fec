"""
Core data structures for the validation system.

Defines the fundamental types used throughout the validation package:
- Severity: Issue severity levels (INFO, WARN, FAIL)
- ValidationStage: Compile stages where validation occurs
- ValidationIssue: Individual validation finding
- ValidationResult: Collection of issues with pass/fail status
- ValidationError: Exception raised when validation fails
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional


class Severity(Enum):
    """Validation issue severity levels.

    - INFO: Informational, logged but doesn't affect pass/fail
    - WARN: Warning, logged; the affected face or brush is dropped
    - FAIL: Error, fails the compile when ``fail_on_errors`` is set
    """
    INFO = auto()
    WARN = auto()
    FAIL = auto()

    def __str__(self) -> str:
        return self.name


class ValidationStage(Enum):
    """Compile stages where validation occurs.

    - INPUT: Checks on parsed brush records before clipping
    - CLIP: Outcomes of the per-face clipping
    """
    INPUT = "input"
    CLIP = "clip"

    def __str__(self) -> str:
        return self.value


@dataclass
class ValidationIssue:
    """Represents a single validation finding.

    Attributes:
        severity: Issue severity (INFO, WARN, FAIL)
        code: Rule code (e.g., "BRUSH-002")
        message: Human-readable description
        remediation: Optional suggested fix
        entity_index: Index of the entity in the document, if known
        brush_index: Index of the brush within its entity, if known
        face_index: Index of the face within its brush, if known
    """
    severity: Severity
    code: str
    message: str
    remediation: Optional[str] = None
    entity_index: Optional[int] = None
    brush_index: Optional[int] = None
    face_index: Optional[int] = None

    @property
    def location(self) -> str:
        parts = []
        if self.entity_index is not None:
            parts.append(f"entity {self.entity_index}")
        if self.brush_index is not None:
            parts.append(f"brush {self.brush_index}")
        if self.face_index is not None:
            parts.append(f"face {self.face_index}")
        return " ".join(parts) or "-"

    def format(self) -> str:
        """Format issue for display.

        Returns:
            ``[SEVERITY] CODE location :: message :: fix=FIX``
        """
        fix = self.remediation or 'N/A'
        return f"[{self.severity}] {self.code} {self.location} :: {self.message} :: fix={fix}"

    def __str__(self) -> str:
        return self.format()


@dataclass
class ValidationResult:
    """Collection of validation issues with pass/fail determination.

    Attributes:
        issues: List of ValidationIssue objects
        stage: Compile stage this result is from

    Properties:
        passed: True if no FAIL severity issues
        failed: True if any FAIL severity issues
        warnings: List of WARN severity issues
        errors: List of FAIL severity issues
        infos: List of INFO severity issues
    """
    issues: List[ValidationIssue] = field(default_factory=list)
    stage: Optional[ValidationStage] = None

    @property
    def passed(self) -> bool:
        """Check if validation passed (no FAIL issues)."""
        return not self.failed

    @property
    def failed(self) -> bool:
        """Check if validation failed (any FAIL issues)."""
        return any(i.severity == Severity.FAIL for i in self.issues)

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARN]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.FAIL]

    @property
    def infos(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.INFO]

    def add_issue(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Merge another result into this one.

        Returns:
            Self for chaining
        """
        self.issues.extend(other.issues)
        return self

    def with_codes(self, code: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.code == code]

    def report(self) -> str:
        """Generate a formatted multi-line report of all issues."""
        if not self.issues:
            return "Validation passed: No issues found"

        lines = []
        stage_str = f" ({self.stage})" if self.stage else ""
        status = "PASSED" if self.passed else "FAILED"
        lines.append(f"Validation {status}{stage_str}: {len(self.issues)} issue(s)")
        lines.append("-" * 60)

        for severity in [Severity.FAIL, Severity.WARN, Severity.INFO]:
            severity_issues = [i for i in self.issues if i.severity == severity]
            if severity_issues:
                lines.append(f"\n{severity.name} ({len(severity_issues)}):")
                for issue in severity_issues:
                    lines.append(issue.format())

        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'passed': self.passed,
            'stage': str(self.stage) if self.stage else None,
            'issue_count': len(self.issues),
            'fail_count': len(self.errors),
            'warn_count': len(self.warnings),
            'info_count': len(self.infos),
            'issues': [
                {
                    'severity': str(issue.severity),
                    'code': issue.code,
                    'message': issue.message,
                    'remediation': issue.remediation,
                    'entity_index': issue.entity_index,
                    'brush_index': issue.brush_index,
                    'face_index': issue.face_index,
                }
                for issue in self.issues
            ]
        }


class ValidationError(Exception):
    """Exception raised when validation fails with FAIL severity issues.

    Attributes:
        result: The ValidationResult that caused the failure
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.report())
