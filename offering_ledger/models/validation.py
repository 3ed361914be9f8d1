"""
Validation Models

Used by the invariant checker to report problems with a document
(typically right after an import) without raising.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


Severity = Literal["error", "warning", "info"]


class ValidationIssue(BaseModel):
    """One broken invariant, located by document path."""

    field: str = Field(
        ...,
        description="Dotted document path, e.g. 'expenses.Operations'"
    )
    issue_type: str = Field(
        ...,
        description="total_mismatch, negative_amount, broken_link, ..."
    )
    message: str = Field(
        ...,
        description="Shown to the treasurer as-is"
    )
    severity: Severity
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Outcome of LedgerValidator.check_invariants()."""

    is_valid: bool = Field(
        ...,
        description="False when at least one error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    def _with_severity(self, severity: Severity) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def errors(self) -> list[ValidationIssue]:
        return self._with_severity("error")

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warnings(self) -> list[str]:
        """Messages of warning-level issues."""
        return [issue.message for issue in self._with_severity("warning")]
