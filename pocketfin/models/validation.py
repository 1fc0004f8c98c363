"""
Validation Result Models

The validator never fixes a record silently. It reports issues,
and the caller decides whether to block (errors) or show (warnings).
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """One problem found on a transaction or plan."""

    field: str = Field(
        ...,
        description="Offending field, snake_case"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'unknown_bank', 'future_date', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Message shown to the user"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="error blocks the write, warning and info do not"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="What the user can do about it"
    )


class ValidationResult(BaseModel):
    """Outcome of validating a transaction or an installment plan."""

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="Every issue, in the order checks ran"
    )

    @property
    def has_errors(self) -> bool:
        """True when at least one issue blocks the write."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Number of blocking issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
