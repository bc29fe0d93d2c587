"""Form validation package."""

from finance_tracker.validation.forms import (
    FormValidator,
    InvalidInputError,
    ValidationIssue,
    ValidationResult,
    schema_issues,
)

__all__ = [
    "FormValidator",
    "InvalidInputError",
    "ValidationIssue",
    "ValidationResult",
    "schema_issues",
]
