"""
Two-Stage Form Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking
- Required field presence
- Positive amounts
- Done by the pydantic draft models

STAGE 2 - FORM RULES:
- Known category, known debt link
- Minimum name length
- Case-insensitive duplicate names
- Mandatory reasons for manual corrections
- Sign rules for balances, income, caps and limits

Both stages run before any store call. A result with an error-level
issue never reaches the data layer.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them back to the form.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.finance import (
    BtcContributionDraft,
    DebtDraft,
    ScheduledPaymentDraft,
    TransactionDraft,
    name_key,
)


DraftT = TypeVar("DraftT", bound=BaseModel)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_short', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form."""

    form: str
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def errors(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "warning"]

    def issue_dicts(self) -> list[dict]:
        return [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in self.issues
        ]


class InvalidInputError(Exception):
    """A form was rejected before reaching the store."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.errors) or f"Invalid {result.form} form")


def _error(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type=issue_type, message=message, severity="error")


def _warning(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type=issue_type, message=message, severity="warning")


def schema_issues(exc: ValidationError) -> list[ValidationIssue]:
    """Stage 1 issues from a pydantic ValidationError."""
    return [
        _error(
            ".".join(str(part) for part in err["loc"]) or "form",
            err["type"],
            err["msg"],
        )
        for err in exc.errors()
    ]


class FormValidator:
    """
    Validates form input for every user action.

    Usage:
        validator = FormValidator()
        draft = validator.parse(TransactionDraft, form_data, form="transaction")
        result = validator.validate_transaction(draft, categories)
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    # -------------------------------------------------------------------------
    # Stage 1
    # -------------------------------------------------------------------------

    def parse(self, model: Type[DraftT], data: dict[str, Any], form: str) -> DraftT:
        """
        Build a draft model from raw form data.

        Raises:
            InvalidInputError: With the schema issues, if parsing fails
        """
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise InvalidInputError(ValidationResult(form=form, issues=schema_issues(e)))

    # -------------------------------------------------------------------------
    # Stage 2
    # -------------------------------------------------------------------------

    def validate_transaction(
        self,
        draft: TransactionDraft,
        categories: Iterable[str],
        debt_ids: Optional[Iterable[str]] = None,
    ) -> ValidationResult:
        issues = []

        if not draft.description.strip():
            issues.append(_error("description", "missing", "Description is required"))

        known = {name_key(c) for c in categories}
        known.add(name_key(self._settings.investment_category))
        if name_key(draft.category) not in known:
            issues.append(_error(
                "category",
                "unknown",
                f"Unknown category: {draft.category}",
            ))

        if draft.debt_id is not None:
            if draft.category != self._settings.debt_payment_category:
                issues.append(_error(
                    "debt_id",
                    "inconsistent",
                    f"Only '{self._settings.debt_payment_category}' transactions can be linked to a debt",
                ))
            elif debt_ids is not None and draft.debt_id not in set(debt_ids):
                issues.append(_error("debt_id", "unknown", "Linked debt does not exist"))

        return ValidationResult(form="transaction", issues=issues)

    def validate_debt(
        self,
        draft: DebtDraft,
        existing_names: Iterable[str] = (),
    ) -> ValidationResult:
        issues = []

        if not draft.name.strip():
            issues.append(_error("name", "missing", "Debt name is required"))
        elif name_key(draft.name) in {name_key(n) for n in existing_names}:
            issues.append(_warning(
                "name",
                "duplicate",
                f"A debt named {draft.name} already exists",
            ))

        if draft.real_payment is not None and draft.real_payment < draft.monthly_minimum:
            issues.append(_warning(
                "real_payment",
                "below_minimum",
                "Real payment is below the monthly minimum",
            ))

        return ValidationResult(form="debt", issues=issues)

    def validate_new_name(
        self,
        kind: str,
        name: str,
        existing: Iterable[str],
    ) -> ValidationResult:
        """Category or payment-concept creation."""
        issues = []
        trimmed = name.strip()
        label = kind.replace("_", " ")

        if len(trimmed) < self._settings.min_name_length:
            issues.append(_error(
                "name",
                "too_short",
                f"The name must be at least {self._settings.min_name_length} characters long",
            ))
        elif name_key(trimmed) in {name_key(n) for n in existing}:
            issues.append(_error(
                "name",
                "duplicate",
                f"This {label} already exists",
            ))

        return ValidationResult(form=kind, issues=issues)

    def validate_adjustment(
        self,
        field: str,
        value: Decimal,
        reason: str,
        allow_zero: bool = True,
    ) -> ValidationResult:
        """
        Manual correction of a balance, income or cap.

        Corrections bypass transaction history, so a reason is mandatory.
        """
        issues = []

        if value < 0 or (value == 0 and not allow_zero):
            expected = "zero or more" if allow_zero else "greater than zero"
            issues.append(_error(field, "invalid_value", f"Value must be {expected}"))

        if not (reason or "").strip():
            issues.append(_error("reason", "missing", "A reason is required for manual corrections"))

        return ValidationResult(form=field, issues=issues)

    def validate_budget(self, category: str, limit: Decimal) -> ValidationResult:
        issues = []
        if not category.strip():
            issues.append(_error("category", "missing", "Category is required"))
        if limit < 0:
            issues.append(_error("limit", "invalid_value", "Limit cannot be negative"))
        return ValidationResult(form="budget", issues=issues)

    def validate_scheduled_payment(
        self,
        draft: ScheduledPaymentDraft,
        concepts: Iterable[str],
    ) -> ValidationResult:
        issues = []

        if not draft.concept.strip():
            issues.append(_error("concept", "missing", "Concept is required"))
        elif name_key(draft.concept) not in {name_key(c) for c in concepts}:
            issues.append(_warning(
                "concept",
                "unknown",
                f"{draft.concept} is not in the payment concept list",
            ))

        return ValidationResult(form="scheduled_payment", issues=issues)

    def validate_contribution(self, draft: BtcContributionDraft) -> ValidationResult:
        issues = []
        if draft.btc_amount is None:
            issues.append(ValidationIssue(
                field="btc_amount",
                issue_type="missing",
                message="BTC amount not given; accumulated BTC will not change",
                severity="info",
            ))
        return ValidationResult(form="btc_contribution", issues=issues)
