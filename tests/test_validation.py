"""Tests for form validation."""

from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.config import AppSettings
from finance_tracker.models.finance import (
    BtcContributionDraft,
    DebtDraft,
    ScheduledPaymentDraft,
    TransactionDraft,
)
from finance_tracker.validation import (
    FormValidator,
    InvalidInputError,
    ValidationIssue,
    ValidationResult,
)


CATEGORIES = ["Esencial", "Variable", "Fin de Semana", "Pago de Deuda", "Ingreso"]


@pytest.fixture
def validator():
    return FormValidator(AppSettings())


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_result_with_errors(self):
        result = ValidationResult(
            form="transaction",
            issues=[
                ValidationIssue(
                    field="category",
                    issue_type="unknown",
                    message="Unknown category: X",
                    severity="error",
                ),
                ValidationIssue(
                    field="concept",
                    issue_type="unknown",
                    message="Not listed",
                    severity="warning",
                ),
            ],
        )
        assert not result.is_valid
        assert result.errors == ["Unknown category: X"]
        assert result.warnings == ["Not listed"]

    def test_warnings_only_is_valid(self):
        result = ValidationResult(
            form="scheduled_payment",
            issues=[ValidationIssue(
                field="concept", issue_type="unknown", message="x", severity="warning"
            )],
        )
        assert result.is_valid

    def test_error_message_joins_errors(self):
        result = ValidationResult(
            form="category",
            issues=[ValidationIssue(
                field="name", issue_type="too_short", message="Too short", severity="error"
            )],
        )
        assert str(InvalidInputError(result)) == "Too short"


class TestSchemaStage:
    """Stage 1: parsing raw form data."""

    def test_parse_valid_form(self, validator):
        draft = validator.parse(
            TransactionDraft,
            {"description": "Uber", "amount": "22", "category": "Variable"},
            form="transaction",
        )
        assert draft.amount == Decimal("22")

    def test_parse_rejects_non_positive_amount(self, validator):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.parse(
                TransactionDraft,
                {"description": "Uber", "amount": "0"},
                form="transaction",
            )
        result = exc_info.value.result
        assert result.form == "transaction"
        assert result.issues[0].field == "amount"

    def test_parse_reports_missing_fields(self, validator):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.parse(ScheduledPaymentDraft, {"amount": "10"}, form="scheduled_payment")
        fields = {issue.field for issue in exc_info.value.result.issues}
        assert {"date", "concept"} <= fields


class TestTransactionRules:
    """Stage 2 rules for transactions."""

    def test_known_category_passes(self, validator):
        draft = TransactionDraft(description="Uber", amount=Decimal("22"), category="variable")
        assert validator.validate_transaction(draft, CATEGORIES).is_valid

    def test_unknown_category(self, validator):
        draft = TransactionDraft(description="Uber", amount=Decimal("22"), category="Viajes")
        result = validator.validate_transaction(draft, CATEGORIES)
        assert not result.is_valid
        assert result.issues[0].issue_type == "unknown"

    def test_investment_category_always_known(self, validator):
        draft = TransactionDraft(description="BTC", amount=Decimal("800"), category="Inversión")
        assert validator.validate_transaction(draft, CATEGORIES).is_valid

    def test_debt_link_requires_debt_category(self, validator):
        draft = TransactionDraft(
            description="Uber", amount=Decimal("22"), category="Variable", debt_id="d1"
        )
        result = validator.validate_transaction(draft, CATEGORIES, ["d1"])
        assert result.issues[0].issue_type == "inconsistent"

    def test_debt_link_must_exist(self, validator):
        draft = TransactionDraft(
            description="Pago", amount=Decimal("22"), category="Pago de Deuda", debt_id="zz"
        )
        result = validator.validate_transaction(draft, CATEGORIES, ["d1"])
        assert not result.is_valid


class TestNameRules:
    """Category and payment-concept creation."""

    def test_short_name(self, validator):
        result = validator.validate_new_name("category", " ab ", [])
        assert result.issues[0].issue_type == "too_short"

    def test_duplicate_ignores_case(self, validator):
        result = validator.validate_new_name("category", "salud", ["Salud"])
        assert result.issues[0].issue_type == "duplicate"
        assert result.issues[0].message == "This category already exists"

    def test_new_concept(self, validator):
        assert validator.validate_new_name("payment_concept", "Luz", ["Agua"]).is_valid


class TestAdjustmentRules:
    """Manual corrections need a reason."""

    def test_reason_required(self, validator):
        result = validator.validate_adjustment("current_balance", Decimal("9000"), "   ")
        assert result.issues[0].field == "reason"

    def test_negative_balance(self, validator):
        result = validator.validate_adjustment("current_balance", Decimal("-1"), "fix")
        assert not result.is_valid

    def test_zero_balance_allowed(self, validator):
        assert validator.validate_adjustment("current_balance", Decimal("0"), "paid off").is_valid

    def test_income_must_be_positive(self, validator):
        result = validator.validate_adjustment(
            "monthly_income", Decimal("0"), "lost job", allow_zero=False
        )
        assert not result.is_valid


class TestOtherForms:
    """Budgets, debts, scheduled payments and contributions."""

    def test_negative_budget_limit(self, validator):
        assert not validator.validate_budget("Ocio", Decimal("-5")).is_valid

    def test_duplicate_debt_name_is_warning(self, validator):
        draft = DebtDraft(
            name="interbank (p2)",
            initial_balance=Decimal("100"),
            due_date=date(2026, 5, 15),
        )
        result = validator.validate_debt(draft, ["Interbank (P2)"])
        assert result.is_valid
        assert result.warnings

    def test_unknown_concept_is_warning(self, validator):
        draft = ScheduledPaymentDraft(
            date=date(2026, 5, 1), concept="Gimnasio", amount=Decimal("90")
        )
        result = validator.validate_scheduled_payment(draft, ["Alquiler"])
        assert result.is_valid
        assert result.warnings

    def test_contribution_without_btc_amount_is_info(self, validator):
        result = validator.validate_contribution(BtcContributionDraft(amount=Decimal("800")))
        assert result.is_valid
        assert result.issues[0].severity == "info"
