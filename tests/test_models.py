"""
Tests for Finance Tracker models

Test strategy:
1. Unit tests for individual components (models, engine, validators)
2. Session tests run against the in-memory store
3. No real API calls in tests (Google Sheets is faked)
"""

import json
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from finance_tracker.models.finance import (
    CategoryBudget,
    DashboardStats,
    Debt,
    DebtDraft,
    ScheduledPayment,
    ScheduledPaymentStatus,
    ScheduledPaymentType,
    Transaction,
    TransactionCategory,
    TransactionDraft,
    TransactionStatus,
    name_key,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestTransactionModels:
    """Tests for transaction models."""

    def test_transaction_defaults(self):
        """New transactions are categorized, unlinked and get an id."""
        tx = Transaction(description="Uber Trip", amount=Decimal("22"))
        assert tx.status == TransactionStatus.CATEGORIZED
        assert tx.category == TransactionCategory.VARIABLE.value
        assert tx.debt_id is None
        assert tx.id

    def test_transaction_strips_whitespace(self):
        tx = TransactionDraft(description="  Mercado  ", amount=Decimal("10"))
        assert tx.description == "Mercado"

    def test_transaction_rejects_non_positive_amount(self):
        """Amounts are always positive."""
        with pytest.raises(ValidationError):
            TransactionDraft(description="Test", amount=Decimal("0"))
        with pytest.raises(ValidationError):
            TransactionDraft(description="Test", amount=Decimal("-5"))

    def test_camel_case_aliases(self):
        """Models accept and produce the camelCase shape."""
        tx = Transaction.model_validate({
            "id": "t1",
            "date": "2026-04-20",
            "description": "Tambo",
            "amount": "54",
            "isWeekend": True,
            "debtId": None,
        })
        assert tx.is_weekend is True
        dumped = tx.model_dump(by_alias=True)
        assert "isWeekend" in dumped
        assert "debtId" in dumped

    def test_persisted_shape_is_snake_case(self):
        tx = Transaction(id="t1", description="Tambo", amount=Decimal("54"), is_weekend=True)
        record = tx.model_dump(mode="json")
        assert record["is_weekend"] is True
        assert record["amount"] == "54"


class TestDebtModels:
    """Tests for debt models."""

    def test_draft_fills_balance_and_payment(self):
        """Current balance and real payment default from the other fields."""
        draft = DebtDraft(
            name="Interbank (P2)",
            initial_balance=Decimal("12000"),
            monthly_minimum=Decimal("380"),
            due_date=date(2026, 5, 15),
        )
        assert draft.current_balance == Decimal("12000")
        assert draft.real_payment == Decimal("380")

    def test_draft_rejects_balance_above_initial(self):
        with pytest.raises(ValueError, match="Current balance cannot exceed initial balance"):
            DebtDraft(
                name="Test",
                initial_balance=Decimal("100"),
                current_balance=Decimal("200"),
                due_date=date(2026, 5, 15),
            )

    def test_paid_off_percent(self):
        debt = Debt(
            name="Scheu Dental (P1)",
            initial_balance=Decimal("15000"),
            current_balance=Decimal("9600"),
            due_date=date(2026, 4, 29),
        )
        assert debt.paid_off_percent == Decimal("36.0")

    def test_paid_off_percent_without_initial_balance(self):
        debt = Debt(
            name="Empty",
            initial_balance=Decimal("0"),
            current_balance=Decimal("0"),
            due_date=date(2026, 4, 29),
        )
        assert debt.paid_off_percent == Decimal("100.0")

    def test_payments_remaining(self):
        debt = Debt(
            name="Reactiva (P3)",
            initial_balance=Decimal("20000"),
            current_balance=Decimal("15500"),
            real_payment=Decimal("500"),
            due_date=date(2026, 5, 20),
        )
        assert debt.payments_remaining == 31

    def test_payments_remaining_without_payment(self):
        debt = Debt(
            name="Frozen",
            initial_balance=Decimal("100"),
            current_balance=Decimal("100"),
            due_date=date(2026, 5, 20),
        )
        assert debt.payments_remaining == 0


class TestOtherModels:
    """Budgets, scheduled payments and dashboard stats."""

    def test_budget_usage_percent(self):
        budget = CategoryBudget(category="Ocio", limit=Decimal("300"), spent=Decimal("150"))
        assert budget.usage_percent == Decimal("50")

    def test_budget_without_limit(self):
        budget = CategoryBudget(category="Ocio", spent=Decimal("150"))
        assert budget.usage_percent == Decimal("0")

    def test_scheduled_payment_defaults(self):
        payment = ScheduledPayment(
            date=date(2026, 5, 15),
            concept="Interbank (P2)",
            amount=Decimal("380"),
        )
        assert payment.status == ScheduledPaymentStatus.PENDING
        assert payment.type == ScheduledPaymentType.MINIMUM
        assert payment.is_minimum

    def test_dashboard_stats_singleton_id(self):
        assert DashboardStats().id == "dashboard"

    def test_weekend_usage_is_capped(self):
        stats = DashboardStats(weekend_spent=Decimal("700"), weekend_cap=Decimal("600"))
        assert stats.weekend_usage_percent == Decimal("100")
        assert stats.weekend_status == "exceeded"

    def test_weekend_status_ok(self):
        stats = DashboardStats(weekend_spent=Decimal("420"), weekend_cap=Decimal("600"))
        assert stats.weekend_usage_percent == Decimal("70")
        assert stats.weekend_status == "ok"

    def test_name_key_ignores_case_and_spaces(self):
        assert name_key("  Salud ") == name_key("salud")


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            description="Test",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.DEBT_CREATED,
            entity_type="debt",
            entity_id="d1",
            description="Debt created",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "debt_created"
        assert log_dict["entity_id"] == "d1"

    def test_audit_event_to_sheets_row(self):
        """Rows have the 11 audit columns in order."""
        event = AuditEventBuilder.income_adjusted(
            Decimal("12000"), Decimal("12500"), "Aumento", None
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "income_adjusted"
        details = json.loads(row[8])
        assert details["reason"] == "Aumento"
        assert details["new_income"] == "12500"

    def test_balance_adjustment_is_a_warning(self):
        """Corrections outside history stand out in the log."""
        event = AuditEventBuilder.debt_balance_adjusted(
            "d1", Decimal("9600"), Decimal("9000"), "Bank statement", None
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.is_user_action

    def test_name_created_event_type(self):
        category = AuditEventBuilder.name_created("category", "Salud", None)
        concept = AuditEventBuilder.name_created("payment_concept", "Luz", None)
        assert category.event_type == AuditEventType.CATEGORY_CREATED
        assert concept.event_type == AuditEventType.PAYMENT_CONCEPT_CREATED
        assert concept.description == "New payment concept: Luz"

    def test_stats_recomputed_details_are_strings(self):
        event = AuditEventBuilder.stats_recomputed({"available_cash": Decimal("9834")})
        assert event.details == {"available_cash": "9834"}
        assert event.severity == AuditSeverity.DEBUG
