"""
Audit Models for Finance Tracker

Every user action that changes the record set is logged for audit purposes.
This provides:
1. Complete traceability of all operations
2. A home for the free-text reasons behind manual corrections
3. Debugging information when a store call fails
4. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every user-initiated mutation has its own event type.
    """
    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"

    # Debts
    DEBT_CREATED = "debt_created"
    DEBT_BALANCE_ADJUSTED = "debt_balance_adjusted"
    DEBT_PAYMENT_APPLIED = "debt_payment_applied"

    # Dashboard corrections
    INCOME_ADJUSTED = "income_adjusted"
    WEEKEND_CAP_ADJUSTED = "weekend_cap_adjusted"
    STATS_RECOMPUTED = "stats_recomputed"

    # Open lists and budgets
    CATEGORY_CREATED = "category_created"
    PAYMENT_CONCEPT_CREATED = "payment_concept_created"
    BUDGET_SAVED = "budget_saved"

    # Calendar
    SCHEDULED_PAYMENT_CREATED = "scheduled_payment_created"
    SCHEDULED_PAYMENT_UPDATED = "scheduled_payment_updated"
    SCHEDULED_PAYMENT_DELETED = "scheduled_payment_deleted"

    # Investments
    CONTRIBUTION_REGISTERED = "contribution_registered"
    CONTRIBUTION_REFUSED = "contribution_refused"

    # Simulation
    SIMULATION_APPLIED = "simulation_applied"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _money(value: Decimal) -> str:
    return str(value)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'transaction', 'debt', 'dashboard')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a contribution and its transaction)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, ensure_ascii=False) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_created(tx_id, "Uber", amount, "Variable", cid)
        event = AuditEventBuilder.income_adjusted(old, new, "Bonus", cid)
    """

    @staticmethod
    def transaction_created(
        transaction_id: str,
        description: str,
        amount: Decimal,
        category: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction registered: {description}",
            details={
                "amount": _money(amount),
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(
        transaction_id: str,
        changes: dict[str, Any],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction edited",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def debt_created(
        debt_id: str,
        name: str,
        balance: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_CREATED,
            entity_type="debt",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description=f"Debt created: {name}",
            details={"current_balance": _money(balance)},
            is_user_action=True,
        )

    @staticmethod
    def debt_balance_adjusted(
        debt_id: str,
        old_balance: Decimal,
        new_balance: Decimal,
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_BALANCE_ADJUSTED,
            severity=AuditSeverity.WARNING,
            entity_type="debt",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description="Debt balance corrected outside transaction history",
            details={
                "old_balance": _money(old_balance),
                "new_balance": _money(new_balance),
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def debt_payment_applied(
        debt_id: str,
        transaction_id: str,
        amount: Decimal,
        new_balance: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_PAYMENT_APPLIED,
            entity_type="debt",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description=f"Payment of {amount} applied to debt",
            details={
                "transaction_id": transaction_id,
                "amount": _money(amount),
                "new_balance": _money(new_balance),
            },
        )

    @staticmethod
    def income_adjusted(
        old_income: Decimal,
        new_income: Decimal,
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_ADJUSTED,
            entity_type="dashboard",
            correlation_id=correlation_id,
            description="Monthly income adjusted",
            details={
                "old_income": _money(old_income),
                "new_income": _money(new_income),
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def weekend_cap_adjusted(
        old_cap: Decimal,
        new_cap: Decimal,
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WEEKEND_CAP_ADJUSTED,
            entity_type="dashboard",
            correlation_id=correlation_id,
            description="Weekend spending cap adjusted",
            details={
                "old_cap": _money(old_cap),
                "new_cap": _money(new_cap),
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def stats_recomputed(
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATS_RECOMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="dashboard",
            correlation_id=correlation_id,
            description=f"Derived statistics updated: {', '.join(sorted(changes))}",
            details={key: str(value) for key, value in changes.items()},
        )

    @staticmethod
    def name_created(
        kind: str,
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        event_type = (
            AuditEventType.CATEGORY_CREATED
            if kind == "category"
            else AuditEventType.PAYMENT_CONCEPT_CREATED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=kind,
            correlation_id=correlation_id,
            description=f"New {kind.replace('_', ' ')}: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def budget_saved(
        budget_id: str,
        category: str,
        limit: Decimal,
        created: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SAVED,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Budget {'created' if created else 'updated'} for {category}",
            details={"category": category, "limit": _money(limit)},
            is_user_action=True,
        )

    @staticmethod
    def scheduled_payment_created(
        payment_id: str,
        concept: str,
        amount: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEDULED_PAYMENT_CREATED,
            entity_type="scheduled_payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=f"Scheduled payment added: {concept}",
            details={"concept": concept, "amount": _money(amount)},
            is_user_action=True,
        )

    @staticmethod
    def scheduled_payment_updated(
        payment_id: str,
        changes: dict[str, Any],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEDULED_PAYMENT_UPDATED,
            entity_type="scheduled_payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description="Scheduled payment edited",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def scheduled_payment_deleted(
        payment_id: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEDULED_PAYMENT_DELETED,
            entity_type="scheduled_payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description="Scheduled payment deleted",
            is_user_action=True,
        )

    @staticmethod
    def contribution_registered(
        contribution_id: str,
        amount: Decimal,
        btc_amount: Optional[Decimal],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTRIBUTION_REGISTERED,
            entity_type="btc_contribution",
            entity_id=contribution_id,
            correlation_id=correlation_id,
            description=f"BTC contribution registered: {amount}",
            details={
                "amount": _money(amount),
                "btc_amount": _money(btc_amount) if btc_amount is not None else None,
            },
            is_user_action=True,
        )

    @staticmethod
    def contribution_refused(
        reason: str,
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTRIBUTION_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type="btc_contribution",
            correlation_id=correlation_id,
            description="BTC contribution blocked by eligibility rule",
            details={"reason": reason, "message": message},
            is_user_action=True,
        )

    @staticmethod
    def simulation_applied(
        debt_id: str,
        amount: Decimal,
        status: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIMULATION_APPLIED,
            entity_type="debt",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description=f"Extra payment simulation applied ({status})",
            details={"amount": _money(amount), "status": status},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        form: str,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="form",
            correlation_id=correlation_id,
            description=f"{form} form rejected with {len(issues)} issues",
            details={
                "form": form,
                "issues": issues,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Store call failed: {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )
