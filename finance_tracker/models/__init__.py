"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker system.
All records flowing through the system must conform to these schemas.
"""

from finance_tracker.models.finance import (
    DASHBOARD_STATS_ID,
    BtcContribution,
    BtcContributionDraft,
    CategoryBudget,
    DashboardStats,
    Debt,
    DebtDraft,
    ScheduledPayment,
    ScheduledPaymentDraft,
    ScheduledPaymentStatus,
    ScheduledPaymentType,
    Transaction,
    TransactionCategory,
    TransactionDraft,
    TransactionStatus,
    name_key,
    new_record_id,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "DASHBOARD_STATS_ID",
    "BtcContribution",
    "BtcContributionDraft",
    "CategoryBudget",
    "DashboardStats",
    "Debt",
    "DebtDraft",
    "ScheduledPayment",
    "ScheduledPaymentDraft",
    "ScheduledPaymentStatus",
    "ScheduledPaymentType",
    "Transaction",
    "TransactionCategory",
    "TransactionDraft",
    "TransactionStatus",
    "name_key",
    "new_record_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
