"""
Audit Logger

DESIGN DECISION: Every user action that changes the record set is logged.
This provides:
1. Complete traceability
2. A record of the reasons behind manual corrections
3. Debugging capability when a store call fails

The audit logger:
- Is async so it can share the session's event loop
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder
from finance_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_created(
        self,
        transaction_id: str,
        description: str,
        amount: Decimal,
        category: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_created(
            transaction_id=transaction_id,
            description=description,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    async def log_transaction_updated(
        self,
        transaction_id: str,
        changes: dict[str, Any],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_debt_created(
        self,
        debt_id: str,
        name: str,
        balance: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.debt_created(
            debt_id=debt_id,
            name=name,
            balance=balance,
            correlation_id=correlation_id,
        ))

    async def log_debt_balance_adjusted(
        self,
        debt_id: str,
        old_balance: Decimal,
        new_balance: Decimal,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        """Log a manual balance correction with its reason."""
        await self.log(AuditEventBuilder.debt_balance_adjusted(
            debt_id=debt_id,
            old_balance=old_balance,
            new_balance=new_balance,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_debt_payment_applied(
        self,
        debt_id: str,
        transaction_id: str,
        amount: Decimal,
        new_balance: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.debt_payment_applied(
            debt_id=debt_id,
            transaction_id=transaction_id,
            amount=amount,
            new_balance=new_balance,
            correlation_id=correlation_id,
        ))

    async def log_income_adjusted(
        self,
        old_income: Decimal,
        new_income: Decimal,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.income_adjusted(
            old_income=old_income,
            new_income=new_income,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_weekend_cap_adjusted(
        self,
        old_cap: Decimal,
        new_cap: Decimal,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.weekend_cap_adjusted(
            old_cap=old_cap,
            new_cap=new_cap,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_stats_recomputed(
        self,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.stats_recomputed(
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_name_created(
        self,
        kind: str,
        name: str,
        correlation_id: UUID,
    ) -> None:
        """Log a new category or payment concept."""
        await self.log(AuditEventBuilder.name_created(
            kind=kind,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_budget_saved(
        self,
        budget_id: str,
        category: str,
        limit: Decimal,
        created: bool,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.budget_saved(
            budget_id=budget_id,
            category=category,
            limit=limit,
            created=created,
            correlation_id=correlation_id,
        ))

    async def log_scheduled_payment_created(
        self,
        payment_id: str,
        concept: str,
        amount: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.scheduled_payment_created(
            payment_id=payment_id,
            concept=concept,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_scheduled_payment_updated(
        self,
        payment_id: str,
        changes: dict[str, Any],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.scheduled_payment_updated(
            payment_id=payment_id,
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_scheduled_payment_deleted(
        self,
        payment_id: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.scheduled_payment_deleted(
            payment_id=payment_id,
            correlation_id=correlation_id,
        ))

    async def log_contribution_registered(
        self,
        contribution_id: str,
        amount: Decimal,
        btc_amount: Optional[Decimal],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.contribution_registered(
            contribution_id=contribution_id,
            amount=amount,
            btc_amount=btc_amount,
            correlation_id=correlation_id,
        ))

    async def log_contribution_refused(
        self,
        reason: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a contribution blocked by the eligibility gate."""
        await self.log(AuditEventBuilder.contribution_refused(
            reason=reason,
            message=message,
            correlation_id=correlation_id,
        ))

    async def log_simulation_applied(
        self,
        debt_id: str,
        amount: Decimal,
        status: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.simulation_applied(
            debt_id=debt_id,
            amount=amount,
            status=status,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        form: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log validation failure."""
        await self.log(AuditEventBuilder.validation_failed(
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed store call."""
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a contribution).
    Pass it through all subsequent operations.
    """
    return uuid4()
