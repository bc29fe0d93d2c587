"""
Main Orchestrator for Finance Tracker

This module ties together all the components and defines the flow
every user action goes through:

    validate → write → re-fetch → recompute

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing form validation
- Every mutation ends with a full re-fetch and an idempotent recompute,
  so optimistic deltas can never drift from the record set
- The in-memory snapshot is replaced only after a successful re-fetch
- Every step is audited

A FinanceTracker is one user session. Its operations are meant to be
awaited one at a time; nothing here is shared between sessions.
"""

import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, Field, ValidationError
from pydantic_core import to_jsonable_python

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.config import AppSettings, Settings, get_settings
from finance_tracker.engine import (
    BudgetOverview,
    InvestmentEligibility,
    InvestmentGate,
    PaymentSimulation,
    SimulationError,
    StatsEngine,
    balance_after_payment,
    build_budget_overview,
    build_payment_draft,
    linked_debts,
    simulable_debts,
    simulate_extra_payment,
    upcoming_payments,
)
from finance_tracker.models.finance import (
    BtcContribution,
    BtcContributionDraft,
    CategoryBudget,
    DashboardStats,
    Debt,
    DebtDraft,
    ScheduledPayment,
    ScheduledPaymentDraft,
    ScheduledPaymentStatus,
    Transaction,
    TransactionDraft,
    name_key,
)
from finance_tracker.notifications import NotificationCenter
from finance_tracker.services.storage import (
    FinanceRepository,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    StorageError,
)
from finance_tracker.validation import (
    FormValidator,
    InvalidInputError,
    ValidationIssue,
    ValidationResult,
    schema_issues,
)


logger = structlog.get_logger(__name__)


class RecordNotFoundError(Exception):
    """The id given by the caller is not in the current snapshot."""
    pass


class SessionNotLoadedError(Exception):
    """The session was read before its first successful load."""
    pass


class InvestmentNotPermittedError(Exception):
    """The eligibility gate refused a contribution."""

    def __init__(self, eligibility: InvestmentEligibility):
        self.eligibility = eligibility
        super().__init__(eligibility.message)


class TrackerSnapshot(BaseModel):
    """Everything fetched from the store in one pass."""

    transactions: list[Transaction] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)
    budgets: list[CategoryBudget] = Field(default_factory=list)
    scheduled_payments: list[ScheduledPayment] = Field(default_factory=list)
    contributions: list[BtcContribution] = Field(default_factory=list)
    stats: DashboardStats = Field(default_factory=DashboardStats)
    categories: list[str] = Field(default_factory=list)
    payment_concepts: list[str] = Field(default_factory=list)


class FinanceTracker:
    """
    One user session over the record store.

    Flow for every mutation:
    1. Validate → reject with InvalidInputError before any store call
    2. Write → the record plus any verified deltas
    3. Re-fetch → load every collection again
    4. Recompute → persist derived stats only if they changed

    If a store call fails the snapshot stays as it was, an error
    notification is raised, and the StorageError propagates.
    """

    def __init__(
        self,
        repository: FinanceRepository,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
        gate: Optional[InvestmentGate] = None,
        notifications: Optional[NotificationCenter] = None,
        validator: Optional[FormValidator] = None,
    ):
        self._repository = repository
        self._audit = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        self._gate = gate or InvestmentGate()
        self._notifications = notifications or NotificationCenter(
            ttl_seconds=self._settings.notification_ttl_seconds
        )
        self._validator = validator or FormValidator(self._settings)
        self._stats_engine = StatsEngine(self._settings)
        self._snapshot = TrackerSnapshot()
        self._loaded = False

    @property
    def snapshot(self) -> TrackerSnapshot:
        return self._snapshot

    @property
    def notifications(self) -> NotificationCenter:
        return self._notifications

    @property
    def validator(self) -> FormValidator:
        return self._validator

    # -------------------------------------------------------------------------
    # Loading and sync
    # -------------------------------------------------------------------------

    async def _fetch_snapshot(self) -> TrackerSnapshot:
        repo = self._repository
        return TrackerSnapshot(
            transactions=await repo.list_transactions(),
            debts=await repo.list_debts(),
            budgets=await repo.list_budgets(),
            scheduled_payments=await repo.list_scheduled_payments(),
            contributions=await repo.list_contributions(),
            stats=await repo.get_stats(),
            categories=await repo.get_categories(),
            payment_concepts=await repo.get_payment_concepts(),
        )

    async def _sync(self, correlation_id: Optional[UUID] = None) -> TrackerSnapshot:
        """Re-fetch everything, persist changed derived stats, swap the snapshot."""
        snapshot = await self._fetch_snapshot()

        patch = self._stats_engine.recompute(
            snapshot.stats, snapshot.transactions, snapshot.debts
        )
        if patch:
            stats = await self._repository.update_stats(patch)
            snapshot = snapshot.model_copy(update={"stats": stats})
            await self._audit.log_stats_recomputed(patch, correlation_id)

        self._snapshot = snapshot
        self._loaded = True
        return snapshot

    async def load(self) -> TrackerSnapshot:
        """Initial load of the session."""
        try:
            return await self._sync()
        except StorageError as e:
            await self._store_failed("load your data", e)
            raise

    async def refresh(self) -> TrackerSnapshot:
        return await self.load()

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    def _require_loaded(self) -> TrackerSnapshot:
        if not self._loaded:
            raise SessionNotLoadedError("Load the session before reading derived views")
        return self._snapshot

    # -------------------------------------------------------------------------
    # Failure handling
    # -------------------------------------------------------------------------

    async def _store_failed(
        self,
        action: str,
        error: StorageError,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._audit.log_storage_error(action, str(error), correlation_id)
        self._notifications.error(f"Could not {action}. Please try again.")

    async def _check(self, result: ValidationResult, correlation_id: UUID) -> None:
        """Raise InvalidInputError for a result with errors."""
        if not result.is_valid:
            await self._audit.log_validation_failed(
                form=result.form,
                issues=result.issue_dicts(),
                correlation_id=correlation_id,
            )
            raise InvalidInputError(result)

    def _find(self, records: list, record_id: str, label: str):
        for record in records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(f"{label} not found: {record_id}")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def _write_transaction(
        self,
        transaction: Transaction,
        correlation_id: UUID,
    ) -> Transaction:
        """Store a transaction and apply its immediate effects."""
        repo = self._repository
        saved = await repo.add_transaction(transaction)
        await self._audit.log_transaction_created(
            transaction_id=saved.id,
            description=saved.description,
            amount=saved.amount,
            category=saved.category,
            correlation_id=correlation_id,
        )

        stats = await repo.get_stats()
        await repo.update_stats(StatsEngine.transaction_created_patch(stats, saved))

        for debt in linked_debts(saved, await repo.list_debts(), self._settings):
            new_balance = balance_after_payment(debt, saved.amount)
            await repo.update_debt(debt.id, {"current_balance": new_balance})
            await self._audit.log_debt_payment_applied(
                debt_id=debt.id,
                transaction_id=saved.id,
                amount=saved.amount,
                new_balance=new_balance,
                correlation_id=correlation_id,
            )

        return saved

    async def create_transaction(
        self,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Register a transaction.

        Debt-payment transactions linked to a debt also pay it down.
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        snapshot = self._snapshot
        await self._check(
            self._validator.validate_transaction(
                draft, snapshot.categories, [d.id for d in snapshot.debts]
            ),
            correlation_id,
        )

        transaction = Transaction.model_validate(draft.model_dump())
        try:
            saved = await self._write_transaction(transaction, correlation_id)
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("save the transaction", e, correlation_id)
            raise

        self._notifications.success("Transaction registered")
        return saved

    async def update_transaction(
        self,
        transaction_id: str,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Edit a transaction.

        Edits don't replay debt or weekend deltas; the re-fetch and
        recompute that follow bring available cash back in line.
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        snapshot = self._snapshot
        existing = self._find(snapshot.transactions, transaction_id, "Transaction")
        await self._check(
            self._validator.validate_transaction(
                draft, snapshot.categories, [d.id for d in snapshot.debts]
            ),
            correlation_id,
        )

        changes = {
            field: value
            for field, value in draft.model_dump().items()
            if getattr(existing, field) != value
        }
        if not changes:
            return existing

        try:
            updated = await self._repository.update_transaction(transaction_id, changes)
            await self._audit.log_transaction_updated(
                transaction_id=transaction_id,
                changes=to_jsonable_python(changes),
                correlation_id=correlation_id,
            )
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("update the transaction", e, correlation_id)
            raise

        self._notifications.success("Transaction updated")
        return updated

    # -------------------------------------------------------------------------
    # Debts
    # -------------------------------------------------------------------------

    async def add_debt(
        self,
        draft: DebtDraft,
        correlation_id: Optional[UUID] = None,
    ) -> Debt:
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        await self._check(
            self._validator.validate_debt(draft, [d.name for d in self._snapshot.debts]),
            correlation_id,
        )

        debt = Debt.model_validate(draft.model_dump())
        try:
            saved = await self._repository.add_debt(debt)
            await self._audit.log_debt_created(
                debt_id=saved.id,
                name=saved.name,
                balance=saved.current_balance,
                correlation_id=correlation_id,
            )
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("save the debt", e, correlation_id)
            raise

        self._notifications.success(f"Debt {saved.name} added")
        return saved

    async def adjust_debt_balance(
        self,
        debt_id: str,
        new_balance: Decimal,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> Debt:
        """Manual balance correction outside transaction history."""
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        debt = self._find(self._snapshot.debts, debt_id, "Debt")
        await self._check(
            self._validator.validate_adjustment("current_balance", new_balance, reason),
            correlation_id,
        )

        try:
            updated = await self._repository.update_debt(
                debt_id, {"current_balance": new_balance}
            )
            await self._audit.log_debt_balance_adjusted(
                debt_id=debt_id,
                old_balance=debt.current_balance,
                new_balance=new_balance,
                reason=reason.strip(),
                correlation_id=correlation_id,
            )
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("adjust the debt balance", e, correlation_id)
            raise

        self._notifications.success(f"Balance of {debt.name} adjusted")
        return updated

    # -------------------------------------------------------------------------
    # Dashboard corrections
    # -------------------------------------------------------------------------

    async def adjust_monthly_income(
        self,
        new_income: Decimal,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> DashboardStats:
        """Replace monthly income; the delta carries into available cash."""
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        await self._check(
            self._validator.validate_adjustment(
                "monthly_income", new_income, reason, allow_zero=False
            ),
            correlation_id,
        )

        try:
            stats = await self._repository.get_stats()
            await self._repository.update_stats(
                StatsEngine.income_adjustment_patch(stats, new_income)
            )
            await self._audit.log_income_adjusted(
                old_income=stats.monthly_income,
                new_income=new_income,
                reason=reason.strip(),
                correlation_id=correlation_id,
            )
            snapshot = await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("adjust the monthly income", e, correlation_id)
            raise

        self._notifications.success("Monthly income updated")
        return snapshot.stats

    async def adjust_weekend_cap(
        self,
        new_cap: Decimal,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> DashboardStats:
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        await self._check(
            self._validator.validate_adjustment("weekend_cap", new_cap, reason),
            correlation_id,
        )

        try:
            stats = await self._repository.get_stats()
            await self._repository.update_stats(StatsEngine.weekend_cap_patch(new_cap))
            await self._audit.log_weekend_cap_adjusted(
                old_cap=stats.weekend_cap,
                new_cap=new_cap,
                reason=reason.strip(),
                correlation_id=correlation_id,
            )
            snapshot = await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("adjust the weekend cap", e, correlation_id)
            raise

        self._notifications.success("Weekend cap updated")
        return snapshot.stats

    # -------------------------------------------------------------------------
    # Categories, concepts and budgets
    # -------------------------------------------------------------------------

    async def _add_name(
        self,
        kind: str,
        name: str,
        existing: list[str],
        correlation_id: UUID,
    ) -> bool:
        await self._check(self._validator.validate_new_name(kind, name, existing), correlation_id)

        add = (
            self._repository.add_category
            if kind == "category"
            else self._repository.add_payment_concept
        )
        try:
            added = await add(name)
            if added:
                await self._audit.log_name_created(kind, name.strip(), correlation_id)
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed(f"save the {kind.replace('_', ' ')}", e, correlation_id)
            raise

        if added:
            self._notifications.success(f"{name.strip()} created")
        return added

    async def add_category(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Add a category name. Returns False if it already existed."""
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()
        return await self._add_name("category", name, self._snapshot.categories, correlation_id)

    async def add_payment_concept(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()
        return await self._add_name(
            "payment_concept", name, self._snapshot.payment_concepts, correlation_id
        )

    async def save_budget(
        self,
        category: str,
        limit: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> CategoryBudget:
        """Set the monthly limit of a category, declaring its budget if needed."""
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        await self._check(self._validator.validate_budget(category, limit), correlation_id)

        existing = next(
            (b for b in self._snapshot.budgets if name_key(b.category) == name_key(category)),
            None,
        )
        try:
            if existing is not None:
                saved = await self._repository.update_budget(existing.id, {"limit": limit})
            else:
                saved = await self._repository.add_budget(
                    CategoryBudget(category=category.strip(), limit=limit)
                )
            await self._audit.log_budget_saved(
                budget_id=saved.id,
                category=saved.category,
                limit=limit,
                created=existing is None,
                correlation_id=correlation_id,
            )
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("save the budget", e, correlation_id)
            raise

        self._notifications.success(f"Budget for {saved.category} saved")
        return saved

    def budget_overview(self, today: Optional[datetime.date] = None) -> BudgetOverview:
        snapshot = self._require_loaded()
        return build_budget_overview(
            stats=snapshot.stats,
            budgets=snapshot.budgets,
            categories=snapshot.categories,
            transactions=snapshot.transactions,
            debts=snapshot.debts,
            today=today,
            settings=self._settings,
        )

    # -------------------------------------------------------------------------
    # Scheduled payments
    # -------------------------------------------------------------------------

    async def create_scheduled_payment(
        self,
        draft: ScheduledPaymentDraft,
        correlation_id: Optional[UUID] = None,
    ) -> ScheduledPayment:
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        await self._check(
            self._validator.validate_scheduled_payment(draft, self._snapshot.payment_concepts),
            correlation_id,
        )

        payment = ScheduledPayment.model_validate(draft.model_dump())
        try:
            saved = await self._repository.add_scheduled_payment(payment)
            await self._audit.log_scheduled_payment_created(
                payment_id=saved.id,
                concept=saved.concept,
                amount=saved.amount,
                correlation_id=correlation_id,
            )
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("save the scheduled payment", e, correlation_id)
            raise

        self._notifications.success("Payment scheduled")
        return saved

    async def update_scheduled_payment(
        self,
        payment_id: str,
        correlation_id: Optional[UUID] = None,
        **changes: Any,
    ) -> ScheduledPayment:
        """
        Edit fields of a scheduled payment (date, concept, amount, type,
        status, notes).
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        existing = self._find(self._snapshot.scheduled_payments, payment_id, "Scheduled payment")

        unknown = set(changes) - (set(ScheduledPayment.model_fields) - {"id"})
        if unknown:
            await self._check(
                ValidationResult(
                    form="scheduled_payment",
                    issues=[
                        ValidationIssue(
                            field=field,
                            issue_type="unknown",
                            message=f"Unknown field: {field}",
                            severity="error",
                        )
                        for field in sorted(unknown)
                    ],
                ),
                correlation_id,
            )

        try:
            updated = ScheduledPayment.model_validate({**existing.model_dump(), **changes})
        except ValidationError as e:
            result = ValidationResult(form="scheduled_payment", issues=schema_issues(e))
            await self._check(result, correlation_id)
            raise
        await self._check(
            self._validator.validate_scheduled_payment(updated, self._snapshot.payment_concepts),
            correlation_id,
        )

        patch = {
            field: getattr(updated, field)
            for field in changes
            if getattr(existing, field) != getattr(updated, field)
        }
        if not patch:
            return existing

        try:
            saved = await self._repository.update_scheduled_payment(payment_id, patch)
            await self._audit.log_scheduled_payment_updated(
                payment_id=payment_id,
                changes=to_jsonable_python(patch),
                correlation_id=correlation_id,
            )
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("update the scheduled payment", e, correlation_id)
            raise

        self._notifications.success("Scheduled payment updated")
        return saved

    async def mark_payment_paid(
        self,
        payment_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> ScheduledPayment:
        return await self.update_scheduled_payment(
            payment_id,
            correlation_id=correlation_id,
            status=ScheduledPaymentStatus.PAID,
        )

    async def delete_scheduled_payment(
        self,
        payment_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        self._find(self._snapshot.scheduled_payments, payment_id, "Scheduled payment")

        try:
            deleted = await self._repository.delete_scheduled_payment(payment_id)
            if deleted:
                await self._audit.log_scheduled_payment_deleted(payment_id, correlation_id)
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("delete the scheduled payment", e, correlation_id)
            raise

        if not deleted:
            raise RecordNotFoundError(f"Scheduled payment not found: {payment_id}")
        self._notifications.success("Scheduled payment deleted")

    def upcoming_payments(self, limit: int = 10) -> list[ScheduledPayment]:
        return upcoming_payments(self._require_loaded().scheduled_payments, limit=limit)

    # -------------------------------------------------------------------------
    # Payoff simulation
    # -------------------------------------------------------------------------

    def simulation_candidates(self) -> list[Debt]:
        return simulable_debts(self._require_loaded().debts, self._settings.max_simulable_priority)

    def simulate_extra_payment(self, debt_id: str, amount: Decimal) -> PaymentSimulation:
        """Project an extra payment against current available cash. Writes nothing."""
        snapshot = self._require_loaded()
        debt = self._find(snapshot.debts, debt_id, "Debt")
        return simulate_extra_payment(
            debt, amount, snapshot.stats.available_cash, self._settings
        )

    async def apply_simulation(
        self,
        simulation: PaymentSimulation,
        today: Optional[datetime.date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> TransactionDraft:
        """
        Turn an accepted simulation into a pre-filled transaction form.

        The draft still has to be submitted through create_transaction.

        Raises:
            SimulationError: If the simulation is invalid
        """
        correlation_id = correlation_id or create_correlation_id()
        draft = build_payment_draft(simulation, today=today, settings=self._settings)
        await self._audit.log_simulation_applied(
            debt_id=simulation.debt_id,
            amount=simulation.amount,
            status=simulation.status.value,
            correlation_id=correlation_id,
        )
        return draft

    # -------------------------------------------------------------------------
    # Investments
    # -------------------------------------------------------------------------

    def investment_status(
        self,
        period: Optional[tuple[int, int]] = None,
    ) -> InvestmentEligibility:
        snapshot = self._require_loaded()
        return self._gate.evaluate(
            snapshot.stats, snapshot.scheduled_payments, snapshot.debts, period
        )

    async def register_contribution(
        self,
        draft: BtcContributionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> BtcContribution:
        """
        Register a BTC contribution if the eligibility gate allows it.

        Writes the contribution, the ledger totals, then the linked
        investment transaction. These are separate store calls: a failure
        in between leaves the contribution without its transaction.

        Raises:
            InvestmentNotPermittedError: If the gate is closed
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._ensure_loaded()

        eligibility = self.investment_status()
        if not eligibility.is_permitted:
            await self._audit.log_contribution_refused(
                reason=eligibility.reason.value,
                message=eligibility.message,
                correlation_id=correlation_id,
            )
            raise InvestmentNotPermittedError(eligibility)

        await self._check(self._validator.validate_contribution(draft), correlation_id)

        contribution = BtcContribution.model_validate(draft.model_dump())
        repo = self._repository
        try:
            saved = await repo.add_contribution(contribution)
            stats = await repo.get_stats()
            await repo.update_stats(StatsEngine.contribution_patch(stats, saved))
            await self._audit.log_contribution_registered(
                contribution_id=saved.id,
                amount=saved.amount,
                btc_amount=saved.btc_amount,
                correlation_id=correlation_id,
            )

            await self._write_transaction(
                Transaction(
                    date=saved.date,
                    description=f"BTC investment: {saved.notes or 'Contribution'}"[:200],
                    amount=saved.amount,
                    category=self._settings.investment_category,
                    is_weekend=False,
                ),
                correlation_id,
            )
            await self._sync(correlation_id)
        except StorageError as e:
            await self._store_failed("register the contribution", e, correlation_id)
            raise

        self._notifications.success("BTC contribution registered")
        return saved


def create_tracker(settings: Optional[Settings] = None) -> FinanceTracker:
    """
    Factory function to create a tracker session.

    Uses Google Sheets when configured, otherwise (or if Sheets can't be
    configured) an in-memory store for this session only.
    """
    settings = settings or get_settings()
    app_settings = settings.app

    store = None
    audit_storage = None

    if app_settings.storage_backend == "google_sheets":
        try:
            client = GoogleSheetsClient(settings.google_sheets)
            store = GoogleSheetsRecordStore(client)
            audit_storage = GoogleSheetsAuditStorage(client)
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e), fallback="memory")
            store = None
            audit_storage = None

    if store is None:
        store = (
            InMemoryRecordStore.with_demo_data()
            if app_settings.seed_demo_data
            else InMemoryRecordStore()
        )
        audit_storage = InMemoryAuditStorage()

    return FinanceTracker(
        repository=FinanceRepository(store),
        audit_logger=AuditLogger(audit_storage),
        settings=app_settings,
    )


__all__ = [
    "FinanceTracker",
    "InvalidInputError",
    "InvestmentNotPermittedError",
    "RecordNotFoundError",
    "SessionNotLoadedError",
    "SimulationError",
    "TrackerSnapshot",
    "create_tracker",
]
