"""
Tests for the FinanceTracker session.

Every test runs against the in-memory store seeded with the demo data
set. On load, available cash is recomputed to 12000 - 2166 = 9834.
"""

from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, Settings
from finance_tracker.engine import EligibilityReason, SimulationError
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.finance import (
    BtcContributionDraft,
    DebtDraft,
    ScheduledPaymentDraft,
    ScheduledPaymentStatus,
    TransactionDraft,
)
from finance_tracker.notifications import NotificationKind
from finance_tracker.orchestrator import (
    FinanceTracker,
    InvestmentNotPermittedError,
    RecordNotFoundError,
    SessionNotLoadedError,
    create_tracker,
)
from finance_tracker.services.storage import (
    Collection,
    FinanceRepository,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    StorageError,
)
from finance_tracker.services.storage.demo_data import demo_config, demo_records
from finance_tracker.validation import InvalidInputError


class FailingInsertStore(InMemoryRecordStore):
    """Demo store whose inserts into one collection fail."""

    def __init__(self, failing: Collection):
        super().__init__(records=demo_records(), config=demo_config())
        self._failing = failing

    async def insert(self, collection, record):
        if collection == self._failing:
            raise StorageError("sheet unavailable")
        return await super().insert(collection, record)


def make_tracker(store=None):
    store = store or InMemoryRecordStore.with_demo_data()
    audit_storage = InMemoryAuditStorage()
    tracker = FinanceTracker(
        repository=FinanceRepository(store),
        audit_logger=AuditLogger(audit_storage),
        settings=AppSettings(),
    )
    return tracker, store, audit_storage


def event_types(audit_storage):
    return [event.event_type for event in audit_storage.events]


def debt(tracker, debt_id):
    return next(d for d in tracker.snapshot.debts if d.id == debt_id)


class TestLoad:
    """Initial load recomputes derived stats."""

    @pytest.mark.asyncio
    async def test_available_cash_is_recomputed(self):
        tracker, store, audit_storage = make_tracker()
        snapshot = await tracker.load()

        assert snapshot.stats.available_cash == Decimal("9834")
        assert snapshot.stats.total_debt == Decimal("33500")
        assert AuditEventType.STATS_RECOMPUTED in event_types(audit_storage)

        rows = await store.fetch_all(Collection.DASHBOARD_STATS)
        assert Decimal(rows[0]["available_cash"]) == Decimal("9834")

    @pytest.mark.asyncio
    async def test_second_load_writes_nothing(self):
        tracker, _, audit_storage = make_tracker()
        await tracker.load()
        before = len(audit_storage.events)
        await tracker.refresh()
        assert len(audit_storage.events) == before

    @pytest.mark.asyncio
    async def test_empty_store(self):
        tracker, _, _ = make_tracker(InMemoryRecordStore())
        snapshot = await tracker.load()
        assert snapshot.transactions == []
        assert snapshot.stats.available_cash == Decimal("0")


class TestTransactions:
    """Creating and editing transactions."""

    @pytest.mark.asyncio
    async def test_weekend_transaction(self):
        tracker, _, _ = make_tracker()
        await tracker.create_transaction(TransactionDraft(
            date=date(2026, 4, 25),
            description="Cine",
            amount=Decimal("100"),
            category="Fin de Semana",
            is_weekend=True,
        ))

        stats = tracker.snapshot.stats
        assert stats.weekend_spent == Decimal("520")
        assert stats.available_cash == Decimal("9734")
        assert len(tracker.snapshot.transactions) == 6
        assert tracker.notifications.current.kind == NotificationKind.SUCCESS

    @pytest.mark.asyncio
    async def test_debt_payment_decrements_linked_debt(self):
        tracker, _, audit_storage = make_tracker()
        await tracker.create_transaction(TransactionDraft(
            description="Interbank abono",
            amount=Decimal("500"),
            category="Pago de Deuda",
            debt_id="d2",
        ))

        assert debt(tracker, "d2").current_balance == Decimal("7900")
        assert debt(tracker, "d1").current_balance == Decimal("9600")
        assert tracker.snapshot.stats.total_debt == Decimal("33000")
        assert AuditEventType.DEBT_PAYMENT_APPLIED in event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_overpayment_clamps_balance_at_zero(self):
        tracker, _, _ = make_tracker()
        await tracker.create_transaction(TransactionDraft(
            description="Interbank cancelación",
            amount=Decimal("9000"),
            category="Pago de Deuda",
            debt_id="d2",
        ))
        assert debt(tracker, "d2").current_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_description_alone_links_nothing(self):
        tracker, _, _ = make_tracker()
        await tracker.create_transaction(TransactionDraft(
            description="Pago Interbank (P2)",
            amount=Decimal("380"),
            category="Pago de Deuda",
        ))
        assert debt(tracker, "d2").current_balance == Decimal("8400")

    @pytest.mark.asyncio
    async def test_invalid_transaction_never_reaches_store(self):
        tracker, store, audit_storage = make_tracker()
        await tracker.load()

        with pytest.raises(InvalidInputError):
            await tracker.create_transaction(TransactionDraft(
                description="Vuelo", amount=Decimal("900"), category="Viajes"
            ))

        assert len(await store.fetch_all(Collection.TRANSACTIONS)) == 5
        assert event_types(audit_storage)[-1] == AuditEventType.VALIDATION_FAILED

    @pytest.mark.asyncio
    async def test_update_transaction_recomputes_cash(self):
        tracker, _, audit_storage = make_tracker()
        await tracker.load()
        updated = await tracker.update_transaction("t3", TransactionDraft(
            date=date(2026, 4, 13),
            description="Uber Trip",
            amount=Decimal("40"),
            category="Variable",
        ))

        assert updated.amount == Decimal("40")
        assert tracker.snapshot.stats.available_cash == Decimal("9816")
        assert AuditEventType.TRANSACTION_UPDATED in event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_update_does_not_replay_debt_payment(self):
        tracker, _, _ = make_tracker()
        await tracker.load()
        await tracker.update_transaction("t2", TransactionDraft(
            date=date(2026, 4, 15),
            description="Interbank Mínimo",
            amount=Decimal("400"),
            category="Pago de Deuda",
            debt_id="d2",
        ))
        assert debt(tracker, "d2").current_balance == Decimal("8400")

    @pytest.mark.asyncio
    async def test_update_unknown_transaction(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(RecordNotFoundError):
            await tracker.update_transaction("nope", TransactionDraft(
                description="x", amount=Decimal("1")
            ))


class TestStorageFailures:
    """A failed write keeps the previous snapshot and re-raises."""

    @pytest.mark.asyncio
    async def test_failed_insert(self):
        tracker, _, audit_storage = make_tracker(FailingInsertStore(Collection.TRANSACTIONS))
        snapshot = await tracker.load()

        with pytest.raises(StorageError):
            await tracker.create_transaction(TransactionDraft(
                description="Cine", amount=Decimal("40"), category="Variable"
            ))

        assert tracker.snapshot is snapshot
        notification = tracker.notifications.current
        assert notification.kind == NotificationKind.ERROR
        assert notification.message == "Could not save the transaction. Please try again."
        assert event_types(audit_storage)[-1] == AuditEventType.STORAGE_ERROR

    @pytest.mark.asyncio
    async def test_unreadable_row_on_load(self):
        records = demo_records()
        records[Collection.DEBTS][0]["real_payment"] = None
        tracker, _, audit_storage = make_tracker(
            InMemoryRecordStore(records=records, config=demo_config())
        )

        with pytest.raises(StorageError):
            await tracker.load()

        assert tracker.notifications.current.message == "Could not load your data. Please try again."
        assert event_types(audit_storage)[-1] == AuditEventType.STORAGE_ERROR
        with pytest.raises(SessionNotLoadedError):
            tracker.investment_status()


class TestUnloadedSession:
    """Derived views refuse to answer from an empty snapshot."""

    def test_gate_before_load(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(SessionNotLoadedError):
            tracker.investment_status()

    def test_other_views_before_load(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(SessionNotLoadedError):
            tracker.budget_overview()
        with pytest.raises(SessionNotLoadedError):
            tracker.upcoming_payments()
        with pytest.raises(SessionNotLoadedError):
            tracker.simulation_candidates()
        with pytest.raises(SessionNotLoadedError):
            tracker.simulate_extra_payment("d1", Decimal("100"))

    @pytest.mark.asyncio
    async def test_gate_after_load_reports_pending_minimums(self):
        tracker, _, _ = make_tracker()
        await tracker.load()
        status = tracker.investment_status()
        assert not status.is_permitted
        assert status.reason == EligibilityReason.MINIMUMS_PENDING


class TestDebts:
    """Debt creation and manual corrections."""

    @pytest.mark.asyncio
    async def test_add_debt(self):
        tracker, _, _ = make_tracker()
        saved = await tracker.add_debt(DebtDraft(
            name="Tarjeta BCP",
            initial_balance=Decimal("2000"),
            monthly_minimum=Decimal("150"),
            priority=4,
            due_date=date(2026, 5, 28),
        ))

        assert saved.current_balance == Decimal("2000")
        assert len(tracker.snapshot.debts) == 4
        assert tracker.snapshot.stats.total_debt == Decimal("35500")

    @pytest.mark.asyncio
    async def test_adjust_balance_requires_reason(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(InvalidInputError):
            await tracker.adjust_debt_balance("d1", Decimal("9000"), "  ")
        assert debt(tracker, "d1").current_balance == Decimal("9600")

    @pytest.mark.asyncio
    async def test_adjust_balance(self):
        tracker, _, audit_storage = make_tracker()
        await tracker.adjust_debt_balance("d1", Decimal("9000"), "Bank statement")

        assert debt(tracker, "d1").current_balance == Decimal("9000")
        assert tracker.snapshot.stats.total_debt == Decimal("32900")
        event = next(
            e for e in audit_storage.events
            if e.event_type == AuditEventType.DEBT_BALANCE_ADJUSTED
        )
        assert event.details["reason"] == "Bank statement"


class TestDashboardCorrections:
    """Income and weekend cap adjustments."""

    @pytest.mark.asyncio
    async def test_income_adjustment_moves_cash(self):
        tracker, _, _ = make_tracker()
        stats = await tracker.adjust_monthly_income(Decimal("12500"), "Raise")
        assert stats.monthly_income == Decimal("12500")
        assert stats.available_cash == Decimal("10334")

    @pytest.mark.asyncio
    async def test_income_must_be_positive(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(InvalidInputError):
            await tracker.adjust_monthly_income(Decimal("0"), "Lost job")

    @pytest.mark.asyncio
    async def test_weekend_cap(self):
        tracker, _, _ = make_tracker()
        stats = await tracker.adjust_weekend_cap(Decimal("700"), "Holiday month")
        assert stats.weekend_cap == Decimal("700")
        assert stats.available_cash == Decimal("9834")


class TestNamesAndBudgets:
    """Categories, payment concepts and budget limits."""

    @pytest.mark.asyncio
    async def test_add_category(self):
        tracker, _, _ = make_tracker()
        assert await tracker.add_category("Salud") is True
        assert "Salud" in tracker.snapshot.categories

    @pytest.mark.asyncio
    async def test_duplicate_category_is_a_form_error(self):
        tracker, _, _ = make_tracker()
        await tracker.add_category("Salud")
        size = len(tracker.snapshot.categories)

        with pytest.raises(InvalidInputError) as exc_info:
            await tracker.add_category("salud")

        assert exc_info.value.result.issues[0].issue_type == "duplicate"
        assert len(tracker.snapshot.categories) == size

    @pytest.mark.asyncio
    async def test_add_payment_concept(self):
        tracker, _, _ = make_tracker()
        assert await tracker.add_payment_concept("Gimnasio") is True
        assert "Gimnasio" in tracker.snapshot.payment_concepts

    @pytest.mark.asyncio
    async def test_save_existing_budget_ignores_case(self):
        tracker, _, _ = make_tracker()
        saved = await tracker.save_budget("ocio", Decimal("350"))

        assert saved.id == "b4"
        assert saved.limit == Decimal("350")
        assert len(tracker.snapshot.budgets) == 5

    @pytest.mark.asyncio
    async def test_save_new_budget(self):
        tracker, _, audit_storage = make_tracker()
        await tracker.save_budget("Viajes", Decimal("200"))

        assert len(tracker.snapshot.budgets) == 6
        assert event_types(audit_storage)[-1] == AuditEventType.BUDGET_SAVED

    @pytest.mark.asyncio
    async def test_budget_overview(self):
        tracker, _, _ = make_tracker()
        await tracker.load()
        overview = tracker.budget_overview(today=date(2026, 4, 25))

        assert overview.total_minimum_payments == Decimal("2380")
        names = [b.category for b in overview.budgets]
        assert "Alimentación" in names
        assert "Variable" in names


class TestScheduledPayments:
    """Scheduled payment lifecycle."""

    @pytest.mark.asyncio
    async def test_create_starts_pending(self):
        tracker, _, _ = make_tracker()
        saved = await tracker.create_scheduled_payment(ScheduledPaymentDraft(
            date=date(2026, 6, 1), concept="Alquiler", amount=Decimal("1200")
        ))
        assert saved.status == ScheduledPaymentStatus.PENDING
        assert len(tracker.snapshot.scheduled_payments) == 6

    @pytest.mark.asyncio
    async def test_unknown_concept_is_accepted(self):
        tracker, _, _ = make_tracker()
        saved = await tracker.create_scheduled_payment(ScheduledPaymentDraft(
            date=date(2026, 6, 1), concept="Gimnasio", amount=Decimal("90")
        ))
        assert saved.concept == "Gimnasio"

    @pytest.mark.asyncio
    async def test_mark_paid(self):
        tracker, _, audit_storage = make_tracker()
        paid = await tracker.mark_payment_paid("p1")

        assert paid.status == ScheduledPaymentStatus.PAID
        assert AuditEventType.SCHEDULED_PAYMENT_UPDATED in event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(InvalidInputError):
            await tracker.update_scheduled_payment("p1", colour="red")

    @pytest.mark.asyncio
    async def test_update_rejects_bad_amount(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(InvalidInputError):
            await tracker.update_scheduled_payment("p1", amount=Decimal("-5"))

    @pytest.mark.asyncio
    async def test_delete(self):
        tracker, _, _ = make_tracker()
        await tracker.delete_scheduled_payment("p4")

        assert "p4" not in [p.id for p in tracker.snapshot.scheduled_payments]
        with pytest.raises(RecordNotFoundError):
            await tracker.delete_scheduled_payment("p4")

    @pytest.mark.asyncio
    async def test_upcoming_sorted_by_date(self):
        tracker, _, _ = make_tracker()
        await tracker.load()
        upcoming = tracker.upcoming_payments(limit=3)
        assert [p.id for p in upcoming] == ["p5", "p4", "p1"]


class TestSimulation:
    """From simulation to an applied debt payment."""

    @pytest.mark.asyncio
    async def test_candidates(self):
        tracker, _, _ = make_tracker()
        await tracker.load()
        assert [d.id for d in tracker.simulation_candidates()] == ["d1", "d2"]

    @pytest.mark.asyncio
    async def test_apply_then_submit(self):
        tracker, _, audit_storage = make_tracker()
        await tracker.load()

        simulation = tracker.simulate_extra_payment("d1", Decimal("3000"))
        assert simulation.can_apply

        draft = await tracker.apply_simulation(simulation, today=date(2026, 4, 25))
        assert draft.description == "Extra payment - Scheu Dental (P1)"
        assert debt(tracker, "d1").current_balance == Decimal("9600")

        await tracker.create_transaction(draft)
        assert debt(tracker, "d1").current_balance == Decimal("6600")
        assert tracker.snapshot.stats.available_cash == Decimal("6834")
        assert AuditEventType.SIMULATION_APPLIED in event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_invalid_simulation_cannot_be_applied(self):
        tracker, _, _ = make_tracker()
        await tracker.load()
        simulation = tracker.simulate_extra_payment("d1", Decimal("10000"))

        with pytest.raises(SimulationError):
            await tracker.apply_simulation(simulation)

    @pytest.mark.asyncio
    async def test_low_priority_debt_is_not_simulable(self):
        tracker, _, _ = make_tracker()
        await tracker.load()
        with pytest.raises(SimulationError):
            tracker.simulate_extra_payment("d3", Decimal("100"))


class TestContributions:
    """The eligibility gate in front of BTC contributions."""

    @pytest.mark.asyncio
    async def test_refused_while_minimums_pending(self):
        tracker, store, audit_storage = make_tracker()

        with pytest.raises(InvestmentNotPermittedError) as exc_info:
            await tracker.register_contribution(BtcContributionDraft(amount=Decimal("800")))

        assert exc_info.value.eligibility.reason == EligibilityReason.MINIMUMS_PENDING
        assert len(await store.fetch_all(Collection.BTC_CONTRIBUTIONS)) == 3
        assert event_types(audit_storage)[-1] == AuditEventType.CONTRIBUTION_REFUSED

    @pytest.mark.asyncio
    async def test_registered_once_minimums_are_paid(self):
        tracker, _, _ = make_tracker()
        for payment_id in ("p1", "p2", "p3"):
            await tracker.mark_payment_paid(payment_id)
        assert tracker.investment_status().is_permitted

        await tracker.register_contribution(BtcContributionDraft(
            date=date(2026, 4, 1),
            amount=Decimal("800"),
            btc_amount=Decimal("0.0024"),
            notes="Aporte mensual Abril",
        ))

        snapshot = tracker.snapshot
        assert len(snapshot.contributions) == 4
        assert snapshot.stats.btc_total_contributed == Decimal("11300")
        assert snapshot.stats.btc_accumulated == Decimal("0.0476")
        assert snapshot.stats.available_cash == Decimal("9034")

        linked = next(t for t in snapshot.transactions if t.date == date(2026, 4, 1))
        assert linked.category == "Inversión"
        assert linked.description == "BTC investment: Aporte mensual Abril"


class TestCreateTracker:
    """Factory fallbacks."""

    @pytest.mark.asyncio
    async def test_unconfigured_sheets_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")
        monkeypatch.setenv("SEED_DEMO_DATA", "true")
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)

        tracker = create_tracker(Settings())
        snapshot = await tracker.load()
        assert len(snapshot.debts) == 3

    @pytest.mark.asyncio
    async def test_empty_memory_store(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("SEED_DEMO_DATA", "false")

        tracker = create_tracker(Settings())
        snapshot = await tracker.load()
        assert snapshot.debts == []
