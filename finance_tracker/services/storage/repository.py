"""
Finance Repository

Typed layer over a RecordStoreInterface. The store speaks plain dicts;
the rest of the system speaks models. This is the only place where
the two meet.
"""

from typing import Any, Optional

import structlog
from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from finance_tracker.models.finance import (
    DASHBOARD_STATS_ID,
    BtcContribution,
    CategoryBudget,
    DashboardStats,
    Debt,
    ScheduledPayment,
    Transaction,
    TransactionCategory,
    name_key,
)
from finance_tracker.services.storage.interface import (
    Collection,
    ConfigKey,
    RecordStoreInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

# Derived at read time, never written
BUDGET_TRANSIENT_FIELDS = {"spent", "has_limit"}


def _to_record(model, exclude: Optional[set[str]] = None) -> dict[str, Any]:
    return model.model_dump(mode="json", exclude=exclude)


def _to_patch(changes: dict[str, Any]) -> dict[str, Any]:
    """Make a patch of model values (Decimal, date, enums) JSON-safe."""
    return to_jsonable_python(changes)


def _parse(model: type[BaseModel], collection: Collection, row: dict[str, Any]):
    """Map a stored row to its model; a row that does not fit is a store failure."""
    try:
        return model.model_validate(row)
    except ValidationError as e:
        raise StorageError(
            f"Unreadable {collection.value} record {row.get('id')}: {e}"
        ) from e


class FinanceRepository:
    """
    Repository for every collection of the tracker.

    Usage:
        repo = FinanceRepository(InMemoryRecordStore.with_demo_data())
        debts = await repo.list_debts()
    """

    def __init__(self, store: RecordStoreInterface):
        self._store = store

    @property
    def store(self) -> RecordStoreInterface:
        return self._store

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> list[Transaction]:
        rows = await self._store.fetch_all(Collection.TRANSACTIONS)
        return [_parse(Transaction, Collection.TRANSACTIONS, row) for row in rows]

    async def add_transaction(self, transaction: Transaction) -> Transaction:
        row = await self._store.insert(Collection.TRANSACTIONS, _to_record(transaction))
        return _parse(Transaction, Collection.TRANSACTIONS, row)

    async def update_transaction(
        self,
        transaction_id: str,
        changes: dict[str, Any],
    ) -> Transaction:
        row = await self._store.update(
            Collection.TRANSACTIONS, transaction_id, _to_patch(changes)
        )
        return _parse(Transaction, Collection.TRANSACTIONS, row)

    # -------------------------------------------------------------------------
    # Debts
    # -------------------------------------------------------------------------

    async def list_debts(self) -> list[Debt]:
        """Debts in payoff order (priority 1 first)."""
        rows = await self._store.fetch_all(Collection.DEBTS)
        debts = [_parse(Debt, Collection.DEBTS, row) for row in rows]
        return sorted(debts, key=lambda d: d.priority)

    async def add_debt(self, debt: Debt) -> Debt:
        row = await self._store.insert(Collection.DEBTS, _to_record(debt))
        return _parse(Debt, Collection.DEBTS, row)

    async def update_debt(self, debt_id: str, changes: dict[str, Any]) -> Debt:
        row = await self._store.update(Collection.DEBTS, debt_id, _to_patch(changes))
        return _parse(Debt, Collection.DEBTS, row)

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(self) -> list[CategoryBudget]:
        """Declared budgets. `spent` is left at zero for the engine to fill."""
        rows = await self._store.fetch_all(Collection.BUDGETS)
        budgets = []
        for row in rows:
            clean = {k: v for k, v in row.items() if k not in BUDGET_TRANSIENT_FIELDS}
            budgets.append(_parse(CategoryBudget, Collection.BUDGETS, clean))
        return budgets

    async def add_budget(self, budget: CategoryBudget) -> CategoryBudget:
        row = await self._store.insert(
            Collection.BUDGETS, _to_record(budget, exclude=BUDGET_TRANSIENT_FIELDS)
        )
        return _parse(CategoryBudget, Collection.BUDGETS, row)

    async def update_budget(self, budget_id: str, changes: dict[str, Any]) -> CategoryBudget:
        patch = {k: v for k, v in changes.items() if k not in BUDGET_TRANSIENT_FIELDS}
        row = await self._store.update(Collection.BUDGETS, budget_id, _to_patch(patch))
        return _parse(CategoryBudget, Collection.BUDGETS, row)

    # -------------------------------------------------------------------------
    # Scheduled payments
    # -------------------------------------------------------------------------

    async def list_scheduled_payments(self) -> list[ScheduledPayment]:
        """Scheduled payments ordered by date."""
        rows = await self._store.fetch_all(Collection.SCHEDULED_PAYMENTS)
        payments = [_parse(ScheduledPayment, Collection.SCHEDULED_PAYMENTS, row) for row in rows]
        return sorted(payments, key=lambda p: p.date)

    async def add_scheduled_payment(self, payment: ScheduledPayment) -> ScheduledPayment:
        row = await self._store.insert(Collection.SCHEDULED_PAYMENTS, _to_record(payment))
        return _parse(ScheduledPayment, Collection.SCHEDULED_PAYMENTS, row)

    async def update_scheduled_payment(
        self,
        payment_id: str,
        changes: dict[str, Any],
    ) -> ScheduledPayment:
        row = await self._store.update(
            Collection.SCHEDULED_PAYMENTS, payment_id, _to_patch(changes)
        )
        return _parse(ScheduledPayment, Collection.SCHEDULED_PAYMENTS, row)

    async def delete_scheduled_payment(self, payment_id: str) -> bool:
        return await self._store.delete(Collection.SCHEDULED_PAYMENTS, payment_id)

    # -------------------------------------------------------------------------
    # BTC contributions
    # -------------------------------------------------------------------------

    async def list_contributions(self) -> list[BtcContribution]:
        """Contributions, newest first."""
        rows = await self._store.fetch_all(Collection.BTC_CONTRIBUTIONS)
        contributions = [_parse(BtcContribution, Collection.BTC_CONTRIBUTIONS, row) for row in rows]
        return sorted(contributions, key=lambda c: c.date, reverse=True)

    async def add_contribution(self, contribution: BtcContribution) -> BtcContribution:
        row = await self._store.insert(Collection.BTC_CONTRIBUTIONS, _to_record(contribution))
        return _parse(BtcContribution, Collection.BTC_CONTRIBUTIONS, row)

    # -------------------------------------------------------------------------
    # Dashboard statistics (singleton)
    # -------------------------------------------------------------------------

    async def get_stats(self) -> DashboardStats:
        """The stats record, or an all-zero one if none was ever written."""
        rows = await self._store.fetch_all(Collection.DASHBOARD_STATS)
        for row in rows:
            if row.get("id") == DASHBOARD_STATS_ID:
                return _parse(DashboardStats, Collection.DASHBOARD_STATS, row)
        if rows:
            # Foreign id: adopt the first row
            return _parse(DashboardStats, Collection.DASHBOARD_STATS, rows[0])
        return DashboardStats()

    async def update_stats(self, changes: dict[str, Any]) -> DashboardStats:
        """Apply a patch to the stats record, creating it on first write."""
        rows = await self._store.fetch_all(Collection.DASHBOARD_STATS)
        if not rows:
            stats = DashboardStats().model_copy(update=changes)
            row = await self._store.insert(Collection.DASHBOARD_STATS, _to_record(stats))
            logger.info("dashboard_stats_created", fields=sorted(changes))
            return _parse(DashboardStats, Collection.DASHBOARD_STATS, row)

        stats_id = next(
            (row["id"] for row in rows if row.get("id") == DASHBOARD_STATS_ID),
            rows[0]["id"],
        )
        row = await self._store.update(
            Collection.DASHBOARD_STATS, stats_id, _to_patch(changes)
        )
        return _parse(DashboardStats, Collection.DASHBOARD_STATS, row)

    # -------------------------------------------------------------------------
    # Open name lists
    # -------------------------------------------------------------------------

    async def get_categories(self) -> list[str]:
        """Category list; the built-in categories until one is saved."""
        stored = await self._store.get_config(ConfigKey.CATEGORIES)
        if stored is None:
            return [category.value for category in TransactionCategory]
        return list(stored)

    async def get_payment_concepts(self) -> list[str]:
        stored = await self._store.get_config(ConfigKey.PAYMENT_CONCEPTS)
        return list(stored or [])

    async def add_category(self, name: str) -> bool:
        return await self._add_unique_name(ConfigKey.CATEGORIES, await self.get_categories(), name)

    async def add_payment_concept(self, name: str) -> bool:
        return await self._add_unique_name(
            ConfigKey.PAYMENT_CONCEPTS, await self.get_payment_concepts(), name
        )

    async def _add_unique_name(self, key: ConfigKey, current: list[str], name: str) -> bool:
        """
        Append a trimmed name unless it already exists ignoring case.

        Returns:
            True if the list grew, False if the name was already present
        """
        name = name.strip()
        if any(name_key(existing) == name_key(name) for existing in current):
            return False
        await self._store.set_config(key, current + [name])
        return True
