"""
Derived Statistics

Keeps the DashboardStats record consistent with the transaction and debt
lists. Everything here is a pure function of its inputs.

DESIGN DECISION: Derived fields are recomputed from the full record set
rather than maintained as running counters. Optimistic deltas exist
only for the fields that have no recompute rule (weekend spending,
BTC totals); every other field is overwritten by the next recompute,
so the two can never double-count.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.finance import (
    BtcContribution,
    DashboardStats,
    Debt,
    Transaction,
)


ZERO = Decimal("0")


def total_debt(debts: Iterable[Debt]) -> Decimal:
    """Sum of current balances."""
    return sum((debt.current_balance for debt in debts), ZERO)


def total_outflows(
    transactions: Iterable[Transaction],
    all_transactions_are_outflows: bool = True,
    income_category: str = "Ingreso",
) -> Decimal:
    """
    Net amount that leaves available cash.

    With `all_transactions_are_outflows` every amount is deducted,
    including income-category ones. Without it, income-category
    transactions add back instead.
    """
    total = ZERO
    for tx in transactions:
        if not all_transactions_are_outflows and tx.category == income_category:
            total -= tx.amount
        else:
            total += tx.amount
    return total


def available_cash(
    transactions: Iterable[Transaction],
    monthly_income: Decimal,
    all_transactions_are_outflows: bool = True,
    income_category: str = "Ingreso",
) -> Decimal:
    """Monthly income minus every transaction, not month-scoped."""
    return monthly_income - total_outflows(
        transactions,
        all_transactions_are_outflows=all_transactions_are_outflows,
        income_category=income_category,
    )


class StatsEngine:
    """
    Computes patches for the dashboard statistics record.

    Every method returns a dict of changed fields; the caller decides
    when to write it. An empty dict means nothing to write.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def derived_values(
        self,
        stats: DashboardStats,
        transactions: list[Transaction],
        debts: list[Debt],
    ) -> dict[str, Decimal]:
        """The recomputable fields, from scratch."""
        return {
            "total_debt": total_debt(debts),
            "available_cash": available_cash(
                transactions,
                stats.monthly_income,
                all_transactions_are_outflows=self._settings.all_transactions_are_outflows,
                income_category=self._settings.income_category,
            ),
        }

    def recompute(
        self,
        stats: DashboardStats,
        transactions: list[Transaction],
        debts: list[Debt],
    ) -> dict[str, Any]:
        """
        Patch of derived fields whose computed value differs from the stored one.

        Idempotent: applying the patch and recomputing yields an empty patch.
        """
        patch = {}
        for field, value in self.derived_values(stats, transactions, debts).items():
            if getattr(stats, field) != value:
                patch[field] = value
        return patch

    @staticmethod
    def transaction_created_patch(
        stats: DashboardStats,
        transaction: Transaction,
    ) -> dict[str, Any]:
        """Immediate effect of a new transaction."""
        patch: dict[str, Any] = {
            "available_cash": stats.available_cash - transaction.amount,
        }
        if transaction.is_weekend:
            patch["weekend_spent"] = stats.weekend_spent + transaction.amount
        return patch

    @staticmethod
    def income_adjustment_patch(
        stats: DashboardStats,
        new_income: Decimal,
    ) -> dict[str, Any]:
        """Replace monthly income and carry the delta into available cash."""
        delta = new_income - stats.monthly_income
        return {
            "monthly_income": new_income,
            "available_cash": stats.available_cash + delta,
        }

    @staticmethod
    def weekend_cap_patch(new_cap: Decimal) -> dict[str, Any]:
        return {"weekend_cap": new_cap}

    @staticmethod
    def contribution_patch(
        stats: DashboardStats,
        contribution: BtcContribution,
    ) -> dict[str, Any]:
        """Ledger totals after a contribution, plus the cash it consumes."""
        return {
            "btc_total_contributed": stats.btc_total_contributed + contribution.amount,
            "btc_accumulated": stats.btc_accumulated + (contribution.btc_amount or ZERO),
            "available_cash": stats.available_cash - contribution.amount,
        }
