"""
Debt Payment Linkage

Decides which debt a debt-payment transaction pays down.

DESIGN DECISION: A transaction names its debt explicitly through
`debt_id`. Matching the description against debt names is a legacy
fallback that must be switched on in settings, and it never overrides
an explicit link.
"""

from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.finance import Debt, Transaction


def total_minimum_payments(debts: Iterable[Debt]) -> Decimal:
    """Sum of monthly minimums across all debts."""
    return sum((debt.monthly_minimum for debt in debts), Decimal("0"))


def balance_after_payment(debt: Debt, amount: Decimal) -> Decimal:
    """Current balance minus a payment, never below zero."""
    return max(Decimal("0"), debt.current_balance - amount)


def _match_by_description(
    transaction: Transaction,
    debts: list[Debt],
    priority_keyword: Optional[str],
) -> list[Debt]:
    description = transaction.description.casefold()
    matched = [debt for debt in debts if debt.name.casefold() in description]

    if priority_keyword and priority_keyword.casefold() in description:
        top = min(debts, key=lambda d: d.priority, default=None)
        if top is not None and top not in matched:
            matched.append(top)

    return matched


def linked_debts(
    transaction: Transaction,
    debts: list[Debt],
    settings: Optional[AppSettings] = None,
) -> list[Debt]:
    """
    Debts whose balance a transaction should decrement.

    Only transactions in the debt-payment category link to anything.
    An explicit `debt_id` that matches no debt links to nothing.
    """
    settings = settings or get_settings().app

    if transaction.category != settings.debt_payment_category:
        return []

    if transaction.debt_id is not None:
        return [debt for debt in debts if debt.id == transaction.debt_id]

    if settings.link_debt_payments_by_description:
        return _match_by_description(transaction, debts, settings.priority_debt_keyword)

    return []
