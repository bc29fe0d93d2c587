"""
Budget Aggregation

Merges declared category limits with actual month-to-date spending and
derives the monthly margin, its classification and the alert list.

Nothing here is persisted: `spent` and the alerts are recomputed every
time the overview is built.
"""

import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.engine.debts import total_minimum_payments
from finance_tracker.models.finance import (
    CategoryBudget,
    DashboardStats,
    Debt,
    Transaction,
    name_key,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")


class MarginStatus(str, Enum):
    """Band of the projected monthly margin."""
    HEALTHY = "healthy"
    TIGHT = "tight"
    DEFICIT = "deficit"


class AlertKind(str, Enum):
    WEEKEND = "weekend"
    CATEGORY = "category"
    MARGIN = "margin"


class BudgetAlert(BaseModel):
    """A non-persisted budget warning."""

    kind: AlertKind
    message: str
    category: Optional[str] = None
    percent: Optional[int] = None


class BudgetOverview(BaseModel):
    """Everything the budget view shows, computed in one pass."""

    budgets: list[CategoryBudget] = Field(default_factory=list)
    total_spent: Decimal = ZERO
    total_limit: Decimal = ZERO
    total_minimum_payments: Decimal = ZERO
    monthly_margin: Decimal = ZERO
    margin_status: MarginStatus = MarginStatus.TIGHT
    usage_percent: Decimal = ZERO
    weekend_status: str = "ok"
    alerts: list[BudgetAlert] = Field(default_factory=list)


def _round_percent(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def month_to_date_spending(
    transactions: Iterable[Transaction],
    today: datetime.date,
) -> dict[str, Decimal]:
    """Spend per category for transactions in today's calendar month."""
    spending: dict[str, Decimal] = {}
    for tx in transactions:
        if tx.date.year == today.year and tx.date.month == today.month:
            spending[tx.category] = spending.get(tx.category, ZERO) + tx.amount
    return spending


def merge_budgets(
    budgets: list[CategoryBudget],
    categories: list[str],
    spending: dict[str, Decimal],
) -> list[CategoryBudget]:
    """
    One entry per known category, highest spend first.

    Known categories are the category list followed by any budgeted
    category missing from it. Categories without a declared budget get
    a zero-limit entry with `has_limit=False`. Category names compare
    case-insensitively.
    """
    spent_by_key: dict[str, Decimal] = {}
    for category, amount in spending.items():
        key = name_key(category)
        spent_by_key[key] = spent_by_key.get(key, ZERO) + amount

    budget_by_key = {}
    for budget in budgets:
        budget_by_key.setdefault(name_key(budget.category), budget)

    ordered_names = []
    seen = set()
    for name in list(categories) + [b.category for b in budgets]:
        key = name_key(name)
        if key not in seen:
            seen.add(key)
            ordered_names.append(name)

    merged = []
    for name in ordered_names:
        key = name_key(name)
        spent = spent_by_key.get(key, ZERO)
        existing = budget_by_key.get(key)
        if existing is not None:
            merged.append(existing.model_copy(update={"spent": spent, "has_limit": True}))
        else:
            merged.append(CategoryBudget(
                id=f"virtual-{name}",
                category=name,
                limit=ZERO,
                spent=spent,
                has_limit=False,
            ))

    # sorted() is stable, so equal spends keep list order
    return sorted(merged, key=lambda b: b.spent, reverse=True)


def monthly_margin(
    monthly_income: Decimal,
    total_spent: Decimal,
    total_minimums: Decimal,
) -> Decimal:
    return monthly_income - total_spent - total_minimums


def classify_margin(
    margin: Decimal,
    healthy_threshold: Decimal = Decimal("1000"),
) -> MarginStatus:
    """Step function: above the threshold healthy, down to zero tight, below deficit."""
    if margin > healthy_threshold:
        return MarginStatus.HEALTHY
    if margin >= 0:
        return MarginStatus.TIGHT
    return MarginStatus.DEFICIT


def budget_usage_percent(total_spent: Decimal, total_limit: Decimal) -> Decimal:
    """Spent over limit as a percentage, capped at 100; 0 without limits."""
    if total_limit <= 0:
        return ZERO
    return min(HUNDRED, total_spent / total_limit * 100)


def budget_alerts(
    stats: DashboardStats,
    budgets: list[CategoryBudget],
    margin_status: MarginStatus,
    settings: Optional[AppSettings] = None,
) -> list[BudgetAlert]:
    """
    Alerts in fixed order: weekend, then categories in list order, then margin.
    """
    settings = settings or get_settings().app
    alerts = []

    if stats.weekend_cap > 0:
        ratio = stats.weekend_spent / stats.weekend_cap
        if ratio >= settings.weekend_alert_ratio:
            percent = _round_percent(ratio * 100)
            alerts.append(BudgetAlert(
                kind=AlertKind.WEEKEND,
                message=f"Weekend spending at {percent}% of the cap",
                percent=percent,
            ))

    for budget in budgets:
        if budget.limit <= 0:
            continue
        ratio = budget.spent / budget.limit
        if ratio >= settings.category_alert_ratio:
            percent = _round_percent(ratio * 100)
            alerts.append(BudgetAlert(
                kind=AlertKind.CATEGORY,
                message=f"{budget.category} reached {percent}% of its limit",
                category=budget.category,
                percent=percent,
            ))

    if margin_status == MarginStatus.TIGHT:
        alerts.append(BudgetAlert(
            kind=AlertKind.MARGIN,
            message="Monthly margin is in the yellow zone",
        ))
    elif margin_status == MarginStatus.DEFICIT:
        alerts.append(BudgetAlert(
            kind=AlertKind.MARGIN,
            message="ALERT: projected monthly deficit",
        ))

    return alerts


def build_budget_overview(
    stats: DashboardStats,
    budgets: list[CategoryBudget],
    categories: list[str],
    transactions: list[Transaction],
    debts: list[Debt],
    today: Optional[datetime.date] = None,
    settings: Optional[AppSettings] = None,
) -> BudgetOverview:
    settings = settings or get_settings().app
    today = today or datetime.date.today()

    merged = merge_budgets(budgets, categories, month_to_date_spending(transactions, today))
    total_spent = sum((b.spent for b in merged), ZERO)
    total_limit = sum((b.limit for b in merged), ZERO)
    minimums = total_minimum_payments(debts)

    margin = monthly_margin(stats.monthly_income, total_spent, minimums)
    status = classify_margin(margin, settings.healthy_margin_threshold)

    return BudgetOverview(
        budgets=merged,
        total_spent=total_spent,
        total_limit=total_limit,
        total_minimum_payments=minimums,
        monthly_margin=margin,
        margin_status=status,
        usage_percent=budget_usage_percent(total_spent, total_limit),
        weekend_status=stats.weekend_status,
        alerts=budget_alerts(stats, merged, status, settings),
    )
