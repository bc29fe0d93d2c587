"""
Core Data Models for Finance Tracker

These models define the strict schemas for all records flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Expose camelCase aliases alongside the snake_case persisted names

DESIGN DECISION: We use Pydantic v2 with Decimal for every money value.
Record ids are opaque strings handed out by the store.
"""

import datetime
import math
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


DASHBOARD_STATS_ID = "dashboard"

ONE_DECIMAL = Decimal("0.1")


def new_record_id() -> str:
    """Generate an opaque record identifier."""
    return uuid4().hex


def name_key(name: str) -> str:
    """Comparison key for category and concept names: trimmed, case-folded."""
    return name.strip().casefold()


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionCategory(str, Enum):
    """
    Built-in transaction categories.

    The category list is an open set: users add their own names on top
    of these, so Transaction.category stays a plain string.
    """
    ESSENTIAL = "Esencial"
    VARIABLE = "Variable"
    WEEKEND = "Fin de Semana"
    DEBT = "Pago de Deuda"
    INCOME = "Ingreso"


class TransactionStatus(str, Enum):
    """Categorization status of a transaction."""
    CATEGORIZED = "categorized"
    PENDING = "pending"


class ScheduledPaymentType(str, Enum):
    """Kind of scheduled obligation."""
    MINIMUM = "minimum"
    EXTRA = "extra"


class ScheduledPaymentStatus(str, Enum):
    """Payment status for a scheduled payment."""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class RecordModel(BaseModel):
    """Base for every persisted record and form draft."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionDraft(RecordModel):
    """
    Transaction form data, before it is stored.

    Both the "register expense" form and the simulation-apply flow
    produce one of these.
    """
    date: datetime.date = Field(default_factory=datetime.date.today)
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Free-text description"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in local currency, always positive"
    )
    category: str = Field(
        default=TransactionCategory.VARIABLE.value,
        min_length=1,
        max_length=60,
    )
    is_weekend: bool = False
    debt_id: Optional[str] = Field(
        default=None,
        description="Debt this payment is applied to, if any"
    )


class Transaction(TransactionDraft):
    """A stored transaction. Amount is an outflow unless the rule set says otherwise."""

    id: str = Field(default_factory=new_record_id)
    status: TransactionStatus = TransactionStatus.CATEGORIZED


# =============================================================================
# DEBTS
# =============================================================================

class DebtDraft(RecordModel):
    """Debt creation form. Balances default to the initial balance."""

    name: str = Field(..., min_length=1, max_length=100)
    initial_balance: Decimal = Field(..., ge=0)
    current_balance: Optional[Decimal] = Field(default=None, ge=0)
    monthly_minimum: Decimal = Field(default=Decimal("0"), ge=0)
    real_payment: Optional[Decimal] = Field(default=None, ge=0)
    priority: int = Field(default=1, ge=1, description="1 = highest priority")
    due_date: datetime.date

    @model_validator(mode='after')
    def fill_defaults(self) -> 'DebtDraft':
        """Default the balance and real payment, and check their relation."""
        if self.current_balance is None:
            self.current_balance = self.initial_balance
        if self.real_payment is None:
            self.real_payment = self.monthly_minimum
        if self.current_balance > self.initial_balance:
            raise ValueError("Current balance cannot exceed initial balance")
        return self


class Debt(RecordModel):
    """
    A debt being paid off.

    Priority ranks payoff order, avalanche style: priority 1 first.
    """

    id: str = Field(default_factory=new_record_id)
    name: str = Field(..., min_length=1, max_length=100)
    initial_balance: Decimal = Field(..., ge=0)
    current_balance: Decimal = Field(..., ge=0)
    monthly_minimum: Decimal = Field(default=Decimal("0"), ge=0)
    real_payment: Decimal = Field(default=Decimal("0"), ge=0)
    priority: int = Field(default=1, ge=1)
    due_date: datetime.date

    @property
    def paid_off_percent(self) -> Decimal:
        """Share of the initial balance already paid, one decimal."""
        if self.initial_balance <= 0:
            return Decimal("100.0")
        percent = (1 - self.current_balance / self.initial_balance) * 100
        return percent.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)

    @property
    def payments_remaining(self) -> int:
        """Payments of real_payment size still needed to clear the balance."""
        if self.real_payment <= 0:
            return 0
        return math.ceil(self.current_balance / self.real_payment)


# =============================================================================
# BUDGETS
# =============================================================================

class CategoryBudget(RecordModel):
    """
    Monthly limit for a category.

    `spent` is always recomputed from the current month's transactions.
    `has_limit` is False for synthetic entries of categories without a
    declared budget.
    """

    id: str = Field(default_factory=new_record_id)
    category: str = Field(..., min_length=1, max_length=60)
    limit: Decimal = Field(default=Decimal("0"), ge=0)
    spent: Decimal = Field(default=Decimal("0"))
    has_limit: bool = True

    @property
    def usage_percent(self) -> Decimal:
        """Spent as a percentage of the limit (0 without a limit)."""
        if self.limit <= 0:
            return Decimal("0")
        return self.spent / self.limit * 100


# =============================================================================
# SCHEDULED PAYMENTS
# =============================================================================

class ScheduledPaymentDraft(RecordModel):
    """Scheduled payment form. New payments always start as pending."""

    date: datetime.date
    concept: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)
    type: ScheduledPaymentType = ScheduledPaymentType.MINIMUM
    notes: Optional[str] = Field(default=None, max_length=500)


class ScheduledPayment(ScheduledPaymentDraft):
    """A future or past obligation tied to a payment concept."""

    id: str = Field(default_factory=new_record_id)
    status: ScheduledPaymentStatus = ScheduledPaymentStatus.PENDING

    @property
    def is_minimum(self) -> bool:
        return self.type == ScheduledPaymentType.MINIMUM


# =============================================================================
# INVESTMENTS
# =============================================================================

class BtcContributionDraft(RecordModel):
    """BTC contribution form."""

    date: datetime.date = Field(default_factory=datetime.date.today)
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount invested, in local currency"
    )
    btc_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="BTC acquired, if known"
    )
    notes: Optional[str] = Field(default=None, max_length=500)


class BtcContribution(BtcContributionDraft):
    """Append-only ledger entry of an investment contribution."""

    id: str = Field(default_factory=new_record_id)


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardStats(RecordModel):
    """
    The single dashboard-statistics record.

    Most fields are derived at read time (see finance_tracker.engine.stats)
    rather than trusted as stored truth.
    """

    id: str = Field(default=DASHBOARD_STATS_ID)
    available_cash: Decimal = Decimal("0")
    total_debt: Decimal = Decimal("0")
    weekend_spent: Decimal = Decimal("0")
    weekend_cap: Decimal = Decimal("0")
    savings_progress: Decimal = Decimal("0")
    monthly_income: Decimal = Decimal("0")
    btc_target_monthly: Decimal = Decimal("0")
    btc_total_contributed: Decimal = Decimal("0")
    btc_accumulated: Decimal = Decimal("0")

    @property
    def weekend_usage_percent(self) -> Decimal:
        """Weekend spending as a percentage of the cap, capped at 100."""
        if self.weekend_cap <= 0:
            return Decimal("0")
        return min(Decimal("100"), self.weekend_spent / self.weekend_cap * 100)

    @property
    def weekend_status(self) -> str:
        return "exceeded" if self.weekend_spent > self.weekend_cap else "ok"
