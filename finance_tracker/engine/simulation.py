"""
Debt Payoff Simulation

Projects the effect of a hypothetical extra payment on one debt.

DESIGN DECISION: A simulation never writes anything. Applying it only
produces a pre-filled TransactionDraft, which goes through the normal
transaction-creation path so its side effects are the same as for any
other debt payment.

No interest is modelled: months saved is the difference in the number
of minimum payments needed before and after the extra payment.
"""

import datetime
import math
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.engine.debts import balance_after_payment
from finance_tracker.models.finance import (
    ONE_DECIMAL,
    Debt,
    TransactionDraft,
)


class SimulationError(Exception):
    """The simulation request itself is not acceptable."""
    pass


class SimulationStatus(str, Enum):
    """Viability of an extra payment against available cash."""
    VALID = "valid"
    WARNING = "warning"
    INVALID = "invalid"


class PaymentSimulation(BaseModel):
    """Projected outcome of an extra payment."""

    debt_id: str
    debt_name: str
    amount: Decimal
    current_balance: Decimal
    new_balance: Decimal
    months_saved: int
    percentage_paid: Decimal
    status: SimulationStatus
    deficit_value: Decimal

    @property
    def can_apply(self) -> bool:
        return self.status != SimulationStatus.INVALID


def simulable_debts(
    debts: list[Debt],
    max_priority: int = 2,
) -> list[Debt]:
    """Debts open to acceleration: the highest priorities only."""
    return [debt for debt in debts if debt.priority <= max_priority]


def months_to_clear(balance: Decimal, monthly_minimum: Decimal) -> int:
    if monthly_minimum <= 0:
        return 0
    return math.ceil(balance / monthly_minimum)


def classify_payment(
    amount: Decimal,
    cash: Decimal,
    warning_ratio: Decimal = Decimal("0.7"),
) -> SimulationStatus:
    """Invalid above available cash, warning above the ratio of it, else valid."""
    if amount > cash:
        return SimulationStatus.INVALID
    if amount > cash * warning_ratio:
        return SimulationStatus.WARNING
    return SimulationStatus.VALID


def simulate_extra_payment(
    debt: Debt,
    amount: Decimal,
    cash: Decimal,
    settings: Optional[AppSettings] = None,
) -> PaymentSimulation:
    """
    Simulate paying `amount` extra on `debt` with `cash` available.

    Raises:
        SimulationError: For negative amounts or debts outside the
            simulable priorities
    """
    settings = settings or get_settings().app

    if amount < 0:
        raise SimulationError("Extra payment amount cannot be negative")
    if debt.priority > settings.max_simulable_priority:
        raise SimulationError(
            f"Only debts with priority {settings.max_simulable_priority} or higher "
            f"can be simulated ({debt.name} has priority {debt.priority})"
        )

    new_balance = balance_after_payment(debt, amount)

    months_saved = (
        months_to_clear(debt.current_balance, debt.monthly_minimum)
        - months_to_clear(new_balance, debt.monthly_minimum)
    )

    if debt.initial_balance > 0:
        percentage_paid = ((1 - new_balance / debt.initial_balance) * 100).quantize(
            ONE_DECIMAL, rounding=ROUND_HALF_UP
        )
    else:
        percentage_paid = Decimal("100.0")

    return PaymentSimulation(
        debt_id=debt.id,
        debt_name=debt.name,
        amount=amount,
        current_balance=debt.current_balance,
        new_balance=new_balance,
        months_saved=max(0, months_saved),
        percentage_paid=percentage_paid,
        status=classify_payment(amount, cash, settings.simulation_warning_ratio),
        deficit_value=amount - cash,
    )


def build_payment_draft(
    simulation: PaymentSimulation,
    today: Optional[datetime.date] = None,
    settings: Optional[AppSettings] = None,
) -> TransactionDraft:
    """
    Pre-fill the transaction form for an accepted simulation.

    Raises:
        SimulationError: If the simulation is invalid or has no amount
    """
    settings = settings or get_settings().app

    if not simulation.can_apply:
        raise SimulationError("This payment would create a deficit and cannot be applied")
    if simulation.amount <= 0:
        raise SimulationError("Nothing to apply: the extra payment amount is zero")

    return TransactionDraft(
        date=today or datetime.date.today(),
        description=f"Extra payment - {simulation.debt_name}",
        amount=simulation.amount,
        category=settings.debt_payment_category,
        is_weekend=False,
        debt_id=simulation.debt_id,
    )
