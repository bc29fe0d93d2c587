"""
Investment Eligibility Gate

A new BTC contribution is allowed only when three conditions hold, in
this order:
1. No monthly deficit (available cash is not negative)
2. Every minimum scheduled payment is paid
3. Debts are on track

The first failing condition is the one reported to the user.

The "on track" condition has no agreed formula yet. It is a pluggable
predicate; the default always passes. Replace it through the
InvestmentGate constructor, not by editing the gate.
"""

from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import BaseModel

from finance_tracker.models.finance import (
    DashboardStats,
    Debt,
    ScheduledPayment,
    ScheduledPaymentStatus,
)


DebtsOnTrackPredicate = Callable[[list[Debt]], bool]


class EligibilityReason(str, Enum):
    """Why a contribution is (not) permitted."""
    PERMITTED = "permitted"
    DEFICIT = "deficit"
    MINIMUMS_PENDING = "minimums_pending"
    DEBTS_OFF_TRACK = "debts_off_track"


REASON_MESSAGES = {
    EligibilityReason.PERMITTED: "Enabled: all investment rules are met.",
    EligibilityReason.DEFICIT: "Monthly deficit detected. Cover the negative balance first.",
    EligibilityReason.MINIMUMS_PENDING: "There are minimum payments still pending for this month.",
    EligibilityReason.DEBTS_OFF_TRACK: "Debts are not on track yet.",
}


class InvestmentEligibility(BaseModel):
    """Outcome of the gate, with each condition for the checklist view."""

    is_permitted: bool
    reason: EligibilityReason
    message: str
    no_deficit: bool
    minimums_paid: bool
    debts_on_track: bool


def debts_on_track_placeholder(debts: list[Debt]) -> bool:
    # Placeholder until the trend rule is defined
    return True


def minimum_payments(
    payments: Iterable[ScheduledPayment],
    period: Optional[tuple[int, int]] = None,
) -> list[ScheduledPayment]:
    """Minimum-type payments, optionally limited to a (year, month)."""
    selected = [p for p in payments if p.is_minimum]
    if period is not None:
        year, month = period
        selected = [p for p in selected if p.date.year == year and p.date.month == month]
    return selected


class InvestmentGate:
    """Evaluates whether an investment contribution may be registered."""

    def __init__(self, debts_on_track: Optional[DebtsOnTrackPredicate] = None):
        self._debts_on_track = debts_on_track or debts_on_track_placeholder

    def evaluate(
        self,
        stats: DashboardStats,
        payments: list[ScheduledPayment],
        debts: list[Debt],
        period: Optional[tuple[int, int]] = None,
    ) -> InvestmentEligibility:
        """
        Check the three conditions.

        Args:
            period: (year, month) to restrict the minimum-payment check to.
                    None checks every minimum payment on record.
        """
        no_deficit = stats.available_cash >= 0
        minimums_paid = all(
            p.status == ScheduledPaymentStatus.PAID
            for p in minimum_payments(payments, period)
        )
        on_track = bool(self._debts_on_track(debts))

        if not no_deficit:
            reason = EligibilityReason.DEFICIT
        elif not minimums_paid:
            reason = EligibilityReason.MINIMUMS_PENDING
        elif not on_track:
            reason = EligibilityReason.DEBTS_OFF_TRACK
        else:
            reason = EligibilityReason.PERMITTED

        return InvestmentEligibility(
            is_permitted=reason == EligibilityReason.PERMITTED,
            reason=reason,
            message=REASON_MESSAGES[reason],
            no_deficit=no_deficit,
            minimums_paid=minimums_paid,
            debts_on_track=on_track,
        )
