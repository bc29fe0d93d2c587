"""Scheduled-payment calendar helpers."""

import calendar
import datetime
from typing import Iterable, Optional

from finance_tracker.models.finance import ScheduledPayment


def sorted_payments(payments: Iterable[ScheduledPayment]) -> list[ScheduledPayment]:
    return sorted(payments, key=lambda p: p.date)


def upcoming_payments(
    payments: Iterable[ScheduledPayment],
    limit: int = 10,
    since: Optional[datetime.date] = None,
) -> list[ScheduledPayment]:
    """
    The first `limit` payments by date.

    Past payments are included unless `since` is given.
    """
    ordered = sorted_payments(payments)
    if since is not None:
        ordered = [p for p in ordered if p.date >= since]
    return ordered[:limit]


def payments_on(
    payments: Iterable[ScheduledPayment],
    day: datetime.date,
) -> list[ScheduledPayment]:
    return [p for p in payments if p.date == day]


def days_until(day: datetime.date, today: Optional[datetime.date] = None) -> int:
    """Days from today to `day`; negative when it has passed."""
    return (day - (today or datetime.date.today())).days


def month_grid(year: int, month: int) -> list[Optional[datetime.date]]:
    """
    Days of a month for a Sunday-first grid.

    Leading None entries pad the first week up to the month's first day.
    """
    first_weekday, days_in_month = calendar.monthrange(year, month)
    padding = (first_weekday + 1) % 7  # monthrange counts from Monday
    grid: list[Optional[datetime.date]] = [None] * padding
    grid.extend(datetime.date(year, month, day) for day in range(1, days_in_month + 1))
    return grid
