"""
Rule Engine Package

Pure derivation rules: statistics, budget aggregation, payoff
simulation, the investment gate and calendar helpers. Nothing in this
package touches storage.
"""

from finance_tracker.engine.budget import (
    AlertKind,
    BudgetAlert,
    BudgetOverview,
    MarginStatus,
    budget_alerts,
    budget_usage_percent,
    build_budget_overview,
    classify_margin,
    merge_budgets,
    month_to_date_spending,
    monthly_margin,
)
from finance_tracker.engine.calendar import (
    days_until,
    month_grid,
    payments_on,
    sorted_payments,
    upcoming_payments,
)
from finance_tracker.engine.debts import (
    balance_after_payment,
    linked_debts,
    total_minimum_payments,
)
from finance_tracker.engine.eligibility import (
    DebtsOnTrackPredicate,
    EligibilityReason,
    InvestmentEligibility,
    InvestmentGate,
    debts_on_track_placeholder,
    minimum_payments,
)
from finance_tracker.engine.simulation import (
    PaymentSimulation,
    SimulationError,
    SimulationStatus,
    build_payment_draft,
    classify_payment,
    months_to_clear,
    simulable_debts,
    simulate_extra_payment,
)
from finance_tracker.engine.stats import (
    StatsEngine,
    available_cash,
    total_debt,
    total_outflows,
)

__all__ = [
    # Budget
    "AlertKind",
    "BudgetAlert",
    "BudgetOverview",
    "MarginStatus",
    "budget_alerts",
    "budget_usage_percent",
    "build_budget_overview",
    "classify_margin",
    "merge_budgets",
    "month_to_date_spending",
    "monthly_margin",
    # Calendar
    "days_until",
    "month_grid",
    "payments_on",
    "sorted_payments",
    "upcoming_payments",
    # Debts
    "balance_after_payment",
    "linked_debts",
    "total_minimum_payments",
    # Eligibility
    "DebtsOnTrackPredicate",
    "EligibilityReason",
    "InvestmentEligibility",
    "InvestmentGate",
    "debts_on_track_placeholder",
    "minimum_payments",
    # Simulation
    "PaymentSimulation",
    "SimulationError",
    "SimulationStatus",
    "build_payment_draft",
    "classify_payment",
    "months_to_clear",
    "simulable_debts",
    "simulate_extra_payment",
    # Stats
    "StatsEngine",
    "available_cash",
    "total_debt",
    "total_outflows",
]
