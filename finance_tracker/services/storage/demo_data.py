"""
Demo data set.

A small, realistic record set used to seed the in-memory store for
demos and tests. Values are in the persisted (snake_case, JSON-safe)
shape, exactly as a backend would return them.
"""

from typing import Any

from finance_tracker.models.finance import DASHBOARD_STATS_ID, TransactionCategory
from finance_tracker.services.storage.interface import Collection, ConfigKey


def demo_records() -> dict[Collection, list[dict[str, Any]]]:
    """Records for every collection. Returns fresh copies on each call."""
    return {
        Collection.DEBTS: [
            {
                "id": "d1",
                "name": "Scheu Dental (P1)",
                "initial_balance": "15000",
                "current_balance": "9600",
                "monthly_minimum": "1500",
                "real_payment": "1500",
                "priority": 1,
                "due_date": "2026-04-29",
            },
            {
                "id": "d2",
                "name": "Interbank (P2)",
                "initial_balance": "12000",
                "current_balance": "8400",
                "monthly_minimum": "380",
                "real_payment": "380",
                "priority": 2,
                "due_date": "2026-05-15",
            },
            {
                "id": "d3",
                "name": "Reactiva (P3)",
                "initial_balance": "20000",
                "current_balance": "15500",
                "monthly_minimum": "500",
                "real_payment": "500",
                "priority": 3,
                "due_date": "2026-05-20",
            },
        ],
        Collection.TRANSACTIONS: [
            {"id": "t1", "date": "2026-04-20", "description": "Tambo Weekend", "amount": "54",
             "category": TransactionCategory.WEEKEND.value, "is_weekend": True,
             "status": "categorized", "debt_id": None},
            {"id": "t2", "date": "2026-04-15", "description": "Interbank Mínimo", "amount": "380",
             "category": TransactionCategory.DEBT.value, "is_weekend": False,
             "status": "categorized", "debt_id": "d2"},
            {"id": "t3", "date": "2026-04-13", "description": "Uber Trip", "amount": "22",
             "category": TransactionCategory.VARIABLE.value, "is_weekend": False,
             "status": "categorized", "debt_id": None},
            {"id": "t4", "date": "2026-03-29", "description": "Scheu Dental Payment", "amount": "1500",
             "category": TransactionCategory.DEBT.value, "is_weekend": False,
             "status": "categorized", "debt_id": "d1"},
            {"id": "t5", "date": "2026-04-22", "description": "Mercado Semanal", "amount": "210",
             "category": TransactionCategory.ESSENTIAL.value, "is_weekend": False,
             "status": "categorized", "debt_id": None},
        ],
        Collection.BUDGETS: [
            {"id": "b1", "category": "Alimentación", "limit": "1200"},
            {"id": "b2", "category": "Transporte", "limit": "400"},
            {"id": "b3", "category": "Servicios", "limit": "600"},
            {"id": "b4", "category": "Ocio", "limit": "300"},
            {"id": "b5", "category": "Otros", "limit": "500"},
        ],
        Collection.SCHEDULED_PAYMENTS: [
            {"id": "p1", "date": "2026-04-29", "concept": "Scheu Dental (P1)", "amount": "1500",
             "type": "minimum", "status": "pending", "notes": None},
            {"id": "p2", "date": "2026-05-15", "concept": "Interbank (P2)", "amount": "380",
             "type": "minimum", "status": "pending", "notes": None},
            {"id": "p3", "date": "2026-05-20", "concept": "Reactiva (P3)", "amount": "500",
             "type": "minimum", "status": "pending", "notes": None},
            {"id": "p4", "date": "2026-04-25", "concept": "Extra Scheu (P1)", "amount": "500",
             "type": "extra", "status": "pending", "notes": None},
            {"id": "p5", "date": "2026-04-10", "concept": "Alquiler", "amount": "1200",
             "type": "minimum", "status": "paid", "notes": None},
        ],
        Collection.BTC_CONTRIBUTIONS: [
            {"id": "btc1", "date": "2026-03-01", "amount": "800", "btc_amount": "0.0024",
             "notes": "Aporte mensual Marzo"},
            {"id": "btc2", "date": "2026-02-01", "amount": "800", "btc_amount": "0.0026",
             "notes": "Aporte mensual Febrero"},
            {"id": "btc3", "date": "2026-01-01", "amount": "1200", "btc_amount": "0.0041",
             "notes": "Bono Enero"},
        ],
        Collection.DASHBOARD_STATS: [
            {
                "id": DASHBOARD_STATS_ID,
                "available_cash": "7450",
                "total_debt": "33500",
                "weekend_spent": "420",
                "weekend_cap": "600",
                "savings_progress": "12",
                "monthly_income": "12000",
                "btc_target_monthly": "800",
                "btc_total_contributed": "10500",
                "btc_accumulated": "0.0452",
            },
        ],
    }


def demo_config() -> dict[ConfigKey, Any]:
    """Category and payment-concept lists."""
    return {
        ConfigKey.CATEGORIES: [category.value for category in TransactionCategory],
        ConfigKey.PAYMENT_CONCEPTS: [
            "Scheu Dental (P1)",
            "Interbank (P2)",
            "Reactiva (P3)",
            "Alquiler",
            "Servicios",
        ],
    }
