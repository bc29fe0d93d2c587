"""
Finance Tracker - Source Package

A personal finance tracker for a single user: transactions, debts,
category budgets, scheduled payments and BTC contributions, plus the
derived statistics computed from them.

DESIGN PRINCIPLES:
1. Derived numbers are recomputed from records, never trusted from storage
2. Validate at the form layer, before any network call
3. Every mutation is followed by a full re-fetch
4. Every user action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
