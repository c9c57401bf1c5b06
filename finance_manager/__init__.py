"""
Finance Manager - Source Package

Personal finance tracking for several independent users: incomes,
expenses, per-category budgets, transfers between users, alerts and
CSV/JSON import/export.

DESIGN PRINCIPLES:
1. The balance always equals the sum of the ledger
2. Validate first, mutate second
3. Every mutation is auditable
4. Storage and interchange formats are swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Manager Team"
