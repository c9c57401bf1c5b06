"""
Read-only report models.

These are snapshots computed on demand from a wallet. They never feed
back into the ledger.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from finance_manager.models.ledger import NEAR_LIMIT_PERCENTAGE, Budget


class FinanceSummary(BaseModel):
    """Totals across the whole wallet."""

    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    transaction_count: int = Field(ge=0)


class BudgetStatus(BaseModel):
    """
    State of one budget against a given spent total.

    Derived fields are computed once at construction so the snapshot is
    self-contained for display and serialization.
    """

    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    usage_percentage: float
    exceeded: bool
    near_limit: bool

    @classmethod
    def from_budget(cls, budget: Budget, spent: Optional[Decimal] = None) -> "BudgetStatus":
        spent = budget.spent if spent is None else spent
        usage = float(spent / budget.limit * 100) if budget.limit > 0 else 0.0
        return cls(
            category=budget.category,
            limit=budget.limit,
            spent=spent,
            remaining=budget.limit - spent,
            usage_percentage=usage,
            exceeded=spent > budget.limit,
            near_limit=usage >= NEAR_LIMIT_PERCENTAGE,
        )


class CategorySummary(BaseModel):
    """Income/expense totals for one category, with its budget if any."""

    category: str
    total_income: Decimal
    total_expense: Decimal
    budget: Optional[BudgetStatus] = None
