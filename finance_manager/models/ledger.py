"""
Core Ledger Models

Transactions and budgets are the two leaf entities of the ledger.
Wallet (see wallet.py) composes them.

DESIGN DECISION: Amounts are Decimal everywhere.
Balances must equal the signed sum of transactions exactly, regardless of
the order they were added in, which float arithmetic cannot guarantee.

Validation failures raise InvalidArgumentError directly (not a pydantic
ValidationError) so callers see the same error kind as from the services.
"""

import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_manager.exceptions import InvalidArgumentError


# Budgets at or above this share of their limit are "near limit"
NEAR_LIMIT_PERCENTAGE = 80

AmountLike = Union[Decimal, int, float, str]


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert a user-supplied number to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    approximation.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidArgumentError(f"Amount must be a number: {value!r}")
    if not amount.is_finite():
        raise InvalidArgumentError(f"Amount must be a finite number: {value!r}")
    return amount


def _clean_category(value: Any) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError("Category cannot be blank")
    return str(value).strip()


class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, label: str) -> "TransactionType":
        """
        Parse a canonical, display or localized label (case-insensitive).

        Files exported by older localized builds label rows
        "Доход"/"Расход"; those are accepted too.
        """
        normalized = str(label).strip().lower()
        if normalized in _TYPE_LABELS:
            return _TYPE_LABELS[normalized]
        raise InvalidArgumentError(f"Unknown transaction type: {label!r}")


_TYPE_LABELS = {
    "income": TransactionType.INCOME,
    "доход": TransactionType.INCOME,
    "expense": TransactionType.EXPENSE,
    "расход": TransactionType.EXPENSE,
}


class Transaction(BaseModel):
    """
    A single income or expense record.

    Immutable once created. Fresh entries get a generated id and today's
    date; entries restored from storage or an import pass both explicitly.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Opaque unique identifier"
    )
    category: str = Field(
        ...,
        description="Category name (trimmed, non-blank)"
    )
    amount: Decimal = Field(
        ...,
        description="Strictly positive amount"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    date: datetime.date = Field(
        default_factory=datetime.date.today,
        description="Calendar date of the transaction"
    )
    description: str = Field(
        default="",
        description="Free-text note, may be empty"
    )

    @field_validator("id", mode="before")
    @classmethod
    def generate_missing_id(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return str(uuid4())
        return str(v).strip()

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> str:
        return _clean_category(v)

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        amount = to_amount(v)
        if amount <= 0:
            raise InvalidArgumentError("Amount must be positive")
        return amount

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> TransactionType:
        if isinstance(v, TransactionType):
            return v
        return TransactionType.parse(v)

    @field_validator("date", mode="before")
    @classmethod
    def default_date(cls, v: Any) -> Any:
        return datetime.date.today() if v is None else v

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it affects the balance."""
        return self.amount if self.is_income else -self.amount

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return (
            f"{self.date.isoformat()}: {self.category} - "
            f"{self.amount:.2f} ({self.type.display_name})"
        )


class Budget(BaseModel):
    """
    Spending cap for one category with a running spent total.

    `spent` only grows through add_spending() and drops back to zero
    through reset(). It is NOT clamped at the limit: an exceeded budget
    is a valid state that notifications report on.

    Two budgets for the same category are equal regardless of limit/spent.
    """

    category: str = Field(
        ...,
        description="Category this budget caps (unique within a wallet)"
    )
    limit: Decimal = Field(
        ...,
        description="Spending limit, zero or more"
    )
    spent: Decimal = Field(
        default=Decimal("0"),
        description="Cumulative spend since creation or last reset"
    )

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> str:
        return _clean_category(v)

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit(cls, v: Any) -> Decimal:
        limit = to_amount(v)
        if limit < 0:
            raise InvalidArgumentError("Budget limit cannot be negative")
        return limit

    @field_validator("spent", mode="before")
    @classmethod
    def validate_spent(cls, v: Any) -> Decimal:
        spent = to_amount(v)
        if spent < 0:
            raise InvalidArgumentError("Budget spent total cannot be negative")
        return spent

    def add_spending(self, amount: AmountLike) -> None:
        amount = to_amount(amount)
        if amount < 0:
            raise InvalidArgumentError("Spending amount cannot be negative")
        self.spent += amount

    def update_limit(self, new_limit: AmountLike) -> None:
        new_limit = to_amount(new_limit)
        if new_limit < 0:
            raise InvalidArgumentError("Budget limit cannot be negative")
        self.limit = new_limit

    def reset(self) -> None:
        self.spent = Decimal("0")

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.spent

    @property
    def usage_percentage(self) -> float:
        if self.limit <= 0:
            return 0.0
        return float(self.spent / self.limit * 100)

    @property
    def exceeded(self) -> bool:
        return self.spent > self.limit

    @property
    def near_limit(self) -> bool:
        return self.usage_percentage >= NEAR_LIMIT_PERCENTAGE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Budget):
            return NotImplemented
        return self.category == other.category

    def __hash__(self) -> int:
        return hash(self.category)

    def __str__(self) -> str:
        return (
            f"Budget{{category='{self.category}', "
            f"limit={self.limit:.2f}, spent={self.spent:.2f}}}"
        )
