"""
Wallet: per-user container of transactions, budgets and categories.

INVARIANTS:
1. balance == sum of signed transaction amounts
2. every category used by a transaction or budget is in the category set
3. a category with transaction history cannot be removed

Aggregates are recomputed from the transaction list on every call.
Nothing is cached, so they can never drift from the ledger.
"""

import datetime
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from finance_manager.exceptions import (
    AlreadyExistsError,
    InsufficientFundsError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from finance_manager.models.ledger import (
    AmountLike,
    Budget,
    Transaction,
    TransactionType,
    to_amount,
)


class Wallet:
    """Ledger of one user."""

    def __init__(self, user_id: str):
        self._user_id = user_id
        self._balance = Decimal("0")
        self._transactions: list[Transaction] = []
        self._budgets: dict[str, Budget] = {}
        self._categories: set[str] = set()

    @classmethod
    def from_snapshot(
        cls,
        user_id: str,
        balance: Decimal,
        transactions: Iterable[Transaction],
        budgets: Iterable[Budget],
        categories: Iterable[str],
    ) -> "Wallet":
        """
        Rebuild a wallet from previously computed state.

        Balance and budget spent totals are taken as stored, not replayed,
        so a snapshot restores exactly what was saved.
        """
        wallet = cls(user_id)
        wallet._balance = balance
        wallet._transactions = list(transactions)
        wallet._budgets = {budget.category: budget for budget in budgets}
        wallet._categories = set(categories)
        # Keep the category invariant even for hand-edited snapshots
        wallet._categories.update(t.category for t in wallet._transactions)
        wallet._categories.update(wallet._budgets)
        return wallet

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_transaction(self, transaction: Transaction) -> None:
        self.import_transactions([transaction])

    def import_transactions(self, transactions: Iterable[Transaction]) -> None:
        """
        Apply transactions in order, all or nothing.

        Raises:
            InvalidArgumentError: the resulting balance or a budget total
                cannot be represented
        """
        transactions = list(transactions)
        balance = self._project(transactions)

        self._transactions.extend(transactions)
        self._balance = balance
        for t in transactions:
            budget = self._budgets.get(t.category)
            if t.is_expense and budget is not None:
                budget.add_spending(t.amount)
        self._categories.update(t.category for t in transactions)

    def _project(self, transactions: list[Transaction]) -> Decimal:
        """
        Run the balance and budget arithmetic on copies and return the new
        balance. The wallet is not touched.
        """
        balance = self._balance
        spent = {category: budget.spent for category, budget in self._budgets.items()}
        try:
            for t in transactions:
                balance += t.signed_amount
                if t.is_expense and t.category in spent:
                    spent[t.category] += t.amount
        except ArithmeticError as e:
            raise InvalidArgumentError(
                f"Amount is out of the representable range ({e.__class__.__name__})"
            ) from e
        return balance

    def set_budget(self, category: str, limit: AmountLike) -> Budget:
        """
        Create a budget, back-filled from existing expenses in the category.

        Raises:
            AlreadyExistsError: a budget for the category already exists
        """
        budget = Budget(category=category, limit=limit)
        if budget.category in self._budgets:
            raise AlreadyExistsError(
                f"Budget for category '{budget.category}' already exists"
            )
        budget.add_spending(self.expense_by_category(budget.category))
        self._budgets[budget.category] = budget
        self._categories.add(budget.category)
        return budget

    def update_budget(self, category: str, new_limit: AmountLike) -> Budget:
        budget = self._budgets.get(category.strip())
        if budget is None:
            raise NotFoundError(f"Budget for category '{category}' not found")
        budget.update_limit(new_limit)
        return budget

    def remove_budget(self, category: str) -> None:
        self._budgets.pop(category.strip(), None)

    def add_category(self, category: str) -> str:
        if category is None or not category.strip():
            raise InvalidArgumentError("Category cannot be blank")
        category = category.strip()
        self._categories.add(category)
        return category

    def remove_category(self, category: str) -> None:
        """
        Remove a category and its budget.

        Raises:
            InvalidStateError: the category has transaction history
        """
        category = category.strip()
        if self.has_transactions_in_category(category):
            raise InvalidStateError(
                f"Cannot remove category '{category}': it has transactions"
            )
        self._categories.discard(category)
        self._budgets.pop(category, None)

    def clear_transactions(self) -> None:
        """Wipe all transactions, zero the balance and reset every budget."""
        self._transactions.clear()
        self._balance = Decimal("0")
        for budget in self._budgets.values():
            budget.reset()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_transactions_in_category(self, category: str) -> bool:
        return any(t.category == category for t in self._transactions)

    def total_income(self) -> Decimal:
        return sum(
            (t.amount for t in self._transactions if t.is_income),
            Decimal("0"),
        )

    def total_expense(self) -> Decimal:
        return sum(
            (t.amount for t in self._transactions if t.is_expense),
            Decimal("0"),
        )

    def income_by_category(self, category: str) -> Decimal:
        return sum(
            (t.amount for t in self._transactions
             if t.is_income and t.category == category),
            Decimal("0"),
        )

    def expense_by_category(self, category: str) -> Decimal:
        return sum(
            (t.amount for t in self._transactions
             if t.is_expense and t.category == category),
            Decimal("0"),
        )

    def expenses_by_categories(self, categories: Iterable[str]) -> dict[str, Decimal]:
        """Expense totals for each requested category (zero when none)."""
        return {category: self.expense_by_category(category) for category in categories}

    def expenses_by_period(
        self,
        start: datetime.date,
        end: datetime.date,
    ) -> dict[str, Decimal]:
        """Expense totals grouped by category for start <= date <= end."""
        totals: dict[str, Decimal] = {}
        for t in self._transactions:
            if t.is_expense and start <= t.date <= end:
                totals[t.category] = totals.get(t.category, Decimal("0")) + t.amount
        return totals

    def transactions_by_category(self, category: str) -> list[Transaction]:
        return [t for t in self._transactions if t.category == category]

    def get_budget(self, category: str) -> Optional[Budget]:
        return self._budgets.get(category)

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def balance(self) -> Decimal:
        return self._balance

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def budgets(self) -> dict[str, Budget]:
        """Copy of the category -> budget map (budgets themselves are live)."""
        return dict(self._budgets)

    @property
    def categories(self) -> frozenset[str]:
        return frozenset(self._categories)

    def __repr__(self) -> str:
        return (
            f"Wallet(user_id={self._user_id!r}, balance={self._balance}, "
            f"transactions={len(self._transactions)})"
        )


def transfer_between(
    sender: Wallet,
    recipient: Wallet,
    amount: AmountLike,
    sender_login: str,
    recipient_login: str,
    description: Optional[str] = None,
    date: Optional[datetime.date] = None,
) -> tuple[Transaction, Transaction]:
    """
    Move money from one wallet to another.

    Both legs are validated and built before either wallet is touched, so
    a failing check leaves both balances unchanged. The legs are then
    applied back to back. There is no crash safety between them: a caller
    that needs it must record the intended transfer before calling this.

    Returns:
        (expense_leg, income_leg)

    Raises:
        InvalidArgumentError: amount is not positive, same wallet, or a
            resulting balance is out of range
        InsufficientFundsError: sender balance is below amount
    """
    amount = to_amount(amount)
    if amount <= 0:
        raise InvalidArgumentError("Transfer amount must be positive")
    if sender is recipient:
        raise InvalidArgumentError("Cannot transfer to the same wallet")
    if sender.balance < amount:
        raise InsufficientFundsError(
            f"Insufficient funds: balance {sender.balance:.2f}, "
            f"requested {amount:.2f}"
        )

    note = (description or "").strip()
    transfer_date = date or datetime.date.today()

    expense_leg = Transaction(
        category=f"Transfer to {recipient_login}",
        amount=amount,
        type=TransactionType.EXPENSE,
        date=transfer_date,
        description=f"{note} → {recipient_login}".strip(),
    )
    income_leg = Transaction(
        category=f"Transfer from {sender_login}",
        amount=amount,
        type=TransactionType.INCOME,
        date=transfer_date,
        description=f"{note} ← {sender_login}".strip(),
    )

    # Both legs must fit before either is applied
    sender._project([expense_leg])
    recipient._project([income_leg])

    sender.add_transaction(expense_leg)
    recipient.add_transaction(income_leg)

    return expense_leg, income_leg
