"""
Notification rules.

Each check inspects a wallet and, when its rule fires, appends a
human-readable alert to the queue. The rules hold no state of their own;
the queue belongs to the session and is drained by the front end.
"""

from typing import Optional

from finance_manager.models.wallet import Wallet


class NotificationService:
    """Budget and balance alerts, queued in the order they were raised."""

    def __init__(self):
        self._notifications: list[str] = []

    def check_budget_exceeded(self, wallet: Wallet, category: str) -> Optional[str]:
        budget = wallet.get_budget(category)
        if budget is None or not budget.exceeded:
            return None
        return self._add_notification(
            f"BUDGET EXCEEDED! Category: '{category}'. "
            f"Spent: {budget.spent:.2f}, Limit: {budget.limit:.2f}, "
            f"Overspent: {budget.spent - budget.limit:.2f}"
        )

    def check_budget_threshold(self, wallet: Wallet, category: str) -> Optional[str]:
        """Near-limit alert; never raised together with the exceeded one."""
        budget = wallet.get_budget(category)
        if budget is None or not budget.near_limit or budget.exceeded:
            return None
        return self._add_notification(
            f"Approaching limit! Category: '{category}'. "
            f"Used: {budget.usage_percentage:.1f}% "
            f"({budget.spent:.2f} of {budget.limit:.2f})"
        )

    def check_balance_status(self, wallet: Wallet) -> Optional[str]:
        if wallet.balance >= 0:
            return None
        return self._add_notification(
            f"NEGATIVE BALANCE! Current balance: {wallet.balance:.2f}"
        )

    def check_initial_notifications(self, wallet: Wallet) -> list[str]:
        """Re-evaluate every budget plus the balance, e.g. right after login."""
        raised = []
        for category in sorted(wallet.budgets):
            raised.append(self.check_budget_exceeded(wallet, category))
            raised.append(self.check_budget_threshold(wallet, category))
        raised.append(self.check_balance_status(wallet))
        return [message for message in raised if message is not None]

    def get_notifications(self) -> list[str]:
        return list(self._notifications)

    def clear_notifications(self) -> None:
        self._notifications.clear()

    def _add_notification(self, message: str) -> str:
        self._notifications.append(message)
        return message
