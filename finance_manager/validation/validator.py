"""
Input Validation

Checks raw strings typed by the user before they reach the ledger.
The ledger models enforce their own invariants (non-blank category,
positive amount); this layer adds the presentation rules on top: login
and category patterns, password length, amount bounds and date parsing.

IMPORTANT: Validation NEVER silently fixes issues beyond trimming
whitespace. Anything else is reported as InvalidArgumentError.
"""

import datetime
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from finance_manager.config import AppSettings, get_settings
from finance_manager.exceptions import InvalidArgumentError


LOGIN_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,20}$")
# Letters in any script, digits, spaces, underscores and hyphens
CATEGORY_PATTERN = re.compile(r"^[^\W][\w\s\-]{0,49}$")


class InputValidator:
    """
    Validates user input for the front end.

    Thresholds (password length, maximum amount) come from AppSettings.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate_login(self, login: Optional[str]) -> str:
        if login is None or not login.strip():
            raise InvalidArgumentError("Login cannot be empty")
        login = login.strip()
        if not LOGIN_PATTERN.match(login):
            raise InvalidArgumentError(
                "Login must be 3-20 characters (letters, digits, underscores)"
            )
        return login

    def validate_password(self, password: Optional[str]) -> str:
        if not password:
            raise InvalidArgumentError("Password cannot be empty")
        min_length = self._settings.min_password_length
        if len(password) < min_length:
            raise InvalidArgumentError(
                f"Password must be at least {min_length} characters"
            )
        return password

    def validate_category(self, category: Optional[str]) -> str:
        if category is None or not category.strip():
            raise InvalidArgumentError("Category cannot be empty")
        category = category.strip()
        if not CATEGORY_PATTERN.match(category):
            raise InvalidArgumentError(
                "Category must be 1-50 characters "
                "(letters, digits, spaces, hyphens, underscores)"
            )
        return category

    def parse_amount(self, amount: Optional[str]) -> Decimal:
        if amount is None or not str(amount).strip():
            raise InvalidArgumentError("Amount cannot be empty")
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation:
            raise InvalidArgumentError("Amount must be a number")
        if not value.is_finite():
            raise InvalidArgumentError("Amount must be a number")
        if value <= 0:
            raise InvalidArgumentError("Amount must be positive")
        if value > Decimal(str(self._settings.max_transaction_amount)):
            raise InvalidArgumentError("Amount is too large")
        return value

    def parse_date(self, value: Optional[str]) -> datetime.date:
        """Parse an ISO date (YYYY-MM-DD). Blank means today."""
        if value is None or not value.strip():
            return datetime.date.today()
        try:
            return datetime.date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidArgumentError("Invalid date format. Use YYYY-MM-DD")

    def validate_date_range(
        self,
        start: Optional[datetime.date],
        end: Optional[datetime.date],
    ) -> tuple[datetime.date, datetime.date]:
        if start is None or end is None:
            raise InvalidArgumentError("Both start and end dates are required")
        if start > end:
            raise InvalidArgumentError("Start date cannot be after end date")
        return start, end
