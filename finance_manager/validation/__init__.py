"""Input validation package."""

from finance_manager.validation.validator import (
    CATEGORY_PATTERN,
    LOGIN_PATTERN,
    InputValidator,
)

__all__ = ["CATEGORY_PATTERN", "LOGIN_PATTERN", "InputValidator"]
