"""
Data Models Package

Ledger entities (transactions, budgets, wallets, users), read-only report
models and audit models.
"""

from finance_manager.models.ledger import (
    NEAR_LIMIT_PERCENTAGE,
    Budget,
    Transaction,
    TransactionType,
    to_amount,
)
from finance_manager.models.wallet import Wallet, transfer_between
from finance_manager.models.user import User, hash_password, normalize_login
from finance_manager.models.summary import (
    BudgetStatus,
    CategorySummary,
    FinanceSummary,
)
from finance_manager.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "NEAR_LIMIT_PERCENTAGE",
    "Budget",
    "Transaction",
    "TransactionType",
    "Wallet",
    "User",
    "hash_password",
    "normalize_login",
    "to_amount",
    "transfer_between",
    # Report models
    "BudgetStatus",
    "CategorySummary",
    "FinanceSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
