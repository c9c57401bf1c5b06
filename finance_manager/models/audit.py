"""
Audit Models for Finance Manager

Every significant action on the ledger is logged for audit purposes.
This provides:
1. Traceability of every balance change
2. Debugging information when things go wrong
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Authentication
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"
    LOGIN_FAILED = "login_failed"
    USER_LOGGED_OUT = "user_logged_out"

    # Ledger mutation
    INCOME_ADDED = "income_added"
    EXPENSE_ADDED = "expense_added"
    TRANSFER_COMPLETED = "transfer_completed"
    TRANSACTIONS_CLEARED = "transactions_cleared"

    # Budgets and categories
    BUDGET_SET = "budget_set"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_REMOVED = "budget_removed"
    CATEGORY_ADDED = "category_added"
    CATEGORY_REMOVED = "category_removed"

    # Interchange
    TRANSACTIONS_IMPORTED = "transactions_imported"
    TRANSACTIONS_EXPORTED = "transactions_exported"

    # Alerts
    NOTIFICATION_RAISED = "notification_raised"

    # Persistence
    DATA_LOADED = "data_loaded"
    DATA_SAVED = "data_saved"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who did it
    user_login: Optional[str] = Field(
        default=None,
        description="Login of the acting user, if any"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'budget', 'user')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_login": self.user_login,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_logged_in("alice")
        event = AuditEventBuilder.transaction_added("alice", transaction)
    """

    @staticmethod
    def user_registered(login: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            user_login=login,
            entity_type="user",
            entity_id=login,
            description=f"User registered: {login}",
        )

    @staticmethod
    def user_logged_in(login: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            user_login=login,
            entity_type="user",
            entity_id=login,
            description=f"User logged in: {login}",
        )

    @staticmethod
    def login_failed(login: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=login,
            description=f"Login failed for {login}",
            details={"reason": reason},
        )

    @staticmethod
    def user_logged_out(login: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            user_login=login,
            entity_type="user",
            entity_id=login,
            description=f"User logged out: {login}",
        )

    @staticmethod
    def transaction_added(login: str, transaction) -> AuditEvent:
        event_type = (
            AuditEventType.INCOME_ADDED
            if transaction.is_income
            else AuditEventType.EXPENSE_ADDED
        )
        return AuditEvent(
            event_type=event_type,
            user_login=login,
            entity_type="transaction",
            entity_id=transaction.id,
            description=(
                f"{transaction.type.display_name} added: "
                f"{transaction.category} {transaction.amount:.2f}"
            ),
            details={
                "category": transaction.category,
                "amount": str(transaction.amount),
                "date": transaction.date.isoformat(),
            },
        )

    @staticmethod
    def transfer_completed(
        sender: str,
        recipient: str,
        amount: str,
        expense_id: str,
        income_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_COMPLETED,
            user_login=sender,
            entity_type="transfer",
            entity_id=expense_id,
            description=f"Transfer {sender} → {recipient}: {amount}",
            details={
                "recipient": recipient,
                "amount": amount,
                "expense_id": expense_id,
                "income_id": income_id,
            },
        )

    @staticmethod
    def transactions_cleared(login: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            severity=AuditSeverity.WARNING,
            user_login=login,
            entity_type="wallet",
            entity_id=login,
            description=f"Cleared {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def budget_changed(
        event_type: AuditEventType,
        login: str,
        category: str,
        limit: Optional[str] = None,
    ) -> AuditEvent:
        verb = {
            AuditEventType.BUDGET_SET: "set",
            AuditEventType.BUDGET_UPDATED: "updated",
            AuditEventType.BUDGET_REMOVED: "removed",
        }[event_type]
        details = {"category": category}
        if limit is not None:
            details["limit"] = limit
        return AuditEvent(
            event_type=event_type,
            user_login=login,
            entity_type="budget",
            entity_id=category,
            description=f"Budget {verb}: {category}",
            details=details,
        )

    @staticmethod
    def category_changed(
        event_type: AuditEventType,
        login: str,
        category: str,
    ) -> AuditEvent:
        verb = "added" if event_type == AuditEventType.CATEGORY_ADDED else "removed"
        return AuditEvent(
            event_type=event_type,
            user_login=login,
            entity_type="category",
            entity_id=category,
            description=f"Category {verb}: {category}",
        )

    @staticmethod
    def transactions_imported(login: str, count: int, source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_IMPORTED,
            user_login=login,
            entity_type="wallet",
            entity_id=login,
            description=f"Imported {count} transactions from {source}",
            details={"count": count, "source": source},
        )

    @staticmethod
    def transactions_exported(login: str, count: int, target: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_EXPORTED,
            user_login=login,
            entity_type="wallet",
            entity_id=login,
            description=f"Exported {count} transactions to {target}",
            details={"count": count, "target": target},
        )

    @staticmethod
    def notification_raised(login: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_RAISED,
            severity=AuditSeverity.WARNING,
            user_login=login,
            entity_type="wallet",
            entity_id=login,
            description=message[:500],
        )

    @staticmethod
    def data_loaded(user_count: int, source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            description=f"Loaded {user_count} users",
            details={"user_count": user_count, "source": source},
        )

    @staticmethod
    def data_saved(user_count: int, target: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_SAVED,
            description=f"Saved {user_count} users",
            details={"user_count": user_count, "target": target},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
