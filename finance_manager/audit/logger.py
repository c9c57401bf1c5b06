"""
Audit Logger

DESIGN DECISION: Every significant action on the ledger is logged.
This provides:
1. Complete traceability of balance changes
2. Debugging capability
3. User can see history of their interactions

The audit logger:
- Is synchronous, like the rest of the core (no suspension points)
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

from typing import Optional

import structlog

from finance_manager.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from finance_manager.models.ledger import Transaction
from finance_manager.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An append-only audit store, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finance_manager.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def get_recent_events(
        self,
        limit: int = 100,
        user_login: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Read back persisted events, newest first.

        Returns an empty list when only local logging is configured.
        """
        if not self._storage:
            return []

        try:
            events = self._storage.get_recent_events(limit=None)
        except StorageError as e:
            self._logger.error("audit_read_failed", error=str(e))
            return []

        if user_login is not None:
            events = [e for e in events if e.user_login == user_login]
        return events[:limit]

    def log_user_registered(self, login: str) -> None:
        self.log(AuditEventBuilder.user_registered(login))

    def log_user_logged_in(self, login: str) -> None:
        self.log(AuditEventBuilder.user_logged_in(login))

    def log_login_failed(self, login: str, reason: str) -> None:
        self.log(AuditEventBuilder.login_failed(login, reason))

    def log_user_logged_out(self, login: str) -> None:
        self.log(AuditEventBuilder.user_logged_out(login))

    def log_transaction_added(self, login: str, transaction: Transaction) -> None:
        self.log(AuditEventBuilder.transaction_added(login, transaction))

    def log_transfer(
        self,
        sender: str,
        recipient: str,
        expense_leg: Transaction,
        income_leg: Transaction,
    ) -> None:
        """Log both legs of a transfer as one event."""
        self.log(AuditEventBuilder.transfer_completed(
            sender=sender,
            recipient=recipient,
            amount=str(expense_leg.amount),
            expense_id=expense_leg.id,
            income_id=income_leg.id,
        ))

    def log_transactions_cleared(self, login: str, count: int) -> None:
        self.log(AuditEventBuilder.transactions_cleared(login, count))

    def log_budget_set(self, login: str, category: str, limit: str) -> None:
        self.log(AuditEventBuilder.budget_changed(
            AuditEventType.BUDGET_SET, login, category, limit,
        ))

    def log_budget_updated(self, login: str, category: str, limit: str) -> None:
        self.log(AuditEventBuilder.budget_changed(
            AuditEventType.BUDGET_UPDATED, login, category, limit,
        ))

    def log_budget_removed(self, login: str, category: str) -> None:
        self.log(AuditEventBuilder.budget_changed(
            AuditEventType.BUDGET_REMOVED, login, category,
        ))

    def log_category_added(self, login: str, category: str) -> None:
        self.log(AuditEventBuilder.category_changed(
            AuditEventType.CATEGORY_ADDED, login, category,
        ))

    def log_category_removed(self, login: str, category: str) -> None:
        self.log(AuditEventBuilder.category_changed(
            AuditEventType.CATEGORY_REMOVED, login, category,
        ))

    def log_transactions_imported(self, login: str, count: int, source: str) -> None:
        self.log(AuditEventBuilder.transactions_imported(login, count, source))

    def log_transactions_exported(self, login: str, count: int, target: str) -> None:
        self.log(AuditEventBuilder.transactions_exported(login, count, target))

    def log_notification(self, login: str, message: str) -> None:
        self.log(AuditEventBuilder.notification_raised(login, message))

    def log_data_loaded(self, user_count: int, source: str) -> None:
        self.log(AuditEventBuilder.data_loaded(user_count, source))

    def log_data_saved(self, user_count: int, target: str) -> None:
        self.log(AuditEventBuilder.data_saved(user_count, target))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
