"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file for a real database later
2. Use in-memory storage for testing
3. Keep the ledger decoupled from how it is persisted

Persistence is whole-dataset: the full user + wallet graph is loaded at
startup and written back at checkpoints (logout, exit). There is no
incremental update API.
"""

from abc import ABC, abstractmethod
from typing import Optional

from finance_manager.models.audit import AuditEvent
from finance_manager.models.user import User


class UserStorageInterface(ABC):
    """
    Abstract interface for the user dataset.

    Any storage implementation (JSON file, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load_users(self) -> dict[str, User]:
        """
        Load every user with its wallet.

        Returns:
            Mapping of normalized login -> User. Empty if nothing was saved yet.

        Raises:
            StorageError: If the stored data cannot be read
        """
        pass

    @abstractmethod
    def save_users(self, users: dict[str, User]) -> None:
        """
        Overwrite the stored dataset with the given users.

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: Optional[int] = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first). limit=None returns all.
        """
        pass


class InMemoryUserStorage(UserStorageInterface):
    """Keeps the dataset in process memory. Used when no data dir is wanted."""

    def __init__(self):
        self._users: dict[str, User] = {}

    def load_users(self) -> dict[str, User]:
        return dict(self._users)

    def save_users(self, users: dict[str, User]) -> None:
        self._users = dict(users)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but cannot be parsed."""
    pass
