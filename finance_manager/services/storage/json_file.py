"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document holds every user and wallet:
1. Human-readable, easy to back up or inspect
2. No database setup required
3. Whole-dataset overwrite matches how the app checkpoints

TRADEOFFS:
- Not suitable for large datasets (fine for personal use)
- No partial writes: the file is replaced atomically via a temp file

Wallets are stored with their computed balance and budget spent totals
and restored through Wallet.from_snapshot(), so nothing is replayed on load.
"""

import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from finance_manager.config import get_settings
from finance_manager.exceptions import FinanceError
from finance_manager.models.audit import AuditEvent
from finance_manager.models.ledger import Budget, Transaction
from finance_manager.models.user import User
from finance_manager.models.wallet import Wallet
from finance_manager.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    StorageError,
    UserStorageInterface,
)


logger = structlog.get_logger(__name__)

DATASET_VERSION = 1


# =============================================================================
# SNAPSHOT RECORDS
# =============================================================================

class WalletRecord(BaseModel):
    """Persisted form of a Wallet."""

    user_id: str
    balance: Decimal = Decimal("0")
    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)

    @classmethod
    def from_wallet(cls, wallet: Wallet) -> "WalletRecord":
        return cls(
            user_id=wallet.user_id,
            balance=wallet.balance,
            transactions=list(wallet.transactions),
            budgets=sorted(wallet.budgets.values(), key=lambda b: b.category),
            categories=sorted(wallet.categories),
        )

    def to_wallet(self) -> Wallet:
        expected = sum((t.signed_amount for t in self.transactions), Decimal("0"))
        if expected != self.balance:
            logger.warning(
                "wallet_balance_mismatch",
                user_id=self.user_id,
                stored_balance=str(self.balance),
                computed_balance=str(expected),
            )
        return Wallet.from_snapshot(
            user_id=self.user_id,
            balance=self.balance,
            transactions=self.transactions,
            budgets=self.budgets,
            categories=self.categories,
        )


class UserRecord(BaseModel):
    """Persisted form of a User (password hash only, never the password)."""

    login: str
    password_hash: str
    wallet: WalletRecord

    @classmethod
    def from_user(cls, user: User) -> "UserRecord":
        return cls(
            login=user.login,
            password_hash=user.password_hash,
            wallet=WalletRecord.from_wallet(user.wallet),
        )

    def to_user(self) -> User:
        return User(self.login, self.password_hash, self.wallet.to_wallet())


class UserDataset(BaseModel):
    """Top-level document written to the users file."""

    version: int = DATASET_VERSION
    users: list[UserRecord] = Field(default_factory=list)


# =============================================================================
# STORAGE
# =============================================================================

class JsonFileUserStorage(UserStorageInterface):
    """Stores the full user dataset in one JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_settings().storage.users_path

    @property
    def path(self) -> Path:
        return self._path

    def load_users(self) -> dict[str, User]:
        if not self._path.exists():
            logger.info("users_file_missing", path=str(self._path))
            return {}

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

        try:
            dataset = UserDataset.model_validate_json(raw)
            users = [record.to_user() for record in dataset.users]
        except (ValidationError, FinanceError) as e:
            raise CorruptDataError(f"Invalid user data in {self._path}: {e}") from e

        return {user.login: user for user in users}

    def save_users(self, users: dict[str, User]) -> None:
        dataset = UserDataset(
            users=[UserRecord.from_user(user) for user in users.values()]
        )
        payload = dataset.model_dump_json(indent=2)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e


class JsonLinesAuditStorage(AuditStorageInterface):
    """Append-only audit log, one JSON event per line."""

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_settings().storage.audit_path

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(event.model_dump_json() + "\n")
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}") from e
        return True

    def get_recent_events(self, limit: Optional[int] = 100) -> list[AuditEvent]:
        if not self._path.exists():
            return []

        try:
            with self._path.open(encoding="utf-8") as fh:
                lines = fh.readlines()
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}") from e

        events = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValidationError:
                logger.warning(
                    "audit_line_unreadable",
                    path=str(self._path),
                    line=line_number,
                )

        events.reverse()
        return events[:limit]
