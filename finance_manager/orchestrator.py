"""
Main Orchestrator for Finance Manager

This module ties together the ledger, notifications, persistence and the
audit trail. The front end talks only to FinanceService.

DESIGN DECISION: The orchestrator enforces the boundaries:
- No ledger operation runs without an authenticated session
- Every check happens before any wallet is mutated
- Every mutation is audited
- Alerts are evaluated against the acting user's wallet after each expense

Session state is an explicit Session object owned by each FinanceService
instance rather than a process global. Two services sharing one user
directory therefore act as two independent sessions.
"""

import datetime
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path
from typing import Optional

from finance_manager.audit import AuditLogger
from finance_manager.config import get_settings
from finance_manager.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    InvalidCredentialError,
    InvalidStateError,
    NotFoundError,
)
from finance_manager.models.audit import AuditEvent
from finance_manager.models.ledger import (
    AmountLike,
    Budget,
    Transaction,
    TransactionType,
)
from finance_manager.models.summary import (
    BudgetStatus,
    CategorySummary,
    FinanceSummary,
)
from finance_manager.models.user import User, normalize_login
from finance_manager.models.wallet import Wallet, transfer_between
from finance_manager.notifications import NotificationService
from finance_manager.services.export import TransactionExporter
from finance_manager.services.storage import (
    InMemoryUserStorage,
    JsonFileUserStorage,
    JsonLinesAuditStorage,
    StorageError,
    UserStorageInterface,
)


class Session:
    """The authenticated user context of one FinanceService (or none)."""

    def __init__(self):
        self._user: Optional[User] = None

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def start(self, user: User) -> None:
        self._user = user

    def end(self) -> None:
        self._user = None

    def require_user(self) -> User:
        if self._user is None:
            raise InvalidStateError("User is not authenticated")
        return self._user


class FinanceService:
    """
    Entry point for every ledger operation.

    State machine: logged out -> login() -> logged in -> logout() -> logged out.
    Everything except register/login/logout requires a logged-in user and
    raises InvalidStateError otherwise.
    """

    def __init__(
        self,
        users: Optional[dict[str, User]] = None,
        notification_service: Optional[NotificationService] = None,
        audit_logger: Optional[AuditLogger] = None,
        storage: Optional[UserStorageInterface] = None,
        hash_rounds: Optional[int] = None,
        session: Optional[Session] = None,
    ):
        # Shared on purpose when passed in: the user directory outlives sessions
        self._users: dict[str, User] = users if users is not None else {}
        self._notifications = notification_service or NotificationService()
        self._audit_logger = audit_logger or AuditLogger()
        self._storage = storage
        self._hash_rounds = hash_rounds or get_settings().app.password_hash_rounds
        self._session = session or Session()

    # ------------------------------------------------------------------
    # User directory and persistence checkpoints
    # ------------------------------------------------------------------

    def initialize_users(self, users: dict[str, User]) -> None:
        """Replace the user directory with a loaded dataset."""
        self._users.clear()
        self._users.update(users)

    def load_data(self) -> int:
        """Load users from the configured storage. Returns the user count."""
        if self._storage is None:
            return len(self._users)
        try:
            users = self._storage.load_users()
        except StorageError as e:
            self._log_storage_failure("load", e)
            raise
        self.initialize_users(users)
        self._audit_logger.log_data_loaded(len(self._users), type(self._storage).__name__)
        return len(self._users)

    def save_data(self) -> None:
        """Overwrite the stored dataset with the current user directory."""
        if self._storage is None:
            return
        try:
            self._storage.save_users(self._users)
        except StorageError as e:
            self._log_storage_failure("save", e)
            raise
        self._audit_logger.log_data_saved(len(self._users), type(self._storage).__name__)

    def _log_storage_failure(self, operation: str, error: StorageError) -> None:
        self._audit_logger.log_error(
            error_type=type(error).__name__,
            error_message=str(error),
            details={"operation": operation, "storage": type(self._storage).__name__},
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def register(self, login: str, password: str) -> User:
        """
        Create a user and its wallet. Does not log in.

        Raises:
            AlreadyExistsError: login is taken (case-insensitive)
            InvalidArgumentError: login or password is empty
        """
        normalized = normalize_login(login)
        if normalized in self._users:
            raise AlreadyExistsError(f"User with login '{login}' already exists")

        user = User.register(normalized, password, rounds=self._hash_rounds)
        self._users[user.login] = user
        self._audit_logger.log_user_registered(user.login)
        return user

    def login(self, login: str, password: str) -> User:
        """
        Start a session and surface alerts inherited from earlier sessions.

        Raises:
            NotFoundError: no such user
            InvalidCredentialError: wrong password
        """
        normalized = normalize_login(login)
        user = self._users.get(normalized)
        if user is None:
            self._audit_logger.log_login_failed(normalized, "unknown user")
            raise NotFoundError(f"User with login '{login}' not found")

        if not user.verify_password(password):
            self._audit_logger.log_login_failed(normalized, "wrong password")
            raise InvalidCredentialError("Invalid password")

        self._session.start(user)
        self._audit_logger.log_user_logged_in(user.login)

        for message in self._notifications.check_initial_notifications(user.wallet):
            self._audit_logger.log_notification(user.login, message)
        return user

    def logout(self) -> None:
        user = self._session.user
        self._session.end()
        self._notifications.clear_notifications()
        if user is not None:
            self._audit_logger.log_user_logged_out(user.login)

    @property
    def current_user(self) -> Optional[User]:
        return self._session.user

    @property
    def is_logged_in(self) -> bool:
        return self._session.is_authenticated

    @property
    def users(self) -> dict[str, User]:
        return dict(self._users)

    @property
    def wallet(self) -> Wallet:
        return self._session.require_user().wallet

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def add_income(
        self,
        category: str,
        amount: AmountLike,
        description: Optional[str] = None,
        date: Optional[datetime.date] = None,
    ) -> Transaction:
        user = self._session.require_user()
        transaction = Transaction(
            category=category,
            amount=amount,
            type=TransactionType.INCOME,
            date=date,
            description=description,
        )
        user.wallet.add_transaction(transaction)
        self._audit_logger.log_transaction_added(user.login, transaction)
        return transaction

    def add_expense(
        self,
        category: str,
        amount: AmountLike,
        description: Optional[str] = None,
        date: Optional[datetime.date] = None,
    ) -> Transaction:
        """Record an expense, then check the category budget and the balance."""
        user = self._session.require_user()
        transaction = Transaction(
            category=category,
            amount=amount,
            type=TransactionType.EXPENSE,
            date=date,
            description=description,
        )
        user.wallet.add_transaction(transaction)
        self._audit_logger.log_transaction_added(user.login, transaction)
        self._check_after_expense(user, transaction.category)
        return transaction

    def transfer(
        self,
        to_login: str,
        amount: AmountLike,
        description: Optional[str] = None,
    ) -> tuple[Transaction, Transaction]:
        """
        Send money to another user.

        Returns:
            (expense_leg on the sender, income_leg on the recipient)

        Raises:
            NotFoundError: recipient does not exist
            InvalidArgumentError: amount is not positive, or recipient is the sender
            InsufficientFundsError: sender balance is below amount
        """
        sender = self._session.require_user()
        # A blank login names nobody, so it is reported like any unknown one
        recipient = self._users.get((to_login or "").strip().lower())
        if recipient is None:
            raise NotFoundError(f"Recipient with login '{to_login}' not found")

        expense_leg, income_leg = transfer_between(
            sender=sender.wallet,
            recipient=recipient.wallet,
            amount=amount,
            sender_login=sender.login,
            recipient_login=recipient.login,
            description=description,
        )
        self._audit_logger.log_transfer(
            sender.login, recipient.login, expense_leg, income_leg,
        )
        self._check_after_expense(sender, expense_leg.category)
        return expense_leg, income_leg

    def clear_transactions(self) -> None:
        user = self._session.require_user()
        count = len(user.wallet.transactions)
        user.wallet.clear_transactions()
        self._audit_logger.log_transactions_cleared(user.login, count)

    def import_transactions(
        self,
        transactions: Iterable[Transaction],
        source: str = "import",
    ) -> int:
        """Replay transactions into the current wallet. Returns how many."""
        user = self._session.require_user()
        transactions = list(transactions)
        user.wallet.import_transactions(transactions)
        self._audit_logger.log_transactions_imported(user.login, len(transactions), source)
        return len(transactions)

    def export_transactions(
        self,
        exporter: TransactionExporter,
        file_name: Optional[str] = None,
    ) -> Path:
        user = self._session.require_user()
        transactions = user.wallet.transactions
        path = exporter.export_transactions(transactions, file_name)
        self._audit_logger.log_transactions_exported(user.login, len(transactions), str(path))
        return path

    def get_transactions(self) -> list[Transaction]:
        return list(self.wallet.transactions)

    # ------------------------------------------------------------------
    # Budgets and categories
    # ------------------------------------------------------------------

    def set_budget(self, category: str, limit: AmountLike) -> Budget:
        user = self._session.require_user()
        budget = user.wallet.set_budget(category, limit)
        self._audit_logger.log_budget_set(user.login, budget.category, str(budget.limit))
        return budget

    def update_budget(self, category: str, new_limit: AmountLike) -> Budget:
        user = self._session.require_user()
        budget = user.wallet.update_budget(category, new_limit)
        self._audit_logger.log_budget_updated(user.login, budget.category, str(budget.limit))
        return budget

    def remove_budget(self, category: str) -> None:
        user = self._session.require_user()
        user.wallet.remove_budget(category)
        self._audit_logger.log_budget_removed(user.login, category.strip())

    def add_category(self, category: str) -> str:
        user = self._session.require_user()
        category = user.wallet.add_category(category)
        self._audit_logger.log_category_added(user.login, category)
        return category

    def remove_category(self, category: str) -> None:
        user = self._session.require_user()
        user.wallet.remove_category(category)
        self._audit_logger.log_category_removed(user.login, category.strip())

    # ------------------------------------------------------------------
    # Reports (recomputed on every call)
    # ------------------------------------------------------------------

    def get_summary(self) -> FinanceSummary:
        wallet = self.wallet
        return FinanceSummary(
            total_income=wallet.total_income(),
            total_expense=wallet.total_expense(),
            balance=wallet.balance,
            transaction_count=len(wallet.transactions),
        )

    def get_category_summaries(self) -> dict[str, CategorySummary]:
        wallet = self.wallet
        summaries = {}
        for category in sorted(wallet.categories):
            budget = wallet.get_budget(category)
            expense = wallet.expense_by_category(category)
            summaries[category] = CategorySummary(
                category=category,
                total_income=wallet.income_by_category(category),
                total_expense=expense,
                budget=BudgetStatus.from_budget(budget, expense) if budget else None,
            )
        return summaries

    def get_budget_statuses(self) -> dict[str, BudgetStatus]:
        wallet = self.wallet
        return {
            category: BudgetStatus.from_budget(
                budget, wallet.expense_by_category(category)
            )
            for category, budget in sorted(wallet.budgets.items())
        }

    def get_expenses_by_selected_categories(
        self,
        categories: Iterable[str],
    ) -> dict[str, Decimal]:
        """
        Expense totals for the selected categories.

        Raises:
            NotFoundError: listing every selected category the wallet doesn't know
        """
        wallet = self.wallet
        selected = [c.strip() for c in categories]
        missing = sorted({c for c in selected if c not in wallet.categories})
        if missing:
            raise NotFoundError(f"Categories not found: {', '.join(missing)}")
        return wallet.expenses_by_categories(dict.fromkeys(selected))

    def get_expenses_by_period(
        self,
        start: datetime.date,
        end: datetime.date,
    ) -> dict[str, Decimal]:
        wallet = self.wallet
        if start > end:
            raise InvalidArgumentError("Start date cannot be after end date")
        return wallet.expenses_by_period(start, end)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def get_notifications(self) -> list[str]:
        return self._notifications.get_notifications()

    def clear_notifications(self) -> None:
        self._notifications.clear_notifications()

    def get_recent_activity(self, limit: int = 20) -> list[AuditEvent]:
        """The current user's latest audit events, newest first."""
        user = self._session.require_user()
        return self._audit_logger.get_recent_events(
            limit=limit, user_login=user.login,
        )

    def _check_after_expense(self, user: User, category: str) -> None:
        # Order matters for display: exceeded, then balance, then threshold
        wallet = user.wallet
        raised = [
            self._notifications.check_budget_exceeded(wallet, category),
            self._notifications.check_balance_status(wallet),
            self._notifications.check_budget_threshold(wallet, category),
        ]
        for message in raised:
            if message is not None:
                self._audit_logger.log_notification(user.login, message)


def create_app_components(
    use_storage: bool = True,
    data_dir: Optional[Path] = None,
) -> tuple[FinanceService, UserStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to JSON files.
                    Set to False to keep everything in memory.
        data_dir: Override the configured data directory.

    Returns:
        (finance_service, user_storage) with users already loaded
    """
    settings = get_settings()

    if use_storage:
        storage_settings = settings.storage
        base_dir = Path(data_dir) if data_dir else storage_settings.data_dir
        user_storage: UserStorageInterface = JsonFileUserStorage(
            base_dir / storage_settings.users_file
        )
        audit_logger = AuditLogger(
            JsonLinesAuditStorage(base_dir / storage_settings.audit_file)
        )
    else:
        user_storage = InMemoryUserStorage()
        audit_logger = AuditLogger()  # Local-only logging

    service = FinanceService(
        audit_logger=audit_logger,
        storage=user_storage,
        hash_rounds=settings.app.password_hash_rounds,
    )
    service.load_data()

    return service, user_storage
