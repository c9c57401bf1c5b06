"""
Tests for the FinanceService orchestrator.

Flows run end to end against an in-memory user directory.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from finance_manager.exceptions import (
    AlreadyExistsError,
    InsufficientFundsError,
    InvalidArgumentError,
    InvalidCredentialError,
    InvalidStateError,
    NotFoundError,
)
from finance_manager.audit import AuditLogger
from finance_manager.models.audit import AuditEventType
from finance_manager.models.ledger import Transaction
from finance_manager.orchestrator import FinanceService, Session, create_app_components
from finance_manager.services.export import CsvTransactionExporter, JsonTransactionExporter
from finance_manager.services.storage import (
    InMemoryUserStorage,
    JsonFileUserStorage,
    JsonLinesAuditStorage,
    StorageError,
)


class RecordingAuditLogger:
    """Collects audit calls instead of writing them anywhere."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if not name.startswith("log"):
            raise AttributeError(name)

        def record(*args, **kwargs):
            self.calls.append((name, args))
        return record

    def names(self):
        return [name for name, _ in self.calls]


class TestSession:
    """Tests for the session object."""

    def test_lifecycle(self):
        session = Session()
        assert not session.is_authenticated
        with pytest.raises(InvalidStateError):
            session.require_user()


class TestAuthentication:
    """Tests for register/login/logout."""

    def test_register_does_not_log_in(self, service):
        user = service.register("  Alice ", "secret1")
        assert user.login == "alice"
        assert not service.is_logged_in
        assert "alice" in service.users

    def test_register_duplicate_is_case_insensitive(self, service):
        service.register("alice", "secret1")
        with pytest.raises(AlreadyExistsError):
            service.register("ALICE", "other")

    def test_register_empty_login(self, service):
        with pytest.raises(InvalidArgumentError):
            service.register("   ", "secret1")

    def test_login(self, service):
        service.register("alice", "secret1")
        user = service.login("Alice", "secret1")
        assert service.is_logged_in
        assert service.current_user is user

    def test_login_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.login("nobody", "secret1")
        assert not service.is_logged_in

    def test_login_wrong_password(self, service):
        service.register("alice", "secret1")
        with pytest.raises(InvalidCredentialError):
            service.login("alice", "secret2")
        assert not service.is_logged_in

    def test_logout_clears_session_and_notifications(self, alice):
        alice.add_expense("Food", 10)
        assert alice.get_notifications()

        alice.logout()

        assert not alice.is_logged_in
        assert alice.current_user is None
        assert alice.get_notifications() == []

    def test_second_login_replaces_session(self, alice):
        alice.register("bob", "secret2")
        alice.login("bob", "secret2")
        assert alice.current_user.login == "bob"

    @pytest.mark.parametrize("operation", [
        lambda s: s.add_income("Salary", 100),
        lambda s: s.add_expense("Food", 100),
        lambda s: s.transfer("bob", 10),
        lambda s: s.set_budget("Food", 100),
        lambda s: s.update_budget("Food", 100),
        lambda s: s.remove_budget("Food"),
        lambda s: s.add_category("Food"),
        lambda s: s.remove_category("Food"),
        lambda s: s.clear_transactions(),
        lambda s: s.import_transactions([]),
        lambda s: s.get_transactions(),
        lambda s: s.get_summary(),
        lambda s: s.get_category_summaries(),
        lambda s: s.get_budget_statuses(),
        lambda s: s.get_expenses_by_selected_categories(["Food"]),
        lambda s: s.get_expenses_by_period(date.today(), date.today()),
        lambda s: s.get_recent_activity(),
        lambda s: s.wallet,
    ])
    def test_operations_require_login(self, service, operation):
        with pytest.raises(InvalidStateError, match="not authenticated"):
            operation(service)


class TestLedgerOperations:
    """Tests for income, expense and summaries."""

    def test_summary_scenario(self, alice):
        """Income 50000 and expense 3000 leave a balance of 47000."""
        alice.add_income("Salary", 50000)
        alice.add_expense("Food", 3000)

        summary = alice.get_summary()

        assert summary.total_income == Decimal("50000")
        assert summary.total_expense == Decimal("3000")
        assert summary.balance == Decimal("47000")
        assert summary.transaction_count == 2

    def test_income_keeps_given_date(self, alice):
        when = date(2024, 5, 17)
        t = alice.add_income("Salary", 100, "May pay", when)
        assert t.date == when
        assert t.description == "May pay"

    def test_invalid_amount_changes_nothing(self, alice):
        with pytest.raises(InvalidArgumentError):
            alice.add_expense("Food", 0)
        with pytest.raises(InvalidArgumentError):
            alice.add_income("  ", 10)
        assert alice.get_transactions() == []
        assert alice.wallet.balance == Decimal("0")

    def test_clear_transactions(self, alice):
        alice.add_income("Salary", 100)
        alice.set_budget("Food", 50)
        alice.add_expense("Food", 20)

        alice.clear_transactions()

        assert alice.get_transactions() == []
        assert alice.get_summary().balance == Decimal("0")
        assert alice.get_budget_statuses()["Food"].spent == Decimal("0")


class TestBudgetsAndNotifications:
    """Tests for budget status and the alerts raised by expenses."""

    def test_near_limit_scenario(self, alice):
        alice.add_income("Salary", 10000)
        alice.set_budget("Food", 5000)
        alice.add_expense("Food", 4000)

        status = alice.get_budget_statuses()["Food"]

        assert status.spent == Decimal("4000")
        assert status.remaining == Decimal("1000")
        assert status.usage_percentage == 80.0
        assert status.near_limit
        assert not status.exceeded
        notes = alice.get_notifications()
        assert len(notes) == 1
        assert notes[0].startswith("Approaching limit!")

    def test_exceeded_scenario(self, alice):
        alice.add_income("Salary", 10000)
        alice.set_budget("Food", 5000)
        alice.add_expense("Food", 6000)

        status = alice.get_budget_statuses()["Food"]

        assert status.exceeded
        assert status.remaining == Decimal("-1000")
        notes = alice.get_notifications()
        assert len(notes) == 1
        assert notes[0].startswith("BUDGET EXCEEDED!")

    def test_alert_order_after_expense(self, alice):
        """Exceeded comes before the negative balance alert."""
        alice.set_budget("Food", 100)
        alice.add_expense("Food", 150)

        notes = alice.get_notifications()

        assert notes[0].startswith("BUDGET EXCEEDED!")
        assert notes[1].startswith("NEGATIVE BALANCE!")
        assert len(notes) == 2

    def test_budget_back_fill(self, alice):
        alice.add_income("Salary", 1000)
        alice.add_expense("Food", 300)
        budget = alice.set_budget("Food", 500)
        assert budget.spent == Decimal("300")

    def test_budget_errors(self, alice):
        alice.set_budget("Food", 500)
        with pytest.raises(AlreadyExistsError):
            alice.set_budget("Food", 600)
        with pytest.raises(NotFoundError):
            alice.update_budget("Rent", 600)
        with pytest.raises(InvalidArgumentError):
            alice.set_budget("Rent", -1)

    def test_update_and_remove_budget(self, alice):
        alice.set_budget("Food", 500)
        alice.update_budget("Food", 800)
        assert alice.get_budget_statuses()["Food"].limit == Decimal("800")
        alice.remove_budget("Food")
        assert alice.get_budget_statuses() == {}

    def test_login_surfaces_inherited_alerts(self, service):
        service.register("alice", "secret1")
        service.login("alice", "secret1")
        service.set_budget("Food", 100)
        service.add_expense("Food", 90)
        service.logout()

        service.login("alice", "secret1")

        notes = service.get_notifications()
        assert any(n.startswith("Approaching limit!") for n in notes)
        assert any(n.startswith("NEGATIVE BALANCE!") for n in notes)

    def test_clear_notifications(self, alice):
        alice.add_expense("Food", 1)
        alice.clear_notifications()
        assert alice.get_notifications() == []


class TestCategories:
    """Tests for category management through the service."""

    def test_add_and_remove(self, alice):
        assert alice.add_category(" Travel ") == "Travel"
        alice.set_budget("Travel", 100)
        alice.remove_category("Travel")
        assert "Travel" not in alice.wallet.categories
        assert "Travel" not in alice.get_budget_statuses()

    def test_remove_category_in_use(self, alice):
        alice.add_expense("Food", 5)
        with pytest.raises(InvalidStateError):
            alice.remove_category("Food")


class TestTransfers:
    """Tests for transfers between users."""

    @pytest.fixture
    def funded(self, alice):
        alice.register("bob", "secret2")
        alice.add_income("Salary", 1000)
        return alice

    def test_transfer(self, funded):
        expense_leg, income_leg = funded.transfer("Bob", 300, "dinner")

        assert funded.wallet.balance == Decimal("700")
        bob = funded.users["bob"]
        assert bob.wallet.balance == Decimal("300")
        assert bob.wallet.transactions == (income_leg,)
        assert income_leg.category == "Transfer from alice"
        assert expense_leg.category == "Transfer to bob"
        # The session still belongs to the sender
        assert funded.current_user.login == "alice"

    def test_unknown_recipient(self, funded):
        with pytest.raises(NotFoundError):
            funded.transfer("carol", 10)
        assert funded.wallet.balance == Decimal("1000")

    def test_unknown_recipient_checked_before_amount(self, funded):
        with pytest.raises(NotFoundError):
            funded.transfer("carol", -10)

    @pytest.mark.parametrize("login", ["", "   "])
    def test_blank_recipient_is_unknown(self, funded, login):
        with pytest.raises(NotFoundError):
            funded.transfer(login, 10)
        assert funded.wallet.balance == Decimal("1000")

    def test_non_positive_amount(self, funded):
        with pytest.raises(InvalidArgumentError):
            funded.transfer("bob", 0)

    def test_insufficient_funds(self, funded):
        with pytest.raises(InsufficientFundsError):
            funded.transfer("bob", "1000.01")
        assert funded.wallet.balance == Decimal("1000")
        assert funded.users["bob"].wallet.balance == Decimal("0")

    def test_transfer_to_self(self, funded):
        with pytest.raises(InvalidArgumentError):
            funded.transfer("alice", 10)

    def test_wallets_are_independent(self, service):
        """Mutating one user's wallet never changes another's balance."""
        service.register("a_user", "secret1")
        service.register("b_user", "secret2")

        service.login("a_user", "secret1")
        service.add_income("Salary", 50000)
        service.add_expense("Food", 10000)
        service.logout()

        service.login("b_user", "secret2")
        service.add_income("Salary", 100000)
        service.add_expense("Rent", 30000)
        service.logout()

        users = service.users
        assert users["a_user"].wallet.balance == Decimal("40000")
        assert users["b_user"].wallet.balance == Decimal("70000")

        service.login("a_user", "secret1")
        service.add_expense("Food", 5000)
        assert service.users["b_user"].wallet.balance == Decimal("70000")


class TestReports:
    """Tests for read-only reports."""

    @pytest.fixture
    def filled(self, alice):
        alice.add_income("Salary", 1000, date=date(2024, 1, 1))
        alice.add_expense("Food", 30, date=date(2024, 1, 10))
        alice.add_expense("Rent", 500, date=date(2024, 1, 31))
        alice.add_expense("Food", 20, date=date(2024, 2, 1))
        alice.add_category("Travel")
        alice.set_budget("Food", 100)
        return alice

    def test_category_summaries(self, filled):
        summaries = filled.get_category_summaries()

        assert list(summaries) == ["Food", "Rent", "Salary", "Travel"]
        food = summaries["Food"]
        assert food.total_expense == Decimal("50")
        assert food.budget.spent == Decimal("50")
        assert summaries["Salary"].total_income == Decimal("1000")
        assert summaries["Travel"].budget is None

    def test_selected_categories(self, filled):
        totals = filled.get_expenses_by_selected_categories(["Food", "Travel"])
        assert totals == {"Food": Decimal("50"), "Travel": Decimal("0")}

    def test_selected_categories_unknown(self, filled):
        with pytest.raises(NotFoundError, match="Categories not found: Cars, Pets"):
            filled.get_expenses_by_selected_categories(["Food", "Pets", "Cars"])

    def test_expenses_by_period(self, filled):
        totals = filled.get_expenses_by_period(date(2024, 1, 1), date(2024, 1, 31))
        assert totals == {"Food": Decimal("30"), "Rent": Decimal("500")}

    def test_expenses_by_period_reversed(self, filled):
        today = date.today()
        with pytest.raises(InvalidArgumentError):
            filled.get_expenses_by_period(today, today - timedelta(days=1))


class TestImportExport:
    """Tests for interchange through the service."""

    @pytest.mark.parametrize("exporter_cls", [CsvTransactionExporter, JsonTransactionExporter])
    def test_export_then_import_into_other_user(self, alice, tmp_path, exporter_cls):
        alice.add_income("Salary", "1234.56", "Jan", date(2024, 1, 31))
        alice.add_expense("Food", "12.345", "", date(2024, 2, 1))
        original = alice.get_transactions()

        exporter = exporter_cls(export_dir=tmp_path)
        path = alice.export_transactions(exporter, "backup")
        assert path == tmp_path / f"backup.{exporter.extension}"

        alice.register("bob", "secret2")
        alice.login("bob", "secret2")
        count = alice.import_transactions(exporter.import_transactions(path), str(path))

        assert count == 2
        imported = alice.get_transactions()
        for before, after in zip(original, imported):
            assert after.id == before.id
            assert after.category == before.category
            assert after.amount == before.amount
            assert after.type == before.type
            assert after.date == before.date
            assert after.description == before.description
        assert alice.wallet.balance == Decimal("1222.215")

    def test_import_applies_budget_side_effects(self, alice):
        alice.set_budget("Food", 100)
        alice.import_transactions([
            Transaction(category="Food", amount=90, type="expense"),
        ])
        assert alice.get_budget_statuses()["Food"].near_limit

    def test_import_out_of_range_changes_nothing(self, alice):
        exporter = JsonTransactionExporter(export_dir=".")
        content = exporter.dumps([
            Transaction(category="Salary", amount="9E+999999", type="income"),
            Transaction(category="Salary", amount="9E+999999", type="income"),
        ])
        loaded = exporter.loads(content)

        with pytest.raises(InvalidArgumentError):
            alice.import_transactions(loaded, source="huge.json")

        assert alice.get_transactions() == []
        assert alice.get_summary().balance == Decimal("0")


class TestAuditing:
    """Tests that mutations are audited."""

    def test_flow_is_audited(self, hash_rounds):
        audit = RecordingAuditLogger()
        service = FinanceService(audit_logger=audit, hash_rounds=hash_rounds)

        service.register("alice", "secret1")
        with pytest.raises(InvalidCredentialError):
            service.login("alice", "wrong")
        service.login("alice", "secret1")
        service.add_income("Salary", 100)
        service.set_budget("Food", 50)
        service.add_expense("Food", 45)
        service.logout()

        assert audit.names() == [
            "log_user_registered",
            "log_login_failed",
            "log_user_logged_in",
            "log_transaction_added",
            "log_budget_set",
            "log_transaction_added",
            "log_notification",
            "log_user_logged_out",
        ]

    def test_audit_events_reach_storage(self, tmp_path):
        service, _ = create_app_components(use_storage=True, data_dir=tmp_path)
        service.register("alice", "secret1")

        events = JsonLinesAuditStorage(tmp_path / "audit.jsonl").get_recent_events()
        assert events[0].event_type == AuditEventType.USER_REGISTERED

    def test_storage_failure_is_audited_and_raised(self, hash_rounds):
        class BrokenStorage(InMemoryUserStorage):
            def save_users(self, users):
                raise StorageError("disk full")

        audit = RecordingAuditLogger()
        service = FinanceService(
            audit_logger=audit, storage=BrokenStorage(), hash_rounds=hash_rounds,
        )
        service.register("alice", "secret1")

        with pytest.raises(StorageError, match="disk full"):
            service.save_data()

        assert audit.names()[-1] == "log_error"
        assert "log_data_saved" not in audit.names()

    def test_recent_activity_is_per_user(self, tmp_path, hash_rounds):
        audit = AuditLogger(JsonLinesAuditStorage(tmp_path / "audit.jsonl"))
        service = FinanceService(audit_logger=audit, hash_rounds=hash_rounds)
        service.register("alice", "secret1")
        service.register("bob", "secret2")
        service.login("bob", "secret2")
        service.add_income("Salary", 10)
        service.login("alice", "secret1")
        service.add_income("Salary", 100)
        service.set_budget("Food", 50)

        activity = service.get_recent_activity()

        assert [e.event_type for e in activity] == [
            AuditEventType.BUDGET_SET,
            AuditEventType.INCOME_ADDED,
            AuditEventType.USER_LOGGED_IN,
            AuditEventType.USER_REGISTERED,
        ]
        assert all(e.user_login == "alice" for e in activity)
        assert len(service.get_recent_activity(limit=2)) == 2

    def test_recent_activity_without_audit_storage(self, alice):
        assert alice.get_recent_activity() == []


class TestPersistence:
    """Tests for load/save checkpoints."""

    def test_save_and_reload(self, tmp_path, hash_rounds):
        storage = JsonFileUserStorage(tmp_path / "users.json")
        first = FinanceService(storage=storage, hash_rounds=hash_rounds)
        first.register("alice", "secret1")
        first.login("alice", "secret1")
        first.add_income("Salary", 1000)
        first.set_budget("Food", 100)
        first.add_expense("Food", 85)
        first.save_data()

        second = FinanceService(storage=storage, hash_rounds=hash_rounds)
        assert second.load_data() == 1
        second.login("alice", "secret1")

        assert second.wallet.balance == Decimal("915")
        assert second.get_budget_statuses()["Food"].spent == Decimal("85")
        assert any(n.startswith("Approaching limit!") for n in second.get_notifications())

    def test_without_storage(self, alice):
        alice.save_data()
        assert alice.load_data() == 1

    def test_initialize_users(self, service, hash_rounds):
        storage = InMemoryUserStorage()
        other = FinanceService(storage=storage, hash_rounds=hash_rounds)
        other.register("alice", "secret1")
        other.save_data()

        service.initialize_users(storage.load_users())
        service.login("alice", "secret1")
        assert service.current_user.login == "alice"

    def test_create_app_components_in_memory(self):
        service, storage = create_app_components(use_storage=False)
        assert isinstance(storage, InMemoryUserStorage)
        assert service.users == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
