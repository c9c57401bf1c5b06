"""
Streamlit Frontend for Finance Manager

This is the user interface for tracking incomes, expenses, budgets and
transfers.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Input is validated before it reaches the ledger
3. Clear error messages, the app never crashes on a domain error
4. Alerts are shown once and then cleared
5. Data is saved after every change and on logout

The ledger keeps a single process-wide session, so the service is cached
as a resource shared by every browser tab.
"""

from datetime import date

import streamlit as st

from finance_manager.config import validate_all_settings
from finance_manager.exceptions import FinanceError
from finance_manager.orchestrator import FinanceService, create_app_components
from finance_manager.services.export import (
    CsvTransactionExporter,
    ExportError,
    JsonTransactionExporter,
)
from finance_manager.services.storage import StorageError
from finance_manager.validation import InputValidator


# Page configuration
st.set_page_config(
    page_title="Finance Manager",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

EXPORTERS = {
    "CSV": CsvTransactionExporter,
    "JSON": JsonTransactionExporter,
}


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except StorageError as e:
        st.error(f"Failed to load saved data: {e}")
        return create_app_components(use_storage=False)


def save(service: FinanceService) -> None:
    try:
        service.save_data()
    except StorageError as e:
        st.error(f"Failed to save data: {e}")


def show_notifications(service: FinanceService) -> None:
    """Show queued alerts once, then clear them."""
    for message in service.get_notifications():
        st.warning(f"🔔 {message}")
    service.clear_notifications()


def main():
    """Main application entry point."""
    service, _ = get_components()
    validator = InputValidator()

    if not service.is_logged_in:
        render_auth_page(service, validator)
        return

    user = service.current_user

    # Sidebar navigation
    st.sidebar.title("💰 Finance Manager")
    st.sidebar.markdown(f"Logged in as **{user.login}**")
    if st.sidebar.button("🚪 Log out"):
        save(service)
        service.logout()
        st.rerun()
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "➕ Transactions",
            "🎯 Budgets & Categories",
            "💸 Transfer",
            "📈 Reports",
            "📁 Import / Export",
            "⚙️ Settings",
        ],
        index=0,
    )

    show_notifications(service)

    if page == "📊 Dashboard":
        render_dashboard_page(service)
    elif page == "➕ Transactions":
        render_transactions_page(service, validator)
    elif page == "🎯 Budgets & Categories":
        render_budgets_page(service, validator)
    elif page == "💸 Transfer":
        render_transfer_page(service, validator)
    elif page == "📈 Reports":
        render_reports_page(service, validator)
    elif page == "📁 Import / Export":
        render_import_export_page(service)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_auth_page(service: FinanceService, validator: InputValidator):
    """Render login and registration forms."""
    st.title("💰 Finance Manager")

    login_tab, register_tab = st.tabs(["Log in", "Register"])

    with login_tab:
        with st.form("login_form"):
            login = st.text_input("Login")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")
        if submitted:
            try:
                service.login(login, password)
                st.rerun()
            except FinanceError as e:
                st.error(str(e))

    with register_tab:
        with st.form("register_form"):
            login = st.text_input("Choose a login")
            password = st.text_input("Choose a password", type="password")
            submitted = st.form_submit_button("Register")
        if submitted:
            try:
                service.register(
                    validator.validate_login(login),
                    validator.validate_password(password),
                )
                save(service)
                st.success("Registration complete. You can log in now.")
            except FinanceError as e:
                st.error(str(e))


def render_dashboard_page(service: FinanceService):
    """Render summary metrics and budget overview."""
    st.title("📊 Dashboard")

    summary = service.get_summary()
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total income", f"{summary.total_income:,.2f}")
    col2.metric("Total expense", f"{summary.total_expense:,.2f}")
    col3.metric("Balance", f"{summary.balance:,.2f}")
    col4.metric("Transactions", summary.transaction_count)

    st.markdown("### Budgets")
    statuses = service.get_budget_statuses()
    if not statuses:
        st.info("No budgets yet. Set one on the 'Budgets & Categories' page.")
    for status in statuses.values():
        label = (
            f"**{status.category}**: {status.spent:,.2f} of {status.limit:,.2f} "
            f"(remaining {status.remaining:,.2f})"
        )
        if status.exceeded:
            st.error(f"⛔ {label}")
        elif status.near_limit:
            st.warning(f"⚠️ {label}")
        else:
            st.markdown(label)
        st.progress(min(status.usage_percentage, 100.0) / 100)

    st.markdown("### Recent activity")
    events = service.get_recent_activity(limit=10)
    if not events:
        st.caption("Nothing recorded yet.")
    for event in events:
        st.caption(f"{event.timestamp:%Y-%m-%d %H:%M} · {event.description}")


def render_transactions_page(service: FinanceService, validator: InputValidator):
    """Render transaction entry and history."""
    st.title("➕ Transactions")

    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            kind = st.radio("Type", ["Expense", "Income"], horizontal=True)
            category = st.text_input("Category")
            amount = st.text_input("Amount")
        with col2:
            tx_date = st.date_input("Date", value=date.today())
            description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        try:
            category = validator.validate_category(category)
            value = validator.parse_amount(amount)
            if kind == "Income":
                service.add_income(category, value, description, tx_date)
            else:
                service.add_expense(category, value, description, tx_date)
            save(service)
            st.success(f"{kind} added")
            show_notifications(service)
        except FinanceError as e:
            st.error(str(e))

    st.markdown("### History")
    transactions = service.get_transactions()
    if not transactions:
        st.info("No transactions yet.")
    else:
        st.dataframe(
            [
                {
                    "Date": t.date.isoformat(),
                    "Category": t.category,
                    "Type": t.type.display_name,
                    "Amount": f"{t.amount:,.2f}",
                    "Description": t.description,
                }
                for t in reversed(transactions)
            ],
            use_container_width=True,
        )

    with st.expander("🗑️ Clear all transactions"):
        st.markdown("This removes every transaction and resets all budgets.")
        if st.button("Clear transactions"):
            service.clear_transactions()
            save(service)
            st.rerun()


def render_budgets_page(service: FinanceService, validator: InputValidator):
    """Render budget and category management."""
    st.title("🎯 Budgets & Categories")

    wallet = service.wallet
    budget_tab, category_tab = st.tabs(["Budgets", "Categories"])

    with budget_tab:
        with st.form("budget_form"):
            category = st.text_input("Category")
            limit = st.text_input("Limit")
            col1, col2 = st.columns(2)
            create = col1.form_submit_button("Set budget", type="primary")
            update = col2.form_submit_button("Update limit")
        if create or update:
            try:
                category = validator.validate_category(category)
                value = validator.parse_amount(limit)
                if create:
                    service.set_budget(category, value)
                else:
                    service.update_budget(category, value)
                save(service)
                st.success(f"Budget for '{category}' saved")
            except FinanceError as e:
                st.error(str(e))

        budgets = sorted(wallet.budgets)
        if budgets:
            to_remove = st.selectbox("Remove budget", budgets)
            if st.button("Remove budget"):
                service.remove_budget(to_remove)
                save(service)
                st.rerun()

    with category_tab:
        with st.form("category_form", clear_on_submit=True):
            category = st.text_input("New category")
            submitted = st.form_submit_button("Add category")
        if submitted:
            try:
                service.add_category(validator.validate_category(category))
                save(service)
                st.success("Category added")
            except FinanceError as e:
                st.error(str(e))

        categories = sorted(wallet.categories)
        if categories:
            st.markdown(", ".join(categories))
            to_remove = st.selectbox("Remove category", categories)
            if st.button("Remove category"):
                try:
                    service.remove_category(to_remove)
                    save(service)
                    st.rerun()
                except FinanceError as e:
                    st.error(str(e))


def render_transfer_page(service: FinanceService, validator: InputValidator):
    """Render the transfer form."""
    st.title("💸 Transfer")
    st.markdown(f"Available balance: **{service.wallet.balance:,.2f}**")

    with st.form("transfer_form", clear_on_submit=True):
        recipient = st.text_input("Recipient login")
        amount = st.text_input("Amount")
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Send", type="primary")

    if submitted:
        try:
            service.transfer(recipient, validator.parse_amount(amount), description)
            save(service)
            st.success(f"Sent {amount} to {recipient}")
            show_notifications(service)
        except FinanceError as e:
            st.error(str(e))


def render_reports_page(service: FinanceService, validator: InputValidator):
    """Render category and period reports."""
    st.title("📈 Reports")

    st.markdown("### By category")
    summaries = service.get_category_summaries()
    if summaries:
        st.dataframe(
            [
                {
                    "Category": s.category,
                    "Income": f"{s.total_income:,.2f}",
                    "Expense": f"{s.total_expense:,.2f}",
                    "Budget": f"{s.budget.limit:,.2f}" if s.budget else "",
                }
                for s in summaries.values()
            ],
            use_container_width=True,
        )

    st.markdown("### Expenses for selected categories")
    selected = st.multiselect("Categories", sorted(service.wallet.categories))
    if selected:
        try:
            totals = service.get_expenses_by_selected_categories(selected)
            st.bar_chart({k: float(v) for k, v in totals.items()})
        except FinanceError as e:
            st.error(str(e))

    st.markdown("### Expenses by period")
    col1, col2 = st.columns(2)
    start = col1.date_input("From", value=date.today().replace(day=1))
    end = col2.date_input("To", value=date.today())
    try:
        start, end = validator.validate_date_range(start, end)
        totals = service.get_expenses_by_period(start, end)
        if totals:
            st.bar_chart({k: float(v) for k, v in totals.items()})
        else:
            st.info("No expenses in this period.")
    except FinanceError as e:
        st.error(str(e))


def render_import_export_page(service: FinanceService):
    """Render transaction import and export."""
    st.title("📁 Import / Export")

    fmt = st.radio("Format", list(EXPORTERS), horizontal=True)
    exporter = EXPORTERS[fmt]()

    st.markdown("### Export")
    file_name = st.text_input("File name (optional)")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save to exports folder"):
            try:
                path = service.export_transactions(exporter, file_name)
                st.success(f"Exported to {path}")
            except ExportError as e:
                st.error(str(e))
    with col2:
        st.download_button(
            "⬇️ Download",
            data=exporter.dumps(service.get_transactions()),
            file_name=f"{file_name.strip() or 'transactions'}.{exporter.extension}",
        )

    st.markdown("### Import")
    uploaded = st.file_uploader("Choose a file", type=[exporter.extension])
    if uploaded and st.button("📥 Import", type="primary"):
        try:
            transactions = exporter.loads(uploaded.read().decode("utf-8-sig"))
            count = service.import_transactions(transactions, source=uploaded.name)
            save(service)
            st.success(f"Imported {count} transactions")
        except (ExportError, FinanceError, UnicodeDecodeError) as e:
            st.error(f"Import failed: {e}")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    sections = [
        ("Storage", "storage"),
        ("Export", "export"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file or set "
        "`FINANCE_STORAGE_*` / `FINANCE_EXPORT_*` environment variables."
    )


if __name__ == "__main__":
    main()
