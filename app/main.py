"""
Streamlit Frontend for the Ledger

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages for every refused operation
3. Visual feedback for all operations
4. No hidden actions

The UI only talks to the use cases and reports on LedgerApp. It never
touches repositories or entities' internals directly.
"""

from datetime import date, timedelta
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from finledger.audit import configure_logging
from finledger.config import get_settings, validate_all_settings
from finledger.demo import seed_demo_data
from finledger.models import (
    AccountType,
    BillStatus,
    InvoiceStatus,
    LedgerError,
    Money,
    TransactionCategory,
    TransactionType,
)
from finledger.orchestrator import LedgerApp, create_app_components
from finledger.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Ledger",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Errors a user can cause and fix themselves
USER_ERRORS = (LedgerError, StorageError, ValidationError)


@st.cache_resource
def get_app() -> LedgerApp:
    """Get or create application components (cached)."""
    app_settings = get_settings().app
    configure_logging(app_settings.log_level, app_settings.log_json)
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize storage: {e}")
        return create_app_components(use_storage=False)


def label(value) -> str:
    return value.value.replace("_", " ").title()


def main():
    """Main application entry point."""
    app = get_app()

    # Sidebar navigation
    st.sidebar.title("💰 Ledger")
    st.sidebar.caption(f"Storage: {app.backend} · Currency: {app.currency}")
    st.sidebar.markdown("---")

    pages = {
        "📊 Dashboard": render_dashboard_page,
        "🏦 Accounts": render_accounts_page,
        "💳 Credit Cards": render_credit_cards_page,
        "🧾 Invoices": render_invoices_page,
        "📄 Bills": render_bills_page,
        "💸 Transactions": render_transactions_page,
        "👥 People": render_people_page,
        "📈 Reports": render_reports_page,
        "⚙️ Settings": render_settings_page,
    }
    page = st.sidebar.radio("Navigate to:", list(pages), index=0)

    st.sidebar.markdown("---")
    if st.sidebar.button("Load demo data"):
        try:
            seed_demo_data(app)
            st.sidebar.success("Demo data loaded")
        except USER_ERRORS as e:
            st.sidebar.error(str(e))

    pages[page](app)


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard_page(app: LedgerApp):
    st.title("📊 Dashboard")

    summary = app.reports.dashboard_summary()

    col1, col2, col3 = st.columns(3)
    col1.metric("Total balance", str(summary.total_balance))
    col2.metric("Income this month", str(summary.month_income))
    col3.metric("Expenses this month", str(summary.month_expenses))

    if summary.overdue_bill_count:
        st.warning(f"⚠️ {summary.overdue_bill_count} overdue bill(s)")
    if summary.next_due_bill:
        bill = summary.next_due_bill
        st.info(f"Next bill due: **{bill.name}** on {bill.due_date:%b %d} ({bill.get_remaining_amount()} left)")

    st.markdown("### Recent transactions")
    if not summary.recent_transactions:
        st.info("No transactions in the recent window.")
    for txn in summary.recent_transactions:
        sign = "-" if txn.is_debit() else "+"
        st.write(f"{txn.date:%b %d} · {label(txn.category)} · {txn.description} · {sign}{txn.amount}")


# =============================================================================
# ACCOUNTS
# =============================================================================

def render_accounts_page(app: LedgerApp):
    st.title("🏦 Accounts")

    with st.expander("➕ New account"):
        with st.form("new_account"):
            name = st.text_input("Name")
            account_type = st.selectbox("Type", list(AccountType), format_func=label)
            balance = st.number_input("Initial balance", value=0.0, step=0.01)
            description = st.text_input("Description")
            if st.form_submit_button("Create"):
                try:
                    app.accounts.create_account(
                        name, account_type, Money.of(balance, app.currency), description
                    )
                    st.success(f"Account {name} created")
                except USER_ERRORS as e:
                    st.error(str(e))

    accounts = app.accounts.list_accounts()
    if not accounts:
        st.info("No accounts yet.")
        return

    for account in accounts:
        st.markdown(f"**{account.name}** ({label(account.type)}): {account.balance}")

    st.markdown("---")
    st.markdown("### Move money")
    names = {a.id: a.name for a in accounts}
    with st.form("account_ops"):
        operation = st.radio("Operation", ["Deposit", "Withdraw", "Transfer"], horizontal=True)
        account_id = st.selectbox("Account", list(names), format_func=names.get)
        target_id = st.selectbox("Transfer to", list(names), format_func=names.get)
        amount = st.number_input("Amount", min_value=0.0, step=0.01)
        if st.form_submit_button("Apply"):
            money = Money.of(amount, app.currency)
            try:
                if operation == "Deposit":
                    app.accounts.deposit(account_id, money)
                elif operation == "Withdraw":
                    app.accounts.withdraw(account_id, money)
                else:
                    app.accounts.transfer(account_id, target_id, money)
                st.success(f"{operation} of {money} done")
            except USER_ERRORS as e:
                st.error(str(e))


# =============================================================================
# CREDIT CARDS AND INVOICES
# =============================================================================

def render_credit_cards_page(app: LedgerApp):
    st.title("💳 Credit Cards")

    accounts = app.accounts.list_accounts()
    names = {a.id: a.name for a in accounts}

    with st.expander("➕ New card"):
        if not accounts:
            st.info("Create an account first.")
        else:
            with st.form("new_card"):
                account_id = st.selectbox("Account", list(names), format_func=names.get)
                name = st.text_input("Name")
                digits = st.text_input("Last four digits", max_chars=4)
                limit = st.number_input("Credit limit", min_value=0.0, step=100.0)
                due_day = st.number_input("Due day", min_value=1, max_value=31, value=10)
                if st.form_submit_button("Create"):
                    try:
                        app.credit_cards.create_credit_card(
                            account_id, name, digits, Money.of(limit, app.currency), int(due_day)
                        )
                        st.success(f"Card {name} created")
                    except USER_ERRORS as e:
                        st.error(str(e))

    for card in app.credit_cards.list_credit_cards():
        st.markdown(
            f"**{card.name}** •••• {card.last_four_digits}: "
            f"{card.current_balance} of {card.credit_limit} "
            f"({card.get_utilization_percentage():.1f}% used, due day {card.due_day})"
        )
        with st.form(f"pay_{card.id}"):
            amount = st.number_input("Pay from linked account", min_value=0.0, step=0.01, key=f"amt_{card.id}")
            if st.form_submit_button("Pay"):
                try:
                    app.credit_cards.make_payment(card.id, Money.of(amount, app.currency))
                    st.success("Payment applied")
                except USER_ERRORS as e:
                    st.error(str(e))


def render_invoices_page(app: LedgerApp):
    st.title("🧾 Invoices")

    cards = app.credit_cards.list_credit_cards()
    if not cards:
        st.info("No credit cards yet.")
        return

    names = {c.id: f"{c.name} •••• {c.last_four_digits}" for c in cards}
    card_id = st.selectbox("Card", list(names), format_func=names.get)

    col1, col2 = st.columns(2)
    if col1.button("Open current invoice"):
        try:
            app.invoices.get_current_invoice(card_id)
        except USER_ERRORS as e:
            st.error(str(e))
    if col2.button("Refresh overdue status"):
        changed = app.invoices.update_overdue_invoices(card_id)
        st.info(f"{len(changed)} invoice(s) marked overdue")

    for invoice in app.invoices.list_invoices_by_card(card_id):
        st.markdown(
            f"**{invoice.reference_month}** ({label(invoice.status)}) · "
            f"{invoice.statement_period} · due {invoice.due_date_formatted}"
        )
        st.write(
            f"Previous {invoice.previous_balance} + charges {invoice.total_charges} "
            f"- payments {invoice.total_payments} = **{invoice.closing_balance}**"
        )
        if invoice.status == InvoiceStatus.OPEN:
            col1, col2 = st.columns(2)
            if col1.button("Close", key=f"close_{invoice.id}"):
                try:
                    app.invoices.close_invoice(invoice.id, create_next=True)
                    st.success("Invoice closed")
                except USER_ERRORS as e:
                    st.error(str(e))
            with col2.form(f"pay_invoice_{invoice.id}"):
                amount = st.number_input("Payment", min_value=0.0, step=0.01, key=f"inv_{invoice.id}")
                if st.form_submit_button("Record payment"):
                    try:
                        app.invoices.process_payment(invoice.id, Money.of(amount, app.currency))
                        st.success("Payment recorded")
                    except USER_ERRORS as e:
                        st.error(str(e))


# =============================================================================
# BILLS
# =============================================================================

def render_bills_page(app: LedgerApp):
    st.title("📄 Bills")

    with st.expander("➕ New bill"):
        with st.form("new_bill"):
            name = st.text_input("Name")
            description = st.text_input("Description")
            start = st.date_input("Start date", value=date.today().replace(day=1))
            end = st.date_input("End date", value=date.today())
            due = st.date_input("Due date", value=date.today() + timedelta(days=10))
            total = st.number_input("Total amount", min_value=0.0, step=0.01)
            if st.form_submit_button("Create"):
                try:
                    app.bills.create_bill(name, description, start, end, due, Money.of(total, app.currency))
                    st.success(f"Bill {name} created")
                except USER_ERRORS as e:
                    st.error(str(e))

    status_filter = st.selectbox(
        "Filter by status",
        options=[None] + list(BillStatus),
        format_func=lambda x: "All" if x is None else label(x),
    )
    if st.button("Refresh overdue status"):
        changed = app.bills.refresh_overdue_bills()
        st.info(f"{len(changed)} bill(s) updated")

    bills = app.bills.get_bills_by_status(status_filter) if status_filter else app.bills.list_bills()
    for bill in bills:
        st.markdown(
            f"**{bill.name}** ({label(bill.status)}) · {bill.start_date} to {bill.end_date} · "
            f"due {bill.due_date} · paid {bill.paid_amount} of {bill.total_amount} "
            f"({bill.get_payment_percentage():.0f}%)"
        )
        col1, col2 = st.columns(2)
        with col1.form(f"bill_pay_{bill.id}"):
            amount = st.number_input("Payment", min_value=0.0, step=0.01, key=f"bill_amt_{bill.id}")
            if st.form_submit_button("Add payment"):
                try:
                    app.bills.add_payment(bill.id, Money.of(amount, app.currency))
                    st.success("Payment added")
                except USER_ERRORS as e:
                    st.error(str(e))
        if col2.button("Close bill", key=f"bill_close_{bill.id}"):
            try:
                app.bills.close_bill(bill.id)
                st.success("Bill closed")
            except USER_ERRORS as e:
                st.error(str(e))


# =============================================================================
# TRANSACTIONS
# =============================================================================

def render_transactions_page(app: LedgerApp):
    st.title("💸 Transactions")

    sources = {("account", a.id): f"🏦 {a.name}" for a in app.accounts.list_accounts()}
    sources.update({
        ("card", c.id): f"💳 {c.name} •••• {c.last_four_digits}"
        for c in app.credit_cards.list_credit_cards()
    })

    with st.expander("➕ New transaction"):
        if not sources:
            st.info("Create an account or a card first.")
        else:
            with st.form("new_transaction"):
                source = st.selectbox("Source", list(sources), format_func=sources.get)
                txn_type = st.radio("Type", list(TransactionType), format_func=label, horizontal=True)
                category = st.selectbox("Category", list(TransactionCategory), format_func=label)
                amount = st.number_input("Amount", min_value=0.0, step=0.01)
                description = st.text_input("Description")
                txn_date = st.date_input("Date", value=date.today())
                if st.form_submit_button("Create"):
                    kind, source_id = source
                    try:
                        txn = app.transactions.create_transaction(
                            source_id if kind == "account" else None,
                            source_id if kind == "card" else None,
                            txn_type,
                            category,
                            Money.of(amount, app.currency),
                            description,
                            txn_date,
                        )
                        st.success(f"Transaction of {txn.amount} recorded")
                    except USER_ERRORS as e:
                        st.error(str(e))

    people = {p.id: p.name for p in app.people.list_people()}
    transactions = sorted(app.transactions.list_transactions(), key=lambda t: t.date, reverse=True)
    if not transactions:
        st.info("No transactions yet.")

    for txn in transactions:
        shared = f" · shared {txn.total_shared_percentage():.0f}%" if txn.is_shared() else ""
        st.markdown(
            f"{txn.date} · **{txn.description or label(txn.category)}** · "
            f"{label(txn.type)} {txn.amount}{shared}"
        )
        if people:
            with st.form(f"split_{txn.id}"):
                chosen = st.multiselect("Split 50% with", list(people), format_func=people.get, key=f"p_{txn.id}")
                col1, col2 = st.columns(2)
                split = col1.form_submit_button("Split")
                clear = col2.form_submit_button("Clear shares")
                try:
                    if split:
                        app.transactions.split_transaction_equally(txn.id, chosen)
                        st.success("Split saved")
                    if clear:
                        app.transactions.clear_shared_expenses(txn.id)
                        st.success("Shares cleared")
                except USER_ERRORS as e:
                    st.error(str(e))


# =============================================================================
# PEOPLE
# =============================================================================

def render_people_page(app: LedgerApp):
    st.title("👥 People")

    with st.form("new_person"):
        name = st.text_input("Name")
        email = st.text_input("Email")
        phone = st.text_input("Phone")
        if st.form_submit_button("Add"):
            try:
                app.people.create_person(name, email, phone)
                st.success(f"{name} added")
            except USER_ERRORS as e:
                st.error(str(e))

    for person in app.people.list_people():
        col1, col2 = st.columns([4, 1])
        col1.markdown(f"**{person.name}** · {person.email or '-'} · {person.phone or '-'}")
        if col2.button("Delete", key=f"del_{person.id}"):
            try:
                app.people.delete_person(person.id)
                st.success(f"{person.name} deleted")
            except USER_ERRORS as e:
                st.error(str(e))


# =============================================================================
# REPORTS
# =============================================================================

def render_reports_page(app: LedgerApp):
    st.title("📈 Reports")

    tab_monthly, tab_shared, tab_bill = st.tabs(["Monthly", "Shared expenses", "Bill"])

    with tab_monthly:
        today = date.today()
        col1, col2 = st.columns(2)
        year = col1.number_input("Year", min_value=2000, max_value=2100, value=today.year)
        month = col2.number_input("Month", min_value=1, max_value=12, value=today.month)
        report = app.reports.monthly_report(int(year), int(month))
        st.subheader(report.period)
        c1, c2, c3 = st.columns(3)
        c1.metric("Income", str(report.total_income))
        c2.metric("Expenses", str(report.total_expenses))
        c3.metric("Net savings", str(report.net_savings))
        for item in report.by_category:
            st.write(f"{item.category.title()}: {item.total} ({item.transaction_count})")

    with tab_shared:
        people = {p.id: p.name for p in app.people.list_people()}
        if not people:
            st.info("No people yet.")
        else:
            person_id = st.selectbox("Person", list(people), format_func=people.get)
            start = st.date_input("From", value=date.today().replace(day=1))
            end = st.date_input("To", value=date.today())
            report = app.reports.shared_expense_report(person_id, start, end)
            st.metric(f"{report.person.name} owes", str(report.balance))
            for txn in report.transactions:
                share = txn.share_for(person_id)
                st.write(f"{txn.date} · {txn.description} · {share.amount} ({share.percentage:.0f}%)")

    with tab_bill:
        bills = {b.id: b.name for b in app.bills.list_bills()}
        if not bills:
            st.info("No bills yet.")
        else:
            bill_id = st.selectbox("Bill", list(bills), format_func=bills.get)
            report = app.reports.bill_report(bill_id)
            c1, c2, c3 = st.columns(3)
            c1.metric("Total", str(report.total_expenses))
            c2.metric("Shared", str(report.shared_expenses))
            c3.metric("Personal", str(report.personal_expenses))
            if report.participants:
                st.write("Participants: " + ", ".join(report.participants))


# =============================================================================
# SETTINGS
# =============================================================================

def render_settings_page(app: LedgerApp):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Recent activity")
    storage = app.audit_logger.storage
    if storage is not None:
        for event in storage.get_recent_events(limit=20):
            st.write(f"{event.timestamp:%Y-%m-%d %H:%M} · {event.severity.value} · {event.description}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with:\n\n"
        "- `GOOGLE_SHEETS_CREDENTIALS_PATH`, `GOOGLE_SHEETS_SPREADSHEET_ID`\n"
        "- `STORAGE_BACKEND` (`google_sheets` or `memory`)\n"
        "- `DEFAULT_CURRENCY`, `RECENT_TRANSACTIONS_DAYS`\n"
        "- `LOG_LEVEL`, `LOG_JSON`"
    )


if __name__ == "__main__":
    main()
