"""Tests for the read-side reports, using the demo ledger as fixture data."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from finledger.demo import seed_demo_data
from finledger.models import AccountType, Money, TransactionCategory, TransactionType
from finledger.services.storage import NotFoundError


@pytest.fixture
def demo(app, today):
    return seed_demo_data(app, today=today)


class TestDemoData:
    def test_seeded_entities(self, app, demo):
        assert len(app.accounts.list_accounts()) == 2
        assert len(app.people.list_people()) == 2
        assert len(app.transactions.list_transactions()) == 4
        assert demo["dinner"].is_shared()

    def test_everything_lands_on_the_bill(self, demo):
        for key in ("groceries", "gas", "salary", "dinner"):
            assert demo[key].bill_id == demo["bill"].id


class TestSharedExpenseReport:
    """Tests for what a person owes."""

    def test_totals(self, app, demo, today):
        report = app.reports.shared_expense_report(
            demo["alice"].id, today - timedelta(days=30), today
        )
        assert report.person.name == "Alice Smith"
        assert len(report.transactions) == 2
        # 50% of 127.45 plus 25% of 180.00
        assert report.total_owed == Money.of("108.73", "BRL")
        assert report.total_paid.is_zero()
        assert report.balance == report.total_owed

    def test_range_is_inclusive(self, app, demo, today):
        groceries_day = today - timedelta(days=2)
        report = app.reports.shared_expense_report(demo["alice"].id, groceries_day, groceries_day)
        assert [t.id for t in report.transactions] == [demo["groceries"].id]

    def test_person_with_no_shares(self, app, demo, today):
        carol = app.people.create_person("Carol")
        report = app.reports.shared_expense_report(carol.id, today - timedelta(days=30), today)
        assert report.transactions == []
        assert report.total_owed.is_zero()

    def test_unknown_person(self, app, today):
        with pytest.raises(NotFoundError):
            app.reports.shared_expense_report(uuid4(), today, today)


class TestBillReport:
    def test_bill_totals(self, app, demo):
        report = app.reports.bill_report(demo["bill"].id)
        assert len(report.transactions) == 4
        assert report.total_expenses == Money.of("3872.65", "BRL")
        assert report.shared_expenses == Money.of("153.73", "BRL")
        assert report.participants == ["Alice Smith", "Bob Johnson"]

    def test_deleted_person_is_skipped(self, app, demo):
        app.people.delete_person(demo["bob"].id)
        report = app.reports.bill_report(demo["bill"].id)
        assert report.participants == ["Alice Smith"]

    def test_empty_bill(self, app, brl):
        bill = app.bills.create_bill(
            "Empty", "", date(2020, 1, 1), date(2020, 1, 31), date(2020, 2, 10), brl(10)
        )
        report = app.reports.bill_report(bill.id)
        assert report.total_expenses.is_zero()
        assert report.participants == []


class TestMonthlyReport:
    """Tests for income/expense totals and the category breakdown."""

    def test_march(self, app, demo):
        report = app.reports.monthly_report(2024, 3)
        assert report.period == "March 2024"
        assert report.transaction_count == 4
        assert report.total_income == Money.of("3500.00", "BRL")
        assert report.total_expenses == Money.of("372.65", "BRL")
        assert report.net_savings == Money.of("3127.35", "BRL")

        categories = [c.category for c in report.by_category]
        assert categories == ["income", "entertainment", "food", "transportation"]
        assert report.by_category[0].transaction_count == 1

    def test_empty_month(self, app, demo):
        report = app.reports.monthly_report(2023, 1)
        assert report.transaction_count == 0
        assert report.total_income.is_zero()
        assert report.by_category == []


class TestDashboard:
    def test_summary(self, app, demo, today):
        summary = app.reports.dashboard_summary(today=today)

        assert summary.as_of == today
        assert summary.total_balance.amount == Decimal("20873.30")
        assert summary.month_income == Money.of("3500.00", "BRL")
        assert summary.month_expenses == Money.of("372.65", "BRL")
        assert [b.id for b in summary.pending_bills] == [demo["bill"].id]
        assert summary.next_due_bill.id == demo["bill"].id
        assert summary.overdue_bill_count == 0
        assert summary.recent_transactions[0].id == demo["dinner"].id

    def test_empty_ledger(self, app, today):
        summary = app.reports.dashboard_summary(today=today)
        assert summary.total_balance.is_zero()
        assert summary.recent_transactions == []
        assert summary.next_due_bill is None

    def test_other_currencies_left_out(self, app, brl, today):
        app.accounts.create_account("Main", AccountType.CHECKING, brl("100.00"))
        usd = app.accounts.create_account("Travel", AccountType.CHECKING, Money.of(50, "USD"))
        app.transactions.create_transaction(
            usd.id, None, TransactionType.DEBIT, TransactionCategory.OTHER,
            Money.of(5, "USD"), "Snack", today,
        )

        summary = app.reports.dashboard_summary(today=today)
        assert summary.total_balance == brl("100.00")
        assert summary.month_expenses.is_zero()
        assert len(summary.accounts) == 2
