"""
Integration tests for the use cases

These run the full wiring (use cases, repositories, in-memory store and
audit logger) the same way the front end does.
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from finledger.models import (
    AccountType,
    AuditEventType,
    BillStatus,
    CreditLimitExceededError,
    InsufficientFundsError,
    InvoiceAlreadyExistsError,
    InvoiceStatus,
    OutstandingBalanceError,
    SameAccountTransferError,
    TransactionCategory,
    TransactionSourceError,
    TransactionType,
)
from finledger.services.storage import NotFoundError
from finledger.usecases import select_bill_for_date


def event_types(audit_storage) -> list:
    return [e.event_type for e in audit_storage.events]


# =============================================================================
# ACCOUNTS AND CARDS
# =============================================================================

class TestAccountFlows:
    """Tests for account balance operations through the use case."""

    def test_checking_overdraft(self, app, brl):
        account = app.accounts.create_account("Checking", AccountType.CHECKING, brl("1000.00"))
        app.accounts.withdraw(account.id, brl("1500.00"))
        assert app.accounts.get_account(account.id).balance.amount == Decimal("-500.00")

    def test_savings_overdraft_rejected(self, app, brl):
        account = app.accounts.create_account("Savings", AccountType.SAVINGS, brl("1000.00"))
        with pytest.raises(InsufficientFundsError):
            app.accounts.withdraw(account.id, brl("1500.00"))
        assert app.accounts.get_account(account.id).balance == brl("1000.00")

    def test_transfer(self, app, brl, checking):
        savings = app.accounts.create_account("Savings", AccountType.SAVINGS, brl("200.00"))
        app.accounts.transfer(savings.id, checking.id, brl("50.00"))

        assert app.accounts.get_account(savings.id).balance == brl("150.00")
        assert app.accounts.get_account(checking.id).balance == brl("1050.00")

    def test_failed_transfer_writes_nothing(self, app, brl, checking):
        savings = app.accounts.create_account("Savings", AccountType.SAVINGS, brl("20.00"))
        with pytest.raises(InsufficientFundsError):
            app.accounts.transfer(savings.id, checking.id, brl("50.00"))

        assert app.accounts.get_account(savings.id).balance == brl("20.00")
        assert app.accounts.get_account(checking.id).balance == brl("1000.00")

    def test_transfer_to_same_account_rejected(self, app, audit_storage, brl):
        savings = app.accounts.create_account("Savings", AccountType.SAVINGS, brl("100.00"))
        with pytest.raises(SameAccountTransferError):
            app.accounts.transfer(savings.id, savings.id, brl("40.00"))

        assert app.accounts.get_account(savings.id).balance == brl("100.00")
        assert AuditEventType.TRANSFER_COMPLETED not in event_types(audit_storage)

    def test_update_and_delete(self, app, brl, checking):
        app.accounts.update_account(checking.id, "Renamed", AccountType.SAVINGS, brl(5), "memo")
        updated = app.accounts.get_account(checking.id)
        assert updated.name == "Renamed"
        assert updated.type == AccountType.SAVINGS
        assert app.accounts.list_accounts_by_type(AccountType.SAVINGS)[0].id == checking.id

        app.accounts.delete_account(checking.id)
        with pytest.raises(NotFoundError):
            app.accounts.get_account(checking.id)


class TestCreditCardFlows:
    def test_charge_up_to_limit(self, app, brl, card):
        with pytest.raises(CreditLimitExceededError):
            app.credit_cards.charge_card(card.id, brl("5000.01"))
        assert app.credit_cards.get_credit_card(card.id).current_balance.is_zero()

        app.credit_cards.charge_card(card.id, brl("5000.00"))
        stored = app.credit_cards.get_credit_card(card.id)
        assert stored.current_balance == brl("5000.00")
        assert stored.get_utilization_percentage() == 100

    def test_card_needs_existing_account(self, app, brl):
        with pytest.raises(NotFoundError):
            app.credit_cards.create_credit_card(uuid4(), "Visa", "1234", brl(100), 10)

    def test_payment_from_linked_account(self, app, brl, checking, card):
        app.credit_cards.charge_card(card.id, brl("300.00"))
        app.credit_cards.make_payment(card.id, brl("100.00"))

        assert app.credit_cards.get_credit_card(card.id).current_balance == brl("200.00")
        assert app.accounts.get_account(checking.id).balance == brl("900.00")

    def test_list_by_account(self, app, checking, card):
        assert [c.id for c in app.credit_cards.list_credit_cards_by_account(checking.id)] == [card.id]


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TestTransactionFlows:
    """Tests for the create-transaction workflow."""

    def test_account_debit_and_credit(self, app, brl, checking, today):
        app.transactions.create_transaction(
            checking.id, None, TransactionType.DEBIT, TransactionCategory.FOOD,
            brl("100.00"), "Groceries", today,
        )
        app.transactions.create_transaction(
            checking.id, None, TransactionType.CREDIT, TransactionCategory.INCOME,
            brl("50.00"), "Refund", today,
        )
        assert app.accounts.get_account(checking.id).balance == brl("950.00")
        assert len(app.transactions.get_transactions_by_account(checking.id)) == 2

    @pytest.mark.parametrize("use_account,use_card", [(False, False), (True, True)])
    def test_exactly_one_source(self, app, brl, checking, card, today, use_account, use_card):
        with pytest.raises(TransactionSourceError):
            app.transactions.create_transaction(
                checking.id if use_account else None,
                card.id if use_card else None,
                TransactionType.DEBIT, TransactionCategory.OTHER,
                brl(1), "", today,
            )
        assert app.transactions.list_transactions() == []

    def test_refused_balance_change_writes_nothing(self, app, brl, today):
        savings = app.accounts.create_account("Savings", AccountType.SAVINGS, brl("10.00"))
        with pytest.raises(InsufficientFundsError):
            app.transactions.create_transaction(
                savings.id, None, TransactionType.DEBIT, TransactionCategory.OTHER,
                brl("20.00"), "", today,
            )
        assert app.transactions.list_transactions() == []
        assert app.accounts.get_account(savings.id).balance == brl("10.00")

    def test_unknown_source(self, app, brl, today):
        with pytest.raises(NotFoundError):
            app.transactions.create_transaction(
                uuid4(), None, TransactionType.DEBIT, TransactionCategory.OTHER,
                brl(1), "", today,
            )

    def test_card_charge_opens_invoice(self, app, brl, card, today):
        txn = app.transactions.create_transaction(
            None, card.id, TransactionType.DEBIT, TransactionCategory.TRANSPORTATION,
            brl("65.20"), "Gas", today,
        )

        invoice = app.invoices.list_invoices_by_card(card.id)[0]
        assert invoice.reference_month == "2024-03"
        assert invoice.transaction_ids == [txn.id]
        assert invoice.closing_balance == brl("65.20")
        assert app.transactions.get_transaction(txn.id).credit_card_invoice_id == invoice.id
        assert app.credit_cards.get_credit_card(card.id).current_balance == brl("65.20")
        assert app.transactions.get_transactions_by_invoice(invoice.id)[0].id == txn.id

    def test_card_credit_is_invoice_payment(self, app, brl, card, today):
        app.transactions.create_transaction(
            None, card.id, TransactionType.DEBIT, TransactionCategory.SHOPPING,
            brl("100.00"), "Shoes", today,
        )
        app.transactions.create_transaction(
            None, card.id, TransactionType.CREDIT, TransactionCategory.TRANSFER,
            brl("30.00"), "Partial payment", today,
        )

        invoice = app.invoices.list_invoices_by_card(card.id)[0]
        assert invoice.total_payments == brl("30.00")
        assert invoice.closing_balance == brl("70.00")
        assert app.credit_cards.get_credit_card(card.id).current_balance == brl("70.00")

    def test_card_charge_falls_back_to_open_invoice(self, app, brl, card):
        january = app.invoices.create_invoice(card.id, "2024-01")

        txn = app.transactions.create_transaction(
            None, card.id, TransactionType.DEBIT, TransactionCategory.SHOPPING,
            brl("75.00"), "Books", date(2024, 4, 20),
        )

        assert [i.id for i in app.invoices.list_invoices_by_card(card.id)] == [january.id]
        assert app.transactions.get_transaction(txn.id).credit_card_invoice_id == january.id
        assert app.invoices.get_invoice(january.id).closing_balance == brl("75.00")

    def test_new_invoice_carries_closed_balance(self, app, audit_storage, brl, card, today):
        january = app.invoices.create_invoice(card.id, "2024-01")
        app.invoices.add_transaction_to_invoice(january.id, uuid4(), brl("100.00"), is_payment=False)
        app.invoices.close_invoice(january.id, today=date(2024, 2, 1))

        txn = app.transactions.create_transaction(
            None, card.id, TransactionType.DEBIT, TransactionCategory.FOOD,
            brl("40.00"), "Lunch", today,
        )

        march = app.invoices.get_invoice(
            app.transactions.get_transaction(txn.id).credit_card_invoice_id
        )
        assert march.reference_month == "2024-03"
        assert march.previous_balance == brl("100.00")
        assert march.closing_balance == brl("140.00")

        created = [
            e for e in audit_storage.events
            if e.event_type == AuditEventType.INVOICE_CREATED and e.entity_id == march.id
        ]
        assert len(created) == 1
        related = audit_storage.get_events_by_correlation_id(created[0].correlation_id)
        assert txn.id in {e.entity_id for e in related}

    def test_closed_invoice_does_not_block_transaction(self, app, audit_storage, brl, card, today):
        """A failed invoice step is recorded but the transaction still goes through."""
        invoice = app.invoices.create_invoice(card.id, "2024-03")
        app.invoices.close_invoice(invoice.id, today=today)

        txn = app.transactions.create_transaction(
            None, card.id, TransactionType.DEBIT, TransactionCategory.FOOD,
            brl("40.00"), "Lunch", today,
        )

        stored = app.transactions.get_transaction(txn.id)
        assert stored.credit_card_invoice_id is None
        assert app.credit_cards.get_credit_card(card.id).current_balance == brl("40.00")
        assert app.invoices.get_invoice(invoice.id).transaction_ids == []

        failures = [
            e for e in audit_storage.events
            if e.event_type == AuditEventType.INVOICE_ASSIGNMENT_FAILED
        ]
        assert len(failures) == 1
        assert failures[0].entity_id == txn.id
        assert failures[0].error_message

    def test_events_share_correlation_id(self, app, audit_storage, brl, checking, today):
        txn = app.transactions.create_transaction(
            checking.id, None, TransactionType.DEBIT, TransactionCategory.FOOD,
            brl("10.00"), "Coffee", today,
        )
        created = next(
            e for e in audit_storage.events
            if e.event_type == AuditEventType.TRANSACTION_CREATED and e.entity_id == txn.id
        )
        related = audit_storage.get_events_by_correlation_id(created.correlation_id)
        assert {e.event_type for e in related} == {
            AuditEventType.BALANCE_CHANGED,
            AuditEventType.TRANSACTION_CREATED,
        }

    def test_split_and_clear(self, app, brl, checking, today):
        alice = app.people.create_person("Alice")
        bob = app.people.create_person("Bob")
        txn = app.transactions.create_transaction(
            checking.id, None, TransactionType.DEBIT, TransactionCategory.ENTERTAINMENT,
            brl("180.00"), "Dinner", today,
        )

        app.transactions.split_transaction_equally(txn.id, [alice.id, bob.id])
        stored = app.transactions.get_transaction(txn.id)
        assert stored.get_personal_amount() == brl("90.00")

        app.transactions.add_shared_expense(txn.id, alice.id, 10)
        assert app.transactions.get_transaction(txn.id).total_shared_percentage() == Decimal("60")

        app.transactions.clear_shared_expenses(txn.id)
        assert not app.transactions.get_transaction(txn.id).is_shared()

    def test_delete_does_not_reverse_balance(self, app, brl, checking, today):
        txn = app.transactions.create_transaction(
            checking.id, None, TransactionType.DEBIT, TransactionCategory.FOOD,
            brl("100.00"), "", today,
        )
        app.transactions.delete_transaction(txn.id)

        assert app.transactions.list_transactions() == []
        assert app.accounts.get_account(checking.id).balance == brl("900.00")

    def test_date_range_newest_first(self, app, brl, checking, today):
        for days_ago in (3, 1, 2):
            app.transactions.create_transaction(
                checking.id, None, TransactionType.DEBIT, TransactionCategory.FOOD,
                brl(1), f"{days_ago} days ago", today - timedelta(days=days_ago),
            )
        found = app.transactions.get_transactions_by_date_range(today - timedelta(days=2), today)
        assert [t.description for t in found] == ["1 days ago", "2 days ago"]


# =============================================================================
# BILL AUTO-ASSIGNMENT
# =============================================================================

class TestBillAssignment:
    """Transactions are attached to the narrowest open bill covering their date."""

    def _create(self, app, brl, checking, day):
        return app.transactions.create_transaction(
            checking.id, None, TransactionType.DEBIT, TransactionCategory.UTILITIES,
            brl("10.00"), "", day,
        )

    def test_bill_covering_today(self, app, brl, checking, today):
        bill = app.bills.create_bill(
            "Utilities", "", today - timedelta(days=15), today + timedelta(days=15),
            today + timedelta(days=30), brl("350.00"),
        )
        txn = self._create(app, brl, checking, today)
        assert app.transactions.get_transaction(txn.id).bill_id == bill.id

    def test_shortest_window_wins(self, app, brl, checking, today):
        app.bills.create_bill(
            "Month", "", date(2024, 3, 1), date(2024, 3, 31), date(2024, 4, 10), brl(100),
        )
        week = app.bills.create_bill(
            "Week", "", date(2024, 3, 11), date(2024, 3, 17), date(2024, 3, 20), brl(100),
        )
        assert self._create(app, brl, checking, today).bill_id == week.id

    def test_closed_bills_are_skipped(self, app, brl, checking, today):
        bill = app.bills.create_bill(
            "Month", "", date(2024, 3, 1), date(2024, 3, 31), date(2024, 4, 10), brl(100),
        )
        app.bills.close_bill(bill.id)
        assert self._create(app, brl, checking, today).bill_id is None

    def test_no_bill(self, app, brl, checking, today):
        assert self._create(app, brl, checking, today).bill_id is None

    def test_select_bill_tie_keeps_first(self, app, brl):
        first = app.bills.create_bill(
            "A", "", date(2024, 3, 1), date(2024, 3, 10), date(2024, 3, 20), brl(1),
        )
        second = app.bills.create_bill(
            "B", "", date(2024, 3, 2), date(2024, 3, 11), date(2024, 3, 20), brl(1),
        )
        assert select_bill_for_date([first, second], date(2024, 3, 5)).id == first.id


# =============================================================================
# INVOICES
# =============================================================================

class TestInvoiceFlows:
    """Tests for the invoice use case."""

    def test_charge_payment_and_outstanding_balance(self, app, brl, card):
        invoice = app.invoices.create_invoice(card.id, "2024-01")
        assert invoice.previous_balance.is_zero()

        app.invoices.add_transaction_to_invoice(invoice.id, uuid4(), brl("100.00"), is_payment=False)
        app.invoices.add_transaction_to_invoice(invoice.id, uuid4(), brl("40.00"), is_payment=True)

        stored = app.invoices.get_invoice(invoice.id)
        assert stored.closing_balance.amount == Decimal("60.00")
        with pytest.raises(OutstandingBalanceError):
            stored.mark_as_paid()

    def test_remove_transaction(self, app, brl, card):
        invoice = app.invoices.create_invoice(card.id, "2024-01")
        charge_id = uuid4()
        app.invoices.add_transaction_to_invoice(invoice.id, charge_id, brl("25.00"), is_payment=False)
        app.invoices.remove_transaction_from_invoice(invoice.id, charge_id, brl("25.00"), is_payment=False)
        assert app.invoices.get_invoice(invoice.id).closing_balance.is_zero()

    def test_duplicate_month_rejected(self, app, card):
        app.invoices.create_invoice(card.id, "2024-01")
        with pytest.raises(InvoiceAlreadyExistsError):
            app.invoices.create_invoice(card.id, "2024-01")

    def test_default_dates_follow_due_day(self, app, card):
        invoice = app.invoices.create_invoice(card.id, "2024-01")
        assert invoice.opening_date == date(2024, 1, 1)
        assert invoice.closing_date == date(2024, 1, 31)
        assert invoice.due_date == date(2024, 2, 10)

    def test_close_carries_balance_to_next_month(self, app, brl, card):
        january = app.invoices.create_invoice(card.id, "2024-01")
        app.invoices.add_transaction_to_invoice(january.id, uuid4(), brl("100.00"), is_payment=False)

        closed = app.invoices.close_invoice(january.id, create_next=True, today=date(2024, 2, 1))
        assert closed.status == InvoiceStatus.CLOSED

        february = app.invoices.get_current_invoice(card.id, today=date(2024, 2, 5))
        assert february.reference_month == "2024-02"
        assert february.previous_balance == brl("100.00")
        assert february.closing_balance == brl("100.00")

    def test_get_current_invoice_creates_one(self, app, card, today):
        invoice = app.invoices.get_current_invoice(card.id, today=today)
        assert invoice.reference_month == "2024-03"
        assert app.invoices.get_current_invoice(card.id, today=today).id == invoice.id

    def test_process_payment_marks_paid(self, app, audit_storage, brl, card):
        invoice = app.invoices.create_invoice(card.id, "2024-01")
        app.invoices.add_transaction_to_invoice(invoice.id, uuid4(), brl("100.00"), is_payment=False)

        partial = app.invoices.process_payment(invoice.id, brl("60.00"))
        assert partial.status == InvoiceStatus.OPEN

        paid = app.invoices.process_payment(invoice.id, brl("40.00"))
        assert paid.status == InvoiceStatus.PAID
        assert app.invoices.get_invoice(invoice.id).status == InvoiceStatus.PAID
        assert AuditEventType.INVOICE_PAID in event_types(audit_storage)

    def test_update_overdue_invoices(self, app, brl, card):
        invoice = app.invoices.create_invoice(card.id, "2024-01")
        app.invoices.add_transaction_to_invoice(invoice.id, uuid4(), brl("10.00"), is_payment=False)
        app.invoices.close_invoice(invoice.id, today=date(2024, 2, 1))

        assert app.invoices.update_overdue_invoices(card.id, today=date(2024, 2, 10)) == []
        changed = app.invoices.update_overdue_invoices(card.id, today=date(2024, 2, 11))
        assert [i.id for i in changed] == [invoice.id]
        overdue = app.invoices.get_invoices_by_status(card.id, InvoiceStatus.OVERDUE)
        assert [i.id for i in overdue] == [invoice.id]


# =============================================================================
# BILLS AND PEOPLE
# =============================================================================

class TestBillFlows:
    def _bill(self, app, brl):
        return app.bills.create_bill(
            "Utilities", "", date(2024, 3, 1), date(2024, 3, 31), date(2024, 4, 10), brl("350.00"),
        )

    def test_payments(self, app, brl):
        bill = self._bill(app, brl)
        app.bills.add_payment(bill.id, brl("350.00"), today=date(2024, 3, 20))
        assert app.bills.get_bill(bill.id).status == BillStatus.PAID
        assert app.bills.get_pending_bills() == []

    def test_refresh_overdue(self, app, brl):
        bill = self._bill(app, brl)
        assert app.bills.refresh_overdue_bills(today=date(2024, 4, 10)) == []

        changed = app.bills.refresh_overdue_bills(today=date(2024, 4, 11))
        assert [b.id for b in changed] == [bill.id]
        assert app.bills.get_bills_by_status(BillStatus.OVERDUE)[0].id == bill.id

    def test_overdue_query_does_not_change_status(self, app, brl):
        bill = self._bill(app, brl)
        assert [b.id for b in app.bills.get_overdue_bills(today=date(2024, 5, 1))] == [bill.id]
        assert app.bills.get_bill(bill.id).status == BillStatus.OPEN

    def test_delete(self, app, brl):
        bill = self._bill(app, brl)
        app.bills.delete_bill(bill.id)
        assert app.bills.list_bills() == []


class TestPersonFlows:
    def test_crud(self, app, audit_storage):
        person = app.people.create_person("Alice", "alice@example.com")
        app.people.update_person(person.id, "Alice Smith", "alice@example.com", "555")

        assert app.people.find_by_email("alice@example.com").name == "Alice Smith"

        app.people.delete_person(person.id)
        assert app.people.list_people() == []
        assert event_types(audit_storage) == [
            AuditEventType.PERSON_CREATED,
            AuditEventType.PERSON_UPDATED,
            AuditEventType.PERSON_DELETED,
        ]
