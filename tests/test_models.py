"""
Tests for the ledger entities

Test strategy:
1. Unit tests for individual entities (no storage involved)
2. Integration tests for flows live in test_flows.py
3. No real API calls in tests
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from finledger.models import (
    Account,
    AccountType,
    AlreadyTerminalError,
    Bill,
    BillStatus,
    CreditCard,
    CreditLimitExceededError,
    InsufficientFundsError,
    InvalidCardParametersError,
    InvalidDateRangeError,
    Money,
    Person,
)


def brl(amount) -> Money:
    return Money.of(amount, "BRL")


class TestAccount:
    """Tests for Account balance rules."""

    def test_create_account(self):
        account = Account.create("Main", AccountType.SAVINGS, brl(100), "Rainy day")
        assert account.name == "Main"
        assert account.balance == brl(100)
        assert account.created_at.tzinfo is not None

    def test_name_strips_whitespace(self):
        account = Account.create("  Main  ", AccountType.CHECKING, brl(0))
        assert account.name == "Main"

    def test_deposit(self):
        account = Account.create("Main", AccountType.SAVINGS, brl(100))
        account.deposit(brl("50.25"))
        assert account.balance.amount == Decimal("150.25")

    def test_checking_can_go_negative(self):
        account = Account.create("Main", AccountType.CHECKING, brl("1000.00"))
        account.withdraw(brl("1500.00"))
        assert account.balance.amount == Decimal("-500.00")

    @pytest.mark.parametrize("account_type", [AccountType.SAVINGS, AccountType.INVESTMENT])
    def test_non_checking_cannot_go_negative(self, account_type):
        account = Account.create("Main", account_type, brl("1000.00"))
        with pytest.raises(InsufficientFundsError):
            account.withdraw(brl("1500.00"))
        assert account.balance.amount == Decimal("1000.00")

    def test_withdraw_to_exactly_zero_is_allowed(self):
        account = Account.create("Main", AccountType.SAVINGS, brl("10.00"))
        account.withdraw(brl("10.00"))
        assert account.balance.is_zero()

    def test_touch_bumps_updated_at(self):
        account = Account.create("Main", AccountType.CHECKING, brl(0))
        before = account.updated_at
        account.deposit(brl(1))
        assert account.updated_at >= before


class TestCreditCard:
    """Tests for CreditCard limit and payment rules."""

    def _card(self, limit="5000.00") -> CreditCard:
        return CreditCard.create(uuid4(), "Visa", "1234", brl(limit), 10)

    def test_new_card_has_zero_balance(self):
        card = self._card()
        assert card.current_balance == brl(0)
        assert card.get_available_credit() == brl("5000.00")

    @pytest.mark.parametrize("due_day", [0, 32])
    def test_invalid_due_day(self, due_day):
        with pytest.raises(InvalidCardParametersError):
            CreditCard.create(uuid4(), "Visa", "1234", brl(100), due_day)

    @pytest.mark.parametrize("digits", ["123", "12345", " 123", "123 ", "    "])
    def test_invalid_last_four_digits(self, digits):
        with pytest.raises(InvalidCardParametersError):
            CreditCard.create(uuid4(), "Visa", digits, brl(100), 10)

    def test_last_four_digits_stripped(self):
        card = CreditCard.create(uuid4(), "Visa", " 1234 ", brl(100), 10)
        assert card.last_four_digits == "1234"

    def test_charge_over_limit_is_rejected(self):
        card = self._card()
        with pytest.raises(CreditLimitExceededError):
            card.charge(brl("5000.01"))
        assert card.current_balance.is_zero()

    def test_charge_up_to_limit(self):
        card = self._card()
        card.charge(brl("5000.00"))
        assert card.current_balance == brl("5000.00")
        assert card.get_utilization_percentage() == 100

    def test_payment_never_goes_below_zero(self):
        card = self._card()
        card.charge(brl(100))
        card.payment(brl(250))
        assert card.current_balance.is_zero()

    def test_utilization_with_zero_limit(self):
        card = self._card(limit=0)
        assert card.get_utilization_percentage() == 0


class TestBill:
    """Tests for Bill date validation and status rules."""

    start = date(2024, 3, 1)
    end = date(2024, 3, 31)
    due = date(2024, 4, 10)

    def _bill(self, total="350.00") -> Bill:
        return Bill.create("Utilities", "Power and water", self.start, self.end, self.due, brl(total))

    def test_create_bill(self):
        bill = self._bill()
        assert bill.status == BillStatus.OPEN
        assert bill.paid_amount.is_zero()
        assert bill.get_remaining_amount() == brl("350.00")

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidDateRangeError):
            Bill.create("x", "", self.end, self.start, self.due, brl(1))

    def test_due_before_end_rejected(self):
        with pytest.raises(InvalidDateRangeError):
            Bill.create("x", "", self.start, self.end, self.end - timedelta(days=1), brl(1))

    def test_single_day_bill_allowed(self):
        bill = Bill.create("x", "", self.start, self.start, self.start, brl(1))
        assert bill.window_days == 0

    def test_exact_payment_marks_paid(self):
        bill = self._bill()
        bill.add_payment(brl("200.00"), today=self.start)
        assert bill.status == BillStatus.OPEN
        bill.add_payment(brl("150.00"), today=self.start)
        assert bill.status == BillStatus.PAID
        assert bill.get_payment_percentage() == 100

    def test_partial_payment_after_due_marks_overdue(self):
        bill = self._bill()
        bill.add_payment(brl("10.00"), today=self.due + timedelta(days=1))
        assert bill.status == BillStatus.OVERDUE

    def test_payment_on_due_date_is_not_overdue(self):
        bill = self._bill()
        bill.add_payment(brl("10.00"), today=self.due)
        assert bill.status == BillStatus.OPEN

    def test_overpayment_is_not_paid(self):
        """Only an exact match flips the bill to PAID."""
        bill = self._bill()
        bill.add_payment(brl("400.00"), today=self.start)
        assert bill.status == BillStatus.OPEN
        assert bill.get_remaining_amount().is_negative()

    def test_close(self):
        bill = self._bill()
        bill.close()
        assert bill.status == BillStatus.CLOSED
        with pytest.raises(AlreadyTerminalError):
            bill.close()

    def test_close_paid_bill_rejected(self):
        bill = self._bill()
        bill.add_payment(brl("350.00"), today=self.start)
        with pytest.raises(AlreadyTerminalError):
            bill.close()

    def test_covers_is_inclusive(self):
        bill = self._bill()
        assert bill.covers(self.start)
        assert bill.covers(self.end)
        assert not bill.covers(self.end + timedelta(days=1))
        assert bill.window_days == 30

    def test_zero_total_percentage(self):
        bill = self._bill(total=0)
        assert bill.get_payment_percentage() == 100


class TestPerson:
    def test_create_with_defaults(self):
        person = Person.create("Alice")
        assert person.email == ""
        assert person.phone == ""

    def test_update(self):
        person = Person.create("Alice", "a@example.com")
        person.update("Alice Smith", "alice@example.com", "555-0101")
        assert person.name == "Alice Smith"
        assert person.email == "alice@example.com"
        assert person.phone == "555-0101"
