"""
Credit Card Invoice Model

An invoice is the monthly statement of one credit card. It tracks the
charges and payments of the month on top of the balance carried over from
the previous closed invoice.

INVARIANTS:
- closing_balance == previous_balance + total_charges - total_payments,
  recomputed after every add/remove
- opening_date <= closing_date <= due_date
- reference_month is "YYYY-MM"
- lines can only be added/removed while the invoice is OPEN
"""

import calendar
import re
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from finledger.models.base import LedgerEntity, today_or
from finledger.models.errors import (
    AlreadyPaidError,
    InvalidInvoiceParametersError,
    InvoiceNotOpenError,
    OutstandingBalanceError,
    TransactionNotFoundError,
)
from finledger.models.money import Money


REFERENCE_MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""
    OPEN = "open"
    CLOSED = "closed"
    PAID = "paid"
    OVERDUE = "overdue"


# =============================================================================
# REFERENCE MONTH HELPERS
# =============================================================================

def parse_reference_month(reference_month: str) -> date:
    """
    Parse "YYYY-MM" into the first day of that month.

    Raises:
        InvalidInvoiceParametersError: If the string is not a valid YYYY-MM
    """
    if not REFERENCE_MONTH_PATTERN.match(reference_month or ""):
        raise InvalidInvoiceParametersError(
            "invalid reference month format, expected YYYY-MM"
        )
    try:
        return datetime.strptime(reference_month, "%Y-%m").date()
    except ValueError:
        raise InvalidInvoiceParametersError(
            "invalid reference month format, expected YYYY-MM"
        )


def reference_month_for(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def next_reference_month(reference_month: str) -> str:
    first = parse_reference_month(reference_month)
    if first.month == 12:
        return f"{first.year + 1:04d}-01"
    return f"{first.year:04d}-{first.month + 1:02d}"


def invoice_period(reference_month: str, due_day: int) -> tuple[date, date, date]:
    """
    Compute (opening_date, closing_date, due_date) for a calendar-month invoice.

    The statement covers the whole month. The due date falls on due_day of
    the following month, clamped to that month's last day (due_day 31 in
    a 30-day month becomes the 30th).
    """
    first = parse_reference_month(reference_month)
    last_day = calendar.monthrange(first.year, first.month)[1]
    closing = first.replace(day=last_day)

    following = parse_reference_month(next_reference_month(reference_month))
    following_last = calendar.monthrange(following.year, following.month)[1]
    due = following.replace(day=min(due_day, following_last))

    return first, closing, due


# =============================================================================
# INVOICE MODEL
# =============================================================================

class CreditCardInvoice(LedgerEntity):
    """Monthly statement for one credit card."""

    credit_card_id: UUID = Field(
        ...,
        description="Card this invoice belongs to (weak reference)"
    )
    reference_month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Calendar month covered, as YYYY-MM"
    )
    opening_date: date
    closing_date: date
    due_date: date

    previous_balance: Money
    total_charges: Optional[Money] = None
    total_payments: Optional[Money] = None
    closing_balance: Optional[Money] = None

    status: InvoiceStatus = InvoiceStatus.OPEN
    transaction_ids: list[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def default_totals(self) -> "CreditCardInvoice":
        currency = self.previous_balance.currency
        if self.total_charges is None:
            self.total_charges = Money.zero(currency)
        if self.total_payments is None:
            self.total_payments = Money.zero(currency)
        if self.closing_balance is None:
            self.closing_balance = self.previous_balance
        return self

    @classmethod
    def create(
        cls,
        credit_card_id: UUID,
        reference_month: str,
        opening_date: date,
        closing_date: date,
        due_date: date,
        previous_balance: Money,
    ) -> "CreditCardInvoice":
        """
        Open a new invoice. closing_balance starts at previous_balance.

        Raises:
            InvalidInvoiceParametersError: On out-of-order dates or a bad
                reference month
        """
        if closing_date < opening_date:
            raise InvalidInvoiceParametersError(
                "closing date cannot be before opening date"
            )
        if due_date < closing_date:
            raise InvalidInvoiceParametersError(
                "due date cannot be before closing date"
            )
        parse_reference_month(reference_month)

        return cls(
            credit_card_id=credit_card_id,
            reference_month=reference_month,
            opening_date=opening_date,
            closing_date=closing_date,
            due_date=due_date,
            previous_balance=previous_balance,
        )

    def _require_open(self, action: str) -> None:
        if self.status != InvoiceStatus.OPEN:
            raise InvoiceNotOpenError(
                f"cannot {action} {self.status.value} invoice"
            )

    def add_transaction(
        self,
        transaction_id: UUID,
        amount: Money,
        is_payment: bool,
    ) -> None:
        self._require_open("add transaction to")

        # Compute first so a currency mismatch leaves the invoice untouched
        if is_payment:
            total_payments = self.total_payments.add(amount)
            total_charges = self.total_charges
        else:
            total_payments = self.total_payments
            total_charges = self.total_charges.add(amount)

        self.transaction_ids.append(transaction_id)
        self.total_charges = total_charges
        self.total_payments = total_payments
        self._recalculate_balance()
        self.touch()

    def remove_transaction(
        self,
        transaction_id: UUID,
        amount: Money,
        is_payment: bool,
    ) -> None:
        self._require_open("remove transaction from")

        if transaction_id not in self.transaction_ids:
            raise TransactionNotFoundError(
                f"transaction {transaction_id} not found in invoice"
            )

        if is_payment:
            total_payments = self.total_payments.subtract(amount)
            total_charges = self.total_charges
        else:
            total_payments = self.total_payments
            total_charges = self.total_charges.subtract(amount)

        self.transaction_ids = [
            tid for tid in self.transaction_ids if tid != transaction_id
        ]
        self.total_charges = total_charges
        self.total_payments = total_payments
        self._recalculate_balance()
        self.touch()

    def _recalculate_balance(self) -> None:
        self.closing_balance = (
            self.previous_balance
            .add(self.total_charges)
            .subtract(self.total_payments)
        )

    def has_outstanding_balance(self) -> bool:
        return not self.closing_balance.is_zero() and not self.closing_balance.is_negative()

    def close(self, today: Optional[date] = None) -> None:
        if self.status != InvoiceStatus.OPEN:
            raise InvoiceNotOpenError(f"invoice is already {self.status.value}")

        self.status = InvoiceStatus.CLOSED
        self.touch()
        self.update_status_if_overdue(today)

    def update_status_if_overdue(self, today: Optional[date] = None) -> bool:
        """Flip a CLOSED invoice to OVERDUE past its due date. Returns True if flipped."""
        if (
            self.status == InvoiceStatus.CLOSED
            and today_or(today) > self.due_date
            and self.has_outstanding_balance()
        ):
            self.status = InvoiceStatus.OVERDUE
            self.touch()
            return True
        return False

    def mark_as_paid(self) -> None:
        if self.status == InvoiceStatus.PAID:
            raise AlreadyPaidError("invoice is already paid")
        if self.has_outstanding_balance():
            raise OutstandingBalanceError(
                f"invoice still has outstanding balance of {self.closing_balance}"
            )
        self.status = InvoiceStatus.PAID
        self.touch()

    def is_open(self) -> bool:
        return self.status == InvoiceStatus.OPEN

    def is_closed(self) -> bool:
        return self.status in (
            InvoiceStatus.CLOSED,
            InvoiceStatus.PAID,
            InvoiceStatus.OVERDUE,
        )

    def contains_date(self, day: date) -> bool:
        return self.opening_date <= day <= self.closing_date

    @property
    def statement_period(self) -> str:
        return (
            f"{self.opening_date.strftime('%b %d')} to "
            f"{self.closing_date.strftime('%b %d, %Y')}"
        )

    @property
    def due_date_formatted(self) -> str:
        return self.due_date.strftime("%B %d, %Y")
