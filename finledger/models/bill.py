"""
Bill Model

A bill is a payable obligation covering a [start_date, end_date] window,
due on due_date, with a running ledger of payments.

STATUS RULES:
- OPEN on creation
- PAID as soon as paid_amount equals total_amount exactly
- OVERDUE when checked after due_date while not fully paid
- CLOSED only by an explicit close()
- close() on a PAID or CLOSED bill is rejected
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from finledger.models.base import LedgerEntity, today_or
from finledger.models.errors import AlreadyTerminalError, InvalidDateRangeError
from finledger.models.money import Money


class BillStatus(str, Enum):
    """Bill lifecycle status."""
    OPEN = "open"
    CLOSED = "closed"
    PAID = "paid"
    OVERDUE = "overdue"


class Bill(LedgerEntity):
    """A payable obligation with a coverage window and payment ledger."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    start_date: date
    end_date: date
    due_date: date
    total_amount: Money
    paid_amount: Optional[Money] = None
    status: BillStatus = BillStatus.OPEN

    @model_validator(mode="after")
    def default_paid_amount(self) -> "Bill":
        if self.paid_amount is None:
            self.paid_amount = Money.zero(self.total_amount.currency)
        return self

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        start_date: date,
        end_date: date,
        due_date: date,
        total_amount: Money,
    ) -> "Bill":
        """
        Build a new open bill with nothing paid yet.

        Raises:
            InvalidDateRangeError: If end_date < start_date or due_date < end_date
        """
        if end_date < start_date:
            raise InvalidDateRangeError("end date cannot be before start date")
        if due_date < end_date:
            raise InvalidDateRangeError("due date cannot be before end date")

        return cls(
            name=name,
            description=description,
            start_date=start_date,
            end_date=end_date,
            due_date=due_date,
            total_amount=total_amount,
        )

    def add_payment(self, amount: Money, today: Optional[date] = None) -> None:
        self.paid_amount = self.paid_amount.add(amount)
        self.touch()
        self.update_status(today)

    def update_status(self, today: Optional[date] = None) -> None:
        """Apply the paid/overdue rule; other statuses are left as they are."""
        if self.is_fully_paid():
            self.status = BillStatus.PAID
        elif today_or(today) > self.due_date:
            self.status = BillStatus.OVERDUE

    def close(self) -> None:
        if self.status in (BillStatus.PAID, BillStatus.CLOSED):
            raise AlreadyTerminalError(f"bill is already {self.status.value}")
        self.status = BillStatus.CLOSED
        self.touch()

    def get_remaining_amount(self) -> Money:
        return self.total_amount.subtract(self.paid_amount)

    def is_fully_paid(self) -> bool:
        return self.paid_amount.equals(self.total_amount)

    def get_payment_percentage(self) -> Decimal:
        if self.total_amount.is_zero():
            return Decimal("100")
        return self.paid_amount.amount / self.total_amount.amount * 100

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def window_days(self) -> int:
        return (self.end_date - self.start_date).days
