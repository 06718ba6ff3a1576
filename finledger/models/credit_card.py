"""
Credit Card Model

A card is linked to an owning account and carries a running balance
against a credit limit.

INVARIANTS:
- current_balance never exceeds credit_limit after a charge
- current_balance never goes below zero (overpayments are absorbed)
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from finledger.models.base import LedgerEntity
from finledger.models.errors import (
    CreditLimitExceededError,
    InvalidCardParametersError,
)
from finledger.models.money import Money


class CreditCard(LedgerEntity):
    """Revolving-credit instrument with a limit and a running balance."""

    account_id: UUID = Field(
        ...,
        description="Owning account (weak reference)"
    )
    name: str = Field(..., min_length=1, max_length=200)
    last_four_digits: str = Field(..., min_length=4, max_length=4)
    credit_limit: Money
    current_balance: Optional[Money] = None
    due_day: int = Field(..., ge=1, le=31)

    @model_validator(mode="after")
    def default_balance(self) -> "CreditCard":
        if self.current_balance is None:
            self.current_balance = Money.zero(self.credit_limit.currency)
        return self

    @classmethod
    def create(
        cls,
        account_id: UUID,
        name: str,
        last_four_digits: str,
        credit_limit: Money,
        due_day: int,
    ) -> "CreditCard":
        """
        Build a new card with a zero balance.

        Raises:
            InvalidCardParametersError: If due_day is outside 1-31 or
                last_four_digits is not exactly 4 characters
        """
        if due_day < 1 or due_day > 31:
            raise InvalidCardParametersError("due day must be between 1 and 31")
        # Checked after stripping, the same way the model will store it
        last_four_digits = last_four_digits.strip()
        if len(last_four_digits) != 4:
            raise InvalidCardParametersError(
                "last four digits must be exactly 4 characters"
            )
        return cls(
            account_id=account_id,
            name=name,
            last_four_digits=last_four_digits,
            credit_limit=credit_limit,
            due_day=due_day,
        )

    def charge(self, amount: Money) -> None:
        new_balance = self.current_balance.add(amount)
        available = self.credit_limit.subtract(new_balance)
        if available.is_negative():
            raise CreditLimitExceededError(
                f"credit limit exceeded: limit is {self.credit_limit}, "
                f"would be {new_balance}"
            )
        self.current_balance = new_balance
        self.touch()

    def payment(self, amount: Money) -> None:
        new_balance = self.current_balance.subtract(amount)
        if new_balance.is_negative():
            new_balance = Money.zero(self.current_balance.currency)
        self.current_balance = new_balance
        self.touch()

    def get_available_credit(self) -> Money:
        return self.credit_limit.subtract(self.current_balance)

    def get_utilization_percentage(self) -> Decimal:
        if self.credit_limit.is_zero():
            return Decimal("0")
        return self.current_balance.amount / self.credit_limit.amount * 100
