"""
Money Value Object

Money is an immutable (amount, currency) pair. The amount is a Decimal that
is ALWAYS rounded to cents when the value is built, so every Money in the
system is exact to the cent and equality is a plain comparison.

Rounding is half away from zero: 19.995 -> 20.00, -0.005 -> -0.01.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator

from finledger.models.errors import CurrencyMismatchError


CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal, going through str() for floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_to_cents(value: Number) -> Decimal:
    """Round half away from zero to two decimal places."""
    rounded = to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    if rounded == 0:
        # Drop the sign of -0.00
        return Decimal("0.00")
    return rounded


class Money(BaseModel):
    """
    Currency-tagged amount, exact to the cent.

    Usage:
        price = Money.of(19.995, "BRL")      # R$ 20.00
        total = price.add(Money.of(5, "BRL"))
    """
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency: str

    @field_validator("amount", mode="before")
    @classmethod
    def round_amount(cls, v: Number) -> Decimal:
        try:
            return round_to_cents(v)
        except (InvalidOperation, TypeError) as e:
            raise ValueError(f"Invalid money amount: {v!r}") from e

    @classmethod
    def of(cls, amount: Number, currency: str) -> "Money":
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(amount=Decimal("0"), currency=currency)

    def _check_currency(self, other: "Money", operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(operation, self.currency, other.currency)

    def add(self, other: "Money") -> "Money":
        self._check_currency(other, "add")
        return Money.of(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other, "subtract")
        return Money.of(self.amount - other.amount, self.currency)

    def multiply(self, factor: Number) -> "Money":
        return Money.of(self.amount * to_decimal(factor), self.currency)

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_zero(self) -> bool:
        return self.amount == 0

    def equals(self, other: "Money") -> bool:
        return self.amount == other.amount and self.currency == other.currency

    def __str__(self) -> str:
        if self.currency == "BRL":
            return f"R$ {self.amount:.2f}"
        return f"{self.currency} {self.amount:.2f}"
