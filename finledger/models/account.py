"""Bank-like accounts holding a Money balance."""

from enum import Enum

from pydantic import Field

from finledger.models.base import LedgerEntity
from finledger.models.errors import InsufficientFundsError
from finledger.models.money import Money


class AccountType(str, Enum):
    """
    Account kinds.

    Only CHECKING accounts may go negative after a withdrawal.
    """
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"


class Account(LedgerEntity):
    """A store of funds with a type-dependent overdraft policy."""

    name: str = Field(..., min_length=1, max_length=200)
    type: AccountType
    balance: Money
    description: str = Field(default="", max_length=1000)

    @classmethod
    def create(
        cls,
        name: str,
        account_type: AccountType,
        initial_balance: Money,
        description: str = "",
    ) -> "Account":
        return cls(
            name=name,
            type=account_type,
            balance=initial_balance,
            description=description,
        )

    def deposit(self, amount: Money) -> None:
        self.balance = self.balance.add(amount)
        self.touch()

    def withdraw(self, amount: Money) -> None:
        """
        Take money out of the account.

        Raises:
            CurrencyMismatchError: If the amount is in another currency
            InsufficientFundsError: If a non-checking account would go negative
        """
        new_balance = self.balance.subtract(amount)
        if new_balance.is_negative() and self.type != AccountType.CHECKING:
            raise InsufficientFundsError(
                f"insufficient funds: balance would be {new_balance}"
            )
        self.balance = new_balance
        self.touch()

    def get_available_balance(self) -> Money:
        return self.balance
