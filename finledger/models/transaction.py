"""
Transaction Model

A transaction is a single ledger entry against an account OR a credit
card. It can be optionally split with other people (shared expenses) and
linked to a bill and a credit card invoice.

DESIGN DECISION: The entity does not enforce the "exactly one source"
rule. Transactions are only created through TransactionUseCase, which
checks it before anything is written.

IMPORTANT: Shared-expense amounts are derived from the transaction amount
at the moment the share is added. They are not recomputed if the amount
changes later.
"""

from datetime import date as Date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from finledger.models.base import LedgerEntity
from finledger.models.errors import (
    EmptyPersonListError,
    InvalidPercentageError,
    PercentageOverflowError,
)
from finledger.models.money import Money


HUNDRED = Decimal("100")

# Equal splits distribute this share of the total among the people.
# The owner always keeps the other half.
EQUAL_SPLIT_TOTAL = Decimal("50")


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Money out (debit) or money in (credit)."""
    DEBIT = "debit"
    CREDIT = "credit"


class TransactionCategory(str, Enum):
    """Spending / income categories used by the reports."""
    FOOD = "food"
    TRANSPORTATION = "transportation"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    INCOME = "income"
    TRANSFER = "transfer"
    OTHER = "other"


# =============================================================================
# SHARED EXPENSE
# =============================================================================

class SharedExpense(BaseModel):
    """One person's share of a transaction."""

    person_id: UUID
    amount: Money
    percentage: Decimal = Field(
        ...,
        gt=0,
        le=100,
        description="Share of the transaction amount, in percent"
    )


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(LedgerEntity):
    """Ledger entry with optional split and bill/invoice links."""

    account_id: Optional[UUID] = None
    credit_card_id: Optional[UUID] = None
    credit_card_invoice_id: Optional[UUID] = None
    bill_id: Optional[UUID] = None

    type: TransactionType
    category: TransactionCategory
    amount: Money
    description: str = Field(default="", max_length=500)
    date: Date
    shared_with: list[SharedExpense] = Field(default_factory=list)

    @classmethod
    def create(
        cls,
        account_id: Optional[UUID],
        credit_card_id: Optional[UUID],
        transaction_type: TransactionType,
        category: TransactionCategory,
        amount: Money,
        description: str,
        transaction_date: Date,
    ) -> "Transaction":
        return cls(
            account_id=account_id,
            credit_card_id=credit_card_id,
            type=transaction_type,
            category=category,
            amount=amount,
            description=description,
            date=transaction_date,
        )

    def is_debit(self) -> bool:
        return self.type == TransactionType.DEBIT

    def is_credit(self) -> bool:
        return self.type == TransactionType.CREDIT

    def is_shared(self) -> bool:
        return len(self.shared_with) > 0

    def total_shared_percentage(self) -> Decimal:
        return sum((share.percentage for share in self.shared_with), Decimal("0"))

    def add_shared_expense(self, person_id: UUID, percentage) -> None:
        """
        Give a person a share of this transaction.

        Raises:
            InvalidPercentageError: If percentage is not in (0, 100]
            PercentageOverflowError: If the shares would exceed 100%
        """
        percentage = Decimal(str(percentage))
        if percentage <= 0 or percentage > HUNDRED:
            raise InvalidPercentageError(
                f"percentage must be between 0 and 100, got {percentage}"
            )

        total = self.total_shared_percentage() + percentage
        if total > HUNDRED:
            raise PercentageOverflowError(
                f"total shared percentage cannot exceed 100%, would be {total}"
            )

        self.shared_with.append(
            SharedExpense(
                person_id=person_id,
                amount=self.amount.multiply(percentage / HUNDRED),
                percentage=percentage,
            )
        )
        self.touch()

    def split_equally(self, person_ids: list[UUID]) -> None:
        """
        Replace existing shares with an equal split of half the amount.

        Every person gets EQUAL_SPLIT_TOTAL / len(person_ids) percent.
        """
        if not person_ids:
            raise EmptyPersonListError("person list cannot be empty")

        self.shared_with = []
        share = EQUAL_SPLIT_TOTAL / Decimal(len(person_ids))
        for person_id in person_ids:
            self.add_shared_expense(person_id, share)

    def get_personal_amount(self) -> Money:
        remaining = HUNDRED - self.total_shared_percentage()
        return self.amount.multiply(remaining / HUNDRED)

    def get_shared_amount(self) -> Money:
        total = Money.zero(self.amount.currency)
        for share in self.shared_with:
            total = total.add(share.amount)
        return total

    def share_for(self, person_id: UUID) -> Optional[SharedExpense]:
        for share in self.shared_with:
            if share.person_id == person_id:
                return share
        return None

    def clear_shared_expenses(self) -> None:
        self.shared_with = []
        self.touch()

    def assign_to_bill(self, bill_id: UUID) -> None:
        self.bill_id = bill_id
        self.touch()

    def assign_to_invoice(self, invoice_id: UUID) -> None:
        self.credit_card_invoice_id = invoice_id
        self.touch()
