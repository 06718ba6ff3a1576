"""
Domain Errors for the Ledger

Two families of errors are raised by the entities:

1. LedgerValidationError - malformed construction or mutation input
   (bad date ordering, bad due day, bad percentage, ...)
2. BusinessRuleError - well-formed input that the current state rejects
   (insufficient funds, credit limit exceeded, invoice not open, ...)

IMPORTANT: When an entity method raises, the entity is left unchanged.
"""


class LedgerError(Exception):
    """Base exception for the ledger domain."""
    pass


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class LedgerValidationError(LedgerError):
    """Input is malformed and can never be accepted as given."""
    pass


class InvalidDateRangeError(LedgerValidationError):
    """Bill dates are not ordered start <= end <= due."""
    pass


class InvalidCardParametersError(LedgerValidationError):
    """Credit card due day or last four digits are invalid."""
    pass


class InvalidInvoiceParametersError(LedgerValidationError):
    """Invoice dates are out of order or the reference month is malformed."""
    pass


class InvalidPercentageError(LedgerValidationError):
    """A shared-expense percentage is outside (0, 100]."""
    pass


class EmptyPersonListError(LedgerValidationError):
    """An equal split was requested with nobody to split with."""
    pass


class TransactionSourceError(LedgerValidationError):
    """A transaction must reference exactly one account or one credit card."""
    pass


class SameAccountTransferError(LedgerValidationError):
    """Source and destination of a transfer are the same account."""
    pass


# =============================================================================
# BUSINESS RULE VIOLATIONS
# =============================================================================

class BusinessRuleError(LedgerError):
    """The operation conflicts with the current state of an entity."""
    pass


class CurrencyMismatchError(BusinessRuleError):
    """Arithmetic between two different currencies."""

    def __init__(self, operation: str, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(
            f"cannot {operation} different currencies: {left} and {right}"
        )


class InsufficientFundsError(BusinessRuleError):
    """Withdrawal would overdraw an account that does not allow it."""
    pass


class CreditLimitExceededError(BusinessRuleError):
    """Charge would push a card balance over its limit."""
    pass


class PercentageOverflowError(BusinessRuleError):
    """Shared percentages would add up to more than 100%."""
    pass


class AlreadyTerminalError(BusinessRuleError):
    """Bill is already paid or closed."""
    pass


class InvoiceNotOpenError(BusinessRuleError):
    """Invoice is closed, paid or overdue and cannot be changed."""
    pass


class AlreadyPaidError(BusinessRuleError):
    """Invoice has already been marked as paid."""
    pass


class OutstandingBalanceError(BusinessRuleError):
    """Invoice cannot be marked paid while it still has a positive balance."""
    pass


class TransactionNotFoundError(BusinessRuleError):
    """Transaction is not part of the invoice."""
    pass


class InvoiceAlreadyExistsError(BusinessRuleError):
    """The card already has an invoice for the reference month."""
    pass
