"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data flowing through the system must conform to these schemas.
"""

from finledger.models.account import Account, AccountType
from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from finledger.models.bill import Bill, BillStatus
from finledger.models.credit_card import CreditCard
from finledger.models.errors import (
    AlreadyPaidError,
    AlreadyTerminalError,
    BusinessRuleError,
    CreditLimitExceededError,
    CurrencyMismatchError,
    EmptyPersonListError,
    InsufficientFundsError,
    InvalidCardParametersError,
    InvalidDateRangeError,
    InvalidInvoiceParametersError,
    InvalidPercentageError,
    InvoiceAlreadyExistsError,
    InvoiceNotOpenError,
    LedgerError,
    LedgerValidationError,
    OutstandingBalanceError,
    PercentageOverflowError,
    SameAccountTransferError,
    TransactionNotFoundError,
    TransactionSourceError,
)
from finledger.models.invoice import CreditCardInvoice, InvoiceStatus
from finledger.models.money import Money
from finledger.models.person import Person
from finledger.models.report import (
    BillReport,
    CategoryTotal,
    DashboardSummary,
    MonthlyReport,
    SharedExpenseReport,
)
from finledger.models.transaction import (
    SharedExpense,
    Transaction,
    TransactionCategory,
    TransactionType,
)

__all__ = [
    # Ledger entities
    "Account",
    "AccountType",
    "Bill",
    "BillStatus",
    "CreditCard",
    "CreditCardInvoice",
    "InvoiceStatus",
    "Money",
    "Person",
    "SharedExpense",
    "Transaction",
    "TransactionCategory",
    "TransactionType",
    # Reports
    "BillReport",
    "CategoryTotal",
    "DashboardSummary",
    "MonthlyReport",
    "SharedExpenseReport",
    # Errors
    "AlreadyPaidError",
    "AlreadyTerminalError",
    "BusinessRuleError",
    "CreditLimitExceededError",
    "CurrencyMismatchError",
    "EmptyPersonListError",
    "InsufficientFundsError",
    "InvalidCardParametersError",
    "InvalidDateRangeError",
    "InvalidInvoiceParametersError",
    "InvalidPercentageError",
    "InvoiceAlreadyExistsError",
    "InvoiceNotOpenError",
    "LedgerError",
    "LedgerValidationError",
    "OutstandingBalanceError",
    "PercentageOverflowError",
    "SameAccountTransferError",
    "TransactionNotFoundError",
    "TransactionSourceError",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
