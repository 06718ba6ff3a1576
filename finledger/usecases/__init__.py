"""Use cases: the operations the front end calls."""

from finledger.usecases.accounts import AccountUseCase
from finledger.usecases.bills import BillUseCase
from finledger.usecases.credit_cards import CreditCardUseCase
from finledger.usecases.invoices import (
    CreditCardInvoiceUseCase,
    carried_over_balance,
    open_invoice,
    resolve_invoice_for_date,
)
from finledger.usecases.people import PersonUseCase
from finledger.usecases.transactions import TransactionUseCase, select_bill_for_date

__all__ = [
    "AccountUseCase",
    "BillUseCase",
    "CreditCardInvoiceUseCase",
    "CreditCardUseCase",
    "PersonUseCase",
    "TransactionUseCase",
    "carried_over_balance",
    "open_invoice",
    "resolve_invoice_for_date",
    "select_bill_for_date",
]
