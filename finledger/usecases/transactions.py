"""
Transaction Operations

create_transaction is the one multi-entity flow in the ledger:

1. Check that exactly one source (account XOR credit card) is given
2. Build the transaction
3. Account source: withdraw (debit) or deposit (credit), persist the account
4. Card source: charge (debit) or payment (credit), persist the card,
   then add the transaction to the right invoice
5. Auto-assign to the open bill covering the transaction date
6. Persist the transaction

CRITICAL: Steps 4 (invoice part) and 5 are best-effort. A failure there is
logged and recorded in the audit trail, and the transaction is still
created. There is no rollback: if step 6 fails, the balance change from
step 3/4 stays.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

import structlog

from finledger.audit import AuditLogger, create_correlation_id
from finledger.models.audit import AuditEventBuilder, AuditEventType
from finledger.models.bill import Bill, BillStatus
from finledger.models.errors import TransactionSourceError
from finledger.models.money import Money
from finledger.models.transaction import (
    Transaction,
    TransactionCategory,
    TransactionType,
)
from finledger.services.storage.repositories import (
    AccountRepository,
    BillRepository,
    CreditCardInvoiceRepository,
    CreditCardRepository,
    TransactionRepository,
)
from finledger.usecases.invoices import resolve_invoice_for_date


logger = structlog.get_logger(__name__)


def select_bill_for_date(bills: list[Bill], day: date) -> Optional[Bill]:
    """
    The open bill covering `day` with the shortest window.

    On equal windows the first bill in the list wins.
    """
    selected = None
    for bill in bills:
        if bill.status != BillStatus.OPEN or not bill.covers(day):
            continue
        if selected is None or bill.window_days < selected.window_days:
            selected = bill
    return selected


class TransactionUseCase:
    def __init__(
        self,
        transaction_repo: TransactionRepository,
        account_repo: AccountRepository,
        card_repo: CreditCardRepository,
        invoice_repo: CreditCardInvoiceRepository,
        bill_repo: BillRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._transactions = transaction_repo
        self._accounts = account_repo
        self._cards = card_repo
        self._invoices = invoice_repo
        self._bills = bill_repo
        self._audit = audit_logger or AuditLogger()

    # =========================================================================
    # CREATION FLOW
    # =========================================================================

    def create_transaction(
        self,
        account_id: Optional[UUID],
        credit_card_id: Optional[UUID],
        transaction_type: TransactionType,
        category: TransactionCategory,
        amount: Money,
        description: str,
        transaction_date: date,
    ) -> Transaction:
        """
        Record a transaction and apply it to its source.

        Raises:
            TransactionSourceError: Unless exactly one of account_id / credit_card_id is set
            NotFoundError: If the source does not exist
            InsufficientFundsError / CreditLimitExceededError / CurrencyMismatchError:
                If the balance change is refused (nothing is written)
        """
        if (account_id is None) == (credit_card_id is None):
            raise TransactionSourceError(
                "transaction must have exactly one of account_id or credit_card_id"
            )

        correlation_id = create_correlation_id()

        transaction = Transaction.create(
            account_id=account_id,
            credit_card_id=credit_card_id,
            transaction_type=transaction_type,
            category=category,
            amount=amount,
            description=description,
            transaction_date=transaction_date,
        )

        if account_id is not None:
            self._apply_to_account(transaction, correlation_id)
        else:
            self._apply_to_card(transaction, correlation_id)

        self._assign_to_bill(transaction, correlation_id)

        self._transactions.create(transaction)

        self._audit.log(AuditEventBuilder.transaction_created(
            transaction_id=transaction.id,
            transaction_type=transaction.type.value,
            amount=str(transaction.amount),
            description=transaction.description,
            correlation_id=correlation_id,
        ))
        return transaction

    def _apply_to_account(self, transaction: Transaction, correlation_id: UUID) -> None:
        account = self._accounts.find_by_id(transaction.account_id)

        if transaction.is_debit():
            account.withdraw(transaction.amount)
            operation = "withdraw"
        else:
            account.deposit(transaction.amount)
            operation = "deposit"

        self._accounts.update(account)

        self._audit.log_balance_changed(
            entity_type="account",
            entity_id=account.id,
            operation=operation,
            amount=str(transaction.amount),
            new_balance=str(account.balance),
            correlation_id=correlation_id,
        )

    def _apply_to_card(self, transaction: Transaction, correlation_id: UUID) -> None:
        card = self._cards.find_by_id(transaction.credit_card_id)

        if transaction.is_debit():
            card.charge(transaction.amount)
            event = AuditEventBuilder.card_charged(
                card.id, str(transaction.amount), str(card.current_balance), correlation_id
            )
        else:
            card.payment(transaction.amount)
            event = AuditEventBuilder.card_paid(
                card.id, str(transaction.amount), str(card.current_balance), correlation_id
            )

        self._cards.update(card)
        self._audit.log(event)

        # Best-effort from here on
        try:
            invoice = resolve_invoice_for_date(
                self._invoices,
                card,
                transaction.date,
                audit_logger=self._audit,
                correlation_id=correlation_id,
            )
            invoice.add_transaction(
                transaction.id,
                transaction.amount,
                is_payment=transaction.is_credit(),
            )
            self._invoices.update(invoice)
            transaction.assign_to_invoice(invoice.id)
        except Exception as e:
            logger.warning(
                "invoice_assignment_failed",
                transaction_id=str(transaction.id),
                credit_card_id=str(card.id),
                error=str(e),
            )
            self._audit.log_invoice_assignment_failed(
                transaction_id=transaction.id,
                card_id=card.id,
                error_message=str(e),
                correlation_id=correlation_id,
            )

    def _assign_to_bill(self, transaction: Transaction, correlation_id: UUID) -> None:
        try:
            bills = self._bills.find_by_date_range(transaction.date, transaction.date)
            bill = select_bill_for_date(bills, transaction.date)
            if bill is not None:
                transaction.assign_to_bill(bill.id)
        except Exception as e:
            logger.warning(
                "bill_assignment_failed",
                transaction_id=str(transaction.id),
                error=str(e),
            )
            self._audit.log_bill_assignment_failed(
                transaction_id=transaction.id,
                error_message=str(e),
                correlation_id=correlation_id,
            )

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_transaction(self, transaction_id: UUID) -> Transaction:
        return self._transactions.find_by_id(transaction_id)

    def list_transactions(self) -> list[Transaction]:
        return self._transactions.find_all()

    def get_transactions_by_date_range(self, start: date, end: date) -> list[Transaction]:
        return self._transactions.find_by_date_range(start, end)

    def get_transactions_by_account(self, account_id: UUID) -> list[Transaction]:
        return self._transactions.find_by_account_id(account_id)

    def get_transactions_by_credit_card(self, credit_card_id: UUID) -> list[Transaction]:
        return self._transactions.find_by_credit_card_id(credit_card_id)

    def get_transactions_by_invoice(self, invoice_id: UUID) -> list[Transaction]:
        return self._transactions.find_by_invoice_id(invoice_id)

    # =========================================================================
    # SHARING
    # =========================================================================

    def split_transaction_equally(
        self,
        transaction_id: UUID,
        person_ids: list[UUID],
    ) -> Transaction:
        transaction = self._transactions.find_by_id(transaction_id)
        transaction.split_equally(person_ids)
        self._transactions.update(transaction)

        self._audit.log(AuditEventBuilder.transaction_shared(
            transaction.id,
            len(transaction.shared_with),
            str(transaction.total_shared_percentage()),
        ))
        return transaction

    def add_shared_expense(
        self,
        transaction_id: UUID,
        person_id: UUID,
        percentage: Union[Decimal, int, float, str],
    ) -> Transaction:
        transaction = self._transactions.find_by_id(transaction_id)
        transaction.add_shared_expense(person_id, percentage)
        self._transactions.update(transaction)

        self._audit.log(AuditEventBuilder.transaction_shared(
            transaction.id,
            len(transaction.shared_with),
            str(transaction.total_shared_percentage()),
        ))
        return transaction

    def clear_shared_expenses(self, transaction_id: UUID) -> Transaction:
        transaction = self._transactions.find_by_id(transaction_id)
        transaction.clear_shared_expenses()
        self._transactions.update(transaction)
        return transaction

    def delete_transaction(self, transaction_id: UUID) -> None:
        """
        Remove the transaction document.

        Account, card, invoice and bill figures are NOT reversed.
        """
        self._transactions.delete(transaction_id)
        self._audit.log(AuditEventBuilder.entity_deleted(
            AuditEventType.TRANSACTION_DELETED, "transaction", transaction_id
        ))
