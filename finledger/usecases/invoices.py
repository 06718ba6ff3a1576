"""
Credit Card Invoice Operations

Invoices are calendar-month statements. Besides the CRUD-like use case
this module holds the rules shared with the transaction flow:

- which invoice a card transaction on a given day belongs to
  (resolve_invoice_for_date)
- how a new invoice seeds its previous balance
  (carried_over_balance)

IMPORTANT: The carried-over balance comes from the FIRST closed, paid or
overdue invoice with an earlier reference month in a newest-first scan.
If months were skipped this can be an older statement than expected.
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finledger.audit import AuditLogger
from finledger.models.audit import AuditEventBuilder
from finledger.models.base import today_or
from finledger.models.credit_card import CreditCard
from finledger.models.errors import InvoiceAlreadyExistsError
from finledger.models.invoice import (
    CreditCardInvoice,
    InvoiceStatus,
    invoice_period,
    next_reference_month,
    reference_month_for,
)
from finledger.models.money import Money
from finledger.services.storage.repositories import (
    CreditCardInvoiceRepository,
    CreditCardRepository,
)


logger = structlog.get_logger(__name__)


# =============================================================================
# SHARED RULES
# =============================================================================

def carried_over_balance(
    invoices: list[CreditCardInvoice],
    reference_month: str,
    currency: str,
) -> Money:
    """
    Balance a new invoice for reference_month starts from.

    Args:
        invoices: The card's invoices, newest reference month first
        reference_month: Month of the invoice being opened
        currency: Currency of the zero balance when nothing carries over
    """
    for invoice in invoices:
        if invoice.is_closed() and invoice.reference_month < reference_month:
            return invoice.closing_balance
    return Money.zero(currency)


def open_invoice(
    invoice_repo: CreditCardInvoiceRepository,
    card: CreditCard,
    reference_month: str,
    opening_date: Optional[date] = None,
    closing_date: Optional[date] = None,
    due_date: Optional[date] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> CreditCardInvoice:
    """
    Create and store a new invoice for a card.

    Dates default to the calendar-month period for reference_month.
    An INVOICE_CREATED event is recorded when audit_logger is given.

    Raises:
        InvoiceAlreadyExistsError: If the card already has an invoice for that month
        InvalidInvoiceParametersError: On bad dates or month format
    """
    if invoice_repo.find_by_month(card.id, reference_month) is not None:
        raise InvoiceAlreadyExistsError(
            f"invoice already exists for {reference_month}"
        )

    default_opening, default_closing, default_due = invoice_period(
        reference_month, card.due_day
    )
    previous_balance = carried_over_balance(
        invoice_repo.find_by_credit_card(card.id),
        reference_month,
        card.credit_limit.currency,
    )

    invoice = CreditCardInvoice.create(
        credit_card_id=card.id,
        reference_month=reference_month,
        opening_date=opening_date or default_opening,
        closing_date=closing_date or default_closing,
        due_date=due_date or default_due,
        previous_balance=previous_balance,
    )
    invoice_repo.create(invoice)

    logger.info(
        "invoice_opened",
        invoice_id=str(invoice.id),
        credit_card_id=str(card.id),
        reference_month=reference_month,
        previous_balance=str(previous_balance),
    )
    if audit_logger is not None:
        audit_logger.log(AuditEventBuilder.invoice_created(
            invoice_id=invoice.id,
            card_id=card.id,
            reference_month=reference_month,
            previous_balance=str(previous_balance),
            correlation_id=correlation_id,
        ))
    return invoice


def resolve_invoice_for_date(
    invoice_repo: CreditCardInvoiceRepository,
    card: CreditCard,
    day: date,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> CreditCardInvoice:
    """
    Find the invoice a card transaction dated `day` belongs to.

    Resolution order:
    1. An invoice of the card whose period contains the day
    2. The card's open invoice
    3. A new invoice for the day's calendar month

    The invoice returned by (1) may be closed; adding to it then fails.
    """
    for invoice in invoice_repo.find_by_credit_card(card.id):
        if invoice.contains_date(day):
            return invoice

    invoice = invoice_repo.find_open_invoice(card.id)
    if invoice is not None:
        return invoice

    return open_invoice(
        invoice_repo,
        card,
        reference_month_for(day),
        audit_logger=audit_logger,
        correlation_id=correlation_id,
    )


# =============================================================================
# USE CASE
# =============================================================================

class CreditCardInvoiceUseCase:
    def __init__(
        self,
        invoice_repo: CreditCardInvoiceRepository,
        card_repo: CreditCardRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._invoices = invoice_repo
        self._cards = card_repo
        self._audit = audit_logger or AuditLogger()

    def create_invoice(
        self,
        credit_card_id: UUID,
        reference_month: str,
        opening_date: Optional[date] = None,
        closing_date: Optional[date] = None,
        due_date: Optional[date] = None,
    ) -> CreditCardInvoice:
        """
        Open an invoice for a card and month.

        Raises:
            NotFoundError: If the card does not exist
            InvoiceAlreadyExistsError: If the month already has an invoice
        """
        card = self._cards.find_by_id(credit_card_id)
        return open_invoice(
            self._invoices,
            card,
            reference_month,
            opening_date,
            closing_date,
            due_date,
            audit_logger=self._audit,
        )

    def get_current_invoice(
        self,
        credit_card_id: UUID,
        today: Optional[date] = None,
    ) -> CreditCardInvoice:
        """The card's open invoice, or a new one for the current month."""
        invoice = self._invoices.find_open_invoice(credit_card_id)
        if invoice is not None:
            return invoice
        return self.create_invoice(credit_card_id, reference_month_for(today_or(today)))

    def close_invoice(
        self,
        invoice_id: UUID,
        create_next: bool = False,
        today: Optional[date] = None,
    ) -> CreditCardInvoice:
        """
        Close an invoice, optionally opening the following month's.

        Returns:
            The closed invoice
        """
        invoice = self._invoices.find_by_id(invoice_id)
        invoice.close(today)
        self._invoices.update(invoice)

        self._audit.log(AuditEventBuilder.invoice_closed(
            invoice.id, invoice.reference_month, invoice.status.value
        ))

        if create_next:
            self.create_invoice(
                invoice.credit_card_id,
                next_reference_month(invoice.reference_month),
            )
        return invoice

    def list_invoices_by_card(self, credit_card_id: UUID) -> list[CreditCardInvoice]:
        return self._invoices.find_by_credit_card(credit_card_id)

    def get_invoice(self, invoice_id: UUID) -> CreditCardInvoice:
        return self._invoices.find_by_id(invoice_id)

    def get_invoices_by_status(
        self,
        credit_card_id: UUID,
        status: InvoiceStatus,
    ) -> list[CreditCardInvoice]:
        return self._invoices.find_by_status(status, credit_card_id)

    def add_transaction_to_invoice(
        self,
        invoice_id: UUID,
        transaction_id: UUID,
        amount: Money,
        is_payment: bool,
    ) -> CreditCardInvoice:
        invoice = self._invoices.find_by_id(invoice_id)
        invoice.add_transaction(transaction_id, amount, is_payment)
        self._invoices.update(invoice)
        return invoice

    def remove_transaction_from_invoice(
        self,
        invoice_id: UUID,
        transaction_id: UUID,
        amount: Money,
        is_payment: bool,
    ) -> CreditCardInvoice:
        invoice = self._invoices.find_by_id(invoice_id)
        invoice.remove_transaction(transaction_id, amount, is_payment)
        self._invoices.update(invoice)
        return invoice

    def process_payment(self, invoice_id: UUID, amount: Money) -> CreditCardInvoice:
        """
        Record a payment line on an open invoice.

        The invoice is marked paid as soon as its closing balance drops to
        zero or below. The payment line gets a fresh id since it has no
        transaction of its own.
        """
        invoice = self._invoices.find_by_id(invoice_id)
        invoice.add_transaction(uuid4(), amount, is_payment=True)

        if not invoice.has_outstanding_balance():
            invoice.mark_as_paid()
            self._audit.log(AuditEventBuilder.invoice_paid(
                invoice.id, invoice.reference_month
            ))

        self._invoices.update(invoice)
        return invoice

    def update_overdue_invoices(
        self,
        credit_card_id: UUID,
        today: Optional[date] = None,
    ) -> list[CreditCardInvoice]:
        """
        Flip the card's closed invoices past their due date to OVERDUE.

        Returns:
            The invoices that changed
        """
        changed = []
        for invoice in self._invoices.find_by_status(InvoiceStatus.CLOSED, credit_card_id):
            if invoice.update_status_if_overdue(today):
                self._invoices.update(invoice)
                changed.append(invoice)

        if changed:
            logger.info(
                "invoices_marked_overdue",
                credit_card_id=str(credit_card_id),
                count=len(changed),
            )
        return changed
