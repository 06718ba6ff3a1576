"""
Entity Repositories

One repository per entity, each on top of a DocumentCollection.
Entities are stored as model_dump(mode="json") documents and rebuilt with
model_validate, so every backend only ever sees plain JSON values.

DESIGN DECISION: All finders load the collection and filter in Python.
For a personal ledger the collections are small, and it keeps the
backends trivial (the same trade-off the Sheets backend makes anyway).

Lookups by id raise NotFoundError. Finders that may legitimately find
nothing (find_by_month, find_open_invoice, find_by_email) return None.
"""

from datetime import date
from typing import Generic, Optional, TypeVar
from uuid import UUID

from finledger.models.account import Account, AccountType
from finledger.models.base import LedgerEntity
from finledger.models.bill import Bill, BillStatus
from finledger.models.credit_card import CreditCard
from finledger.models.invoice import CreditCardInvoice, InvoiceStatus
from finledger.models.person import Person
from finledger.models.transaction import Transaction, TransactionCategory
from finledger.services.storage.interface import (
    DocumentCollection,
    DocumentStoreInterface,
)


EntityT = TypeVar("EntityT", bound=LedgerEntity)


class Repository(Generic[EntityT]):
    """Basic CRUD shared by every entity repository."""

    model: type[EntityT]
    collection_name: str

    def __init__(self, store: DocumentStoreInterface):
        self._collection: DocumentCollection = store.collection(self.collection_name)

    def _to_document(self, entity: EntityT) -> dict:
        return entity.model_dump(mode="json")

    def _from_document(self, document: dict) -> EntityT:
        return self.model.model_validate(document)

    def create(self, entity: EntityT) -> None:
        self._collection.insert(self._to_document(entity))

    def update(self, entity: EntityT) -> None:
        """
        Persist the current state of an existing entity.

        Raises:
            NotFoundError: If the entity was never created
        """
        self._collection.replace(self._to_document(entity))

    def delete(self, entity_id: UUID) -> None:
        self._collection.delete(entity_id)

    def find_by_id(self, entity_id: UUID) -> EntityT:
        return self._from_document(self._collection.get(entity_id))

    def find_all(self) -> list[EntityT]:
        return [self._from_document(doc) for doc in self._collection.all()]


class AccountRepository(Repository[Account]):
    model = Account
    collection_name = "accounts"

    def find_by_type(self, account_type: AccountType) -> list[Account]:
        return [a for a in self.find_all() if a.type == account_type]


class CreditCardRepository(Repository[CreditCard]):
    model = CreditCard
    collection_name = "credit_cards"

    def find_by_account_id(self, account_id: UUID) -> list[CreditCard]:
        return [c for c in self.find_all() if c.account_id == account_id]


class BillRepository(Repository[Bill]):
    model = Bill
    collection_name = "bills"

    def find_by_status(self, status: BillStatus) -> list[Bill]:
        return [b for b in self.find_all() if b.status == status]

    def find_by_date_range(self, start: date, end: date) -> list[Bill]:
        """Bills whose [start_date, end_date] window overlaps [start, end]."""
        return [
            b for b in self.find_all()
            if b.start_date <= end and b.end_date >= start
        ]

    def find_overdue(self, today: date) -> list[Bill]:
        """Bills past due that are neither paid nor closed, whatever their stored status."""
        return [
            b for b in self.find_all()
            if b.due_date < today
            and b.status not in (BillStatus.PAID, BillStatus.CLOSED)
        ]


class CreditCardInvoiceRepository(Repository[CreditCardInvoice]):
    model = CreditCardInvoice
    collection_name = "credit_card_invoices"

    def find_by_credit_card(self, credit_card_id: UUID) -> list[CreditCardInvoice]:
        """All invoices of a card, newest reference month first."""
        invoices = [i for i in self.find_all() if i.credit_card_id == credit_card_id]
        invoices.sort(key=lambda i: i.reference_month, reverse=True)
        return invoices

    def find_by_month(
        self,
        credit_card_id: UUID,
        reference_month: str,
    ) -> Optional[CreditCardInvoice]:
        for invoice in self.find_by_credit_card(credit_card_id):
            if invoice.reference_month == reference_month:
                return invoice
        return None

    def find_open_invoice(self, credit_card_id: UUID) -> Optional[CreditCardInvoice]:
        for invoice in self.find_by_credit_card(credit_card_id):
            if invoice.status == InvoiceStatus.OPEN:
                return invoice
        return None

    def find_by_date_range(self, start: date, end: date) -> list[CreditCardInvoice]:
        """Invoices whose opening date falls in [start, end], newest first."""
        invoices = [
            i for i in self.find_all()
            if start <= i.opening_date <= end
        ]
        invoices.sort(key=lambda i: i.opening_date, reverse=True)
        return invoices

    def find_by_status(
        self,
        status: InvoiceStatus,
        credit_card_id: Optional[UUID] = None,
    ) -> list[CreditCardInvoice]:
        """Invoices with a status (optionally of one card), earliest due date first."""
        invoices = [
            i for i in self.find_all()
            if i.status == status
            and (credit_card_id is None or i.credit_card_id == credit_card_id)
        ]
        invoices.sort(key=lambda i: i.due_date)
        return invoices


class TransactionRepository(Repository[Transaction]):
    model = Transaction
    collection_name = "transactions"

    def find_by_account_id(self, account_id: UUID) -> list[Transaction]:
        return [t for t in self.find_all() if t.account_id == account_id]

    def find_by_credit_card_id(self, credit_card_id: UUID) -> list[Transaction]:
        return [t for t in self.find_all() if t.credit_card_id == credit_card_id]

    def find_by_invoice_id(self, invoice_id: UUID) -> list[Transaction]:
        return [t for t in self.find_all() if t.credit_card_invoice_id == invoice_id]

    def find_by_bill_id(self, bill_id: UUID) -> list[Transaction]:
        return [t for t in self.find_all() if t.bill_id == bill_id]

    def find_by_date_range(self, start: date, end: date) -> list[Transaction]:
        """Transactions dated in [start, end], newest first."""
        transactions = [t for t in self.find_all() if start <= t.date <= end]
        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    def find_by_category(self, category: TransactionCategory) -> list[Transaction]:
        return [t for t in self.find_all() if t.category == category]

    def find_shared_with_person(self, person_id: UUID) -> list[Transaction]:
        return [
            t for t in self.find_all()
            if any(share.person_id == person_id for share in t.shared_with)
        ]

    def find_unassigned_to_bill(self, start: date, end: date) -> list[Transaction]:
        return [
            t for t in self.find_all()
            if t.bill_id is None and start <= t.date <= end
        ]


class PersonRepository(Repository[Person]):
    model = Person
    collection_name = "people"

    def find_by_email(self, email: str) -> Optional[Person]:
        for person in self.find_all():
            if person.email == email:
                return person
        return None
