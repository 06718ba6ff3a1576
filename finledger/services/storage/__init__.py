"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the hosted backend; the in-memory store backs tests and demos.
"""

from finledger.services.storage.interface import (
    AuditStorageInterface,
    DocumentCollection,
    DocumentStoreInterface,
    DuplicateError,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from finledger.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsCollection,
    GoogleSheetsDocumentStore,
)
from finledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryCollection,
    InMemoryDocumentStore,
)
from finledger.services.storage.repositories import (
    AccountRepository,
    BillRepository,
    CreditCardInvoiceRepository,
    CreditCardRepository,
    PersonRepository,
    Repository,
    TransactionRepository,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "DocumentCollection",
    "DocumentStoreInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsCollection",
    "GoogleSheetsDocumentStore",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryCollection",
    "InMemoryDocumentStore",
    # Repositories
    "AccountRepository",
    "BillRepository",
    "CreditCardInvoiceRepository",
    "CreditCardRepository",
    "PersonRepository",
    "Repository",
    "TransactionRepository",
]
