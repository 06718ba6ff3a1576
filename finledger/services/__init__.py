"""Services package."""

from finledger.services.storage import (
    AuditStorageInterface,
    DocumentStoreInterface,
    DuplicateError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryAuditStorage,
    InMemoryDocumentStore,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "DocumentStoreInterface",
    "DuplicateError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
    "InMemoryAuditStorage",
    "InMemoryDocumentStore",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
]
