"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep Google Sheets as the hosted backend and swap it for a database later
2. Use in-memory storage for tests and demos
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
A backend only has to store JSON documents keyed by id in named
collections. Querying by field is done by the repositories on top.
"""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from finledger.models.audit import AuditEvent


Document = dict[str, Any]


class DocumentCollection(ABC):
    """
    A named set of JSON-compatible documents keyed by their "id".

    Any storage implementation (Google Sheets, in-memory, ...)
    must implement these methods.
    """

    @abstractmethod
    def insert(self, document: Document) -> None:
        """
        Store a new document.

        Raises:
            DuplicateError: If a document with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def replace(self, document: Document) -> None:
        """
        Overwrite the document with the same id.

        Raises:
            NotFoundError: If no document has that id
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, document_id: UUID) -> None:
        """
        Remove a document.

        Raises:
            NotFoundError: If no document has that id
        """
        pass

    @abstractmethod
    def get(self, document_id: UUID) -> Document:
        """
        Fetch one document.

        Raises:
            NotFoundError: If no document has that id
        """
        pass

    @abstractmethod
    def all(self) -> list[Document]:
        """All documents, in insertion order."""
        pass


class DocumentStoreInterface(ABC):
    """Factory for named collections."""

    @abstractmethod
    def collection(self, name: str) -> DocumentCollection:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one transaction creation).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
