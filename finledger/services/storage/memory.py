"""
In-Memory Storage

Used by the tests, the demo, and as the fallback when Google Sheets is not
configured. Documents are deep-copied on the way in and out, so callers
never share state with the store.
"""

import copy
from uuid import UUID

from finledger.models.audit import AuditEvent
from finledger.services.storage.interface import (
    AuditStorageInterface,
    Document,
    DocumentCollection,
    DocumentStoreInterface,
    DuplicateError,
    NotFoundError,
)


class InMemoryCollection(DocumentCollection):
    """Dict-backed collection; insertion order is preserved."""

    def __init__(self, name: str):
        self._name = name
        self._documents: dict[str, Document] = {}

    def insert(self, document: Document) -> None:
        key = str(document["id"])
        if key in self._documents:
            raise DuplicateError(f"{self._name} document already exists: {key}")
        self._documents[key] = copy.deepcopy(document)

    def replace(self, document: Document) -> None:
        key = str(document["id"])
        if key not in self._documents:
            raise NotFoundError(f"{self._name} document not found: {key}")
        self._documents[key] = copy.deepcopy(document)

    def delete(self, document_id: UUID) -> None:
        key = str(document_id)
        if key not in self._documents:
            raise NotFoundError(f"{self._name} document not found: {key}")
        del self._documents[key]

    def get(self, document_id: UUID) -> Document:
        key = str(document_id)
        if key not in self._documents:
            raise NotFoundError(f"{self._name} document not found: {key}")
        return copy.deepcopy(self._documents[key])

    def all(self) -> list[Document]:
        return [copy.deepcopy(doc) for doc in self._documents.values()]

    def __len__(self) -> int:
        return len(self._documents)


class InMemoryDocumentStore(DocumentStoreInterface):
    def __init__(self):
        self._collections: dict[str, InMemoryCollection] = {}

    def collection(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return sorted(
            (e for e in self.events if e.correlation_id == correlation_id),
            key=lambda e: e.timestamp,
        )

    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        return sorted(
            (
                e for e in self.events
                if e.entity_type == entity_type and e.entity_id == entity_id
            ),
            key=lambda e: e.timestamp,
        )

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]
