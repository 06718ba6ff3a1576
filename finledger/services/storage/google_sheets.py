"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the hosted storage backend because:
1. Users can view their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

Each collection gets its own worksheet with three columns:
id | updated_at | document_json

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (the use cases write in a fixed order)
- Limited query capabilities (the repositories filter in Python)

The implementation follows the abstract interface, so we can swap
to a real database later without changing business logic.
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finledger.config.settings import GoogleSheetsSettings
from finledger.models.audit import AuditEvent, AuditEventType, AuditSeverity
from finledger.services.storage.interface import (
    AuditStorageInterface,
    Document,
    DocumentCollection,
    DocumentStoreInterface,
    DuplicateError,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Column layout for every collection worksheet
DOCUMENT_COLUMNS = [
    "id",
    "updated_at",
    "document_json",
]

# Column layout for the Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
]

# Missing documents and duplicates are answers, not transient failures
sheets_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_not_exception_type((NotFoundError, DuplicateError)),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    A pre-opened spreadsheet can be passed in to skip authentication.
    """

    def __init__(
        self,
        settings: GoogleSheetsSettings,
        spreadsheet: Optional[gspread.Spreadsheet] = None,
    ):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet = spreadsheet
        self._settings = settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """Get or create a worksheet, writing the header row on creation."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
            logger.info("worksheet_created", title=title)
        return sheet

    def get_collection_sheet(self, name: str) -> gspread.Worksheet:
        title = f"{self._settings.worksheet_prefix}{name}"
        return self.get_worksheet(title, DOCUMENT_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )


class GoogleSheetsCollection(DocumentCollection):
    """
    One worksheet holding one JSON document per row.

    Row 1 is the header; document rows start at row 2.
    """

    def __init__(self, client: GoogleSheetsClient, name: str):
        self._client = client
        self._name = name

    def _sheet(self) -> gspread.Worksheet:
        return self._client.get_collection_sheet(self._name)

    def _document_to_row(self, document: Document) -> list:
        return [
            str(document["id"]),
            str(document.get("updated_at", "")),
            json.dumps(document, default=str),
        ]

    def _find_row(self, sheet: gspread.Worksheet, document_id: str) -> Optional[int]:
        """1-based sheet row number of a document, or None."""
        for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
            if row and row[0] == document_id:
                return idx
        return None

    @sheets_retry
    def insert(self, document: Document) -> None:
        try:
            sheet = self._sheet()
            if self._find_row(sheet, str(document["id"])) is not None:
                raise DuplicateError(
                    f"{self._name} document already exists: {document['id']}"
                )
            sheet.append_row(self._document_to_row(document), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to insert into {self._name}: {e}")

    @sheets_retry
    def replace(self, document: Document) -> None:
        try:
            sheet = self._sheet()
            idx = self._find_row(sheet, str(document["id"]))
            if idx is None:
                raise NotFoundError(f"{self._name} document not found: {document['id']}")

            for col_idx, value in enumerate(self._document_to_row(document), start=1):
                sheet.update_cell(idx, col_idx, value)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {self._name}: {e}")

    @sheets_retry
    def delete(self, document_id: UUID) -> None:
        try:
            sheet = self._sheet()
            idx = self._find_row(sheet, str(document_id))
            if idx is None:
                raise NotFoundError(f"{self._name} document not found: {document_id}")
            sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete from {self._name}: {e}")

    def get(self, document_id: UUID) -> Document:
        for document in self.all():
            if document.get("id") == str(document_id):
                return document
        raise NotFoundError(f"{self._name} document not found: {document_id}")

    @sheets_retry
    def all(self) -> list[Document]:
        try:
            rows = self._sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to read {self._name}: {e}")

        documents = []
        for row in rows:
            if len(row) < 3 or not row[0]:
                continue  # Skip empty rows
            try:
                documents.append(json.loads(row[2]))
            except json.JSONDecodeError:
                logger.warning(
                    "malformed_document_row",
                    collection=self._name,
                    document_id=row[0],
                )
        return documents


class GoogleSheetsDocumentStore(DocumentStoreInterface):
    """Document store backed by one spreadsheet."""

    def __init__(self, client: GoogleSheetsClient):
        self._client = client
        self._collections: dict[str, GoogleSheetsCollection] = {}

    def collection(self, name: str) -> GoogleSheetsCollection:
        if name not in self._collections:
            self._collections[name] = GoogleSheetsCollection(self._client, name)
        return self._collections[name]


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=UUID(safe_get(5)) if safe_get(5) else None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
        )

    def _all_events(self) -> list[AuditEvent]:
        try:
            rows = self._client.get_audit_sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in rows:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, json.JSONDecodeError):
                logger.warning("malformed_audit_row", event_id=row[0])
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _append_row(self, row: list) -> None:
        self._client.get_audit_sheet().append_row(row, value_input_option="RAW")

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Failures are logged, never raised."""
        try:
            self._append_row(event.to_sheets_row())
            return True
        except Exception as e:
            logger.warning(
                "audit_write_failed",
                event_id=str(event.event_id),
                error=str(e),
            )
            return False

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._all_events() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._all_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._all_events()
        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
