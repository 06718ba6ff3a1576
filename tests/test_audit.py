"""Tests for audit events and the audit logger."""

import json
from uuid import uuid4

from finledger.audit import AuditLogger, create_correlation_id
from finledger.models import AuditEvent, AuditEventBuilder, AuditEventType, AuditSeverity
from finledger.services.storage import InMemoryAuditStorage


class FailingAuditStorage(InMemoryAuditStorage):
    def append_event(self, event: AuditEvent) -> bool:
        raise RuntimeError("sheet unavailable")


class TestAuditModels:
    """Tests for audit-related Pydantic models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            description="Account created: Main",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None
        assert event.details == {}

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        account_id = uuid4()
        event = AuditEventBuilder.account_created(account_id, "Main", "R$ 10.00")
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "account_created"
        assert log_dict["entity_id"] == str(account_id)
        assert log_dict["correlation_id"] is None

    def test_audit_event_to_sheets_row(self):
        """Test conversion to Google Sheets row."""
        event = AuditEventBuilder.account_created(uuid4(), "Main", "R$ 10.00")
        row = event.to_sheets_row()

        assert len(row) == 10
        assert row[2] == "account_created"
        assert json.loads(row[8])["name"] == "Main"
        assert row[9] == ""

    def test_invoice_assignment_failed_is_warning(self):
        transaction_id, card_id = uuid4(), uuid4()
        event = AuditEventBuilder.invoice_assignment_failed(
            transaction_id, card_id, "cannot add transaction to closed invoice"
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == transaction_id
        assert event.details["credit_card_id"] == str(card_id)


class TestAuditLogger:
    def test_log_persists_event(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        assert logger.log(AuditEventBuilder.account_created(uuid4(), "Main", "R$ 0.00"))
        assert len(storage.events) == 1

    def test_storage_failure_is_not_raised(self):
        logger = AuditLogger(FailingAuditStorage())
        assert logger.log(AuditEventBuilder.account_created(uuid4(), "Main", "R$ 0.00")) is False

    def test_without_storage(self):
        logger = AuditLogger()
        assert logger.storage is None
        assert logger.log(AuditEventBuilder.account_created(uuid4(), "Main", "R$ 0.00"))

    def test_helpers_carry_correlation_id(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = create_correlation_id()

        logger.log_balance_changed("account", uuid4(), "deposit", "R$ 5.00", "R$ 5.00", correlation_id)
        logger.log_bill_assignment_failed(uuid4(), "boom", correlation_id)
        logger.log_error("unexpected", "boom", {"step": "test"}, correlation_id)

        events = storage.get_events_by_correlation_id(correlation_id)
        assert [e.event_type for e in events] == [
            AuditEventType.BALANCE_CHANGED,
            AuditEventType.BILL_ASSIGNMENT_FAILED,
            AuditEventType.SYSTEM_ERROR,
        ]
