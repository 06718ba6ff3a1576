"""
Audit Models for the Ledger

Every significant action in the ledger is logged for audit purposes.
This provides:
1. Traceability of balance changes across accounts, cards and invoices
2. A record of best-effort steps that failed (invoice / bill assignment)
3. The ability to reconstruct what one user action touched

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finledger.models.base import utc_now


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Grouped by the entity they are about.
    """
    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"
    BALANCE_CHANGED = "balance_changed"
    TRANSFER_COMPLETED = "transfer_completed"

    # Credit cards
    CARD_CREATED = "card_created"
    CARD_CHARGED = "card_charged"
    CARD_PAID = "card_paid"
    CARD_DELETED = "card_deleted"

    # Bills
    BILL_CREATED = "bill_created"
    BILL_PAYMENT_ADDED = "bill_payment_added"
    BILL_CLOSED = "bill_closed"
    BILL_DELETED = "bill_deleted"

    # Invoices
    INVOICE_CREATED = "invoice_created"
    INVOICE_CLOSED = "invoice_closed"
    INVOICE_PAID = "invoice_paid"

    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_SHARED = "transaction_shared"
    INVOICE_ASSIGNMENT_FAILED = "invoice_assignment_failed"
    BILL_ASSIGNMENT_FAILED = "bill_assignment_failed"

    # People
    PERSON_CREATED = "person_created"
    PERSON_UPDATED = "person_updated"
    PERSON_DELETED = "person_deleted"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'invoice', 'transaction')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one transaction creation)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(account.id, account.name, str(account.balance))
        event = AuditEventBuilder.invoice_assignment_failed(txn.id, card.id, str(e), correlation_id)
    """

    @staticmethod
    def account_created(
        account_id: UUID,
        name: str,
        balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account created: {name}",
            details={"name": name, "initial_balance": balance},
        )

    @staticmethod
    def account_updated(account_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account updated: {name}",
        )

    @staticmethod
    def balance_changed(
        entity_type: str,
        entity_id: UUID,
        operation: str,
        amount: str,
        new_balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_CHANGED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} {operation}: {amount}",
            details={
                "operation": operation,
                "amount": amount,
                "new_balance": new_balance,
            },
        )

    @staticmethod
    def transfer_completed(
        from_account_id: UUID,
        to_account_id: UUID,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_COMPLETED,
            entity_type="account",
            entity_id=from_account_id,
            correlation_id=correlation_id,
            description=f"Transferred {amount}",
            details={
                "from_account_id": str(from_account_id),
                "to_account_id": str(to_account_id),
                "amount": amount,
            },
        )

    @staticmethod
    def card_created(card_id: UUID, name: str, limit: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CARD_CREATED,
            entity_type="credit_card",
            entity_id=card_id,
            description=f"Credit card created: {name}",
            details={"name": name, "credit_limit": limit},
        )

    @staticmethod
    def card_charged(
        card_id: UUID,
        amount: str,
        new_balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CARD_CHARGED,
            entity_type="credit_card",
            entity_id=card_id,
            correlation_id=correlation_id,
            description=f"Card charged: {amount}",
            details={"amount": amount, "new_balance": new_balance},
        )

    @staticmethod
    def card_paid(
        card_id: UUID,
        amount: str,
        new_balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CARD_PAID,
            entity_type="credit_card",
            entity_id=card_id,
            correlation_id=correlation_id,
            description=f"Card payment: {amount}",
            details={"amount": amount, "new_balance": new_balance},
        )

    @staticmethod
    def bill_created(bill_id: UUID, name: str, total: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_CREATED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill created: {name} - {total}",
            details={"name": name, "total_amount": total},
        )

    @staticmethod
    def bill_payment_added(
        bill_id: UUID,
        amount: str,
        status: str
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_PAYMENT_ADDED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill payment added: {amount}",
            details={"amount": amount, "status": status},
        )

    @staticmethod
    def invoice_created(
        invoice_id: UUID,
        card_id: UUID,
        reference_month: str,
        previous_balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_CREATED,
            entity_type="invoice",
            entity_id=invoice_id,
            correlation_id=correlation_id,
            description=f"Invoice created for {reference_month}",
            details={
                "credit_card_id": str(card_id),
                "reference_month": reference_month,
                "previous_balance": previous_balance,
            },
        )

    @staticmethod
    def invoice_closed(invoice_id: UUID, reference_month: str, status: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_CLOSED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {reference_month} closed as {status}",
            details={"reference_month": reference_month, "status": status},
        )

    @staticmethod
    def invoice_paid(invoice_id: UUID, reference_month: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_PAID,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {reference_month} paid",
        )

    @staticmethod
    def transaction_created(
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
        description: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction created: {transaction_type} {amount}",
            details={
                "type": transaction_type,
                "amount": amount,
                "description": description,
            },
        )

    @staticmethod
    def transaction_shared(
        transaction_id: UUID,
        person_count: int,
        shared_percentage: str
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SHARED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction shared with {person_count} people",
            details={
                "person_count": person_count,
                "shared_percentage": shared_percentage,
            },
        )

    @staticmethod
    def invoice_assignment_failed(
        transaction_id: UUID,
        card_id: UUID,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_ASSIGNMENT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Could not add transaction to a credit card invoice",
            details={"credit_card_id": str(card_id)},
            error_message=error_message,
        )

    @staticmethod
    def bill_assignment_failed(
        transaction_id: UUID,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_ASSIGNMENT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Could not auto-assign transaction to a bill",
            error_message=error_message,
        )

    @staticmethod
    def person_event(
        event_type: AuditEventType,
        person_id: UUID,
        name: str
    ) -> AuditEvent:
        verb = event_type.value.split("_", 1)[1]
        return AuditEvent(
            event_type=event_type,
            entity_type="person",
            entity_id=person_id,
            description=f"Person {verb}: {name}",
        )

    @staticmethod
    def entity_deleted(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.replace('_', ' ').capitalize()} deleted",
        )

    @staticmethod
    def bill_closed(bill_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_CLOSED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill closed: {name}",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
