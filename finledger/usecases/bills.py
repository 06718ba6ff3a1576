"""Bill operations."""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from finledger.audit import AuditLogger
from finledger.models.audit import AuditEventBuilder, AuditEventType
from finledger.models.base import today_or
from finledger.models.bill import Bill, BillStatus
from finledger.models.money import Money
from finledger.services.storage.repositories import BillRepository


logger = structlog.get_logger(__name__)


class BillUseCase:
    def __init__(
        self,
        bill_repo: BillRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._bills = bill_repo
        self._audit = audit_logger or AuditLogger()

    def create_bill(
        self,
        name: str,
        description: str,
        start_date: date,
        end_date: date,
        due_date: date,
        total_amount: Money,
    ) -> Bill:
        bill = Bill.create(name, description, start_date, end_date, due_date, total_amount)
        self._bills.create(bill)

        self._audit.log(AuditEventBuilder.bill_created(
            bill.id, bill.name, str(bill.total_amount)
        ))
        return bill

    def get_bill(self, bill_id: UUID) -> Bill:
        return self._bills.find_by_id(bill_id)

    def list_bills(self) -> list[Bill]:
        return self._bills.find_all()

    def get_bills_by_status(self, status: BillStatus) -> list[Bill]:
        return self._bills.find_by_status(status)

    def get_pending_bills(self) -> list[Bill]:
        return self._bills.find_by_status(BillStatus.OPEN)

    def get_overdue_bills(self, today: Optional[date] = None) -> list[Bill]:
        return self._bills.find_overdue(today_or(today))

    def get_bills_by_date_range(self, start: date, end: date) -> list[Bill]:
        return self._bills.find_by_date_range(start, end)

    def add_payment(
        self,
        bill_id: UUID,
        amount: Money,
        today: Optional[date] = None,
    ) -> Bill:
        bill = self._bills.find_by_id(bill_id)
        bill.add_payment(amount, today)
        self._bills.update(bill)

        self._audit.log(AuditEventBuilder.bill_payment_added(
            bill.id, str(amount), bill.status.value
        ))
        return bill

    def close_bill(self, bill_id: UUID) -> Bill:
        bill = self._bills.find_by_id(bill_id)
        bill.close()
        self._bills.update(bill)

        self._audit.log(AuditEventBuilder.bill_closed(bill.id, bill.name))
        return bill

    def refresh_overdue_bills(self, today: Optional[date] = None) -> list[Bill]:
        """
        Re-apply the status rule to every bill still OPEN.

        Status only changes when a payment is added, so bills that pass
        their due date untouched stay OPEN until refreshed.

        Returns:
            The bills whose status changed
        """
        changed = []
        for bill in self._bills.find_by_status(BillStatus.OPEN):
            previous = bill.status
            bill.update_status(today)
            if bill.status != previous:
                bill.touch()
                self._bills.update(bill)
                changed.append(bill)

        if changed:
            logger.info("bills_status_refreshed", count=len(changed))
        return changed

    def delete_bill(self, bill_id: UUID) -> None:
        """Delete a bill. Transactions assigned to it keep the dangling bill_id."""
        self._bills.delete(bill_id)
        self._audit.log(AuditEventBuilder.entity_deleted(
            AuditEventType.BILL_DELETED, "bill", bill_id
        ))
