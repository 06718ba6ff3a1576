"""
Report Queries

DESIGN DECISION: Reports are read-only and DETERMINISTIC.
They only aggregate what the repositories return; nothing is estimated
and nothing is written back.

All totals are kept in one currency (the configured default). Amounts in
any other currency are left out of the totals and a warning is logged,
so a mixed-currency ledger never fails a report.
"""

import calendar
from datetime import date, timedelta
from typing import Iterable, Optional
from uuid import UUID

import structlog

from finledger.models.base import today_or
from finledger.models.bill import BillStatus
from finledger.models.money import Money
from finledger.models.report import (
    BillReport,
    CategoryTotal,
    DashboardSummary,
    MonthlyReport,
    SharedExpenseReport,
)
from finledger.models.transaction import Transaction
from finledger.services.storage.interface import NotFoundError
from finledger.services.storage.repositories import (
    AccountRepository,
    BillRepository,
    PersonRepository,
    TransactionRepository,
)


logger = structlog.get_logger(__name__)

RECENT_TRANSACTIONS_LIMIT = 10


class ReportQueries:
    """
    Read-side aggregations over the ledger.

    GUARANTEES:
    - Only returns real data from storage
    - Empty inputs give zero totals, never an error
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        person_repo: PersonRepository,
        bill_repo: BillRepository,
        account_repo: AccountRepository,
        currency: str = "BRL",
        recent_days: int = 30,
    ):
        self._transactions = transaction_repo
        self._people = person_repo
        self._bills = bill_repo
        self._accounts = account_repo
        self._currency = currency
        self._recent_days = recent_days

    def _sum(self, amounts: Iterable[Money], report: str) -> Money:
        total = Money.zero(self._currency)
        for amount in amounts:
            if amount.currency != self._currency:
                logger.warning(
                    "report_currency_skipped",
                    report=report,
                    expected=self._currency,
                    found=amount.currency,
                    amount=str(amount.amount),
                )
                continue
            total = total.add(amount)
        return total

    def shared_expense_report(
        self,
        person_id: UUID,
        start: date,
        end: date,
    ) -> SharedExpenseReport:
        """
        What a person owes for transactions shared with them in [start, end].

        Repayments are not tracked, so total_paid is always zero and the
        balance equals the amount owed.

        Raises:
            NotFoundError: If the person does not exist
        """
        person = self._people.find_by_id(person_id)

        transactions = [
            t for t in self._transactions.find_shared_with_person(person_id)
            if start <= t.date <= end
        ]
        shares = (t.share_for(person_id) for t in transactions)
        total_owed = self._sum(
            (share.amount for share in shares if share is not None),
            "shared_expense",
        )
        total_paid = Money.zero(self._currency)

        return SharedExpenseReport(
            person=person,
            start_date=start,
            end_date=end,
            transactions=transactions,
            total_owed=total_owed,
            total_paid=total_paid,
            balance=total_owed.subtract(total_paid),
        )

    def bill_report(self, bill_id: UUID) -> BillReport:
        """
        Spending attributed to a bill.

        Participants are the sorted, de-duplicated names of everyone sharing
        any of the bill's transactions. People that no longer exist are skipped.
        """
        bill = self._bills.find_by_id(bill_id)
        transactions = self._transactions.find_by_bill_id(bill_id)

        total = self._sum((t.amount for t in transactions), "bill")
        personal = self._sum((t.get_personal_amount() for t in transactions), "bill")
        shared = self._sum(
            (share.amount for t in transactions for share in t.shared_with),
            "bill",
        )

        names = set()
        for t in transactions:
            for share in t.shared_with:
                try:
                    names.add(self._people.find_by_id(share.person_id).name)
                except NotFoundError:
                    logger.debug(
                        "bill_report_person_missing",
                        person_id=str(share.person_id),
                    )

        return BillReport(
            bill=bill,
            transactions=transactions,
            total_expenses=total,
            shared_expenses=shared,
            personal_expenses=personal,
            participants=sorted(names),
        )

    def monthly_report(self, year: int, month: int) -> MonthlyReport:
        first = date(year, month, 1)
        last = first.replace(day=calendar.monthrange(year, month)[1])
        transactions = self._transactions.find_by_date_range(first, last)

        income = self._sum((t.amount for t in transactions if t.is_credit()), "monthly")
        expenses = self._sum((t.amount for t in transactions if t.is_debit()), "monthly")

        by_category: dict[str, list[Transaction]] = {}
        for t in transactions:
            by_category.setdefault(t.category.value, []).append(t)

        breakdown = [
            CategoryTotal(
                category=category,
                total=self._sum((t.amount for t in items), "monthly"),
                transaction_count=len(items),
            )
            for category, items in by_category.items()
        ]
        breakdown.sort(key=lambda c: c.total.amount, reverse=True)

        return MonthlyReport(
            period=first.strftime("%B %Y"),
            year=year,
            month=month,
            total_income=income,
            total_expenses=expenses,
            net_savings=income.subtract(expenses),
            by_category=breakdown,
            transaction_count=len(transactions),
        )

    def dashboard_summary(self, today: Optional[date] = None) -> DashboardSummary:
        """
        Landing page figures as of `today`.

        Income and expenses are month-to-date, taken from the recent
        transaction window.
        """
        today = today_or(today)
        accounts = self._accounts.find_all()
        total_balance = self._sum((a.balance for a in accounts), "dashboard")

        recent = self._transactions.find_by_date_range(
            today - timedelta(days=self._recent_days), today
        )
        this_month = [
            t for t in recent
            if t.date.year == today.year and t.date.month == today.month
        ]
        month_income = self._sum(
            (t.amount for t in this_month if t.is_credit()), "dashboard"
        )
        month_expenses = self._sum(
            (t.amount for t in this_month if t.is_debit()), "dashboard"
        )

        pending = self._bills.find_by_status(BillStatus.OPEN)
        pending.sort(key=lambda b: b.due_date)

        return DashboardSummary(
            as_of=today,
            accounts=accounts,
            total_balance=total_balance,
            month_income=month_income,
            month_expenses=month_expenses,
            pending_bills=pending,
            recent_transactions=recent[:RECENT_TRANSACTIONS_LIMIT],
            overdue_bill_count=len(self._bills.find_overdue(today)),
            next_due_bill=pending[0] if pending else None,
        )
