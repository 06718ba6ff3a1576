"""
Report Models

Read-only results produced by ReportQueries. None of these are persisted.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from finledger.models.account import Account
from finledger.models.bill import Bill
from finledger.models.money import Money
from finledger.models.person import Person
from finledger.models.transaction import Transaction


class SharedExpenseReport(BaseModel):
    """What one person owes across shared transactions in a date range."""

    person: Person
    start_date: date
    end_date: date
    transactions: list[Transaction] = Field(default_factory=list)
    total_owed: Money
    total_paid: Money
    balance: Money


class BillReport(BaseModel):
    """Spending attributed to one bill."""

    bill: Bill
    transactions: list[Transaction] = Field(default_factory=list)
    total_expenses: Money
    shared_expenses: Money
    personal_expenses: Money
    participants: list[str] = Field(
        default_factory=list,
        description="Sorted names of people sharing any of the bill's transactions"
    )


class CategoryTotal(BaseModel):
    category: str
    total: Money
    transaction_count: int = 0


class MonthlyReport(BaseModel):
    """Income, expenses and per-category breakdown for a calendar month."""

    period: str = Field(..., description="Month label, e.g. 'January 2024'")
    year: int
    month: int = Field(..., ge=1, le=12)
    total_income: Money
    total_expenses: Money
    net_savings: Money
    by_category: list[CategoryTotal] = Field(default_factory=list)
    transaction_count: int = 0


class DashboardSummary(BaseModel):
    """Landing page figures."""

    as_of: date
    accounts: list[Account] = Field(default_factory=list)
    total_balance: Money
    month_income: Money
    month_expenses: Money
    pending_bills: list[Bill] = Field(default_factory=list)
    recent_transactions: list[Transaction] = Field(default_factory=list)
    overdue_bill_count: int = 0
    next_due_bill: Optional[Bill] = None
