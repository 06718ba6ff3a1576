"""
Demo Data

Seeds a small, realistic ledger through the use cases so every screen
has something to show. Dates are relative to `today`.
"""

from datetime import date, timedelta
from typing import Optional

import structlog

from finledger.models.account import AccountType
from finledger.models.base import today_or
from finledger.models.money import Money
from finledger.models.transaction import TransactionCategory, TransactionType
from finledger.orchestrator import LedgerApp


logger = structlog.get_logger(__name__)


def seed_demo_data(app: LedgerApp, today: Optional[date] = None) -> dict:
    """
    Create sample accounts, a card, people, a bill and transactions.

    Returns:
        The created entities by name, for callers that want to show them
    """
    today = today_or(today)
    currency = app.currency

    def money(amount) -> Money:
        return Money.of(amount, currency)

    checking = app.accounts.create_account(
        "Main Checking", AccountType.CHECKING, money("2500.75"), "Primary checking account"
    )
    savings = app.accounts.create_account(
        "Emergency Fund", AccountType.SAVINGS, money("15000.00"), "Emergency savings"
    )
    card = app.credit_cards.create_credit_card(
        checking.id, "Rewards Card", "1234", money("5000.00"), 15
    )

    alice = app.people.create_person("Alice Smith", "alice@example.com", "555-0101")
    bob = app.people.create_person("Bob Johnson", "bob@example.com", "555-0102")

    bill = app.bills.create_bill(
        "Monthly Utilities",
        "Electricity, Water, Gas",
        today - timedelta(days=15),
        today + timedelta(days=15),
        today + timedelta(days=30),
        money("350.00"),
    )

    groceries = app.transactions.create_transaction(
        checking.id,
        None,
        TransactionType.DEBIT,
        TransactionCategory.FOOD,
        money("127.45"),
        "Grocery shopping",
        today - timedelta(days=2),
    )
    app.transactions.split_transaction_equally(groceries.id, [alice.id])

    gas = app.transactions.create_transaction(
        None,
        card.id,
        TransactionType.DEBIT,
        TransactionCategory.TRANSPORTATION,
        money("65.20"),
        "Gas station fill-up",
        today - timedelta(days=1),
    )

    salary = app.transactions.create_transaction(
        checking.id,
        None,
        TransactionType.CREDIT,
        TransactionCategory.INCOME,
        money("3500.00"),
        "Monthly salary deposit",
        today - timedelta(days=3),
    )

    dinner = app.transactions.create_transaction(
        None,
        card.id,
        TransactionType.DEBIT,
        TransactionCategory.ENTERTAINMENT,
        money("180.00"),
        "Dinner with friends",
        today,
    )
    app.transactions.split_transaction_equally(dinner.id, [alice.id, bob.id])

    logger.info("demo_data_seeded", currency=currency)

    return {
        "checking": checking,
        "savings": savings,
        "card": card,
        "alice": alice,
        "bob": bob,
        "bill": bill,
        "groceries": app.transactions.get_transaction(groceries.id),
        "gas": gas,
        "salary": salary,
        "dinner": app.transactions.get_transaction(dinner.id),
    }
