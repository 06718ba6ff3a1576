"""
Shared fixtures.

Every test runs against the in-memory store; no Google API calls are made.
Dates are pinned so invoice periods and overdue checks are deterministic.
"""

from datetime import date

import pytest

from finledger.audit import AuditLogger
from finledger.models import AccountType, Money
from finledger.orchestrator import LedgerApp
from finledger.services.storage import InMemoryAuditStorage, InMemoryDocumentStore


@pytest.fixture
def today() -> date:
    return date(2024, 3, 15)


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def app(audit_storage) -> LedgerApp:
    return LedgerApp(
        store=InMemoryDocumentStore(),
        audit_logger=AuditLogger(audit_storage),
        currency="BRL",
    )


@pytest.fixture
def brl():
    """Shorthand for BRL amounts."""
    def make(amount) -> Money:
        return Money.of(amount, "BRL")
    return make


@pytest.fixture
def checking(app, brl):
    return app.accounts.create_account("Checking", AccountType.CHECKING, brl("1000.00"))


@pytest.fixture
def card(app, checking, brl):
    return app.credit_cards.create_credit_card(checking.id, "Visa", "4321", brl("5000.00"), 10)
