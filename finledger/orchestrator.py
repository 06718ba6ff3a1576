"""
Main Orchestrator for the Ledger

This module ties together all the components: storage backend,
repositories, audit logger, use cases and reports.

DESIGN DECISION: Components never build their own collaborators.
Everything is created here and injected by constructor, so the front end
and the tests get the same wiring with a different store underneath.
"""

from typing import Optional

import structlog

from finledger.audit import AuditLogger
from finledger.config import Settings, get_settings
from finledger.queries import ReportQueries
from finledger.services.storage import (
    AccountRepository,
    AuditStorageInterface,
    BillRepository,
    CreditCardInvoiceRepository,
    CreditCardRepository,
    DocumentStoreInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryAuditStorage,
    InMemoryDocumentStore,
    PersonRepository,
    TransactionRepository,
)
from finledger.usecases import (
    AccountUseCase,
    BillUseCase,
    CreditCardInvoiceUseCase,
    CreditCardUseCase,
    PersonUseCase,
    TransactionUseCase,
)


logger = structlog.get_logger(__name__)


class LedgerApp:
    """
    Everything the front end needs, wired to one document store.

    Attributes are the use cases plus `reports`.
    """

    def __init__(
        self,
        store: DocumentStoreInterface,
        audit_logger: AuditLogger,
        currency: str = "BRL",
        recent_days: int = 30,
        backend: str = "memory",
    ):
        self.store = store
        self.audit_logger = audit_logger
        self.currency = currency
        self.backend = backend

        accounts = AccountRepository(store)
        cards = CreditCardRepository(store)
        bills = BillRepository(store)
        invoices = CreditCardInvoiceRepository(store)
        transactions = TransactionRepository(store)
        people = PersonRepository(store)

        self.accounts = AccountUseCase(accounts, audit_logger)
        self.credit_cards = CreditCardUseCase(cards, accounts, audit_logger)
        self.bills = BillUseCase(bills, audit_logger)
        self.invoices = CreditCardInvoiceUseCase(invoices, cards, audit_logger)
        self.people = PersonUseCase(people, audit_logger)
        self.transactions = TransactionUseCase(
            transactions,
            accounts,
            cards,
            invoices,
            bills,
            audit_logger,
        )
        self.reports = ReportQueries(
            transactions,
            people,
            bills,
            accounts,
            currency=currency,
            recent_days=recent_days,
        )


def create_app_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
) -> LedgerApp:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False for tests and demos (in-memory store).
        settings: Settings to use instead of get_settings()

    Returns:
        A fully wired LedgerApp
    """
    settings = settings or get_settings()
    app_settings = settings.app

    store: DocumentStoreInterface
    audit_storage: AuditStorageInterface
    backend = "memory"
    fallback_error: Optional[Exception] = None

    if use_storage and app_settings.storage_backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            sheets_client.get_spreadsheet()
            store = GoogleSheetsDocumentStore(sheets_client)
            audit_storage = GoogleSheetsAuditStorage(sheets_client)
            backend = "google_sheets"
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            fallback_error = e
            store = InMemoryDocumentStore()
            audit_storage = InMemoryAuditStorage()
    else:
        store = InMemoryDocumentStore()
        audit_storage = InMemoryAuditStorage()

    audit_logger = AuditLogger(audit_storage)
    if fallback_error is not None:
        audit_logger.log_error(
            error_type="storage_not_configured",
            error_message=str(fallback_error),
            details={"requested_backend": "google_sheets", "backend": backend},
        )

    logger.info("ledger_components_created", backend=backend)

    return LedgerApp(
        store=store,
        audit_logger=audit_logger,
        currency=app_settings.default_currency,
        recent_days=app_settings.recent_transactions_days,
        backend=backend,
    )
