"""Account operations: CRUD, deposits, withdrawals and transfers."""

from typing import Optional
from uuid import UUID

import structlog

from finledger.audit import AuditLogger, create_correlation_id
from finledger.models.account import Account, AccountType
from finledger.models.audit import AuditEventBuilder, AuditEventType
from finledger.models.errors import SameAccountTransferError
from finledger.models.money import Money
from finledger.services.storage.repositories import AccountRepository


logger = structlog.get_logger(__name__)


class AccountUseCase:
    def __init__(
        self,
        account_repo: AccountRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._accounts = account_repo
        self._audit = audit_logger or AuditLogger()

    def create_account(
        self,
        name: str,
        account_type: AccountType,
        initial_balance: Money,
        description: str = "",
    ) -> Account:
        account = Account.create(name, account_type, initial_balance, description)
        self._accounts.create(account)

        self._audit.log(AuditEventBuilder.account_created(
            account_id=account.id,
            name=account.name,
            balance=str(account.balance),
        ))
        return account

    def get_account(self, account_id: UUID) -> Account:
        return self._accounts.find_by_id(account_id)

    def list_accounts(self) -> list[Account]:
        return self._accounts.find_all()

    def list_accounts_by_type(self, account_type: AccountType) -> list[Account]:
        return self._accounts.find_by_type(account_type)

    def deposit(self, account_id: UUID, amount: Money) -> Account:
        account = self._accounts.find_by_id(account_id)
        account.deposit(amount)
        self._accounts.update(account)

        self._audit.log_balance_changed(
            entity_type="account",
            entity_id=account.id,
            operation="deposit",
            amount=str(amount),
            new_balance=str(account.balance),
        )
        return account

    def withdraw(self, account_id: UUID, amount: Money) -> Account:
        account = self._accounts.find_by_id(account_id)
        account.withdraw(amount)
        self._accounts.update(account)

        self._audit.log_balance_changed(
            entity_type="account",
            entity_id=account.id,
            operation="withdraw",
            amount=str(amount),
            new_balance=str(account.balance),
        )
        return account

    def update_account(
        self,
        account_id: UUID,
        name: str,
        account_type: AccountType,
        balance: Money,
        description: str,
    ) -> Account:
        """Overwrite the editable fields. The balance is set as given, not adjusted."""
        account = self._accounts.find_by_id(account_id)
        account.name = name
        account.type = account_type
        account.balance = balance
        account.description = description
        account.touch()
        self._accounts.update(account)

        self._audit.log(AuditEventBuilder.account_updated(account.id, account.name))
        return account

    def delete_account(self, account_id: UUID) -> None:
        """Delete an account. Cards and transactions that point at it are left as they are."""
        self._accounts.delete(account_id)
        self._audit.log(AuditEventBuilder.entity_deleted(
            AuditEventType.ACCOUNT_DELETED, "account", account_id
        ))

    def transfer(
        self,
        from_account_id: UUID,
        to_account_id: UUID,
        amount: Money,
    ) -> tuple[Account, Account]:
        """
        Move money between two accounts.

        Both balances change in memory first; nothing is written unless
        the withdrawal and the deposit both succeed. The two writes
        themselves are not atomic.

        Raises:
            SameAccountTransferError: If both ids name the same account
        """
        if from_account_id == to_account_id:
            raise SameAccountTransferError(
                "cannot transfer from an account to itself"
            )

        correlation_id = create_correlation_id()

        source = self._accounts.find_by_id(from_account_id)
        destination = self._accounts.find_by_id(to_account_id)

        source.withdraw(amount)
        destination.deposit(amount)

        self._accounts.update(source)
        self._accounts.update(destination)

        logger.info(
            "transfer_completed",
            from_account_id=str(source.id),
            to_account_id=str(destination.id),
            amount=str(amount),
        )
        self._audit.log(AuditEventBuilder.transfer_completed(
            from_account_id=source.id,
            to_account_id=destination.id,
            amount=str(amount),
            correlation_id=correlation_id,
        ))
        return source, destination
