"""Credit card operations."""

from typing import Optional
from uuid import UUID

from finledger.audit import AuditLogger, create_correlation_id
from finledger.models.audit import AuditEventBuilder, AuditEventType
from finledger.models.credit_card import CreditCard
from finledger.models.money import Money
from finledger.services.storage.repositories import (
    AccountRepository,
    CreditCardRepository,
)


class CreditCardUseCase:
    def __init__(
        self,
        card_repo: CreditCardRepository,
        account_repo: AccountRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._cards = card_repo
        self._accounts = account_repo
        self._audit = audit_logger or AuditLogger()

    def create_credit_card(
        self,
        account_id: UUID,
        name: str,
        last_four_digits: str,
        credit_limit: Money,
        due_day: int,
    ) -> CreditCard:
        """
        Register a card against an existing account.

        Raises:
            NotFoundError: If the account does not exist
            InvalidCardParametersError: On a bad due day or card digits
        """
        self._accounts.find_by_id(account_id)

        card = CreditCard.create(account_id, name, last_four_digits, credit_limit, due_day)
        self._cards.create(card)

        self._audit.log(AuditEventBuilder.card_created(
            card.id, card.name, str(card.credit_limit)
        ))
        return card

    def get_credit_card(self, card_id: UUID) -> CreditCard:
        return self._cards.find_by_id(card_id)

    def list_credit_cards(self) -> list[CreditCard]:
        return self._cards.find_all()

    def list_credit_cards_by_account(self, account_id: UUID) -> list[CreditCard]:
        return self._cards.find_by_account_id(account_id)

    def charge_card(self, card_id: UUID, amount: Money) -> CreditCard:
        card = self._cards.find_by_id(card_id)
        card.charge(amount)
        self._cards.update(card)

        self._audit.log(AuditEventBuilder.card_charged(
            card.id, str(amount), str(card.current_balance)
        ))
        return card

    def make_payment(self, card_id: UUID, amount: Money) -> CreditCard:
        """
        Pay the card from its linked account.

        The account is debited (subject to its overdraft policy) and the
        card balance reduced; both are written only if both steps succeed.
        """
        correlation_id = create_correlation_id()

        card = self._cards.find_by_id(card_id)
        account = self._accounts.find_by_id(card.account_id)

        account.withdraw(amount)
        card.payment(amount)

        self._accounts.update(account)
        self._cards.update(card)

        self._audit.log_balance_changed(
            entity_type="account",
            entity_id=account.id,
            operation="withdraw",
            amount=str(amount),
            new_balance=str(account.balance),
            correlation_id=correlation_id,
        )
        self._audit.log(AuditEventBuilder.card_paid(
            card.id, str(amount), str(card.current_balance), correlation_id
        ))
        return card

    def delete_credit_card(self, card_id: UUID) -> None:
        self._cards.delete(card_id)
        self._audit.log(AuditEventBuilder.entity_deleted(
            AuditEventType.CARD_DELETED, "credit_card", card_id
        ))
