from sqlalchemy.orm import Session
import logging

from ..core.config import settings
from ..core.errors import InsufficientFunds, PaymentRequired
from ..models.account import Account

logger = logging.getLogger(__name__)

class FundsLedger:
    """Balances for participants and the escrow pool.

    Debits are conditional updates, so a refused debit leaves the row as it
    was. Callers run these inside their own transaction; a failure anywhere in
    that transaction rolls back both sides of a transfer.
    """

    def __init__(self, db: Session):
        self.db = db
        self.escrow_account = settings.ESCROW_ACCOUNT_ID

    def balance(self, account_id: str) -> int:
        value = self.db.query(Account.balance).filter(
            Account.participant_id == account_id
        ).scalar()
        return value or 0

    def escrow_balance(self) -> int:
        return self.balance(self.escrow_account)

    def debit(self, account_id: str, amount: int):
        if amount <= 0:
            raise PaymentRequired("Transfer amount must be positive")

        updated = self.db.query(Account).filter(
            Account.participant_id == account_id,
            Account.balance >= amount
        ).update(
            {Account.balance: Account.balance - amount},
            synchronize_session=False
        )

        if not updated:
            logger.warning(f"Debit of {amount} refused for account {account_id}")
            raise InsufficientFunds(f"Account {account_id} cannot cover {amount}")

    def credit(self, account_id: str, amount: int):
        if amount <= 0:
            raise PaymentRequired("Transfer amount must be positive")

        updated = self.db.query(Account).filter(
            Account.participant_id == account_id
        ).update(
            {Account.balance: Account.balance + amount},
            synchronize_session=False
        )

        if not updated:
            self.db.add(Account(participant_id=account_id, balance=amount))
            self.db.flush()

    def transfer(self, source: str, destination: str, amount: int):
        self.debit(source, amount)
        self.credit(destination, amount)
