from typing import Tuple
import logging

from ..core.errors import PaymentRequired
from ..core.security import ParticipantId
from .base import LedgerService

logger = logging.getLogger(__name__)

class AccountService(LedgerService):
    """Participant-facing view of the funds ledger."""

    def deposit(self, caller: ParticipantId, amount: int) -> int:
        """Credit the caller's own account and return the new balance."""
        if amount is None or amount <= 0:
            raise PaymentRequired("Deposit amount must be positive")

        with self._transaction():
            self.funds.credit(caller, amount)
            self.notifier.emit("FundsDeposited", participant=caller, amount=amount)

        logger.info(f"{caller} deposited {amount}")
        return self.funds.balance(caller)

    def get_balance(self, caller: ParticipantId) -> Tuple[str, int]:
        return caller, self.funds.balance(caller)

    def get_escrow_balance(self) -> Tuple[str, int]:
        return self.funds.escrow_account, self.funds.escrow_balance()
