from sqlalchemy import Column, BigInteger, String, DateTime, CheckConstraint
from sqlalchemy.sql import func

from ..core.database import Base

class Account(Base):
    """Balance held by a participant, or by the escrow pool."""
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    participant_id = Column(String(255), primary_key=True)
    balance = Column(BigInteger, nullable=False, default=0)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Account(participant_id='{self.participant_id}', balance={self.balance})>"
