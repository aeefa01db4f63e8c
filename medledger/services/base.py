from contextlib import contextmanager
from sqlalchemy.orm import Session

from ..core.database import atomic
from ..core.errors import NotFound
from ..models import Appointment
from .funds_ledger import FundsLedger
from .notifier import Notifier

class LedgerService:
    """Common plumbing for the registries: one transaction per operation,
    notifications published only once that transaction has committed."""

    def __init__(self, db: Session, redis_client=None):
        self.db = db
        self.notifier = Notifier(db, redis_client)
        self.funds = FundsLedger(db)

    @contextmanager
    def _transaction(self):
        try:
            with atomic(self.db):
                yield
        except Exception:
            self.notifier.discard()
            raise
        self.notifier.publish_pending()

    def _load_appointment(self, appointment_id: int, lock: bool = False) -> Appointment:
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if lock:
            query = query.with_for_update().populate_existing()

        appointment = query.first()
        if not appointment:
            raise NotFound(f"Appointment {appointment_id} not found")
        return appointment
