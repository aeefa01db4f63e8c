from sqlalchemy.orm import Session

from ..models.sequence import IdSequence

SEQUENCE_NAMES = ("records", "appointments", "sessions", "prescriptions")

class DenseIdSequence:
    """Monotonic 0-based id counter owned by a single registry.

    The counter row is bumped inside the caller's transaction, so an
    operation that rolls back leaves the counter where it was.
    """

    def __init__(self, name: str):
        self.name = name

    def allocate(self, db: Session) -> int:
        updated = db.query(IdSequence).filter(
            IdSequence.name == self.name
        ).update(
            {IdSequence.next_value: IdSequence.next_value + 1},
            synchronize_session=False
        )

        if not updated:
            # First allocation on a database that was never seeded
            db.add(IdSequence(name=self.name, next_value=1))
            db.flush()
            return 0

        next_value = db.query(IdSequence.next_value).filter(
            IdSequence.name == self.name
        ).scalar()
        return next_value - 1

    def peek(self, db: Session) -> int:
        """Return the id the next allocation would hand out."""
        value = db.query(IdSequence.next_value).filter(
            IdSequence.name == self.name
        ).scalar()
        return value or 0

def seed_sequences(db: Session):
    """Create any missing counter rows at zero."""
    for name in SEQUENCE_NAMES:
        if db.get(IdSequence, name) is None:
            db.add(IdSequence(name=name, next_value=0))
    db.commit()
