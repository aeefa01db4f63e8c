from typing import List
import logging

from ..core.errors import AccessDenied
from ..core.security import ParticipantId
from ..models.permission import PermissionEdge
from ..models.record import Record
from .base import LedgerService
from .sequences import DenseIdSequence

logger = logging.getLogger(__name__)

class RecordService(LedgerService):
    """Patient record references and the read capabilities guarding them."""

    record_ids = DenseIdSequence("records")

    def add_record(self, caller: ParticipantId, content_hash: str) -> Record:
        """Append a record reference to the caller's own list."""
        with self._transaction():
            record = Record(
                id=self.record_ids.allocate(self.db),
                owner=caller,
                content_hash=content_hash
            )
            self.db.add(record)
            self.db.flush()

            self.notifier.emit(
                "RecordAdded",
                patient=caller,
                content_hash=content_hash
            )

        logger.info(f"Record {record.id} added for {caller}")
        return record

    def grant_access(self, caller: ParticipantId, doctor: ParticipantId):
        """Let ``doctor`` read the caller's records. Idempotent."""
        with self._transaction():
            self._set_permission(caller, doctor, True)
            self.notifier.emit("PermissionGranted", patient=caller, doctor=doctor)

        logger.info(f"{caller} granted record access to {doctor}")

    def revoke_access(self, caller: ParticipantId, doctor: ParticipantId):
        """Withdraw ``doctor``'s read capability. Idempotent."""
        with self._transaction():
            self._set_permission(caller, doctor, False)
            self.notifier.emit("PermissionRevoked", patient=caller, doctor=doctor)

        logger.info(f"{caller} revoked record access from {doctor}")

    def has_access(self, patient: ParticipantId, reader: ParticipantId) -> bool:
        if reader == patient:
            return True

        edge = self.db.get(PermissionEdge, (patient, reader))
        return bool(edge and edge.granted)

    def get_records(self, caller: ParticipantId, patient: ParticipantId) -> List[Record]:
        if not self.has_access(patient, caller):
            logger.warning(f"Record read denied: {caller} on records of {patient}")
            raise AccessDenied(f"No read access to records of {patient}")

        return self.db.query(Record).filter(
            Record.owner == patient
        ).order_by(Record.id).all()

    def list_grantees(self, caller: ParticipantId) -> List[ParticipantId]:
        rows = self.db.query(PermissionEdge.doctor).filter(
            PermissionEdge.patient == caller,
            PermissionEdge.granted == True  # noqa: E712
        ).order_by(PermissionEdge.doctor).all()
        return [row.doctor for row in rows]

    def _set_permission(self, patient: ParticipantId, doctor: ParticipantId, granted: bool):
        # Rows are keyed by the caller, so a patient can only touch their own
        edge = self.db.get(PermissionEdge, (patient, doctor))
        if edge is None:
            edge = PermissionEdge(patient=patient, doctor=doctor, granted=granted)
            self.db.add(edge)
        else:
            edge.granted = granted
        self.db.flush()
