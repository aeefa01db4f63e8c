from typing import List
import logging

from ..core.errors import InvalidState, Unauthorized
from ..core.security import ParticipantId
from ..models.prescription import Prescription
from .base import LedgerService
from .sequences import DenseIdSequence

logger = logging.getLogger(__name__)

class PrescriptionService(LedgerService):
    prescription_ids = DenseIdSequence("prescriptions")

    def add_prescription(self, caller: ParticipantId, appointment_id: int, content_hash: str) -> Prescription:
        """Record a prescription issued by the doctor of a confirmed appointment."""
        with self._transaction():
            appointment = self._load_appointment(appointment_id, lock=True)

            if not appointment.is_active:
                raise InvalidState(f"Appointment {appointment_id} must be confirmed and not canceled")

            if caller != appointment.doctor:
                logger.warning(f"Prescription on appointment {appointment_id} refused for {caller}")
                raise Unauthorized("Only the appointment's doctor can prescribe")

            prescription = Prescription(
                id=self.prescription_ids.allocate(self.db),
                appointment_id=appointment_id,
                doctor=caller,
                content_hash=content_hash
            )
            self.db.add(prescription)
            self.db.flush()

            self.notifier.emit(
                "PrescriptionAdded",
                prescription_id=prescription.id,
                appointment_id=appointment_id,
                doctor=caller,
                content_hash=content_hash
            )

        logger.info(f"Prescription {prescription.id} added to appointment {appointment_id}")
        return prescription

    def list_prescriptions(self, caller: ParticipantId, appointment_id: int) -> List[Prescription]:
        appointment = self._load_appointment(appointment_id)
        if not appointment.is_participant(caller):
            raise Unauthorized("Only the appointment's patient or doctor can list its prescriptions")

        return self.db.query(Prescription).filter(
            Prescription.appointment_id == appointment_id
        ).order_by(Prescription.id).all()
