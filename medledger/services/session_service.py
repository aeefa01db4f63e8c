from datetime import datetime
from typing import List
import logging

from ..core.errors import InvalidState, NotFound, Unauthorized
from ..core.security import ParticipantId
from ..models.session import TelemedicineSession
from .base import LedgerService
from .sequences import DenseIdSequence

logger = logging.getLogger(__name__)

class SessionService(LedgerService):
    """Telemedicine sessions attached to confirmed appointments.

    An appointment may carry several sessions (reconnects); ending one does
    not affect the others.
    """

    session_ids = DenseIdSequence("sessions")

    def start_session(self, caller: ParticipantId, appointment_id: int, link: str) -> TelemedicineSession:
        with self._transaction():
            appointment = self._load_appointment(appointment_id, lock=True)

            if not appointment.is_active:
                raise InvalidState(f"Appointment {appointment_id} must be confirmed and not canceled")

            if not appointment.is_participant(caller):
                logger.warning(f"Session start on appointment {appointment_id} refused for {caller}")
                raise Unauthorized("Only the appointment's patient or doctor can start a session")

            session = TelemedicineSession(
                id=self.session_ids.allocate(self.db),
                appointment_id=appointment_id,
                link=link,
                active=True
            )
            self.db.add(session)
            self.db.flush()

            self.notifier.emit(
                "TelemedicineSessionStarted",
                session_id=session.id,
                appointment_id=appointment_id,
                link=link
            )

        logger.info(f"Session {session.id} started for appointment {appointment_id}")
        return session

    def end_session(self, caller: ParticipantId, session_id: int) -> TelemedicineSession:
        with self._transaction():
            session = self.db.query(TelemedicineSession).filter(
                TelemedicineSession.id == session_id
            ).with_for_update().populate_existing().first()

            if not session:
                raise NotFound(f"Session {session_id} not found")

            if not session.appointment.is_participant(caller):
                raise Unauthorized("Only the appointment's patient or doctor can end a session")

            if not session.active:
                raise InvalidState(f"Session {session_id} has already ended")

            session.active = False
            session.ended_at = datetime.utcnow()
            self.db.flush()

            self.notifier.emit(
                "TelemedicineSessionEnded",
                session_id=session_id,
                appointment_id=session.appointment_id
            )

        logger.info(f"Session {session_id} ended by {caller}")
        return session

    def list_sessions(self, caller: ParticipantId, appointment_id: int) -> List[TelemedicineSession]:
        appointment = self._load_appointment(appointment_id)
        if not appointment.is_participant(caller):
            raise Unauthorized("Only the appointment's patient or doctor can list its sessions")

        return self.db.query(TelemedicineSession).filter(
            TelemedicineSession.appointment_id == appointment_id
        ).order_by(TelemedicineSession.id).all()
