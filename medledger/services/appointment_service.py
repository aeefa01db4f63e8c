from sqlalchemy import or_
from datetime import datetime
from typing import List, Optional
import logging

from ..core.errors import InvalidState, PaymentRequired, Unauthorized
from ..core.security import ParticipantId
from ..models.appointment import Appointment
from .base import LedgerService
from .sequences import DenseIdSequence

logger = logging.getLogger(__name__)

class AppointmentService(LedgerService):
    """Appointment state machine and the escrow that travels with it.

    States are ``scheduled`` -> ``confirmed`` (optional) and, orthogonally,
    ``canceled`` which is terminal. The fee is captured into escrow when the
    appointment is scheduled and leaves escrow exactly once: refunded to the
    patient on cancellation, or paid to the doctor by ``send_payment``.
    """

    appointment_ids = DenseIdSequence("appointments")

    def schedule_appointment(
        self,
        caller: ParticipantId,
        doctor: ParticipantId,
        scheduled_at: datetime,
        description: str,
        fee: int
    ) -> Appointment:
        """Create an appointment and capture its fee into escrow."""
        if fee is None or fee <= 0:
            logger.warning(f"Scheduling refused for {caller}: non-positive fee {fee}")
            raise PaymentRequired("Appointment fee must be positive")

        with self._transaction():
            # Debit first: a refused transfer must not consume an id
            self.funds.transfer(caller, self.funds.escrow_account, fee)

            appointment = Appointment(
                id=self.appointment_ids.allocate(self.db),
                patient=caller,
                doctor=doctor,
                scheduled_at=scheduled_at,
                description=description or "",
                confirmed=False,
                canceled=False,
                paid=False,
                fee=fee
            )
            self.db.add(appointment)
            self.db.flush()

            self.notifier.emit(
                "AppointmentScheduled",
                appointment_id=appointment.id,
                patient=caller,
                doctor=doctor,
                scheduled_at=scheduled_at.isoformat(),
                fee=fee
            )

        logger.info(f"Appointment {appointment.id} scheduled: {caller} with {doctor}, fee {fee}")
        return appointment

    def confirm_appointment(self, caller: ParticipantId, appointment_id: int) -> Appointment:
        """Doctor accepts the appointment. Confirming twice is a no-op."""
        with self._transaction():
            appointment = self._load_appointment(appointment_id, lock=True)

            if caller != appointment.doctor:
                logger.warning(f"Confirm of appointment {appointment_id} refused for {caller}")
                raise Unauthorized("Only the appointment's doctor can confirm it")

            if appointment.canceled or not self._compare_and_set(
                appointment_id,
                {"confirmed": True},
                Appointment.canceled == False  # noqa: E712
            ):
                raise InvalidState(f"Appointment {appointment_id} is canceled")

            self.notifier.emit("AppointmentConfirmed", appointment_id=appointment_id)

        logger.info(f"Appointment {appointment_id} confirmed by {caller}")
        return appointment

    def cancel_appointment(self, caller: ParticipantId, appointment_id: int) -> Appointment:
        """Cancel and refund the escrowed fee to the patient in one step."""
        with self._transaction():
            appointment = self._load_appointment(appointment_id, lock=True)

            if not appointment.is_participant(caller):
                logger.warning(f"Cancel of appointment {appointment_id} refused for {caller}")
                raise Unauthorized("Only the appointment's patient or doctor can cancel it")

            if appointment.canceled:
                raise InvalidState(f"Appointment {appointment_id} is already canceled")

            if appointment.paid:
                raise InvalidState(f"Appointment {appointment_id} fee was already paid out")

            # Exactly one of several concurrent cancels wins this update
            if not self._compare_and_set(
                appointment_id,
                {"canceled": True},
                Appointment.canceled == False,  # noqa: E712
                Appointment.paid == False  # noqa: E712
            ):
                raise InvalidState(f"Appointment {appointment_id} is already canceled")

            self.funds.transfer(self.funds.escrow_account, appointment.patient, appointment.fee)

            self.notifier.emit("AppointmentCanceled", appointment_id=appointment_id)

        logger.info(f"Appointment {appointment_id} canceled by {caller}, refunded {appointment.fee}")
        return appointment

    def send_payment(self, caller: ParticipantId, appointment_id: int) -> Appointment:
        """Release the escrowed fee to the doctor. Payment is one-shot."""
        with self._transaction():
            appointment = self._load_appointment(appointment_id, lock=True)

            if caller != appointment.patient:
                logger.warning(f"Payment for appointment {appointment_id} refused for {caller}")
                raise Unauthorized("Only the appointment's patient can pay for it")

            if not appointment.is_active:
                raise InvalidState(f"Appointment {appointment_id} must be confirmed and not canceled")

            if appointment.paid or not self._compare_and_set(
                appointment_id,
                {"paid": True},
                Appointment.confirmed == True,  # noqa: E712
                Appointment.canceled == False,  # noqa: E712
                Appointment.paid == False  # noqa: E712
            ):
                raise InvalidState(f"Appointment {appointment_id} is already paid")

            self.funds.transfer(self.funds.escrow_account, appointment.doctor, appointment.fee)

            self.notifier.emit(
                "PaymentSent",
                appointment_id=appointment_id,
                doctor=appointment.doctor,
                fee=appointment.fee
            )

        logger.info(f"Appointment {appointment_id} paid: {appointment.fee} to {appointment.doctor}")
        return appointment

    def get_appointment(self, caller: ParticipantId, appointment_id: int) -> Appointment:
        appointment = self._load_appointment(appointment_id)
        if not appointment.is_participant(caller):
            raise Unauthorized("Only the appointment's patient or doctor can view it")
        return appointment

    def list_appointments(
        self,
        caller: ParticipantId,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Appointment]:
        query = self.db.query(Appointment).filter(
            or_(Appointment.patient == caller, Appointment.doctor == caller)
        ).order_by(Appointment.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def _compare_and_set(self, appointment_id: int, values: dict, *conditions) -> bool:
        updated = self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            *conditions
        ).update(values, synchronize_session=False)
        return bool(updated)
