import threading
import pytest

from medledger.core.errors import (
    InsufficientFunds, InvalidState, NotFound, PaymentRequired, Unauthorized
)
from medledger.core.database import SessionLocal
from medledger.models import Appointment, Notification
from medledger.services.appointment_service import AppointmentService
from medledger.services.funds_ledger import FundsLedger
from medledger.services.sequences import DenseIdSequence

from .conftest import PATIENT, DOCTOR, OTHER_DOCTOR, STRANGER, SCHEDULED_AT

def schedule(db, fee=100, patient=PATIENT, doctor=DOCTOR):
    return AppointmentService(db).schedule_appointment(
        patient, doctor, SCHEDULED_AT, "Annual check-up", fee
    )

class TestScheduling:

    def test_schedule_creates_unconfirmed_appointment(self, db, funded):
        appointment = schedule(db, fee=100)

        assert appointment.id == 0
        assert appointment.confirmed is False
        assert appointment.canceled is False
        assert appointment.paid is False
        assert appointment.fee == 100
        assert appointment.patient == PATIENT
        assert appointment.doctor == DOCTOR

    def test_schedule_captures_fee_into_escrow(self, db, funded):
        ledger = FundsLedger(db)
        schedule(db, fee=100)

        assert ledger.escrow_balance() == 100
        assert ledger.balance(PATIENT) == funded - 100

    def test_ids_are_dense(self, db, funded):
        ids = [schedule(db, fee=10).id for _ in range(3)]
        assert ids == [0, 1, 2]

    @pytest.mark.parametrize("fee", [0, -5])
    def test_non_positive_fee_requires_payment(self, db, funded, fee):
        with pytest.raises(PaymentRequired):
            schedule(db, fee=fee)

        assert db.query(Appointment).count() == 0
        assert DenseIdSequence("appointments").peek(db) == 0
        assert FundsLedger(db).escrow_balance() == 0

    def test_unfunded_patient_creates_nothing(self, db):
        """A refused debit leaves no appointment and no consumed id."""
        with pytest.raises(InsufficientFunds):
            schedule(db, fee=100)

        assert db.query(Appointment).count() == 0
        assert DenseIdSequence("appointments").peek(db) == 0
        assert db.query(Notification).count() == 0

    def test_scheduled_notification(self, db, funded):
        schedule(db, fee=100)

        event = db.query(Notification).filter(Notification.event == "AppointmentScheduled").one()
        assert event.payload["appointment_id"] == 0
        assert event.payload["fee"] == 100
        assert event.payload["scheduled_at"] == SCHEDULED_AT.isoformat()

class TestConfirmation:

    def test_doctor_confirms(self, db, funded):
        appointment = schedule(db)
        AppointmentService(db).confirm_appointment(DOCTOR, appointment.id)

        assert db.get(Appointment, appointment.id).confirmed is True

    def test_confirm_is_idempotent(self, db, funded):
        appointment = schedule(db)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, appointment.id)
        service.confirm_appointment(DOCTOR, appointment.id)

        assert db.get(Appointment, appointment.id).confirmed is True

    @pytest.mark.parametrize("caller", [PATIENT, OTHER_DOCTOR, STRANGER])
    def test_only_doctor_confirms(self, db, funded, caller):
        appointment = schedule(db)

        with pytest.raises(Unauthorized):
            AppointmentService(db).confirm_appointment(caller, appointment.id)

        assert db.get(Appointment, appointment.id).confirmed is False

    def test_confirm_unknown_appointment(self, db):
        with pytest.raises(NotFound):
            AppointmentService(db).confirm_appointment(DOCTOR, 42)

class TestCancellation:

    @pytest.mark.parametrize("caller", [PATIENT, DOCTOR])
    def test_cancel_refunds_patient(self, db, funded, caller):
        ledger = FundsLedger(db)
        appointment = schedule(db, fee=100)

        AppointmentService(db).cancel_appointment(caller, appointment.id)

        assert db.get(Appointment, appointment.id).canceled is True
        assert ledger.escrow_balance() == 0
        assert ledger.balance(PATIENT) == funded

    def test_stranger_cannot_cancel(self, db, funded):
        appointment = schedule(db)

        with pytest.raises(Unauthorized):
            AppointmentService(db).cancel_appointment(STRANGER, appointment.id)

        assert db.get(Appointment, appointment.id).canceled is False
        assert FundsLedger(db).escrow_balance() == 100

    def test_second_cancel_is_invalid(self, db, funded):
        ledger = FundsLedger(db)
        appointment = schedule(db, fee=100)
        service = AppointmentService(db)
        service.cancel_appointment(PATIENT, appointment.id)

        with pytest.raises(InvalidState):
            service.cancel_appointment(DOCTOR, appointment.id)

        # Refund happened exactly once
        assert ledger.escrow_balance() == 0
        assert ledger.balance(PATIENT) == funded

    def test_competing_sessions_cancel_once(self, db, funded):
        """A later cancel from another session sees the committed flag."""
        appointment = schedule(db, fee=100)
        other = SessionLocal()
        try:
            AppointmentService(db).cancel_appointment(PATIENT, appointment.id)
            with pytest.raises(InvalidState):
                AppointmentService(other).cancel_appointment(DOCTOR, appointment.id)
        finally:
            other.close()

        assert FundsLedger(db).balance(PATIENT) == funded

    def test_concurrent_cancels_refund_once(self, db, funded):
        """Several threads cancel the same appointment: exactly one succeeds."""
        appointment = schedule(db, fee=100)
        appointment_id = appointment.id
        callers = [PATIENT, DOCTOR, PATIENT, DOCTOR]
        barrier = threading.Barrier(len(callers))
        outcomes = []

        def cancel(caller):
            session = SessionLocal()
            try:
                barrier.wait()
                AppointmentService(session).cancel_appointment(caller, appointment_id)
                outcomes.append("ok")
            except InvalidState:
                outcomes.append("invalid_state")
            finally:
                session.close()

        threads = [threading.Thread(target=cancel, args=(caller,)) for caller in callers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("invalid_state") == len(callers) - 1
        assert FundsLedger(db).balance(PATIENT) == funded
        assert FundsLedger(db).escrow_balance() == 0
        assert db.query(Notification).filter(Notification.event == "AppointmentCanceled").count() == 1

    def test_cancel_is_terminal(self, db, funded):
        appointment = schedule(db, fee=50)
        service = AppointmentService(db)
        service.cancel_appointment(PATIENT, appointment.id)

        with pytest.raises(InvalidState):
            service.confirm_appointment(DOCTOR, appointment.id)

        assert db.get(Appointment, appointment.id).confirmed is False

    def test_cancel_after_confirm(self, db, funded):
        appointment = schedule(db, fee=100)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, appointment.id)
        service.cancel_appointment(DOCTOR, appointment.id)

        stored = db.get(Appointment, appointment.id)
        assert stored.confirmed is True
        assert stored.canceled is True
        assert FundsLedger(db).balance(PATIENT) == funded

    def test_refund_failure_leaves_appointment_untouched(self, db, funded):
        """If escrow cannot refund, the cancellation does not happen."""
        appointment = schedule(db, fee=100)
        # Drain escrow behind the ledger's back
        FundsLedger(db).debit(FundsLedger(db).escrow_account, 100)
        db.commit()

        with pytest.raises(InsufficientFunds):
            AppointmentService(db).cancel_appointment(PATIENT, appointment.id)

        assert db.get(Appointment, appointment.id).canceled is False
        assert db.query(Notification).filter(Notification.event == "AppointmentCanceled").count() == 0

    def test_cancel_after_payment_is_invalid(self, db, funded):
        appointment = schedule(db, fee=100)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, appointment.id)
        service.send_payment(PATIENT, appointment.id)

        with pytest.raises(InvalidState):
            service.cancel_appointment(PATIENT, appointment.id)

        assert FundsLedger(db).balance(DOCTOR) == 100

class TestPayment:

    def test_payment_moves_fee_to_doctor(self, db, funded):
        ledger = FundsLedger(db)
        appointment = schedule(db, fee=100)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, appointment.id)

        service.send_payment(PATIENT, appointment.id)

        assert ledger.balance(DOCTOR) == 100
        assert ledger.escrow_balance() == 0
        assert db.get(Appointment, appointment.id).paid is True

    def test_payment_is_one_shot(self, db, funded):
        """A second payment is refused even when escrow holds other fees."""
        ledger = FundsLedger(db)
        first = schedule(db, fee=100)
        schedule(db, fee=100)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, first.id)
        service.send_payment(PATIENT, first.id)

        with pytest.raises(InvalidState):
            service.send_payment(PATIENT, first.id)

        assert ledger.balance(DOCTOR) == 100
        assert ledger.escrow_balance() == 100

    def test_payment_requires_confirmation(self, db, funded):
        appointment = schedule(db)

        with pytest.raises(InvalidState):
            AppointmentService(db).send_payment(PATIENT, appointment.id)

    def test_payment_refused_when_canceled(self, db, funded):
        appointment = schedule(db)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, appointment.id)
        service.cancel_appointment(DOCTOR, appointment.id)

        with pytest.raises(InvalidState):
            service.send_payment(PATIENT, appointment.id)

    @pytest.mark.parametrize("caller", [DOCTOR, STRANGER])
    def test_only_patient_pays(self, db, funded, caller):
        appointment = schedule(db)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, appointment.id)

        with pytest.raises(Unauthorized):
            service.send_payment(caller, appointment.id)

        assert db.get(Appointment, appointment.id).paid is False

    def test_payment_with_drained_escrow(self, db, funded):
        appointment = schedule(db, fee=100)
        service = AppointmentService(db)
        service.confirm_appointment(DOCTOR, appointment.id)
        FundsLedger(db).debit(FundsLedger(db).escrow_account, 100)
        db.commit()

        with pytest.raises(InsufficientFunds):
            service.send_payment(PATIENT, appointment.id)

        assert db.get(Appointment, appointment.id).paid is False
        assert FundsLedger(db).balance(DOCTOR) == 0

class TestReads:

    def test_participants_can_view(self, db, funded):
        appointment = schedule(db)
        service = AppointmentService(db)

        assert service.get_appointment(PATIENT, appointment.id).id == appointment.id
        assert service.get_appointment(DOCTOR, appointment.id).id == appointment.id

        with pytest.raises(Unauthorized):
            service.get_appointment(STRANGER, appointment.id)

    def test_list_appointments_by_participant(self, db, funded):
        schedule(db, doctor=DOCTOR)
        schedule(db, doctor=OTHER_DOCTOR)
        service = AppointmentService(db)

        assert [a.id for a in service.list_appointments(PATIENT)] == [0, 1]
        assert [a.id for a in service.list_appointments(OTHER_DOCTOR)] == [1]
        assert service.list_appointments(STRANGER) == []
