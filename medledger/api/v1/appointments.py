from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import ParticipantId
from ...api.deps import get_current_participant
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import AppointmentCreate, AppointmentResponse

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def schedule_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Schedule an appointment with a doctor, escrowing the fee."""
    appointment = AppointmentService(db).schedule_appointment(
        caller,
        appointment_data.doctor,
        appointment_data.scheduled_at,
        appointment_data.description,
        appointment_data.fee
    )
    return AppointmentResponse.model_validate(appointment)

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """List appointments where the caller is patient or doctor."""
    appointments = AppointmentService(db).list_appointments(caller, skip=skip, limit=limit)
    return [AppointmentResponse.model_validate(a) for a in appointments]

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    appointment = AppointmentService(db).get_appointment(caller, appointment_id)
    return AppointmentResponse.model_validate(appointment)

@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Confirm an appointment (doctor only)."""
    appointment = AppointmentService(db).confirm_appointment(caller, appointment_id)
    return AppointmentResponse.model_validate(appointment)

@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Cancel an appointment and refund the fee to the patient."""
    appointment = AppointmentService(db).cancel_appointment(caller, appointment_id)
    return AppointmentResponse.model_validate(appointment)

@router.post("/{appointment_id}/payment", response_model=AppointmentResponse)
async def send_payment(
    appointment_id: int,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Release the escrowed fee to the doctor (patient only)."""
    appointment = AppointmentService(db).send_payment(caller, appointment_id)
    return AppointmentResponse.model_validate(appointment)
