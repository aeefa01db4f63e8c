from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import ParticipantId
from ...api.deps import get_current_participant
from ...services.prescription_service import PrescriptionService
from ...schemas.prescription import PrescriptionCreate, PrescriptionResponse

router = APIRouter(prefix="/appointments/{appointment_id}/prescriptions", tags=["Prescriptions"])

@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def add_prescription(
    appointment_id: int,
    prescription_data: PrescriptionCreate,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Issue a prescription on a confirmed appointment (doctor only)."""
    prescription = PrescriptionService(db).add_prescription(
        caller, appointment_id, prescription_data.content_hash
    )
    return PrescriptionResponse.model_validate(prescription)

@router.get("", response_model=List[PrescriptionResponse])
async def list_prescriptions(
    appointment_id: int,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    prescriptions = PrescriptionService(db).list_prescriptions(caller, appointment_id)
    return [PrescriptionResponse.model_validate(p) for p in prescriptions]
