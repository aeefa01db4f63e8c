from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import ParticipantId
from ...api.deps import get_current_participant
from ...services.record_service import RecordService
from ...schemas.record import (
    RecordCreate, RecordResponse, GranteeList, PermissionResponse
)

router = APIRouter(tags=["Records"])

@router.post("/records", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def add_record(
    record_data: RecordCreate,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Append a record reference to the caller's records."""
    record = RecordService(db).add_record(caller, record_data.content_hash)
    return RecordResponse.model_validate(record)

@router.get("/records/{patient_id}", response_model=List[RecordResponse])
async def get_records(
    patient_id: str,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Read a patient's records (self, or a doctor holding a grant)."""
    records = RecordService(db).get_records(caller, patient_id)
    return [RecordResponse.model_validate(record) for record in records]

@router.get("/permissions", response_model=GranteeList)
async def list_permissions(
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """List doctors currently allowed to read the caller's records."""
    doctors = RecordService(db).list_grantees(caller)
    return GranteeList(patient=caller, doctors=doctors)

@router.put("/permissions/{doctor_id}", response_model=PermissionResponse)
async def grant_access(
    doctor_id: str,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Grant a doctor read access to the caller's records."""
    RecordService(db).grant_access(caller, doctor_id)
    return PermissionResponse(patient=caller, doctor=doctor_id, granted=True)

@router.delete("/permissions/{doctor_id}", response_model=PermissionResponse)
async def revoke_access(
    doctor_id: str,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Revoke a doctor's read access to the caller's records."""
    RecordService(db).revoke_access(caller, doctor_id)
    return PermissionResponse(patient=caller, doctor=doctor_id, granted=False)
