from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import ParticipantId
from ...api.deps import get_current_participant
from ...services.session_service import SessionService
from ...schemas.session import SessionCreate, SessionResponse

router = APIRouter(tags=["Telemedicine Sessions"])

@router.post(
    "/appointments/{appointment_id}/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED
)
async def start_session(
    appointment_id: int,
    session_data: SessionCreate,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Start a telemedicine session for a confirmed appointment."""
    session = SessionService(db).start_session(caller, appointment_id, session_data.link)
    return SessionResponse.model_validate(session)

@router.get("/appointments/{appointment_id}/sessions", response_model=List[SessionResponse])
async def list_sessions(
    appointment_id: int,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    sessions = SessionService(db).list_sessions(caller, appointment_id)
    return [SessionResponse.model_validate(s) for s in sessions]

@router.post("/sessions/{session_id}/end", response_model=SessionResponse)
async def end_session(
    session_id: int,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    session = SessionService(db).end_session(caller, session_id)
    return SessionResponse.model_validate(session)
