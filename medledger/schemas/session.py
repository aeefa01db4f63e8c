from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class SessionCreate(BaseModel):
    link: str

class SessionResponse(BaseModel):
    id: int
    appointment_id: int
    link: str
    active: bool
    ended_at: Optional[datetime] = None

    class Config:
        from_attributes = True
