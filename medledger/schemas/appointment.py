from pydantic import BaseModel, Field
from datetime import datetime

class AppointmentCreate(BaseModel):
    doctor: str
    scheduled_at: datetime
    description: str = ""
    # Positivity is enforced by the ledger so it can answer with PaymentRequired
    fee: int = Field(..., description="Fee in the smallest currency unit")

class AppointmentResponse(BaseModel):
    id: int
    patient: str
    doctor: str
    scheduled_at: datetime
    description: str
    confirmed: bool
    canceled: bool
    paid: bool
    fee: int

    class Config:
        from_attributes = True
