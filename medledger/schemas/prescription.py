from pydantic import BaseModel

class PrescriptionCreate(BaseModel):
    content_hash: str

class PrescriptionResponse(BaseModel):
    id: int
    appointment_id: int
    doctor: str
    content_hash: str

    class Config:
        from_attributes = True
