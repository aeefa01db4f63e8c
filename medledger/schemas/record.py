from pydantic import BaseModel
from typing import List

class RecordCreate(BaseModel):
    content_hash: str

class RecordResponse(BaseModel):
    id: int
    owner: str
    content_hash: str

    class Config:
        from_attributes = True

class GranteeList(BaseModel):
    patient: str
    doctors: List[str]

class PermissionResponse(BaseModel):
    patient: str
    doctor: str
    granted: bool
