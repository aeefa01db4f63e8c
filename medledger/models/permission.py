from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.sql import func

from ..core.database import Base

class PermissionEdge(Base):
    """Read capability a patient holds out to one doctor.

    A missing row is equivalent to ``granted=False``.
    """
    __tablename__ = "permissions"

    patient = Column(String(255), primary_key=True)
    doctor = Column(String(255), primary_key=True)
    granted = Column(Boolean, nullable=False, default=False)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<PermissionEdge(patient='{self.patient}', doctor='{self.doctor}', granted={self.granted})>"
