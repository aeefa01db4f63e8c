from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)
    doctor = Column(String(255), nullable=False)

    # Opaque handle into the external content store
    content_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    appointment = relationship("Appointment", back_populates="prescriptions")

    def __repr__(self):
        return f"<Prescription(id={self.id}, appointment_id={self.appointment_id}, doctor='{self.doctor}')>"
