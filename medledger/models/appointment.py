from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Boolean, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Appointment(Base):
    __tablename__ = "appointments"

    # Dense, 0-based, never reused
    id = Column(Integer, primary_key=True, autoincrement=False)

    # Participants
    patient = Column(String(255), nullable=False, index=True)
    doctor = Column(String(255), nullable=False, index=True)

    # Appointment details
    scheduled_at = Column(DateTime, nullable=False)
    description = Column(Text, nullable=False, default="")

    # State flags; canceled is terminal
    confirmed = Column(Boolean, nullable=False, default=False)
    canceled = Column(Boolean, nullable=False, default=False)
    paid = Column(Boolean, nullable=False, default=False)

    # Amount held in escrow for this appointment
    fee = Column(BigInteger, nullable=False)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    sessions = relationship("TelemedicineSession", back_populates="appointment", order_by="TelemedicineSession.id")
    prescriptions = relationship("Prescription", back_populates="appointment", order_by="Prescription.id")

    @property
    def is_active(self) -> bool:
        """Confirmed and not canceled: sessions and prescriptions may attach."""
        return bool(self.confirmed) and not self.canceled

    def is_participant(self, participant_id: str) -> bool:
        return participant_id in (self.patient, self.doctor)

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient='{self.patient}', doctor='{self.doctor}', date='{self.scheduled_at}')>"
