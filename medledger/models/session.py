from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class TelemedicineSession(Base):
    __tablename__ = "telemedicine_sessions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)

    link = Column(String(512), nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, server_default=func.now())
    ended_at = Column(DateTime, nullable=True)

    appointment = relationship("Appointment", back_populates="sessions")

    def __repr__(self):
        return f"<TelemedicineSession(id={self.id}, appointment_id={self.appointment_id}, active={self.active})>"
