from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func

from ..core.database import Base

class Notification(Base):
    """Outbox row for an event emitted by a committed operation."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    event = Column(String(64), nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Notification(id={self.id}, event='{self.event}')>"
