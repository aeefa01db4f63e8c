from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from ..core.database import Base

class Record(Base):
    __tablename__ = "records"

    # Dense id from the "records" sequence; also the insertion order
    id = Column(Integer, primary_key=True, autoincrement=False)
    owner = Column(String(255), nullable=False, index=True)

    # Opaque handle into the external content store
    content_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Record(id={self.id}, owner='{self.owner}', content_hash='{self.content_hash}')>"
