from sqlalchemy import Column, Integer, String

from ..core.database import Base

class IdSequence(Base):
    __tablename__ = "id_sequences"

    name = Column(String(64), primary_key=True)
    next_value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<IdSequence(name='{self.name}', next_value={self.next_value})>"
